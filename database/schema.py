"""
Database schema definitions.
Table creation, indexes, and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'email_log',
        'audit_log',
        'documents',
        'maintenance_records',
        'invoices',
        'reservation_assigned_users',
        'reservation_attractions',
        'reservations',
        'attractions',
        'clients',
        'users'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables (no-op for tables that already exist)."""

    # 1. Users
    db.execute('''
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'employee'
                CHECK (role IN ('admin', 'manager', 'employee', 'viewer')),
            avatar TEXT,
            active INTEGER DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            last_login TIMESTAMP
        )
    ''')

    # 2. Clients
    db.execute('''
        CREATE TABLE IF NOT EXISTS clients (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            phone TEXT NOT NULL,
            email TEXT,
            street TEXT NOT NULL,
            building_number TEXT NOT NULL,
            postal_code TEXT NOT NULL,
            city TEXT NOT NULL,
            company_name TEXT,
            tax_id TEXT,
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 3. Attractions
    db.execute('''
        CREATE TABLE IF NOT EXISTS attractions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT,
            width REAL DEFAULT 0,
            length REAL DEFAULT 0,
            height REAL DEFAULT 0,
            weight REAL DEFAULT 0,
            price REAL NOT NULL DEFAULT 0,
            setup_time INTEGER DEFAULT 0,
            image TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 4. Reservations (dates stored as YYYY-MM-DDTHH:MM:SS text)
    db.execute('''
        CREATE TABLE IF NOT EXISTS reservations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            code TEXT UNIQUE NOT NULL,
            client_id INTEGER NOT NULL REFERENCES clients(id),
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'in_progress', 'completed', 'cancelled')),
            total_price REAL NOT NULL DEFAULT 0,
            notes TEXT DEFAULT '',
            cancelled_at TEXT,
            cancelled_by INTEGER REFERENCES users(id),
            created_by INTEGER REFERENCES users(id),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (start_date <= end_date)
        )
    ''')

    db.execute('''
        CREATE TABLE IF NOT EXISTS reservation_attractions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_id INTEGER NOT NULL REFERENCES reservations(id) ON DELETE CASCADE,
            attraction_id INTEGER NOT NULL REFERENCES attractions(id),
            quantity INTEGER NOT NULL DEFAULT 1 CHECK (quantity >= 1)
        )
    ''')

    db.execute('''
        CREATE TABLE IF NOT EXISTS reservation_assigned_users (
            reservation_id INTEGER NOT NULL REFERENCES reservations(id) ON DELETE CASCADE,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            PRIMARY KEY (reservation_id, user_id)
        )
    ''')

    # 5. Invoices (weak reference to reservation, no cascade)
    db.execute('''
        CREATE TABLE IF NOT EXISTS invoices (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            invoice_number TEXT UNIQUE NOT NULL,
            reservation_id INTEGER NOT NULL REFERENCES reservations(id),
            client_id INTEGER REFERENCES clients(id),
            issue_date TEXT NOT NULL,
            due_date TEXT NOT NULL,
            amount REAL NOT NULL,
            status TEXT NOT NULL CHECK (status IN ('paid', 'unpaid')),
            is_company_invoice INTEGER NOT NULL DEFAULT 0,
            company_name TEXT,
            tax_id TEXT,
            pdf_url TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 6. Maintenance records
    db.execute('''
        CREATE TABLE IF NOT EXISTS maintenance_records (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            attraction_id INTEGER NOT NULL REFERENCES attractions(id) ON DELETE CASCADE,
            date TEXT NOT NULL,
            description TEXT NOT NULL,
            cost REAL NOT NULL DEFAULT 0,
            performed_by TEXT NOT NULL,
            images_json TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 7. Documents (metadata only, files live behind url)
    db.execute('''
        CREATE TABLE IF NOT EXISTS documents (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            type TEXT NOT NULL,
            size INTEGER NOT NULL DEFAULT 0,
            url TEXT NOT NULL,
            description TEXT,
            related_type TEXT NOT NULL CHECK (related_type IN ('attraction', 'reservation')),
            related_id INTEGER NOT NULL,
            uploaded_by INTEGER REFERENCES users(id),
            uploaded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 8. Audit log (no FK on user_id so history survives user removal)
    db.execute('''
        CREATE TABLE IF NOT EXISTS audit_log (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER,
            action TEXT NOT NULL,
            target TEXT,
            target_id INTEGER,
            details TEXT,
            ip_address TEXT,
            user_agent TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 9. Confirmation email attempts
    db.execute('''
        CREATE TABLE IF NOT EXISTS email_log (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_id INTEGER REFERENCES reservations(id) ON DELETE SET NULL,
            recipient TEXT NOT NULL,
            subject TEXT NOT NULL,
            status TEXT NOT NULL CHECK (status IN ('sent', 'failed')),
            message TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')


def create_indexes(db):
    """Create database indexes for performance."""
    indexes = [
        'CREATE INDEX IF NOT EXISTS idx_reservations_client ON reservations(client_id)',
        'CREATE INDEX IF NOT EXISTS idx_reservations_dates ON reservations(start_date, end_date)',
        'CREATE INDEX IF NOT EXISTS idx_reservations_status ON reservations(status)',
        'CREATE INDEX IF NOT EXISTS idx_res_attractions_reservation ON reservation_attractions(reservation_id)',
        'CREATE INDEX IF NOT EXISTS idx_res_attractions_attraction ON reservation_attractions(attraction_id)',
        'CREATE INDEX IF NOT EXISTS idx_invoices_reservation ON invoices(reservation_id)',
        'CREATE INDEX IF NOT EXISTS idx_invoices_issue_date ON invoices(issue_date)',
        'CREATE INDEX IF NOT EXISTS idx_maintenance_attraction ON maintenance_records(attraction_id, date)',
        'CREATE INDEX IF NOT EXISTS idx_documents_related ON documents(related_type, related_id)',
        'CREATE INDEX IF NOT EXISTS idx_audit_log_created ON audit_log(created_at)',
        'CREATE INDEX IF NOT EXISTS idx_audit_log_target ON audit_log(target, target_id)',
        'CREATE INDEX IF NOT EXISTS idx_email_log_reservation ON email_log(reservation_id)',
    ]

    for index_sql in indexes:
        db.execute(index_sql)
