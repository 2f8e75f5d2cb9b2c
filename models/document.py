"""
Document metadata.
Files themselves live behind the stored url; only metadata is kept here.
"""

from database import get_db
from utils.errors import NotFoundError

DOCUMENT_RELATED_TYPES = ('attraction', 'reservation')

_RELATED_TABLES = {
    'attraction': 'attractions',
    'reservation': 'reservations',
}


def get_documents(related_type: str, related_id: int) -> list:
    """Documents attached to an attraction or reservation, newest first."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT d.*, u.name as uploaded_by_name
        FROM documents d
        LEFT JOIN users u ON d.uploaded_by = u.id
        WHERE d.related_type = ? AND d.related_id = ?
        ORDER BY d.uploaded_at DESC, d.id DESC
    ''', (related_type, related_id))
    return [dict(row) for row in cursor.fetchall()]


def get_document(document_id: int) -> dict:
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM documents WHERE id = ?', (document_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def create_document(name: str, type: str, url: str, related_type: str, related_id: int,
                    size: int = 0, description: str = None, uploaded_by: int = None) -> int:
    """
    Store document metadata.

    Raises:
        NotFoundError: The related attraction or reservation does not exist
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute(f'SELECT id FROM {_RELATED_TABLES[related_type]} WHERE id = ?', (related_id,))
    if not cursor.fetchone():
        raise NotFoundError(related_type.capitalize(), related_id)

    cursor.execute('''
        INSERT INTO documents
        (name, type, size, url, description, related_type, related_id, uploaded_by)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    ''', (name, type, size or 0, url, description, related_type, related_id, uploaded_by))
    db.commit()
    return cursor.lastrowid


def delete_document(document_id: int) -> dict:
    """
    Delete document metadata.

    Raises:
        NotFoundError: Unknown document
    """
    document = get_document(document_id)
    if not document:
        raise NotFoundError('Document', document_id)

    db = get_db()
    db.execute('DELETE FROM documents WHERE id = ?', (document_id,))
    db.commit()
    return document
