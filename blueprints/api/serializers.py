"""
JSON serializers for API responses.
Model functions return snake_case dicts; the API speaks camelCase.
"""

import json


def camel_case(name: str) -> str:
    """Convert a snake_case column name to camelCase."""
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def camelize(value):
    """Recursively convert dict keys to camelCase."""
    if isinstance(value, dict):
        return {camel_case(key): camelize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [camelize(item) for item in value]
    return value


def serialize_client(client: dict) -> dict:
    if client is None:
        return None
    return camelize(client)


def serialize_attraction(attraction: dict) -> dict:
    if attraction is None:
        return None
    data = camelize({k: v for k, v in attraction.items() if k != 'maintenance_records'})
    if 'maintenance_records' in attraction:
        data['maintenanceRecords'] = [serialize_maintenance(m) for m in attraction['maintenance_records']]
    return data


def serialize_invoice(invoice: dict) -> dict:
    """Invoice with is_company_invoice as a boolean."""
    if invoice is None:
        return None
    data = camelize({k: v for k, v in invoice.items() if k not in ('reservation', 'client')})
    data['isCompanyInvoice'] = bool(invoice.get('is_company_invoice'))
    if 'reservation' in invoice:
        data['reservation'] = camelize(invoice['reservation'])
    if 'client' in invoice:
        data['client'] = serialize_client(invoice['client'])
    return data


def serialize_reservation(reservation: dict) -> dict:
    """Resolved reservation: client, line items, staff and invoices."""
    if reservation is None:
        return None
    nested = ('client', 'attractions', 'assigned_users', 'invoices')
    data = camelize({k: v for k, v in reservation.items() if k not in nested})
    data['client'] = serialize_client(reservation.get('client'))
    data['attractions'] = [
        {
            'id': line['id'],
            'attractionId': line['attraction_id'],
            'quantity': line['quantity'],
            'attraction': serialize_attraction(line['attraction']),
        }
        for line in reservation.get('attractions', [])
    ]
    data['assignedUsers'] = camelize(reservation.get('assigned_users', []))
    data['invoices'] = [serialize_invoice(i) for i in reservation.get('invoices', [])]
    return data


def serialize_calendar_entry(entry: dict) -> dict:
    return {
        'id': entry['id'],
        'code': entry['code'],
        'startDate': entry['start_date'],
        'endDate': entry['end_date'],
        'status': entry['status'],
        'client': {
            'firstName': entry['first_name'],
            'lastName': entry['last_name'],
        },
    }


def serialize_maintenance(record: dict) -> dict:
    """Maintenance record with images decoded from images_json."""
    data = camelize({k: v for k, v in record.items() if k != 'images_json'})
    data['images'] = json.loads(record['images_json']) if record.get('images_json') else []
    return data


def serialize_document(document: dict) -> dict:
    return camelize(document)


def serialize_audit_log(entry: dict) -> dict:
    return camelize(entry)


def serialize_email(entry: dict) -> dict:
    return camelize(entry)
