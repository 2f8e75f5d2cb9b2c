"""
Tests for the invoice API endpoints and their role checks.
"""

import pytest


def _body(reservation, **overrides):
    body = {
        'reservationId': reservation['id'],
        'issueDate': '2025-06-01',
        'dueDate': '2025-06-15',
        'amount': 250,
        'status': 'unpaid',
    }
    body.update(overrides)
    return body


@pytest.fixture
def issued(client, auth_headers, reservation):
    """Three invoices: two receipts and one company invoice."""
    ids = []
    for issue_date, company in (('2025-06-01', False), ('2025-06-02', True), ('2025-06-03', False)):
        response = client.post('/api/invoices', headers=auth_headers('manager'),
                               json=_body(reservation, issueDate=issue_date, isCompanyInvoice=company))
        ids.append(response.get_json()['id'])
    return ids


class TestCreateInvoiceApi:

    def test_manager_creates_company_invoice(self, client, auth_headers, reservation):
        response = client.post('/api/invoices', json=_body(reservation, isCompanyInvoice=True),
                               headers=auth_headers('manager'))

        assert response.status_code == 201
        data = response.get_json()
        assert data['invoiceNumber'].startswith('FV/')
        assert data['invoiceNumber'].endswith('/0001')
        assert data['isCompanyInvoice'] is True
        assert data['companyName'] == 'Nowak Events'
        assert data['reservation']['code'] == reservation['code']
        assert data['client']['lastName'] == 'Nowak'

    def test_receipt_series(self, client, auth_headers, reservation):
        response = client.post('/api/invoices', json=_body(reservation), headers=auth_headers())

        data = response.get_json()
        assert data['invoiceNumber'].startswith('PR/')
        assert data['isCompanyInvoice'] is False

    @pytest.mark.parametrize('role', ['employee', 'viewer'])
    def test_forbidden_roles_are_audited(self, app, client, auth_headers, reservation, users, role):
        response = client.post('/api/invoices', json=_body(reservation), headers=auth_headers(role))

        assert response.status_code == 403

        from models.audit_log import get_audit_logs
        with app.app_context():
            entries = get_audit_logs(action='UNAUTHORIZED_CREATE_INVOICE')
        assert len(entries) == 1
        assert entries[0]['user_id'] == users[role]
        assert entries[0]['details']['role'] == role

    def test_missing_field(self, client, auth_headers, reservation):
        body = _body(reservation)
        del body['dueDate']
        response = client.post('/api/invoices', json=body, headers=auth_headers())

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Missing field: dueDate'

    def test_unknown_reservation(self, client, auth_headers, reservation):
        response = client.post('/api/invoices', json=_body(reservation, reservationId=999),
                               headers=auth_headers())
        assert response.status_code == 404


class TestInvoiceReadUpdateDelete:

    def test_detail(self, client, auth_headers, issued):
        response = client.get(f'/api/invoices/{issued[0]}', headers=auth_headers('viewer'))

        assert response.status_code == 200
        assert response.get_json()['id'] == issued[0]

    def test_detail_not_found(self, client, auth_headers):
        response = client.get('/api/invoices/999', headers=auth_headers())
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Invoice not found'

    def test_partial_update(self, client, auth_headers, issued):
        response = client.put(f'/api/invoices/{issued[0]}', json={'status': 'paid'},
                              headers=auth_headers('manager'))

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'paid'
        assert data['amount'] == 250
        assert data['invoiceNumber'].startswith('PR/')

    def test_update_forbidden_for_employee(self, client, auth_headers, issued):
        response = client.put(f'/api/invoices/{issued[0]}', json={'status': 'paid'},
                              headers=auth_headers('employee'))
        assert response.status_code == 403

    def test_delete_admin_only(self, client, auth_headers, issued):
        response = client.delete(f'/api/invoices/{issued[0]}', headers=auth_headers('manager'))
        assert response.status_code == 403

        response = client.delete(f'/api/invoices/{issued[0]}', headers=auth_headers('admin'))
        assert response.status_code == 200
        assert response.get_json() == {'success': True}

        response = client.get(f'/api/invoices/{issued[0]}', headers=auth_headers())
        assert response.status_code == 404

    def test_delete_unknown(self, client, auth_headers):
        response = client.delete('/api/invoices/999', headers=auth_headers())
        assert response.status_code == 404


class TestInvoiceList:

    def test_page_shape(self, client, auth_headers, issued):
        response = client.get('/api/invoices?page=1&limit=2', headers=auth_headers())

        assert response.status_code == 200
        data = response.get_json()
        assert data['total'] == 3
        assert data['page'] == 1
        assert data['limit'] == 2
        assert data['totalPages'] == 2
        assert [i['id'] for i in data['data']] == [issued[2], issued[1]]
        assert data['data'][0]['client']['firstName'] == 'Anna'

    def test_second_page(self, client, auth_headers, issued):
        data = client.get('/api/invoices?page=2&limit=2', headers=auth_headers()).get_json()
        assert [i['id'] for i in data['data']] == [issued[0]]

    def test_search(self, client, auth_headers, issued):
        data = client.get('/api/invoices?search=FV', headers=auth_headers()).get_json()
        assert [i['id'] for i in data['data']] == [issued[1]]

    def test_status_filter(self, client, auth_headers, issued):
        client.put(f'/api/invoices/{issued[0]}', json={'status': 'paid'}, headers=auth_headers())

        data = client.get('/api/invoices?status=paid', headers=auth_headers()).get_json()
        assert data['total'] == 1

        data = client.get('/api/invoices?status=unpaid', headers=auth_headers()).get_json()
        assert data['total'] == 2

    def test_empty_list(self, client, auth_headers):
        data = client.get('/api/invoices', headers=auth_headers()).get_json()
        assert data == {'data': [], 'total': 0, 'page': 1, 'limit': 10, 'totalPages': 0}
