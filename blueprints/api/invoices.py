"""
Invoice API routes.
"""

from flask import current_app, jsonify, request
from flask_login import login_required

from blueprints.api.serializers import serialize_invoice
from models.invoice import create_invoice, delete_invoice, get_invoice, list_invoices, update_invoice
from utils.api_response import api_page, api_success
from utils.audit import log_audit
from utils.decorators import role_required, MANAGER_ROLES
from utils.errors import NotFoundError, ValidationError
from utils.validators import parse_page_args, require_fields

# camelCase body key -> model field, for partial updates
INVOICE_UPDATE_KEYS = {
    'reservationId': 'reservation_id',
    'clientId': 'client_id',
    'issueDate': 'issue_date',
    'dueDate': 'due_date',
    'amount': 'amount',
    'status': 'status',
    'isCompanyInvoice': 'is_company_invoice',
    'companyName': 'company_name',
    'taxId': 'tax_id',
    'pdfUrl': 'pdf_url',
}


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


def register_routes(bp):
    """Register invoice routes on the blueprint."""

    @bp.route('/invoices')
    @login_required
    def invoices_list():
        """
        Paginated invoices, newest issue date first.

        Query: page, limit, search, status (paid|unpaid)
        Returns: {data, total, page, limit, totalPages}
        """
        page, limit = parse_page_args(
            request.args,
            current_app.config['ITEMS_PER_PAGE'],
            current_app.config['MAX_PAGE_SIZE']
        )
        invoices, total = list_invoices(
            page=page,
            limit=limit,
            search=request.args.get('search') or None,
            status=request.args.get('status') or None
        )
        return api_page([serialize_invoice(i) for i in invoices], total, page, limit)

    @bp.route('/invoices/<int:invoice_id>')
    @login_required
    def invoice_detail(invoice_id):
        invoice = get_invoice(invoice_id)
        if not invoice:
            raise NotFoundError('Invoice', invoice_id)
        return jsonify(serialize_invoice(invoice))

    @bp.route('/invoices', methods=['POST'])
    @login_required
    @role_required(*MANAGER_ROLES, audit_action='UNAUTHORIZED_CREATE_INVOICE', audit_target='invoice')
    def invoices_create():
        """
        Issue an invoice (FV series when isCompanyInvoice, otherwise PR).

        Body: {reservationId, issueDate, dueDate, amount, status,
               isCompanyInvoice?, clientId?, companyName?, taxId?, pdfUrl?}
        """
        payload = _json_body()
        require_fields(payload, ['reservationId', 'issueDate', 'dueDate', 'amount', 'status'])

        invoice = create_invoice(
            reservation_id=payload['reservationId'],
            issue_date=payload['issueDate'],
            due_date=payload['dueDate'],
            amount=payload['amount'],
            status=payload['status'],
            is_company_invoice=bool(payload.get('isCompanyInvoice')),
            client_id=payload.get('clientId'),
            company_name=payload.get('companyName'),
            tax_id=payload.get('taxId'),
            pdf_url=payload.get('pdfUrl')
        )

        log_audit('CREATE_INVOICE', 'invoice', invoice['id'],
                  details={'invoice_number': invoice['invoice_number'],
                           'reservation_id': invoice['reservation_id']})

        return jsonify(serialize_invoice(invoice)), 201

    @bp.route('/invoices/<int:invoice_id>', methods=['PUT'])
    @login_required
    @role_required(*MANAGER_ROLES, audit_action='UNAUTHORIZED_UPDATE_INVOICE', audit_target='invoice')
    def invoices_update(invoice_id):
        """Partial update; only the keys present in the body change."""
        payload = _json_body()
        fields = {
            field: payload[key]
            for key, field in INVOICE_UPDATE_KEYS.items()
            if key in payload
        }

        invoice = update_invoice(invoice_id, **fields)

        log_audit('UPDATE_INVOICE', 'invoice', invoice_id,
                  details={'fields': sorted(fields)})

        return jsonify(serialize_invoice(invoice))

    @bp.route('/invoices/<int:invoice_id>', methods=['DELETE'])
    @login_required
    @role_required('admin', audit_action='UNAUTHORIZED_DELETE_INVOICE', audit_target='invoice')
    def invoices_delete(invoice_id):
        invoice = delete_invoice(invoice_id)

        log_audit('DELETE_INVOICE', 'invoice', invoice_id,
                  details={'invoice_number': invoice['invoice_number']})

        return api_success()
