"""
Client API routes.
"""

from flask import jsonify, request
from flask_login import login_required

from blueprints.api.forms import ClientForm, ClientUpdateForm, first_error, form_payload, present_fields
from blueprints.api.serializers import camelize, serialize_client
from models.client import (
    create_client, delete_client, get_all_clients, get_client_by_id,
    get_client_reservations, update_client
)
from utils.api_response import api_error, api_success
from utils.audit import log_audit
from utils.decorators import role_required, MANAGER_ROLES, STAFF_ROLES
from utils.errors import NotFoundError


def register_routes(bp):
    """Register client routes on the blueprint."""

    @bp.route('/clients')
    @login_required
    def clients_list():
        """All clients, newest first. Query: search (optional)."""
        clients = get_all_clients(search=request.args.get('search') or None)
        return jsonify([serialize_client(c) for c in clients])

    @bp.route('/clients/<int:client_id>')
    @login_required
    def client_detail(client_id):
        """Client with reservation summaries."""
        client = get_client_by_id(client_id)
        if not client:
            raise NotFoundError('Client', client_id)

        data = serialize_client(client)
        data['reservations'] = camelize(get_client_reservations(client_id))
        return jsonify(data)

    @bp.route('/clients', methods=['POST'])
    @login_required
    @role_required(*STAFF_ROLES)
    def clients_create():
        """
        Create a client.

        Body: {firstName, lastName, phone, street, buildingNumber, postalCode,
               city, email?, companyName?, taxId?, notes?}
        """
        form = ClientForm(formdata=form_payload(request.get_json(silent=True)))
        if not form.validate():
            return api_error(first_error(form), status=400)

        data = {name: value for name, value in form.data.items() if name != 'csrf_token'}
        client_id = create_client(**data)

        log_audit('CREATE_CLIENT', 'client', client_id,
                  details={'name': f"{data['first_name']} {data['last_name']}"})

        return jsonify(serialize_client(get_client_by_id(client_id))), 201

    @bp.route('/clients/<int:client_id>', methods=['PUT'])
    @login_required
    @role_required(*MANAGER_ROLES, audit_action='UNAUTHORIZED_UPDATE_CLIENT', audit_target='client')
    def clients_update(client_id):
        """Partial update; only the keys present in the body change."""
        payload = request.get_json(silent=True) or {}
        form = ClientUpdateForm(formdata=form_payload(payload))
        if not form.validate():
            return api_error(first_error(form), status=400)

        fields = present_fields(form, payload)
        client = update_client(client_id, **fields)

        log_audit('UPDATE_CLIENT', 'client', client_id, details={'fields': sorted(fields)})

        return jsonify(serialize_client(client))

    @bp.route('/clients/<int:client_id>', methods=['DELETE'])
    @login_required
    @role_required('admin', audit_action='UNAUTHORIZED_DELETE_CLIENT', audit_target='client')
    def clients_delete(client_id):
        client = delete_client(client_id)

        log_audit('DELETE_CLIENT', 'client', client_id,
                  details={'name': f"{client['first_name']} {client['last_name']}"})

        return api_success()
