"""
Attraction API routes.
"""

from flask import jsonify, request
from flask_login import login_required

from blueprints.api.forms import AttractionForm, AttractionUpdateForm, first_error, form_payload, present_fields
from blueprints.api.serializers import serialize_attraction
from models.attraction import (
    create_attraction, delete_attraction, get_all_attractions,
    get_attraction_by_id, update_attraction
)
from utils.api_response import api_error, api_success
from utils.audit import log_audit
from utils.decorators import role_required, MANAGER_ROLES
from utils.errors import NotFoundError


def register_routes(bp):
    """Register attraction routes on the blueprint."""

    @bp.route('/attractions')
    @login_required
    def attractions_list():
        return jsonify([serialize_attraction(a) for a in get_all_attractions()])

    @bp.route('/attractions/<int:attraction_id>')
    @login_required
    def attraction_detail(attraction_id):
        """Attraction with its maintenance records."""
        attraction = get_attraction_by_id(attraction_id, with_maintenance=True)
        if not attraction:
            raise NotFoundError('Attraction', attraction_id)
        return jsonify(serialize_attraction(attraction))

    @bp.route('/attractions', methods=['POST'])
    @login_required
    @role_required(*MANAGER_ROLES, audit_action='UNAUTHORIZED_CREATE_ATTRACTION', audit_target='attraction')
    def attractions_create():
        """
        Create an attraction.

        Body: {name, price, description?, width?, length?, height?, weight?,
               setupTime?, image?}
        """
        form = AttractionForm(formdata=form_payload(request.get_json(silent=True)))
        if not form.validate():
            return api_error(first_error(form), status=400)

        data = {name: value for name, value in form.data.items() if name != 'csrf_token'}
        attraction_id = create_attraction(**data)

        log_audit('CREATE_ATTRACTION', 'attraction', attraction_id, details={'name': data['name']})

        return jsonify(serialize_attraction(get_attraction_by_id(attraction_id))), 201

    @bp.route('/attractions/<int:attraction_id>', methods=['PUT'])
    @login_required
    @role_required(*MANAGER_ROLES, audit_action='UNAUTHORIZED_UPDATE_ATTRACTION', audit_target='attraction')
    def attractions_update(attraction_id):
        """Partial update; only the keys present in the body change."""
        payload = request.get_json(silent=True) or {}
        form = AttractionUpdateForm(formdata=form_payload(payload))
        if not form.validate():
            return api_error(first_error(form), status=400)

        fields = present_fields(form, payload)
        attraction = update_attraction(attraction_id, **fields)

        log_audit('UPDATE_ATTRACTION', 'attraction', attraction_id, details={'fields': sorted(fields)})

        return jsonify(serialize_attraction(attraction))

    @bp.route('/attractions/<int:attraction_id>', methods=['DELETE'])
    @login_required
    @role_required('admin', audit_action='UNAUTHORIZED_DELETE_ATTRACTION', audit_target='attraction')
    def attractions_delete(attraction_id):
        attraction = delete_attraction(attraction_id)

        log_audit('DELETE_ATTRACTION', 'attraction', attraction_id, details={'name': attraction['name']})

        return api_success()
