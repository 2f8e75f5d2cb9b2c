"""
Maintenance record API routes.
"""

from flask import jsonify, request
from flask_login import login_required

from blueprints.api.forms import MaintenanceForm, first_error, form_payload
from blueprints.api.serializers import serialize_maintenance
from models.maintenance import create_maintenance_record, get_maintenance_record, get_maintenance_records
from utils.api_response import api_error
from utils.audit import log_audit
from utils.datetime_helpers import to_storage
from utils.decorators import role_required, STAFF_ROLES
from utils.errors import ValidationError


def register_routes(bp):
    """Register maintenance routes on the blueprint."""

    @bp.route('/maintenance')
    @login_required
    def maintenance_list():
        """Records for one attraction. Query: attractionId (required)."""
        attraction_id = request.args.get('attractionId', type=int)
        if not attraction_id:
            return api_error('attractionId is required', status=400)
        return jsonify([serialize_maintenance(m) for m in get_maintenance_records(attraction_id)])

    @bp.route('/maintenance', methods=['POST'])
    @login_required
    @role_required(*STAFF_ROLES)
    def maintenance_create():
        """
        Record maintenance work.

        Body: {attractionId, date, description, cost, performedBy, images?: [url]}
        """
        payload = request.get_json(silent=True) or {}
        form = MaintenanceForm(formdata=form_payload(payload))
        if not form.validate():
            return api_error(first_error(form), status=400)

        images = payload.get('images') or []
        if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
            raise ValidationError('images must be a list of URLs')

        record_id = create_maintenance_record(
            attraction_id=form.attraction_id.data,
            date=to_storage(form.date.data, 'date'),
            description=form.description.data,
            performed_by=form.performed_by.data,
            cost=form.cost.data or 0,
            images=images
        )

        log_audit('CREATE_MAINTENANCE', 'attraction', form.attraction_id.data,
                  details={'maintenance_id': record_id, 'cost': form.cost.data or 0})

        return jsonify(serialize_maintenance(get_maintenance_record(record_id))), 201
