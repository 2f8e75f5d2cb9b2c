"""
Document metadata API routes.
"""

from flask import jsonify, request
from flask_login import login_required, current_user

from blueprints.api.forms import DocumentForm, first_error, form_payload
from blueprints.api.serializers import serialize_document
from models.document import DOCUMENT_RELATED_TYPES, create_document, delete_document, get_document, get_documents
from utils.api_response import api_error, api_success
from utils.audit import log_audit
from utils.decorators import role_required, MANAGER_ROLES, STAFF_ROLES


def register_routes(bp):
    """Register document routes on the blueprint."""

    @bp.route('/documents')
    @login_required
    def documents_list():
        """Query: relatedId and relatedType (attraction|reservation), both required."""
        related_id = request.args.get('relatedId', type=int)
        related_type = request.args.get('relatedType')
        if not related_id or not related_type:
            return api_error('relatedId and relatedType are required', status=400)
        if related_type not in DOCUMENT_RELATED_TYPES:
            return api_error('relatedType must be attraction or reservation', status=400)

        return jsonify([serialize_document(d) for d in get_documents(related_type, related_id)])

    @bp.route('/documents', methods=['POST'])
    @login_required
    @role_required(*STAFF_ROLES)
    def documents_create():
        """Body: {name, type, size, url, description?, relatedType, relatedId}"""
        form = DocumentForm(formdata=form_payload(request.get_json(silent=True)))
        if not form.validate():
            return api_error(first_error(form), status=400)

        document_id = create_document(
            name=form.name.data,
            type=form.type.data,
            url=form.url.data,
            related_type=form.related_type.data,
            related_id=form.related_id.data,
            size=form.size.data or 0,
            description=form.description.data,
            uploaded_by=current_user.id
        )

        log_audit('CREATE_DOCUMENT', form.related_type.data, form.related_id.data,
                  details={'document_id': document_id, 'name': form.name.data})

        return jsonify(serialize_document(get_document(document_id))), 201

    @bp.route('/documents/<int:document_id>', methods=['DELETE'])
    @login_required
    @role_required(*MANAGER_ROLES, audit_action='UNAUTHORIZED_DELETE_DOCUMENT', audit_target='document')
    def documents_delete(document_id):
        document = delete_document(document_id)

        log_audit('DELETE_DOCUMENT', document['related_type'], document['related_id'],
                  details={'document_id': document_id, 'name': document['name']})

        return api_success()
