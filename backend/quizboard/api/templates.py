from flask import Blueprint, jsonify, request
from flask_login import login_required

from quizboard.schemas import TemplateRequest, TemplateUpdateRequest
from quizboard.services import templates as template_service


templates = Blueprint('templates', __name__)


@templates.route('', methods=['GET'])
@login_required
def list_templates():
    return jsonify([t.to_dict() for t in template_service.list_templates()])


@templates.route('', methods=['POST'])
@login_required
def create_template():
    body = TemplateRequest.model_validate(request.get_json(silent=True) or {})
    return jsonify(template_service.create_template(body).to_dict()), 201


@templates.route('/<int:template_id>', methods=['GET'])
@login_required
def get_template(template_id):
    return jsonify(template_service.get_template(template_id).to_dict())


@templates.route('/<int:template_id>', methods=['PUT'])
@login_required
def update_template(template_id):
    body = TemplateUpdateRequest.model_validate(request.get_json(silent=True) or {})
    return jsonify(template_service.update_template(template_id, body).to_dict())


@templates.route('/<int:template_id>', methods=['DELETE'])
@login_required
def delete_template(template_id):
    template_service.delete_template(template_id)
    return jsonify({'message': 'Template deleted'})
