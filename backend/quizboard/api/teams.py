from flask import Blueprint, jsonify, request
from flask_login import login_required

from quizboard.schemas import TeamImportRequest, TeamRequest
from quizboard.services import teams as team_service


teams = Blueprint('teams', __name__)


@teams.route('', methods=['GET'])
@login_required
def list_teams():
    return jsonify(team_service.list_teams())


@teams.route('', methods=['POST'])
@login_required
def create_team():
    body = TeamRequest.model_validate(request.get_json(silent=True) or {})
    team = team_service.create_team(body.name)
    return jsonify(team.to_dict()), 201


@teams.route('/import', methods=['POST'])
@login_required
def import_teams():
    body = TeamImportRequest.model_validate(request.get_json(silent=True) or {})
    return jsonify(team_service.import_teams(body.names)), 201


@teams.route('/<int:team_id>', methods=['GET'])
@login_required
def get_team(team_id):
    return jsonify(team_service.get_team(team_id).to_dict())


@teams.route('/<int:team_id>', methods=['PUT'])
@login_required
def rename_team(team_id):
    body = TeamRequest.model_validate(request.get_json(silent=True) or {})
    return jsonify(team_service.rename_team(team_id, body.name).to_dict())


@teams.route('/<int:team_id>', methods=['DELETE'])
@login_required
def delete_team(team_id):
    team_service.delete_team(team_id)
    return jsonify({'message': 'Team deleted'})
