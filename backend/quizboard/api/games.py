from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required

from quizboard.schemas import CreateGameRequest, RoundUpdate, ScoreBatch, ScoreSubmission, StatusUpdate, participant_updates
from quizboard.services.games import lifecycle, scoring
from quizboard.services.games.board import build_board


games = Blueprint('games', __name__)


def _broadcaster():
    return current_app.extensions['broadcaster']


def _body():
    return request.get_json(silent=True) or {}


def _broadcast_scores(game_id: int) -> None:
    # Re-read after commit so viewers get what the database now holds
    _broadcaster().publish_scores(game_id, lambda: scoring.score_rows(game_id))


@games.route('', methods=['GET'])
@login_required
def list_games():
    return jsonify(lifecycle.list_games())


@games.route('', methods=['POST'])
@login_required
def create_game():
    body = CreateGameRequest.model_validate(_body())
    game = lifecycle.create_game(body)
    return jsonify(game.to_dict(include_details=True)), 201


@games.route('/<int:game_id>', methods=['GET'])
@login_required
def get_game(game_id):
    return jsonify(lifecycle.get_game(game_id).to_dict(include_details=True))


@games.route('/<int:game_id>', methods=['DELETE'])
@login_required
def delete_game(game_id):
    lifecycle.delete_game(game_id)
    return jsonify({'message': 'Game deleted'})


@games.route('/<int:game_id>/participants', methods=['PUT'])
@login_required
def update_participants(game_id):
    updates = participant_updates.validate_python(request.get_json(silent=True) or [])
    participants = lifecycle.update_participants(game_id, updates)
    return jsonify([p.to_dict() for p in participants])


@games.route('/<int:game_id>/status', methods=['PUT'])
@login_required
def update_status(game_id):
    body = StatusUpdate.model_validate(_body())
    game = lifecycle.set_status(game_id, body.status)
    _broadcaster().publish_status(game.id, game.status)
    return jsonify(game.to_dict())


@games.route('/<int:game_id>/round', methods=['PUT'])
@login_required
def update_round(game_id):
    body = RoundUpdate.model_validate(_body())
    game = lifecycle.set_round(game_id, body.current_round)
    _broadcaster().publish_round(game.id, game.current_round)
    return jsonify(game.to_dict())


@games.route('/<int:game_id>/scores', methods=['POST'])
@login_required
def submit_score(game_id):
    body = ScoreSubmission.model_validate(_body())
    row = scoring.upsert_score(game_id, body.team_id, body.round_number, body.score)
    _broadcast_scores(game_id)
    return jsonify(row.to_dict()), 201


@games.route('/<int:game_id>/scores/batch', methods=['POST'])
@login_required
def submit_scores(game_id):
    body = ScoreBatch.model_validate(_body())
    rows = scoring.upsert_scores(game_id, body.scores)
    _broadcast_scores(game_id)
    return jsonify([r.to_dict() for r in rows]), 201


@games.route('/<int:game_id>/scores', methods=['GET'])
@login_required
def get_scores(game_id):
    lifecycle.get_game(game_id)
    return jsonify(scoring.score_rows(game_id))


@games.route('/<int:game_id>/board', methods=['GET'])
@login_required
def get_board(game_id):
    return jsonify(build_board(lifecycle.get_game(game_id)))
