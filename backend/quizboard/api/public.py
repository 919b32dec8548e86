"""Read-only endpoints behind the public scoreboard and statistics pages."""

from flask import Blueprint, jsonify, request, current_app

from quizboard.schemas import PageQuery, RankingQuery
from quizboard.services.games import lifecycle, scoring
from quizboard.services.games.board import build_board


public = Blueprint('public', __name__)


def _stats():
    return current_app.extensions['stats']


@public.route('/games/<int:game_id>/board', methods=['GET'])
def game_board(game_id):
    return jsonify(build_board(lifecycle.get_game(game_id)))


@public.route('/games/<int:game_id>/scores', methods=['GET'])
def game_scores(game_id):
    lifecycle.get_game(game_id)
    return jsonify(scoring.score_rows(game_id))


@public.route('/last-game', methods=['GET'])
def last_game():
    return jsonify(_stats().last_game())


@public.route('/stats', methods=['GET'])
def stats():
    return jsonify(_stats().public_stats())


@public.route('/ranking', methods=['GET'])
def ranking():
    query = RankingQuery.model_validate(request.args.to_dict())
    return jsonify(_stats().global_ranking(query.sort, query.order, query.page, query.limit))


@public.route('/teams', methods=['GET'])
def teams():
    query = PageQuery.model_validate(request.args.to_dict())
    return jsonify(_stats().teams(query.page, query.limit))


@public.route('/teams/<int:team_id>', methods=['GET'])
def team_profile(team_id):
    return jsonify(_stats().team_profile(team_id))
