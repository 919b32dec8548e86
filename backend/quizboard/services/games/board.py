from quizboard.models import Game
from quizboard.services.games.scoring import get_scores
from quizboard.services.ranking import index_scores, rank_teams, round_numbers_for


def build_board(game: Game) -> dict:
    """Authoritative standings for one game, from its stored scores."""
    rows = get_scores(game.id)
    rounds = round_numbers_for(game.round_numbers, (r.round_number for r in rows))
    participants = {p.team_id: p for p in game.participants}
    standings = rank_teams(rounds, index_scores(rows), participants.keys())

    board = []
    for standing in standings:
        entry = standing.to_dict(rounds)
        participant = participants.get(standing.team_id)
        entry['team_name'] = participant.team.name if participant and participant.team else None
        entry['table_number'] = participant.table_number if participant else None
        board.append(entry)

    return {
        'game': game.to_dict(include_details=True),
        'rounds': rounds,
        'scores': [r.to_dict() for r in rows],
        'standings': board,
        'totals_by_team': {s.team_id: s.total for s in standings},
    }
