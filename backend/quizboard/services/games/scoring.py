import math
from typing import Iterable, List

from flask import current_app
from sqlalchemy import select

from quizboard import db
from quizboard.errors import ApiError, BusinessRuleError, NotFoundError, ValidationError
from quizboard.models import Game, GameParticipant, RoundScore, TemplateRound
from quizboard.services.ranking import EPSILON, normalize_score


def validate_round_number(round_number) -> int:
    if isinstance(round_number, bool) or not isinstance(round_number, int) or round_number <= 0:
        raise ValidationError('round_number must be a positive integer')
    return round_number


def validate_score(raw_score) -> float:
    """Return the score rounded to one decimal place, or raise."""
    if isinstance(raw_score, bool) or not isinstance(raw_score, (int, float)) or not math.isfinite(raw_score):
        raise ValidationError('score must be a number')
    score = normalize_score(float(raw_score))
    times_ten = score * 10
    if abs(times_ten - round(times_ten)) > EPSILON:
        raise ValidationError('score must have at most one decimal place')
    return score


def _check_round_maximum(game: Game, round_number: int, score: float) -> None:
    rounds = TemplateRound.query.filter_by(template_id=game.template_id).all()
    if not rounds:
        return
    template_round = next((r for r in rounds if r.round_number == round_number), None)
    if template_round is None:
        raise ApiError(f'Round {round_number} is not part of this game', 400, {'field': 'round_number'})
    if template_round.max_score is None:
        return
    max_score = float(template_round.max_score)
    if score - max_score > EPSILON:
        raise BusinessRuleError(
            f'Round maximum exceeded ({max_score:g}). Fix the value and try again.',
            details={'field': 'score', 'max_score': max_score},
        )


def _upsert_statement(values: dict):
    dialect = db.session.get_bind().dialect.name
    if dialect == 'postgresql':
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == 'sqlite':
        from sqlalchemy.dialects.sqlite import insert
    else:
        return None
    stmt = insert(RoundScore.__table__).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=['game_id', 'team_id', 'round_number'],
        set_={'score': stmt.excluded.score},
    )


def _write(game_id: int, team_id: int, round_number: int, score: float) -> RoundScore:
    values = {'game_id': game_id, 'team_id': team_id, 'round_number': round_number, 'score': score}
    stmt = _upsert_statement(values)
    if stmt is not None:
        db.session.execute(stmt)
    else:
        existing = RoundScore.query.filter_by(game_id=game_id, team_id=team_id, round_number=round_number).first()
        if existing:
            existing.score = score
        else:
            db.session.add(RoundScore(**values))
        db.session.flush()
    return db.session.execute(
        select(RoundScore)
        .filter_by(game_id=game_id, team_id=team_id, round_number=round_number)
        .execution_options(populate_existing=True)
    ).scalar_one()


def _get_game(game_id: int) -> Game:
    game = db.session.get(Game, game_id)
    if not game:
        raise NotFoundError('Game not found')
    return game


def _validated(game: Game, team_id: int, round_number, raw_score) -> tuple:
    round_number = validate_round_number(round_number)
    score = validate_score(raw_score)
    if not GameParticipant.query.filter_by(game_id=game.id, team_id=team_id).first():
        raise ApiError('Team is not a participant of the game', 400, {'field': 'team_id'})
    _check_round_maximum(game, round_number, score)
    return round_number, score


def upsert_score(game_id: int, team_id: int, round_number, raw_score) -> RoundScore:
    """Validate and store one round score, overwriting any previous value.

    The caller is expected to broadcast the game's scores afterwards.
    """
    game = _get_game(game_id)
    round_number, score = _validated(game, team_id, round_number, raw_score)
    row = _write(game.id, team_id, round_number, score)
    db.session.commit()
    current_app.logger.info(f"[score-upsert] game={game.id} team={team_id} round={round_number} score={score}")
    return row


def upsert_scores(game_id: int, entries: Iterable) -> List[RoundScore]:
    """Store several scores in one transaction; any rejection writes nothing.

    ``entries`` are mappings or objects with team_id, round_number, score.
    """
    game = _get_game(game_id)
    checked = []
    for entry in entries:
        if isinstance(entry, dict):
            team_id, round_number, raw = entry.get('team_id'), entry.get('round_number'), entry.get('score')
        else:
            team_id, round_number, raw = entry.team_id, entry.round_number, entry.score
        round_number, score = _validated(game, team_id, round_number, raw)
        checked.append((team_id, round_number, score))
    try:
        rows = [_write(game.id, team_id, round_number, score) for team_id, round_number, score in checked]
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info(f"[score-batch] game={game.id} count={len(rows)}")
    return rows


def get_scores(game_id: int) -> List[RoundScore]:
    return (
        RoundScore.query.filter_by(game_id=game_id)
        .order_by(RoundScore.round_number, RoundScore.team_id)
        .all()
    )


def score_rows(game_id: int) -> List[dict]:
    return [s.to_dict() for s in get_scores(game_id)]
