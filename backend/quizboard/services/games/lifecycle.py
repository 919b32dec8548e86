from typing import Iterable, List, Optional

from flask import current_app
from sqlalchemy import func

from quizboard import db
from quizboard.errors import ApiError, BusinessRuleError, NotFoundError, ValidationError
from quizboard.models import GAME_STATUSES, Game, GameParticipant, GameTemplate, Team


def _clean_label(label) -> Optional[str]:
    if label is None:
        return None
    label = str(label).strip()
    return label or None


def check_unique_labels(labels: Iterable) -> None:
    """Non-empty table labels must be pairwise distinct; empty ones are free."""
    seen = set()
    for label in labels:
        label = _clean_label(label)
        if label is None:
            continue
        if label in seen:
            raise BusinessRuleError('Table labels must be unique', details={'field': 'table_number', 'value': label})
        seen.add(label)


def get_game(game_id: int) -> Game:
    game = db.session.get(Game, game_id)
    if not game:
        raise NotFoundError('Game not found')
    return game


def list_games() -> List[dict]:
    counts = dict(
        db.session.query(GameParticipant.game_id, func.count(GameParticipant.id))
        .group_by(GameParticipant.game_id)
        .all()
    )
    games = Game.query.order_by(Game.created_at.desc(), Game.id.desc()).all()
    result = []
    for game in games:
        data = game.to_dict()
        data['template_name'] = game.template.name if game.template else None
        data['participant_count'] = counts.get(game.id, 0)
        result.append(data)
    return result


def create_game(request) -> Game:
    """Create a game and its participants from a ``CreateGameRequest``."""
    if not db.session.get(GameTemplate, request.template_id):
        raise NotFoundError(f'Game template with ID {request.template_id} not found')

    found = {t.id for t in Team.query.filter(Team.id.in_(request.team_ids)).all()}
    missing = [tid for tid in request.team_ids if tid not in found]
    if missing:
        raise NotFoundError(f"Some teams not found: {', '.join(str(m) for m in missing)}")

    labels = request.table_numbers or []
    counts = request.participants_counts or []
    check_unique_labels(labels)

    game = Game(name=request.name, template_id=request.template_id, event_date=request.event_date)
    for index, team_id in enumerate(request.team_ids):
        game.participants.append(GameParticipant(
            team_id=team_id,
            table_number=_clean_label(labels[index]) if index < len(labels) else None,
            participants_count=counts[index] if index < len(counts) else None,
        ))
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[game-create] game={game.id} template={game.template_id} teams={len(request.team_ids)}")
    return game


def update_participants(game_id: int, updates) -> List[GameParticipant]:
    game = get_game(game_id)
    if not updates:
        raise ValidationError('No participants provided')
    by_team = {p.team_id: p for p in game.participants}
    missing = [u.team_id for u in updates if u.team_id not in by_team]
    if missing:
        raise ApiError(f"Teams are not participants of this game: {', '.join(str(m) for m in missing)}", 400)

    new_labels = {p.team_id: p.table_number for p in game.participants}
    for u in updates:
        new_labels[u.team_id] = _clean_label(u.table_number)
    check_unique_labels(new_labels.values())

    for u in updates:
        by_team[u.team_id].table_number = new_labels[u.team_id]
    db.session.commit()
    current_app.logger.info(f"[participants-update] game={game.id} count={len(updates)}")
    return list(game.participants)


def set_status(game_id: int, status: str) -> Game:
    if status not in GAME_STATUSES:
        raise ValidationError('Invalid game status')
    game = get_game(game_id)
    previous = game.status
    game.status = status
    db.session.commit()
    current_app.logger.info(f"[status] game={game.id} {previous} -> {status}")
    return game


def set_round(game_id: int, current_round) -> Game:
    if isinstance(current_round, bool) or not isinstance(current_round, int) or current_round < 0:
        raise ValidationError('current_round must be a non-negative integer')
    game = get_game(game_id)
    previous = game.current_round
    game.current_round = current_round
    db.session.commit()
    current_app.logger.info(f"[round] game={game.id} {previous} -> {current_round}")
    return game


def delete_game(game_id: int) -> None:
    game = get_game(game_id)
    db.session.delete(game)
    db.session.commit()
    current_app.logger.info(f"[game-delete] game={game_id}")
