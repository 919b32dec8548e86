from typing import Iterable, List

from flask import current_app
from sqlalchemy import func

from quizboard import db
from quizboard.errors import BusinessRuleError, NotFoundError
from quizboard.models import GameParticipant, Team


def _find_by_name(name: str):
    return Team.query.filter(func.lower(Team.name) == name.lower()).first()


def list_teams() -> List[dict]:
    counts = dict(
        db.session.query(GameParticipant.team_id, func.count(func.distinct(GameParticipant.game_id)))
        .group_by(GameParticipant.team_id)
        .all()
    )
    teams = Team.query.order_by(Team.created_at.desc(), Team.id.desc()).all()
    # Most active teams first; the sort is stable so newer teams lead among equals
    teams.sort(key=lambda t: -counts.get(t.id, 0))
    result = []
    for team in teams:
        data = team.to_dict()
        data['games_count'] = counts.get(team.id, 0)
        result.append(data)
    return result


def get_team(team_id: int) -> Team:
    team = db.session.get(Team, team_id)
    if not team:
        raise NotFoundError('Team not found')
    return team


def create_team(name: str) -> Team:
    name = name.strip()
    if _find_by_name(name):
        raise BusinessRuleError('Team with this name already exists', details={'field': 'name', 'value': name})
    team = Team(name=name)
    db.session.add(team)
    db.session.commit()
    current_app.logger.info(f"[team-create] team={team.id} name={team.name!r}")
    return team


def rename_team(team_id: int, name: str) -> Team:
    team = get_team(team_id)
    name = name.strip()
    clash = _find_by_name(name)
    if clash and clash.id != team.id:
        raise BusinessRuleError('Team with this name already exists', details={'field': 'name', 'value': name})
    old_name, team.name = team.name, name
    db.session.commit()
    current_app.logger.info(f"[team-rename] team={team.id} {old_name!r} -> {name!r}")
    return team


def delete_team(team_id: int) -> None:
    """Delete a team together with its participations and round scores."""
    team = get_team(team_id)
    db.session.delete(team)
    db.session.commit()
    current_app.logger.info(f"[team-delete] team={team_id}")


def import_teams(names: Iterable[str]) -> dict:
    """Create teams from a list of names, skipping ones that already exist.

    Names are compared case-insensitively, both against the database and
    within the list itself.
    """
    existing = {t.name.lower() for t in Team.query.all()}
    created, skipped = [], []
    for raw in names:
        name = (raw or '').strip()
        if not name:
            continue
        if name.lower() in existing:
            skipped.append(name)
            continue
        team = Team(name=name)
        db.session.add(team)
        existing.add(name.lower())
        created.append(team)
    db.session.commit()
    current_app.logger.info(f"[team-import] created={len(created)} skipped={len(skipped)}")
    return {'created': [t.to_dict() for t in created], 'skipped': skipped}
