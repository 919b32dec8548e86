"""A read-only snapshot of every game, used by the statistics views.

Loading is a handful of queries; everything after that is plain Python
over the snapshot, so the views can be tested without a database.
"""

from dataclasses import dataclass, field
from datetime import datetime
from functools import cached_property
from typing import Dict, List, Optional

from quizboard import db
from quizboard.models import Game, GameParticipant, RoundScore, Team, TemplateRound
from quizboard.services.ranking import Standing, rank_teams, round_numbers_for


@dataclass
class TeamRecord:
    id: int
    name: str
    logo_path: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'logo_path': self.logo_path,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class GameRecord:
    id: int
    name: str
    created_at: Optional[datetime] = None
    event_date: Optional[datetime] = None
    template_rounds: List[int] = field(default_factory=list)
    # team id -> table label (None when unlabelled)
    participants: Dict[int, Optional[str]] = field(default_factory=dict)
    # team id -> round number -> score
    scores: Dict[int, Dict[int, float]] = field(default_factory=dict)

    @property
    def played(self) -> bool:
        return any(self.scores.values())

    @property
    def date(self) -> Optional[datetime]:
        return self.event_date or self.created_at

    @property
    def team_ids(self) -> set:
        return set(self.participants) | set(self.scores)

    @cached_property
    def round_numbers(self) -> List[int]:
        seen = {rn for per_round in self.scores.values() for rn in per_round}
        return round_numbers_for(self.template_rounds, seen)

    @cached_property
    def standings(self) -> List[Standing]:
        return rank_teams(self.round_numbers, self.scores, self.team_ids)

    @cached_property
    def by_team(self) -> Dict[int, Standing]:
        return {s.team_id: s for s in self.standings}

    def round_standings(self, round_number: int) -> List[Standing]:
        """Placement on a single round's scores across all of the game's teams."""
        return rank_teams([round_number], self.scores, self.team_ids)


@dataclass
class History:
    teams: Dict[int, TeamRecord] = field(default_factory=dict)
    # Newest first by creation
    games: List[GameRecord] = field(default_factory=list)

    @property
    def played_games(self) -> List[GameRecord]:
        return [g for g in self.games if g.played]

    def team_name(self, team_id: int) -> str:
        team = self.teams.get(team_id)
        return team.name if team else f'Team #{team_id}'


def load_history() -> History:
    teams = {
        t.id: TeamRecord(id=t.id, name=t.name, logo_path=t.logo_path, created_at=t.created_at)
        for t in Team.query.all()
    }

    rounds_by_template: Dict[int, List[int]] = {}
    for template_id, round_number in db.session.query(TemplateRound.template_id, TemplateRound.round_number):
        rounds_by_template.setdefault(template_id, []).append(round_number)

    games: Dict[int, GameRecord] = {}
    for g in Game.query.order_by(Game.created_at.desc(), Game.id.desc()).all():
        games[g.id] = GameRecord(
            id=g.id,
            name=g.name,
            created_at=g.created_at,
            event_date=g.event_date,
            template_rounds=sorted(rounds_by_template.get(g.template_id, [])),
        )

    for p in GameParticipant.query.all():
        if p.game_id in games:
            games[p.game_id].participants[p.team_id] = p.table_number

    for s in RoundScore.query.all():
        if s.game_id in games:
            games[s.game_id].scores.setdefault(s.team_id, {})[s.round_number] = float(s.score)

    return History(teams=teams, games=list(games.values()))
