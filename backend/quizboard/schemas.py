"""Typed request bodies, parsed before anything reaches the services."""

from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter, model_validator

GameStatus = Literal['created', 'active', 'finished']
RankingSortKey = Literal['games', 'avg_place', 'total_points', 'avg_points']


class _Body(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')


class LoginRequest(_Body):
    password: str = Field(min_length=1)


# ---- scores ----

class ScoreSubmission(_Body):
    team_id: StrictInt
    # Positivity and the one-decimal rule are checked by the scoring service
    round_number: StrictInt
    score: float = Field(strict=True)


class ScoreBatch(_Body):
    scores: List[ScoreSubmission] = Field(min_length=1)


# ---- games ----

class CreateGameRequest(_Body):
    name: str = Field(min_length=1, max_length=255)
    template_id: StrictInt
    team_ids: List[StrictInt] = Field(min_length=1)
    table_numbers: Optional[List[Optional[str]]] = None
    participants_counts: Optional[List[Optional[int]]] = None
    event_date: Optional[datetime] = None

    @model_validator(mode='after')
    def _check_teams(self):
        if len(set(self.team_ids)) != len(self.team_ids):
            raise ValueError('team_ids must not contain duplicates')
        for count in self.participants_counts or []:
            if count is not None and count < 0:
                raise ValueError('participants_counts must be non-negative')
        return self


class ParticipantUpdate(_Body):
    team_id: StrictInt
    table_number: Optional[str] = None


participant_updates = TypeAdapter(List[ParticipantUpdate])


class StatusUpdate(_Body):
    status: GameStatus


class RoundUpdate(_Body):
    current_round: StrictInt


# ---- teams ----

class TeamRequest(_Body):
    name: str = Field(min_length=1, max_length=255)


class TeamImportRequest(_Body):
    names: List[Annotated[str, Field(max_length=255)]] = Field(min_length=1)


# ---- templates ----

class TemplateRoundRequest(_Body):
    round_number: StrictInt = Field(gt=0)
    name: str = Field(min_length=1, max_length=100)
    max_score: Optional[float] = Field(default=None, ge=0)


def _check_round_numbers(rounds):
    numbers = [r.round_number for r in rounds]
    if len(set(numbers)) != len(numbers):
        raise ValueError('Round numbers must be unique')


class TemplateRequest(_Body):
    name: str = Field(min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    rounds: List[TemplateRoundRequest] = Field(min_length=1, max_length=20)

    @model_validator(mode='after')
    def _unique_rounds(self):
        _check_round_numbers(self.rounds)
        return self


class TemplateUpdateRequest(_Body):
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    rounds: Optional[List[TemplateRoundRequest]] = Field(default=None, min_length=1, max_length=20)

    @model_validator(mode='after')
    def _unique_rounds(self):
        if self.rounds is not None:
            _check_round_numbers(self.rounds)
        return self


# ---- public ----

class PageQuery(_Body):
    page: int = Field(default=1, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)


class RankingQuery(PageQuery):
    sort: RankingSortKey = 'total_points'
    order: Optional[Literal['asc', 'desc']] = None
