"""Standings for a set of teams scored over a sequence of rounds.

Order is total descending; equal totals are broken by comparing round
scores from the last round backward. Teams equal on the total and on
every round share a rank, and the next distinct team takes its 1-based
position (1, 1, 3).
"""

import math
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

EPSILON = 1e-9


def normalize_score(value: float) -> float:
    """Round to one decimal place, halves going up (``floor(v*10 + .5)/10``)."""
    return math.floor(value * 10 + 0.5) / 10


@dataclass
class Standing:
    team_id: int
    total: float
    round_scores: List[float]
    rank: int = 0
    position: int = 0
    tied: bool = False

    def to_dict(self, round_numbers: Sequence[int] = ()) -> dict:
        data = {
            'team_id': self.team_id,
            'total': self.total,
            'rank': self.rank,
            'position': self.position,
            'tied': self.tied,
        }
        if round_numbers:
            data['round_scores'] = {
                int(rn): score for rn, score in zip(round_numbers, self.round_scores)
            }
        return data


def _compare(a: Standing, b: Standing) -> int:
    diff = b.total - a.total
    if abs(diff) > EPSILON:
        return 1 if diff > 0 else -1
    for i in range(len(a.round_scores) - 1, -1, -1):
        diff = b.round_scores[i] - a.round_scores[i]
        if abs(diff) > EPSILON:
            return 1 if diff > 0 else -1
    return 0


def _order(a: Standing, b: Standing) -> int:
    result = _compare(a, b)
    if result:
        return result
    return (a.team_id > b.team_id) - (a.team_id < b.team_id)


def rank_teams(
    round_numbers: Iterable[int],
    scores: Mapping[int, Mapping[int, float]],
    team_ids: Optional[Iterable[int]] = None,
) -> List[Standing]:
    """Rank teams by their scores over ``round_numbers``.

    ``scores`` maps team id to a round number -> score mapping; a missing
    round counts as 0. ``team_ids`` adds teams that have no scores at all
    (e.g. participants who have not answered yet).
    """
    rounds = sorted(set(int(rn) for rn in round_numbers))
    teams = set(scores.keys())
    if team_ids is not None:
        teams.update(team_ids)

    rows = []
    for team_id in teams:
        per_round = scores.get(team_id) or {}
        key = [float(per_round.get(rn, 0) or 0) for rn in rounds]
        rows.append(Standing(team_id=team_id, total=normalize_score(sum(key)), round_scores=key))

    rows.sort(key=cmp_to_key(_order))

    previous = None
    for idx, row in enumerate(rows):
        row.position = idx + 1
        if previous is not None and _compare(previous, row) == 0:
            row.rank = previous.rank
            row.tied = previous.tied = True
        else:
            row.rank = idx + 1
        previous = row
    return rows


def round_numbers_for(template_rounds: Iterable[int], score_rounds: Iterable[int]) -> List[int]:
    """Template rounds, or the rounds seen in scores when the template has none."""
    rounds = sorted(set(template_rounds))
    if rounds:
        return rounds
    return sorted(set(score_rounds))


def index_scores(rows: Iterable) -> Dict[int, Dict[int, float]]:
    """Group score rows (objects or dicts) into team -> round -> score."""
    by_team: Dict[int, Dict[int, float]] = {}
    for row in rows:
        if isinstance(row, Mapping):
            team_id, round_number, score = row['team_id'], row['round_number'], row['score']
        else:
            team_id, round_number, score = row.team_id, row.round_number, row.score
        by_team.setdefault(team_id, {})[round_number] = float(score)
    return by_team


def rank_map(standings: Iterable[Standing]) -> Dict[int, int]:
    return {s.team_id: s.rank for s in standings}
