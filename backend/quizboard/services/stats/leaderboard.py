import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from quizboard.errors import ValidationError
from quizboard.services.ranking import normalize_score
from quizboard.services.stats.history import GameRecord, History

# Lower is better for average place; higher is better for the rest
DEFAULT_ORDER = {
    'games': 'desc',
    'avg_place': 'asc',
    'total_points': 'desc',
    'avg_points': 'desc',
}


@dataclass
class TeamResult:
    """How one team finished in one game."""
    game: GameRecord
    team_id: int
    total: float
    place: int


def results_by_team(history: History) -> Dict[int, List[TeamResult]]:
    """Each team's results in played games, newest game first."""
    results: Dict[int, List[TeamResult]] = {}
    for game in history.played_games:
        for standing in game.standings:
            results.setdefault(standing.team_id, []).append(
                TeamResult(game=game, team_id=standing.team_id, total=standing.total, place=standing.rank)
            )
    return results


def summarize(results: List[TeamResult]) -> dict:
    games = len(results)
    total = normalize_score(sum(r.total for r in results))
    places = [r.place for r in results]
    return {
        'games': games,
        'total_points': total,
        'avg_points': round(total / games, 2) if games else 0,
        'avg_place': round(sum(places) / games, 2) if games else 0,
        'first': places.count(1),
        'second': places.count(2),
        'third': places.count(3),
    }


def global_ranking(history: History, results: Optional[Dict[int, List[TeamResult]]] = None) -> List[dict]:
    """One entry per team that has played at least one game."""
    if results is None:
        results = results_by_team(history)
    entries = []
    for team_id, team_results in results.items():
        team = history.teams.get(team_id)
        entry = {
            'team_id': team_id,
            'team_name': history.team_name(team_id),
            'logo_path': team.logo_path if team else None,
        }
        entry.update(summarize(team_results))
        entries.append(entry)
    return entries


def sort_ranking(entries: List[dict], sort: str = 'total_points', order: Optional[str] = None) -> List[dict]:
    if sort not in DEFAULT_ORDER:
        raise ValidationError(f"sort must be one of: {', '.join(DEFAULT_ORDER)}")
    order = order or DEFAULT_ORDER[sort]
    if order not in ('asc', 'desc'):
        raise ValidationError("order must be 'asc' or 'desc'")
    sign = 1 if order == 'asc' else -1
    ordered = sorted(
        entries,
        key=lambda e: (sign * e[sort], -e['avg_points'], -e['games'], e['team_name'].lower(), e['team_id']),
    )
    for position, entry in enumerate(ordered, start=1):
        entry['position'] = position
    return ordered


def paginate(items: List[dict], page: int, limit: int) -> dict:
    total = len(items)
    start = (page - 1) * limit
    return {
        'items': items[start:start + limit],
        'total': total,
        'page': page,
        'limit': limit,
        'pages': max(1, math.ceil(total / limit)),
    }


def public_stats(history: History, leaders_limit: int = 10) -> dict:
    ranking = sort_ranking(global_ranking(history))
    total_points = normalize_score(sum(
        score
        for game in history.games
        for per_round in game.scores.values()
        for score in per_round.values()
    ))

    leaders_wins = sorted(
        (e for e in ranking if e['first'] > 0),
        key=lambda e: (-e['first'], e['team_name'].lower()),
    )[:leaders_limit]
    leaders_avg = sorted(
        ranking,
        key=lambda e: (-e['avg_points'], -e['games'], e['team_name'].lower()),
    )[:leaders_limit]
    leaders_places = sorted(
        (e for e in ranking if e['first'] or e['second'] or e['third']),
        key=lambda e: (-e['first'], -e['second'], -e['third'], e['team_name'].lower()),
    )[:leaders_limit]

    return {
        'total_games': len(history.games),
        'total_points': total_points,
        'leaders_wins': [
            {'team_id': e['team_id'], 'team_name': e['team_name'], 'wins': e['first']} for e in leaders_wins
        ],
        'leaders_avg': [
            {'team_id': e['team_id'], 'team_name': e['team_name'], 'avg_total': e['avg_points'], 'games': e['games']}
            for e in leaders_avg
        ],
        'leaders_places': [
            {
                'team_id': e['team_id'],
                'team_name': e['team_name'],
                'first_places': e['first'],
                'second_places': e['second'],
                'third_places': e['third'],
            }
            for e in leaders_places
        ],
        'global_ranking': ranking,
    }
