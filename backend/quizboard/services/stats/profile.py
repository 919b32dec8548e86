from typing import Dict, List, Optional, Sequence

from quizboard.errors import NotFoundError
from quizboard.services.stats.history import History
from quizboard.services.stats.leaderboard import TeamResult, summarize
from quizboard.services.stats.ranks import DEFAULT_LADDER, RankTier, rank_block
from quizboard.services.stats.trends import badges, benchmarks, chronological, streaks, trends


def round_breakdown(team_id: int, results: List[TeamResult]) -> tuple:
    """Average score and average single-round placement for each round number."""
    scores: Dict[int, List[float]] = {}
    places: Dict[int, List[int]] = {}
    for r in results:
        game = r.game
        mine = game.scores.get(team_id, {})
        for rn in game.round_numbers:
            scores.setdefault(rn, []).append(float(mine.get(rn, 0)))
            standing = next(s for s in game.round_standings(rn) if s.team_id == team_id)
            places.setdefault(rn, []).append(standing.rank)
    averages = [
        {'round_number': rn, 'avg_score': round(sum(v) / len(v), 2), 'games': len(v)}
        for rn, v in sorted(scores.items())
    ]
    round_places = [
        {'round_number': rn, 'avg_place': round(sum(v) / len(v), 2), 'games': len(v)}
        for rn, v in sorted(places.items())
    ]
    return averages, round_places


def head_to_head(history: History, team_id: int, results: List[TeamResult]) -> List[dict]:
    records: Dict[int, dict] = {}
    for r in results:
        for other in r.game.standings:
            if other.team_id == team_id:
                continue
            rec = records.setdefault(other.team_id, {
                'opponent_id': other.team_id,
                'opponent_name': history.team_name(other.team_id),
                'games': 0, 'wins': 0, 'losses': 0, 'draws': 0,
            })
            rec['games'] += 1
            if r.place < other.rank:
                rec['wins'] += 1
            elif r.place > other.rank:
                rec['losses'] += 1
            else:
                rec['draws'] += 1
    return sorted(records.values(), key=lambda rec: (-rec['games'], rec['opponent_name'].lower()))


def table_stats(team_id: int, results: List[TeamResult]) -> List[dict]:
    by_table: Dict[str, List[int]] = {}
    for r in results:
        label = r.game.participants.get(team_id)
        if label:
            by_table.setdefault(label, []).append(r.place)
    rows = [
        {'table_number': label, 'games': len(p), 'avg_place': round(sum(p) / len(p), 2)}
        for label, p in by_table.items()
    ]
    return sorted(rows, key=lambda row: (row['avg_place'], -row['games'], row['table_number']))


def team_profile(
    history: History,
    team_id: int,
    ranking: List[dict],
    results: Optional[List[TeamResult]] = None,
    recent_limit: int = 10,
    window: int = 5,
    ladder: Sequence[RankTier] = DEFAULT_LADDER,
) -> dict:
    team = history.teams.get(team_id)
    if team is None:
        raise NotFoundError('Team not found')
    results = results or []
    summary = summarize(results)
    recent = list(reversed(chronological(results)))[:recent_limit]
    round_averages, round_places = round_breakdown(team_id, results)
    streak = streaks(results, summary['avg_points'], window)
    bench = benchmarks(ranking, summary['avg_points'], summary['total_points'], summary['games'])

    return {
        'team': team.to_dict(),
        'games_played': summary['games'],
        'total_points': summary['total_points'],
        'avg_points': summary['avg_points'],
        'avg_place': summary['avg_place'],
        'placements': {'first': summary['first'], 'second': summary['second'], 'third': summary['third']},
        'recent_games': [
            {
                'game_id': r.game.id,
                'game_name': r.game.name,
                'total': r.total,
                'place': r.place,
                'event_date': r.game.event_date.isoformat() if r.game.event_date else None,
            }
            for r in recent
        ],
        'round_averages': round_averages,
        'round_places': round_places,
        'h2h': head_to_head(history, team_id, results),
        'table_stats': table_stats(team_id, results),
        'ranking': rank_block(summary['total_points'], ladder),
        'trends': trends(results, window),
        'streaks': streak,
        'benchmarks': bench,
        'badges': badges(summary, streak, bench),
    }
