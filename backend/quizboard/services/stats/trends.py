from datetime import datetime
from statistics import mean, median
from typing import Dict, Iterable, List

from quizboard.services.ranking import EPSILON
from quizboard.services.stats.leaderboard import TeamResult


def chronological(results: Iterable[TeamResult]) -> List[TeamResult]:
    """Oldest first by event date, falling back to creation time."""
    return sorted(results, key=lambda r: (r.game.date or datetime.min, r.game.id))


def monthly(results: Iterable[TeamResult]) -> List[dict]:
    buckets: Dict[str, List[TeamResult]] = {}
    for r in chronological(results):
        month = r.game.date.strftime('%Y-%m') if r.game.date else 'unknown'
        buckets.setdefault(month, []).append(r)
    return [
        {
            'month': month,
            'avg_total': round(mean(r.total for r in rows), 2),
            'median_place': median(r.place for r in rows),
            'games': len(rows),
        }
        for month, rows in buckets.items()
    ]


def form_delta(results: Iterable[TeamResult], window: int = 5) -> float:
    """Average total of the latest ``window`` games minus the ``window`` before."""
    totals = [r.total for r in chronological(results)]
    latest = totals[-window:]
    previous = totals[-2 * window:-window] if len(totals) > window else []
    if not latest or not previous:
        return 0.0
    return round(mean(latest) - mean(previous), 2)


def trends(results: List[TeamResult], window: int = 5) -> dict:
    return {
        'timeline': [
            {
                'game_id': r.game.id,
                'game_name': r.game.name,
                'date': r.game.date.isoformat() if r.game.date else None,
                'total': r.total,
                'place': r.place,
            }
            for r in chronological(results)
        ],
        'monthly': monthly(results),
        'trend_score_delta': form_delta(results, window),
    }


def streaks(results: List[TeamResult], avg_points: float, window: int = 5) -> dict:
    """Win and podium runs counted back from the most recent game."""
    recent = list(reversed(chronological(results)))
    wins = 0
    for r in recent:
        if r.place != 1:
            break
        wins += 1
    podiums = 0
    for r in recent:
        if not 1 <= r.place <= 3:
            break
        podiums += 1
    last = [r.total for r in recent[:window]]
    form_ratio = round(mean(last) / avg_points, 2) if last and avg_points > 0 else 0
    return {'wins': wins, 'podiums': podiums, 'form_ratio': form_ratio}


def percentile(values: List[float], value: float) -> float:
    """Share of ``values`` that are <= ``value``, in [0, 1]."""
    if not values:
        return 0.0
    at_or_below = sum(1 for v in values if v <= value + EPSILON)
    return at_or_below / len(values)


def benchmarks(ranking: List[dict], avg_points: float, total_points: float, games: int) -> dict:
    return {
        'avg_points_pct': percentile([e['avg_points'] for e in ranking], avg_points),
        'total_points_pct': percentile([e['total_points'] for e in ranking], total_points),
        'games_pct': percentile([e['games'] for e in ranking], games),
    }


BADGE_ORDER = {'elite': 0, 'achievement': 1, 'streak': 2, 'veteran': 3}


def badges(summary: dict, streak: dict, bench: dict) -> List[dict]:
    earned = []

    def award(label, tone, tooltip):
        earned.append({'label': label, 'tone': tone, 'tooltip': tooltip})

    first = summary['first']
    if first >= 1:
        award('First win', 'achievement', "The team's first victory")
    if first >= 5:
        award('5 wins', 'achievement', 'Five victories overall')
    if first >= 10:
        award('10 wins', 'achievement', 'Ten victories overall')
    if streak['wins'] >= 2:
        award(f"Win streak: {streak['wins']}", 'streak', 'Consecutive wins')
    if streak['podiums'] >= 3:
        award(f"Podium streak: {streak['podiums']}", 'streak', 'Consecutive podium finishes')
    if summary['games'] >= 25:
        award('League veteran', 'veteran', '25+ games played')
    if summary['games'] and bench['avg_points_pct'] >= 0.9:
        award('Top 10% by average total', 'elite', 'Average total at or above 90% of teams')
    if summary['games'] and bench['total_points_pct'] >= 0.9:
        award('Top 10% by total points', 'elite', 'Total points at or above 90% of teams')
    return sorted(earned, key=lambda b: BADGE_ORDER[b['tone']])
