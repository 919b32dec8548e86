from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class RankTier:
    title: str
    min_points: float
    description: str = ''
    icon: str = ''
    color_theme: str = ''

    def to_dict(self) -> dict:
        return asdict(self)


# Ascending by min_points
DEFAULT_LADDER: List[RankTier] = [
    RankTier('Sergeant', 100, 'First hundred points on the board', 'sergeant.png', 'yellow'),
    RankTier('Lieutenant', 300, 'A regular at the quiz tables', 'lieutenant.png', 'yellow'),
    RankTier('General', 700, 'Commands respect on every round', 'general.png', 'pink'),
    RankTier('Rambo', 1500, 'Takes on any topic alone', 'rambo.png', 'pink'),
    RankTier('Chuck Norris', 3000, 'Answers before the question is read', 'chuck_norris.png', 'cyan'),
    RankTier('Untouchables', 6000, 'Out of reach for most of the league', 'untouchables.png', 'cyan'),
    RankTier('Legend', 10000, 'Their name is the answer', 'legend.png', 'red'),
]


def current_tier(points: float, ladder: Sequence[RankTier] = DEFAULT_LADDER) -> Optional[RankTier]:
    reached = None
    for tier in ladder:
        if points >= tier.min_points:
            reached = tier
        else:
            break
    return reached


def next_tier(points: float, ladder: Sequence[RankTier] = DEFAULT_LADDER) -> Optional[RankTier]:
    return next((tier for tier in ladder if points < tier.min_points), None)


def progress_percent(points: float, ladder: Sequence[RankTier] = DEFAULT_LADDER) -> float:
    """Progress from the current tier to the next one, in [0, 100]."""
    upcoming = next_tier(points, ladder)
    if upcoming is None:
        return 100.0
    reached = current_tier(points, ladder)
    if reached is None:
        ratio = points / upcoming.min_points if upcoming.min_points > 0 else 1.0
    else:
        span = upcoming.min_points - reached.min_points
        ratio = (points - reached.min_points) / span if span > 0 else 1.0
    return round(max(0.0, min(100.0, ratio * 100)), 1)


def rank_block(points: float, ladder: Sequence[RankTier] = DEFAULT_LADDER) -> dict:
    reached = current_tier(points, ladder)
    upcoming = next_tier(points, ladder)
    return {
        'total_points': points,
        'global_rank': reached.to_dict() if reached else None,
        'next_rank': upcoming.to_dict() if upcoming else None,
        'progress_percent': progress_percent(points, ladder),
        'ranks': [tier.to_dict() for tier in ladder],
    }
