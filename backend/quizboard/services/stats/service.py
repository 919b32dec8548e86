from typing import Callable, Optional

from flask import current_app

from quizboard.models import Game
from quizboard.services.games.board import build_board
from quizboard.services.teams import list_teams
from quizboard.services.stats.history import History, load_history
from quizboard.services.stats.leaderboard import global_ranking, paginate, public_stats, results_by_team, sort_ranking
from quizboard.services.stats.profile import team_profile


class StatsService:
    """Public statistics, recomputed from a fresh snapshot on every call.

    ``loader`` is the only way data comes in, so a cached loader can be
    swapped in without touching the routes.
    """

    def __init__(self, loader: Callable[[], History] = load_history):
        self.loader = loader

    @staticmethod
    def _page_limit(limit: Optional[int]) -> int:
        cfg = current_app.config
        limit = limit or cfg.get('RANKING_DEFAULT_LIMIT', 20)
        return min(limit, cfg.get('RANKING_MAX_LIMIT', 100))

    def global_ranking(self, sort: str = 'total_points', order: Optional[str] = None, page: int = 1,
                       limit: Optional[int] = None) -> dict:
        history = self.loader()
        ordered = sort_ranking(global_ranking(history), sort, order)
        page_data = paginate(ordered, page, self._page_limit(limit))
        page_data['sort'] = sort
        page_data['order'] = order or ('asc' if sort == 'avg_place' else 'desc')
        return page_data

    def public_stats(self) -> dict:
        return public_stats(self.loader(), current_app.config.get('LEADERS_LIMIT', 10))

    def team_profile(self, team_id: int) -> dict:
        cfg = current_app.config
        history = self.loader()
        results = results_by_team(history)
        return team_profile(
            history,
            team_id,
            ranking=global_ranking(history, results),
            results=results.get(team_id, []),
            recent_limit=cfg.get('RECENT_GAMES_LIMIT', 10),
            window=cfg.get('FORM_WINDOW', 5),
        )

    def last_game(self) -> Optional[dict]:
        game = Game.query.order_by(Game.created_at.desc(), Game.id.desc()).first()
        if game is None:
            return None
        return build_board(game)

    def teams(self, page: int = 1, limit: Optional[int] = None) -> dict:
        """Every team with its games count, most active first, one page at a time."""
        return paginate(list_teams(), page, self._page_limit(limit))
