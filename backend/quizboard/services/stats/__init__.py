"""Read-only statistics over every game: rankings, profiles, ranks, trends."""

from quizboard.services.stats.service import StatsService

__all__ = ['StatsService']
