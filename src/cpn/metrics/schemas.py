"""Derived metric models. Never persisted; always recomputed from girls and entries."""

from __future__ import annotations

from cpn.girls.schemas import Girl
from cpn.schemas import CamelModel


class GirlMetrics(CamelModel):
    total_spent: float = 0.0
    total_nuts: int = 0
    total_time: int = 0
    cost_per_nut: float = 0.0
    time_per_nut: float = 0.0
    cost_per_hour: float = 0.0
    total_entries: int = 0


class GirlWithMetrics(Girl):
    metrics: GirlMetrics = GirlMetrics()


class GlobalStats(CamelModel):
    total_girls: int = 0
    active_girls: int = 0
    total_spent: float = 0.0
    total_nuts: int = 0
    total_time: int = 0
    average_rating: float = 0.0


class LeaderboardStats(CamelModel):
    """Snapshot a member pushes into a leaderboard's stats cache."""

    total_spent: float = 0.0
    total_nuts: int = 0
    cost_per_nut: float = 0.0
    total_time: int = 0
    total_girls: int = 0
    efficiency: float = 0.0
