"""Pure metric calculations over a single user's girls and data entries.

Inputs are small (one user's hand-entered data), so everything is recomputed
on every call with no caching. Every ratio goes through ``safe_divide``:
when the denominator is zero the result is the sentinel ``0.0``, so ``inf``
and ``nan`` never reach a caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from cpn.entries.schemas import DataEntry
from cpn.girls.schemas import Girl
from cpn.metrics.schemas import GirlMetrics, GirlWithMetrics, GlobalStats, LeaderboardStats

ZERO_DIVISION_SENTINEL = 0.0


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning the zero sentinel instead of inf/nan."""
    if not denominator:
        return ZERO_DIVISION_SENTINEL
    return numerator / denominator


def entries_for_girl(girl_id: str, entries: Iterable[DataEntry]) -> list[DataEntry]:
    """Entries whose girl id matches exactly."""
    return [entry for entry in entries if entry.girl_id == girl_id]


def calculate_girl_metrics(entries: Sequence[DataEntry]) -> GirlMetrics:
    """Aggregate a set of entries that all belong to one girl."""
    total_spent = sum(entry.amount_spent for entry in entries)
    total_nuts = sum(entry.number_of_nuts for entry in entries)
    total_time = sum(entry.duration_minutes for entry in entries)

    return GirlMetrics(
        total_spent=total_spent,
        total_nuts=total_nuts,
        total_time=total_time,
        cost_per_nut=safe_divide(total_spent, total_nuts),
        time_per_nut=safe_divide(total_time, total_nuts),
        cost_per_hour=safe_divide(total_spent, total_time / 60),
        total_entries=len(entries),
    )


def metrics_for_girl(girl: Girl, entries: Iterable[DataEntry]) -> GirlWithMetrics:
    """Attach derived metrics to a girl, counting only her own entries."""
    metrics = calculate_girl_metrics(entries_for_girl(girl.id, entries))
    return GirlWithMetrics(**girl.model_dump(), metrics=metrics)


def girls_with_metrics(girls: Iterable[Girl], entries: Sequence[DataEntry]) -> list[GirlWithMetrics]:
    return [metrics_for_girl(girl, entries) for girl in girls]


def global_stats(girls: Sequence[Girl], entries: Iterable[DataEntry]) -> GlobalStats:
    """Totals across every girl and entry of the current user.

    The average rating is the mean over all girls, active or not, and is 0
    when there are none.
    """
    entries = list(entries)
    return GlobalStats(
        total_girls=len(girls),
        active_girls=sum(1 for girl in girls if girl.is_active),
        total_spent=sum(entry.amount_spent for entry in entries),
        total_nuts=sum(entry.number_of_nuts for entry in entries),
        total_time=sum(entry.duration_minutes for entry in entries),
        average_rating=safe_divide(sum(girl.rating for girl in girls), len(girls)),
    )


def leaderboard_stats(stats: GlobalStats) -> LeaderboardStats:
    """Build the snapshot a member pushes into a leaderboard group.

    Efficiency is nuts per hour of tracked time, rounded to one decimal.
    """
    return LeaderboardStats(
        total_spent=round(stats.total_spent, 2),
        total_nuts=stats.total_nuts,
        cost_per_nut=round(safe_divide(stats.total_spent, stats.total_nuts), 2),
        total_time=stats.total_time,
        total_girls=stats.total_girls,
        efficiency=round(safe_divide(stats.total_nuts, stats.total_time / 60), 1),
    )
