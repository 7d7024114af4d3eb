"""Leaderboard ranking over members' cached stats.

Ranking reads only the denormalized ``stats_cache`` each member pushed; it
never recomputes stats. ``sorted`` is stable (also with ``reverse=True``),
so members with equal values keep their input order. ``change`` is always 0
because no rank history is stored. A member with no nuts yet (or one who
just joined with an empty stats cache) has a ``costPerNut`` of 0.0 and so
ranks first when sorting by cost per nut.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from cpn.leaderboards.schemas import LeaderboardMember, LeaderboardRanking

# sort_by -> (key, descending). Lower cost per nut is better.
SORT_FIELDS: dict[str, tuple[Callable[[LeaderboardMember], float], bool]] = {
    "efficiency": (lambda m: m.stats_cache.efficiency, True),
    "costPerNut": (lambda m: m.stats_cache.cost_per_nut, False),
    "totalNuts": (lambda m: m.stats_cache.total_nuts, True),
}

_ALIASES = {
    "cost_per_nut": "costPerNut",
    "total_nuts": "totalNuts",
}


def normalize_sort_by(sort_by: str) -> str:
    """Map snake_case aliases to the canonical sort key."""
    key = _ALIASES.get(sort_by, sort_by)
    if key not in SORT_FIELDS:
        msg = f"Unknown sortBy: {sort_by}. Expected one of: {', '.join(SORT_FIELDS)}"
        raise ValueError(msg)
    return key


def rank_members(
    members: Iterable[LeaderboardMember],
    sort_by: str = "efficiency",
) -> list[LeaderboardRanking]:
    """Sort members by the chosen stat and assign 1-based ranks by position."""
    key, descending = SORT_FIELDS[normalize_sort_by(sort_by)]
    ordered = sorted(members, key=key, reverse=descending)
    return [
        LeaderboardRanking(rank=position, member=member, change=0)
        for position, member in enumerate(ordered, start=1)
    ]
