"""Unit tests for leaderboard ranking."""

import pytest

from cpn.leaderboards.ranking import SORT_FIELDS, normalize_sort_by, rank_members
from cpn.leaderboards.schemas import LeaderboardMember
from cpn.metrics.schemas import LeaderboardStats


def _member(name: str, **stats) -> LeaderboardMember:
    return LeaderboardMember(
        id=f"m-{name}",
        group_id="g1",
        user_id=f"u-{name}",
        username=name,
        stats_cache=LeaderboardStats(**stats),
    )


class TestNormalizeSortBy:
    def test_canonical_keys(self):
        for key in SORT_FIELDS:
            assert normalize_sort_by(key) == key

    def test_snake_case_aliases(self):
        assert normalize_sort_by("cost_per_nut") == "costPerNut"
        assert normalize_sort_by("total_nuts") == "totalNuts"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown sortBy"):
            normalize_sort_by("totalSpent")


class TestRankMembers:
    def test_efficiency_descending(self):
        members = [_member("a", efficiency=1.0), _member("b", efficiency=3.0), _member("c", efficiency=2.0)]
        rankings = rank_members(members)
        assert [r.member.username for r in rankings] == ["b", "c", "a"]
        assert [r.rank for r in rankings] == [1, 2, 3]

    def test_cost_per_nut_ascending(self):
        members = [_member("a", cost_per_nut=30), _member("b", cost_per_nut=10), _member("c", cost_per_nut=20)]
        rankings = rank_members(members, "costPerNut")
        assert [r.member.username for r in rankings] == ["b", "c", "a"]

    def test_total_nuts_descending(self):
        members = [_member("a", total_nuts=5), _member("b", total_nuts=9)]
        rankings = rank_members(members, "total_nuts")
        assert [r.member.username for r in rankings] == ["b", "a"]

    def test_ties_keep_input_order(self):
        members = [_member("a", efficiency=2.0), _member("b", efficiency=2.0), _member("c", efficiency=2.0)]
        rankings = rank_members(members)
        assert [r.member.username for r in rankings] == ["a", "b", "c"]
        assert [r.rank for r in rankings] == [1, 2, 3]

    def test_change_is_always_zero(self):
        rankings = rank_members([_member("a"), _member("b")])
        assert all(r.change == 0 for r in rankings)

    def test_empty_group(self):
        assert rank_members([]) == []
