"""
Tests for third-place ranking and TournamentSession resolution.
"""

import pytest
from pydantic import ValidationError

from wc26.models.tournament_session import GroupResult, TournamentSession
from wc26.services.combination_table import CombinationTable
from wc26.services.group_rules import GROUP_IDS, InvalidAdvancingSetError
from wc26.services.r32_resolver import resolve_session
from wc26.services.third_place_ranking import (
    ThirdPlaceRecord,
    advancing_from_ranking,
    advancing_from_session,
    rank_third_place,
)


def _session(third_place_order=None, stats=None) -> TournamentSession:
    """12 groups with names like 'W-A'; optional per-group (pts, gd, gf) for thirds."""
    stats = stats or {}
    groups = {}
    for g in GROUP_IDS:
        pts, gd, gf = stats.get(g, (0, 0, 0))
        groups[g] = GroupResult(
            winner=f"W-{g}",
            runner_up=f"R-{g}",
            third_place=f"T-{g}",
            third_points=pts,
            third_goal_difference=gd,
            third_goals_for=gf,
        )
    return TournamentSession(name="test", groups=groups, third_place_order=third_place_order)


class TestRankThirdPlace:

    def test_points_first(self):
        records = [
            ThirdPlaceRecord("A", points=3),
            ThirdPlaceRecord("B", points=4),
            ThirdPlaceRecord("C", points=1),
        ]
        assert [r.group for r in rank_third_place(records)] == ["B", "A", "C"]

    def test_goal_difference_then_goals_for(self):
        records = [
            ThirdPlaceRecord("A", points=4, goal_difference=0, goals_for=5),
            ThirdPlaceRecord("B", points=4, goal_difference=1, goals_for=2),
            ThirdPlaceRecord("C", points=4, goal_difference=0, goals_for=6),
        ]
        assert [r.group for r in rank_third_place(records)] == ["B", "C", "A"]

    def test_full_tie_keeps_group_order(self):
        records = [ThirdPlaceRecord(g, points=3) for g in ("L", "C", "A")]
        assert [r.group for r in rank_third_place(records)] == ["A", "C", "L"]

    def test_accepts_generator(self):
        ranked = rank_third_place(ThirdPlaceRecord(g) for g in ("B", "A"))
        assert [r.group for r in ranked] == ["A", "B"]

    def test_unknown_group(self):
        with pytest.raises(InvalidAdvancingSetError):
            rank_third_place([ThirdPlaceRecord("Z")])


class TestAdvancingFromRanking:

    def test_top_eight(self):
        order = list("LKJIHGFEDCBA")
        assert advancing_from_ranking(order) == frozenset("LKJIHGFE")

    def test_exactly_eight_ok(self):
        assert advancing_from_ranking(list("ACEGIKBD")) == frozenset("ABCDEGIK")

    def test_too_short(self):
        with pytest.raises(InvalidAdvancingSetError, match="need at least 8"):
            advancing_from_ranking(list("ABCDEFG"))

    def test_duplicate_in_ranking(self):
        with pytest.raises(InvalidAdvancingSetError, match="more than once"):
            advancing_from_ranking(list("ABCDEFGHIJKA"))

    def test_unknown_in_ranking(self):
        with pytest.raises(InvalidAdvancingSetError):
            advancing_from_ranking(list("ABCDEFGHIJKQ"))


class TestSessionModel:

    def test_missing_group_rejected(self):
        groups = {g: GroupResult(winner=f"W-{g}") for g in GROUP_IDS[:11]}
        with pytest.raises(ValidationError, match="missing L"):
            TournamentSession(groups=groups)

    def test_unknown_group_rejected(self):
        groups = {g: GroupResult() for g in GROUP_IDS}
        groups["M"] = GroupResult()
        with pytest.raises(ValidationError, match="Unknown group"):
            TournamentSession(groups=groups)

    def test_frozen(self):
        session = _session()
        with pytest.raises(ValidationError):
            session.name = "changed"

    def test_serializable_round_trip(self):
        session = _session(third_place_order=list("ABCDEFGHIJKL"))
        restored = TournamentSession.model_validate_json(session.model_dump_json())
        assert restored == session


class TestAdvancingFromSession:

    def test_explicit_order_wins(self):
        session = _session(
            third_place_order=list("EHIJKCFLABDG"),
            stats={"A": (9, 9, 9)},  # ignored when an explicit order is given
        )
        assert advancing_from_session(session) == frozenset("CEFHIJKL")

    def test_ranked_by_stats(self):
        # A, B, D, G worst -> eliminated
        stats = {g: (4, 1, 3) for g in "CEFHIJKL"}
        stats.update({"A": (1, -3, 1), "B": (0, -5, 0), "D": (3, 0, 2), "G": (2, -1, 2)})
        session = _session(stats=stats)
        assert advancing_from_session(session) == frozenset("CEFHIJKL")


class TestResolveSession:

    def test_resolves_16_matchups(self):
        session = _session(third_place_order=list("ABCDEFGHIJKL"))
        result = resolve_session(session, table=CombinationTable())
        assert result.lookup_key == "ABCDEFGH"
        assert len(result.matchups) == 16
        assert result.matchups[0].team1 == "W-E"
        assert result.matchups[0].team2 == "T-A"

    def test_eliminated_third_never_appears(self):
        session = _session(third_place_order=list("EHIJKCFLABDG"))
        result = resolve_session(session, table=CombinationTable())
        names = {n for m in result.matchups for n in (m.team1, m.team2)}
        assert not names & {"T-A", "T-B", "T-D", "T-G"}

    def test_partial_session_gives_placeholders(self):
        groups = {g: GroupResult() for g in GROUP_IDS}
        session = TournamentSession(groups=groups, third_place_order=list("ABCDEFGH"))
        result = resolve_session(session, table=CombinationTable(), placeholder="TBD")
        assert all(m.team1 == "TBD" and m.team2 == "TBD" for m in result.matchups)

    def test_session_not_modified(self):
        session = _session(third_place_order=list("ABCDEFGHIJKL"))
        before = session.model_dump()
        resolve_session(session, table=CombinationTable())
        resolve_session(session, table=CombinationTable())
        assert session.model_dump() == before
