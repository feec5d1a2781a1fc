"""
Third-place ranking — which 8 of the 12 third-placed teams advance.

Two ways in:
- explicit ordering (the predictor: user drags third-place teams into rank order)
- group-stage records (the simulator: points, then goal difference, then goals for)

Either way the first 8 groups form the AdvancingSet.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, FrozenSet, Iterable, List, Optional, Sequence

from wc26.services.group_rules import (
    ADVANCING_THIRD_PLACE_COUNT,
    GROUP_ORDER,
    InvalidAdvancingSetError,
    check_known_groups,
    validate_advancing_groups,
)

if TYPE_CHECKING:
    from wc26.models.tournament_session import TournamentSession


@dataclass(frozen=True)
class ThirdPlaceRecord:
    group: str
    team: Optional[str] = None
    points: int = 0
    goal_difference: int = 0
    goals_for: int = 0


def rank_third_place(records: Iterable[ThirdPlaceRecord]) -> List[ThirdPlaceRecord]:
    """Best first. Full ties keep group order."""
    records = list(records)
    check_known_groups([r.group for r in records])
    return sorted(
        records,
        key=lambda r: (-r.points, -r.goal_difference, -r.goals_for, GROUP_ORDER[r.group]),
    )


def advancing_from_ranking(
    ranked_groups: Sequence[str],
    advance_count: int = ADVANCING_THIRD_PLACE_COUNT,
) -> FrozenSet[str]:
    """Top *advance_count* groups of an explicit ranking."""
    ranked = list(ranked_groups)
    check_known_groups(ranked)
    if len(set(ranked)) != len(ranked):
        raise InvalidAdvancingSetError("Third-place ranking lists a group more than once")
    if len(ranked) < advance_count:
        raise InvalidAdvancingSetError(
            f"Third-place ranking has {len(ranked)} groups; need at least {advance_count}"
        )
    return validate_advancing_groups(ranked[:advance_count])


def advancing_from_session(session: "TournamentSession") -> FrozenSet[str]:
    if session.third_place_order is not None:
        return advancing_from_ranking(session.third_place_order)

    records = [
        ThirdPlaceRecord(
            group=g,
            team=r.third_place,
            points=r.third_points,
            goal_difference=r.third_goal_difference,
            goals_for=r.third_goals_for,
        )
        for g, r in session.groups.items()
    ]
    return advancing_from_ranking([r.group for r in rank_third_place(records)])
