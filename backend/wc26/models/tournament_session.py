from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from wc26.services.group_rules import GROUP_IDS, GROUP_ORDER


class GroupResult(BaseModel):
    """Final standing of one group. Team names are opaque identifiers from the host."""

    model_config = ConfigDict(frozen=True)

    winner: Optional[str] = None
    runner_up: Optional[str] = None
    third_place: Optional[str] = None

    # Third-place finisher's group record, used when no explicit ranking is given
    third_points: int = 0
    third_goal_difference: int = 0
    third_goals_for: int = 0


class TournamentSession(BaseModel):
    """
    Serializable snapshot of a user's predicted tournament.

    Owned by whichever layer persists it and passed into the resolver by
    value; resolving never modifies it.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    groups: Dict[str, GroupResult]
    # Groups in third-place rank order (best first); first 8 advance.
    # None -> rank by third_points / third_goal_difference / third_goals_for.
    third_place_order: Optional[List[str]] = None

    @field_validator("groups")
    @classmethod
    def _all_groups_present(cls, v: Dict[str, GroupResult]) -> Dict[str, GroupResult]:
        unknown = sorted(g for g in v if g not in GROUP_ORDER)
        if unknown:
            raise ValueError(f"Unknown group id(s): {', '.join(unknown)}")
        missing = [g for g in GROUP_IDS if g not in v]
        if missing:
            raise ValueError(f"Session must define all 12 groups; missing {', '.join(missing)}")
        return v
