"""
Round-of-32 slot types.

The combination table and the priority rules both describe matchups as
pairs of TeamSlotReference (role + group), never as team names, so the same
templates work for any tournament. Names are bound only at resolution time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional


class SlotRole(str, Enum):
    WINNER = "winner"
    RUNNER_UP = "runner_up"
    THIRD_PLACE = "third_place"


@dataclass(frozen=True)
class TeamSlotReference:
    """Indirect pointer to a team: which finishing position of which group."""
    role: SlotRole
    group: Optional[str]  # None only for the unresolved sentinel

    @property
    def is_resolved(self) -> bool:
        return self.group is not None

    @property
    def code(self) -> str:
        """Short code as printed in the official bracket, e.g. '1E', '2A', '3C'."""
        if self.group is None:
            return "?"
        prefix = {SlotRole.WINNER: "1", SlotRole.RUNNER_UP: "2", SlotRole.THIRD_PLACE: "3"}[self.role]
        return f"{prefix}{self.group}"

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"role": self.role.value, "group": self.group}


# Slot whose priority list had no advancing candidate
UNRESOLVED_SLOT = TeamSlotReference(role=SlotRole.THIRD_PLACE, group=None)


def winner(group: str) -> TeamSlotReference:
    return TeamSlotReference(SlotRole.WINNER, group)


def runner_up(group: str) -> TeamSlotReference:
    return TeamSlotReference(SlotRole.RUNNER_UP, group)


def third_place(group: str) -> TeamSlotReference:
    return TeamSlotReference(SlotRole.THIRD_PLACE, group)


@dataclass(frozen=True)
class MatchupTemplate:
    team1: TeamSlotReference
    team2: TeamSlotReference

    @property
    def is_resolved(self) -> bool:
        return self.team1.is_resolved and self.team2.is_resolved

    def label(self) -> str:
        return f"{self.team1.code} v {self.team2.code}"

    def to_dict(self) -> dict:
        return {"team1": self.team1.to_dict(), "team2": self.team2.to_dict()}


@dataclass
class Matchup:
    """One resolved Round-of-32 fixture. `winner` is filled in later by the host."""
    team1: str
    team2: str
    winner: Optional[str] = None


def bind_team(
    ref: TeamSlotReference,
    winners: Mapping[str, Optional[str]],
    runners_up: Mapping[str, Optional[str]],
    third_place_teams: Mapping[str, Optional[str]],
    placeholder: str,
) -> str:
    """Look up the team name for *ref*; missing/empty bindings become *placeholder*."""
    if not ref.is_resolved:
        return placeholder

    if ref.role == SlotRole.WINNER:
        source = winners
    elif ref.role == SlotRole.RUNNER_UP:
        source = runners_up
    else:
        source = third_place_teams

    name = source.get(ref.group)
    return name if name else placeholder
