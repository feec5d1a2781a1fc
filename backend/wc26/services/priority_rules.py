"""
Priority-Rule Engine — fallback Round-of-32 templates.

Used when the combination table has no entry for an AdvancingSet (the table
is generated offline and may be incomplete) or when no table is loaded.

Sixteen slots in canonical bracket order. Static slots always pair the same
finishing positions. Third-place slots name a group winner plus an ordered
priority list; the opponent is the third-place team of the first listed
group that is in the AdvancingSet.

Slot conflicts (one third-place team drawn into two slots, or a winner
drawn against its own group's third-place team) are reported by
audit_fallback_templates() but not avoided.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import AbstractSet, Dict, List, Optional, Tuple, Union

from wc26.services.bracket_slots import (
    UNRESOLVED_SLOT,
    MatchupTemplate,
    SlotRole,
    TeamSlotReference,
    runner_up,
    third_place,
    winner,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Slot definitions
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class StaticSlot:
    team1: TeamSlotReference
    team2: TeamSlotReference


@dataclass(frozen=True)
class ThirdPlaceSlot:
    winner_group: str
    priority: Tuple[str, ...]


SlotDefinition = Union[StaticSlot, ThirdPlaceSlot]

# Canonical order: 0-7 left half of the bracket, 8-15 right half.
SLOT_DEFINITIONS: Tuple[SlotDefinition, ...] = (
    ThirdPlaceSlot("E", ("A", "B", "C", "D", "F")),   # 0
    ThirdPlaceSlot("I", ("C", "D", "F", "G", "H")),   # 1
    StaticSlot(runner_up("A"), runner_up("B")),       # 2
    StaticSlot(winner("F"), runner_up("C")),          # 3
    StaticSlot(runner_up("K"), runner_up("L")),       # 4
    StaticSlot(winner("H"), runner_up("J")),          # 5
    ThirdPlaceSlot("D", ("B", "E", "F", "I", "J")),   # 6
    ThirdPlaceSlot("G", ("A", "E", "H", "I", "J")),   # 7
    ThirdPlaceSlot("C", ("C", "E", "F", "H", "I")),   # 8
    StaticSlot(runner_up("F"), runner_up("E")),       # 9
    StaticSlot(runner_up("I"), runner_up("D")),       # 10
    ThirdPlaceSlot("A", ("E", "H", "I", "J", "K")),   # 11
    ThirdPlaceSlot("L", ("C", "E", "F", "H", "I")),   # 12
    StaticSlot(runner_up("H"), runner_up("G")),       # 13
    ThirdPlaceSlot("J", ("E", "F", "G", "I", "J")),   # 14
    ThirdPlaceSlot("K", ("D", "E", "I", "J", "L")),   # 15
)

THIRD_PLACE_SLOTS: Dict[int, ThirdPlaceSlot] = {
    i: s for i, s in enumerate(SLOT_DEFINITIONS) if isinstance(s, ThirdPlaceSlot)
}
STATIC_SLOTS: Dict[int, StaticSlot] = {
    i: s for i, s in enumerate(SLOT_DEFINITIONS) if isinstance(s, StaticSlot)
}
THIRD_PLACE_SLOT_INDICES: Tuple[int, ...] = tuple(THIRD_PLACE_SLOTS)
STATIC_SLOT_INDICES: Tuple[int, ...] = tuple(STATIC_SLOTS)


# -----------------------------------------------------------------------------
# Engine
# -----------------------------------------------------------------------------

def pick_third_place(
    priority: Tuple[str, ...],
    advancing: AbstractSet[str],
    slot_index: Optional[int] = None,
) -> TeamSlotReference:
    """First group in *priority* that is advancing; UNRESOLVED_SLOT if none is."""
    for group in priority:
        if group in advancing:
            return third_place(group)

    logger.warning(
        "Priority list exhausted for slot %s (candidates %s, advancing %s)",
        slot_index,
        "/".join(priority),
        "".join(sorted(advancing)),
    )
    return UNRESOLVED_SLOT


def build_fallback_templates(advancing: AbstractSet[str]) -> List[MatchupTemplate]:
    """
    Build all 16 matchup templates from the priority rules.

    Does not validate *advancing*; callers that need the 8-group
    precondition enforce it first (see r32_resolver).
    """
    templates: List[MatchupTemplate] = []
    for idx, slot in enumerate(SLOT_DEFINITIONS):
        if isinstance(slot, StaticSlot):
            templates.append(MatchupTemplate(slot.team1, slot.team2))
        else:
            templates.append(MatchupTemplate(
                winner(slot.winner_group),
                pick_third_place(slot.priority, advancing, slot_index=idx),
            ))
    return templates


# -----------------------------------------------------------------------------
# Audit
# -----------------------------------------------------------------------------

@dataclass
class SlotConflict:
    slot_indices: List[int]
    group: str
    reason: str

    def to_dict(self) -> dict:
        return {"slot_indices": list(self.slot_indices), "group": self.group, "reason": self.reason}


def audit_fallback_templates(templates: List[MatchupTemplate]) -> List[SlotConflict]:
    """
    Report structural problems in a set of templates.

    - same third-place group used by more than one slot
    - a group winner drawn against its own group's third-place team
    """
    conflicts: List[SlotConflict] = []
    slots_by_third = defaultdict(list)

    for idx, t in enumerate(templates):
        for ref in (t.team1, t.team2):
            if ref.role == SlotRole.THIRD_PLACE and ref.is_resolved:
                slots_by_third[ref.group].append(idx)

        if (
            t.team1.is_resolved
            and t.team2.is_resolved
            and t.team1.group == t.team2.group
        ):
            conflicts.append(SlotConflict(
                slot_indices=[idx],
                group=t.team1.group,
                reason=f"Same-group pairing in slot {idx}: {t.label()}",
            ))

    for group, indices in sorted(slots_by_third.items()):
        if len(indices) > 1:
            conflicts.append(SlotConflict(
                slot_indices=indices,
                group=group,
                reason=(
                    f"Third-place team of group {group} drawn into "
                    f"{len(indices)} slots: {', '.join(map(str, indices))}"
                ),
            ))

    return conflicts
