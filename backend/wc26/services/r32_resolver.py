"""
Round-of-32 Matchup Resolver — entry point for bracket generation.

Pure function of (AdvancingSet, team bindings, table). Steps:
1. Validate the AdvancingSet (exactly 8 distinct known groups).
2. Build the canonical key.
3. Look the key up in the combination table.
4. On a miss, fall back to the priority rules and log it.
5. Bind every TeamSlotReference to a team name (placeholder if unbound).

Output order is canonical: matchups 0-7 feed the left half of the bracket,
8-15 the right half; 0-3 / 4-7 / 8-11 / 12-15 are the quarters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Literal, Mapping, Optional

from wc26 import config
from wc26.services.bracket_slots import Matchup, MatchupTemplate, bind_team
from wc26.services.combination_table import CombinationTable, get_combination_table
from wc26.services.group_rules import check_known_groups, canonical_key, validate_advancing_groups
from wc26.services.priority_rules import (
    SlotConflict,
    audit_fallback_templates,
    build_fallback_templates,
)
from wc26.services.third_place_ranking import advancing_from_session

if TYPE_CHECKING:
    from wc26.models.tournament_session import TournamentSession

logger = logging.getLogger(__name__)

ResolutionSource = Literal["table", "fallback"]

TeamMap = Mapping[str, Optional[str]]


@dataclass
class Round32Resolution:
    lookup_key: str
    source: ResolutionSource
    templates: List[MatchupTemplate]
    matchups: List[Matchup]
    unresolved_slots: List[int] = field(default_factory=list)
    conflicts: List[SlotConflict] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return self.source == "fallback"


def build_round_of_32(
    advancing_groups: Iterable[str],
    winners: TeamMap,
    runners_up: TeamMap,
    third_place: TeamMap,
    table: Optional[CombinationTable] = None,
    placeholder: Optional[str] = None,
) -> Round32Resolution:
    """
    Resolve the 16 Round-of-32 matchups with full diagnostics.

    Raises InvalidAdvancingSetError if the AdvancingSet is not 8 distinct
    known groups, or if any team map is keyed by an unknown group.
    Missing bindings are not errors: they resolve to *placeholder*.
    """
    advancing = validate_advancing_groups(advancing_groups)
    for what, team_map in (("winner", winners), ("runner-up", runners_up), ("third-place", third_place)):
        check_known_groups(team_map.keys(), what=f"{what} group")

    if table is None:
        table = get_combination_table()
    if placeholder is None:
        placeholder = config.UNRESOLVED_TEAM_LABEL

    key = canonical_key(advancing)
    found = table.lookup(key)

    conflicts: List[SlotConflict] = []
    if found is not None:
        source: ResolutionSource = "table"
        templates = list(found)
    else:
        source = "fallback"
        logger.warning(
            "No combination table entry for %s (%d entries loaded); using priority rules",
            key, len(table),
        )
        templates = build_fallback_templates(advancing)
        conflicts = audit_fallback_templates(templates)
        for c in conflicts:
            logger.debug("Fallback conflict for %s: %s", key, c.reason)

    matchups: List[Matchup] = []
    unresolved: List[int] = []
    for idx, t in enumerate(templates):
        if not t.is_resolved:
            unresolved.append(idx)
        matchups.append(Matchup(
            team1=bind_team(t.team1, winners, runners_up, third_place, placeholder),
            team2=bind_team(t.team2, winners, runners_up, third_place, placeholder),
        ))

    return Round32Resolution(
        lookup_key=key,
        source=source,
        templates=templates,
        matchups=matchups,
        unresolved_slots=unresolved,
        conflicts=conflicts,
    )


def resolve_round_of_32(
    advancing_groups: Iterable[str],
    winners: TeamMap,
    runners_up: TeamMap,
    third_place: TeamMap,
    table: Optional[CombinationTable] = None,
    placeholder: Optional[str] = None,
) -> List[Matchup]:
    """Ordered list of 16 Matchups (team1, team2, winner=None)."""
    return build_round_of_32(
        advancing_groups, winners, runners_up, third_place, table=table, placeholder=placeholder
    ).matchups


def resolve_session(
    session: "TournamentSession",
    table: Optional[CombinationTable] = None,
    placeholder: Optional[str] = None,
) -> Round32Resolution:
    """Resolve from a TournamentSession: AdvancingSet from its third-place ranking."""
    advancing = advancing_from_session(session)
    winners = {g: r.winner for g, r in session.groups.items()}
    runners_up = {g: r.runner_up for g, r in session.groups.items()}
    # Only advancing groups' third-place teams can appear in the bracket
    third_place = {g: r.third_place for g, r in session.groups.items() if g in advancing}
    return build_round_of_32(advancing, winners, runners_up, third_place, table=table, placeholder=placeholder)
