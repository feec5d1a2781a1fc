"""
Round-of-32 resolution endpoints.

Stateless: every request carries its own AdvancingSet and team bindings
(or a whole TournamentSession) and gets back the 16 matchups.
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from wc26.models.tournament_session import TournamentSession
from wc26.services.combination_table import CombinationTable, get_combination_table
from wc26.services.group_rules import InvalidAdvancingSetError
from wc26.services.r32_resolver import Round32Resolution, build_round_of_32, resolve_session

router = APIRouter()


# ── Request / response models ────────────────────────────────────────────

class ResolveRequest(BaseModel):
    advancing_groups: List[str]
    winners: Dict[str, Optional[str]] = {}
    runners_up: Dict[str, Optional[str]] = {}
    third_place: Dict[str, Optional[str]] = {}


class MatchupOut(BaseModel):
    team1: str
    team2: str
    winner: Optional[str] = None
    label: str  # slot codes, e.g. "1E v 3A"


class ConflictOut(BaseModel):
    slot_indices: List[int]
    group: str
    reason: str


class ResolveResponse(BaseModel):
    lookup_key: str
    source: str  # table | fallback
    matchups: List[MatchupOut]
    unresolved_slots: List[int]
    conflicts: List[ConflictOut]


class SessionResolveResponse(ResolveResponse):
    session_name: Optional[str] = None
    advancing_groups: List[str]


def _to_response_fields(resolution: Round32Resolution) -> dict:
    return {
        "lookup_key": resolution.lookup_key,
        "source": resolution.source,
        "matchups": [
            MatchupOut(team1=m.team1, team2=m.team2, winner=m.winner, label=t.label())
            for m, t in zip(resolution.matchups, resolution.templates)
        ],
        "unresolved_slots": resolution.unresolved_slots,
        "conflicts": [ConflictOut(**c.to_dict()) for c in resolution.conflicts],
    }


# ── Endpoints ────────────────────────────────────────────────────────────

@router.post("/round-of-32/resolve", response_model=ResolveResponse)
def resolve_matchups(
    request: ResolveRequest,
    table: CombinationTable = Depends(get_combination_table),
):
    """Resolve the 16 Round-of-32 matchups for an AdvancingSet and team bindings."""
    try:
        resolution = build_round_of_32(
            request.advancing_groups,
            request.winners,
            request.runners_up,
            request.third_place,
            table=table,
        )
    except InvalidAdvancingSetError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ResolveResponse(**_to_response_fields(resolution))


@router.post("/sessions/round-of-32", response_model=SessionResolveResponse)
def resolve_session_matchups(
    session: TournamentSession,
    table: CombinationTable = Depends(get_combination_table),
):
    """Derive the AdvancingSet from a session's third-place ranking, then resolve."""
    try:
        resolution = resolve_session(session, table=table)
    except InvalidAdvancingSetError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return SessionResolveResponse(
        session_name=session.name,
        advancing_groups=list(resolution.lookup_key),
        **_to_response_fields(resolution),
    )
