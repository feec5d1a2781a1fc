"""
Combination table inspection endpoints.

Read-only views used to check how much of the 495-combination table is
populated and whether table entries agree with the priority rules.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from wc26.services.combination_table import (
    CombinationTable,
    find_fallback_mismatches,
    get_combination_table,
    table_coverage,
)
from wc26.services.group_rules import is_canonical_key
from wc26.services.priority_rules import audit_fallback_templates, build_fallback_templates

router = APIRouter()


class CoverageResponse(BaseModel):
    total: int
    populated: int
    missing: int
    source: Optional[str] = None


class SlotRefOut(BaseModel):
    role: str
    group: Optional[str] = None


class TemplateOut(BaseModel):
    slot: int
    label: str
    team1: SlotRefOut
    team2: SlotRefOut


class CombinationResponse(BaseModel):
    key: str
    source: str  # table | fallback
    templates: List[TemplateOut]
    conflicts: List[str]


class AuditResponse(BaseModel):
    checked: int
    mismatched_keys: List[str]


@router.get("/round-of-32/combinations", response_model=CoverageResponse)
def get_coverage(table: CombinationTable = Depends(get_combination_table)):
    """How many of the 495 combinations the loaded table covers"""
    return CoverageResponse(**table_coverage(table))


@router.get("/round-of-32/combinations/audit", response_model=AuditResponse)
def audit_table(table: CombinationTable = Depends(get_combination_table)):
    """Table entries that disagree with the priority rules"""
    return AuditResponse(checked=len(table), mismatched_keys=find_fallback_mismatches(table))


@router.get("/round-of-32/combinations/{key}", response_model=CombinationResponse)
def get_combination(key: str, table: CombinationTable = Depends(get_combination_table)):
    """Slot templates for one canonical key, from the table or the priority rules"""
    if not is_canonical_key(key):
        raise HTTPException(
            status_code=422,
            detail=f"'{key}' is not a canonical key (8 distinct groups A-L in sorted order)",
        )

    found = table.lookup(key)
    if found is not None:
        source = "table"
        templates = list(found)
        conflicts: List[str] = []
    else:
        source = "fallback"
        templates = build_fallback_templates(frozenset(key))
        conflicts = [c.reason for c in audit_fallback_templates(templates)]

    return CombinationResponse(
        key=key,
        source=source,
        templates=[
            TemplateOut(
                slot=i,
                label=t.label(),
                team1=SlotRefOut(**t.team1.to_dict()),
                team2=SlotRefOut(**t.team2.to_dict()),
            )
            for i, t in enumerate(templates)
        ],
        conflicts=conflicts,
    )
