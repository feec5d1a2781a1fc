"""
Combination Table — read-only store of official Round-of-32 templates.

Maps a canonical 8-group key (see group_rules.canonical_key) to the 16
matchup templates for that AdvancingSet. The data is generated offline from
the official seeding document (backend/build_combination_table.py) and
loaded once per process. Nothing mutates an entry after load.

Loading never raises: a missing or malformed file gives an empty table and
every resolution falls back to the priority rules.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from wc26 import config
from wc26.services.bracket_slots import MatchupTemplate, SlotRole, TeamSlotReference
from wc26.services.group_rules import (
    GROUP_ORDER,
    ROUND_OF_32_MATCH_COUNT,
    TOTAL_COMBINATIONS,
    all_combination_keys,
    is_canonical_key,
)
from wc26.services.priority_rules import build_fallback_templates

logger = logging.getLogger(__name__)

TABLE_FORMAT_VERSION = 1

Templates = Tuple[MatchupTemplate, ...]


# ── File schema ──────────────────────────────────────────────────────────

class SlotReferenceRow(BaseModel):
    role: SlotRole
    group: str


class MatchupRow(BaseModel):
    team1: SlotReferenceRow
    team2: SlotReferenceRow


class CombinationTableDocument(BaseModel):
    format_version: int = TABLE_FORMAT_VERSION
    source: Optional[str] = None
    # Rows are validated per entry in table_from_document
    entries: Dict[str, Any] = {}


_MATCHUP_ROWS = TypeAdapter(List[MatchupRow])


# ── Store ────────────────────────────────────────────────────────────────

class CombinationTable:
    """Immutable mapping: canonical key -> 16 MatchupTemplates."""

    def __init__(self, entries: Optional[Mapping[str, Templates]] = None, source: Optional[str] = None):
        frozen = {k: tuple(v) for k, v in (entries or {}).items()}
        self._entries: Mapping[str, Templates] = MappingProxyType(frozen)
        self.source = source

    def lookup(self, key: str) -> Optional[Templates]:
        """Templates for *key*, or None when the combination is not in the table."""
        return self._entries.get(key)

    def keys(self) -> List[str]:
        return sorted(self._entries)

    def items(self) -> Iterator[Tuple[str, Templates]]:
        for key in self.keys():
            yield key, self._entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CombinationTable(entries={len(self)}, source={self.source!r})"


def _entry_problem(key: str, rows: List[MatchupRow]) -> Optional[str]:
    if not is_canonical_key(key):
        return "key is not 8 sorted group ids"
    if len(rows) != ROUND_OF_32_MATCH_COUNT:
        return f"expected {ROUND_OF_32_MATCH_COUNT} matchups, got {len(rows)}"
    for row in rows:
        for ref in (row.team1, row.team2):
            if ref.group not in GROUP_ORDER:
                return f"unknown group {ref.group!r}"
            if ref.role == SlotRole.THIRD_PLACE and ref.group not in key:
                return f"third-place team of group {ref.group} is not advancing"
    return None


def _row_to_template(row: MatchupRow) -> MatchupTemplate:
    return MatchupTemplate(
        TeamSlotReference(row.team1.role, row.team1.group),
        TeamSlotReference(row.team2.role, row.team2.group),
    )


def table_from_document(document: CombinationTableDocument) -> CombinationTable:
    """Build a table from a parsed document, skipping invalid entries."""
    entries: Dict[str, Templates] = {}
    for key, raw_rows in document.entries.items():
        try:
            rows = _MATCHUP_ROWS.validate_python(raw_rows)
        except ValidationError as e:
            logger.warning(
                "Skipping combination table entry %r: %d invalid field(s)", key, e.error_count()
            )
            continue
        problem = _entry_problem(key, rows)
        if problem:
            logger.warning("Skipping combination table entry %r: %s", key, problem)
            continue
        entries[key] = tuple(_row_to_template(r) for r in rows)
    return CombinationTable(entries, source=document.source)


def load_combination_table(path: Union[str, Path]) -> CombinationTable:
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Combination table not found at %s; all resolutions will use priority rules", path)
        return CombinationTable()
    except OSError as e:
        logger.warning("Could not read combination table %s: %s", path, e)
        return CombinationTable()

    try:
        document = CombinationTableDocument.model_validate_json(raw)
    except ValidationError as e:
        logger.warning("Combination table %s is invalid (%d errors); ignoring it", path, e.error_count())
        return CombinationTable()

    if document.format_version != TABLE_FORMAT_VERSION:
        logger.warning(
            "Combination table %s has format_version %s (expected %s); ignoring it",
            path, document.format_version, TABLE_FORMAT_VERSION,
        )
        return CombinationTable()

    table = table_from_document(document)
    logger.info(
        "Loaded combination table from %s: %d/%d combinations",
        path, len(table), TOTAL_COMBINATIONS,
    )
    return table


@lru_cache(maxsize=1)
def get_combination_table() -> CombinationTable:
    """Process-wide table, loaded on first use. Also used as a FastAPI dependency."""
    return load_combination_table(config.COMBINATION_TABLE_PATH)


def dump_combination_table(table: CombinationTable) -> str:
    document = {
        "format_version": TABLE_FORMAT_VERSION,
        "source": table.source,
        "entries": {key: [t.to_dict() for t in templates] for key, templates in table.items()},
    }
    return json.dumps(document, indent=2)


# ── Diagnostics ──────────────────────────────────────────────────────────

def table_coverage(table: CombinationTable) -> dict:
    populated = sum(1 for k in all_combination_keys() if k in table)
    return {
        "total": TOTAL_COMBINATIONS,
        "populated": populated,
        "missing": TOTAL_COMBINATIONS - populated,
        "source": table.source,
    }


def find_fallback_mismatches(table: CombinationTable) -> List[str]:
    """Keys whose table entry differs from what the priority rules produce."""
    mismatched: List[str] = []
    for key, templates in table.items():
        if list(templates) != build_fallback_templates(frozenset(key)):
            mismatched.append(key)
    return mismatched
