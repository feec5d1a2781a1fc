"""Official possibilities CSV -> combination table entries.

Layout of the published CSV (comma-separated, quoted fields allowed):
  lines 1-10   headers
  col 0        row number
  cols 1-12    groups A-L; any non-empty cell = that group's third-place team advances
  cols 13-20   "1A vs" "1B vs" "1D vs" "1E vs" "1G vs" "1I vs" "1K vs" "1L vs"
               opponent cells like "3E"

Only seven opponent columns are mapped onto bracket slots (CSV_COLUMN_SLOTS).
Fixed slots are copied from the priority rules' static slots, and any
third-place slot the CSV leaves empty is filled by the priority rules.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from wc26.services.bracket_slots import MatchupTemplate, third_place, winner
from wc26.services.group_rules import GROUP_IDS, ROUND_OF_32_MATCH_COUNT, canonical_key
from wc26.services.priority_rules import (
    STATIC_SLOTS,
    THIRD_PLACE_SLOTS,
    pick_third_place,
)

logger = logging.getLogger(__name__)

HEADER_LINES = 10
GROUP_COLUMNS = range(1, 13)
OPPONENT_COLUMN_OFFSET = 13

# Opponent column (relative to OPPONENT_COLUMN_OFFSET) -> bracket slot index.
# Column 0 ("1A vs") is not used.
CSV_COLUMN_SLOTS: Dict[int, int] = {
    1: 6,    # 1B vs
    2: 0,    # 1D vs
    3: 7,    # 1E vs
    4: 1,    # 1G vs
    5: 15,   # 1I vs
    6: 12,   # 1K vs
    7: 14,   # 1L vs
}

_THIRD_PLACE_CELL = re.compile(r"^3([A-L])$")


@dataclass
class SkippedRow:
    line_number: int
    reason: str


@dataclass
class CsvParseResult:
    entries: Dict[str, Tuple[MatchupTemplate, ...]] = field(default_factory=dict)
    skipped: List[SkippedRow] = field(default_factory=list)


def _advancing_groups(columns: List[str]) -> List[str]:
    return [
        GROUP_IDS[i - 1]
        for i in GROUP_COLUMNS
        if i < len(columns) and columns[i].strip()
    ]


def _opponent_group(cell: str) -> Optional[str]:
    m = _THIRD_PLACE_CELL.match(cell.strip())
    return m.group(1) if m else None


def templates_for_row(advancing: List[str], opponent_cells: List[str]) -> List[Optional[MatchupTemplate]]:
    """16 slots for one CSV row; None where neither the CSV nor the rules fill a slot."""
    slots: List[Optional[MatchupTemplate]] = [None] * ROUND_OF_32_MATCH_COUNT
    advancing_set = frozenset(advancing)

    for idx, static in STATIC_SLOTS.items():
        slots[idx] = MatchupTemplate(static.team1, static.team2)

    for col, idx in CSV_COLUMN_SLOTS.items():
        if col >= len(opponent_cells):
            continue
        group = _opponent_group(opponent_cells[col])
        if group is None or group not in advancing_set:
            continue
        slot = THIRD_PLACE_SLOTS[idx]
        slots[idx] = MatchupTemplate(winner(slot.winner_group), third_place(group))

    for idx, slot in THIRD_PLACE_SLOTS.items():
        if slots[idx] is None:
            ref = pick_third_place(slot.priority, advancing_set, slot_index=idx)
            if ref.is_resolved:
                slots[idx] = MatchupTemplate(winner(slot.winner_group), ref)

    return slots


def parse_combinations_csv(text: str) -> CsvParseResult:
    result = CsvParseResult()
    reader = csv.reader(io.StringIO(text))

    for line_number, columns in enumerate(reader, start=1):
        if line_number <= HEADER_LINES:
            continue
        if not any(c.strip() for c in columns):
            continue
        # Footnote / title rows
        if columns[0].strip().startswith("T") or len(columns) <= OPPONENT_COLUMN_OFFSET:
            continue

        advancing = _advancing_groups(columns)
        if len(advancing) != 8:
            logger.warning(
                "CSV line %d: expected 8 advancing groups, found %d (%s)",
                line_number, len(advancing), "".join(advancing),
            )
            result.skipped.append(SkippedRow(line_number, f"{len(advancing)} advancing groups"))
            continue

        key = canonical_key(advancing)
        opponent_cells = columns[OPPONENT_COLUMN_OFFSET:OPPONENT_COLUMN_OFFSET + 8]
        slots = templates_for_row(advancing, opponent_cells)

        filled = [s for s in slots if s is not None]
        if len(filled) != ROUND_OF_32_MATCH_COUNT:
            logger.warning(
                "CSV line %d (%s): only %d/%d matchups could be filled",
                line_number, key, len(filled), ROUND_OF_32_MATCH_COUNT,
            )
            result.skipped.append(SkippedRow(line_number, f"{len(filled)}/16 matchups"))
            continue

        if key in result.entries:
            logger.warning("CSV line %d: duplicate combination %s, keeping first", line_number, key)
            result.skipped.append(SkippedRow(line_number, f"duplicate {key}"))
            continue

        result.entries[key] = tuple(filled)

    return result
