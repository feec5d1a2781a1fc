"""
Group Rules — 12-group universe and canonical combination keys (Single Source of Truth)

Every module that needs group identifiers, combination keys or the
AdvancingSet precondition imports from here. Do NOT re-derive group order
elsewhere: the key format of the combination table depends on it.
"""

from itertools import combinations
from typing import FrozenSet, Iterable, List, Tuple

# =============================================================================
# Group Universe
# =============================================================================

# Fixed total order over the 12 groups. Canonical keys sort by this order.
GROUP_IDS: Tuple[str, ...] = ("A", "B", "C", "D", "E", "F", "G", "H", "I", "J", "K", "L")

GROUP_ORDER = {g: i for i, g in enumerate(GROUP_IDS)}

# Third-place teams that advance to the Round of 32
ADVANCING_THIRD_PLACE_COUNT = 8

# C(12, 8)
TOTAL_COMBINATIONS = 495

ROUND_OF_32_MATCH_COUNT = 16


class InvalidAdvancingSetError(ValueError):
    """Caller supplied an AdvancingSet (or group map) that violates the precondition."""


# =============================================================================
# Validation
# =============================================================================

def check_known_groups(groups: Iterable[str], what: str = "group") -> None:
    unknown = sorted({g for g in groups if g not in GROUP_ORDER}, key=str)
    if unknown:
        raise InvalidAdvancingSetError(
            f"Unknown {what} id(s): {', '.join(map(str, unknown))}; "
            f"expected one of {''.join(GROUP_IDS)}"
        )


def validate_advancing_groups(groups: Iterable[str]) -> FrozenSet[str]:
    """
    Enforce the AdvancingSet precondition and return it as a frozenset.

    Rules:
    - every id belongs to GROUP_IDS
    - exactly 8 entries, all distinct (duplicates are rejected, not collapsed)
    """
    items = list(groups)
    check_known_groups(items)

    distinct = frozenset(items)
    if len(distinct) != len(items):
        dupes = sorted({g for g in items if items.count(g) > 1}, key=GROUP_ORDER.get)
        raise InvalidAdvancingSetError(
            f"Duplicate advancing group(s): {', '.join(dupes)}"
        )
    if len(distinct) != ADVANCING_THIRD_PLACE_COUNT:
        raise InvalidAdvancingSetError(
            f"Expected {ADVANCING_THIRD_PLACE_COUNT} advancing third-place groups, "
            f"got {len(distinct)}"
        )
    return distinct


# =============================================================================
# Canonical Keys
# =============================================================================

def canonical_key(groups: Iterable[str]) -> str:
    """
    Canonical lookup key for a set of groups.

    Sorted by GROUP_IDS order and concatenated, so any permutation of the
    same set yields the same key:
      {E, H, I, J, K, C, F, L} -> "CEFHIJKL"
    """
    items = set(groups)
    check_known_groups(items)
    return "".join(sorted(items, key=GROUP_ORDER.__getitem__))


def is_canonical_key(key: str) -> bool:
    """True if *key* is 8 known group ids in strictly increasing universe order."""
    if not isinstance(key, str) or len(key) != ADVANCING_THIRD_PLACE_COUNT:
        return False
    if any(c not in GROUP_ORDER for c in key):
        return False
    positions = [GROUP_ORDER[c] for c in key]
    return all(a < b for a, b in zip(positions, positions[1:]))


def groups_from_key(key: str) -> FrozenSet[str]:
    if not is_canonical_key(key):
        raise InvalidAdvancingSetError(f"Not a canonical combination key: {key!r}")
    return frozenset(key)


def all_combination_keys() -> List[str]:
    """All 495 canonical keys (8 of 12 groups), in lexicographic order."""
    return ["".join(combo) for combo in combinations(GROUP_IDS, ADVANCING_THIRD_PLACE_COUNT)]
