from __future__ import annotations

from typing import Iterable, List

from core.ring import RING_PRIORITY, Ring

_LOWEST_PRIORITY = max(RING_PRIORITY.values()) + 1


def sort_rings_for_placement(rings: Iterable[Ring]) -> List[Ring]:
    """Order rings for double-bond placement.

    Three successive stable sorts, each preserving the previous order on
    ties: preferred size (6, 5, 7, 4, 3, then any other), ascending sum of
    ring memberships over the ring's atoms, then descending number of
    double bonds already in the ring.
    """
    ordered = sorted(rings, key=lambda ring: ring.priority or _LOWEST_PRIORITY)
    ordered = sorted(ordered, key=lambda ring: sum(atom.ring_count for atom in ring.atoms))
    return sorted(ordered, key=lambda ring: ring.double_bond_count, reverse=True)
