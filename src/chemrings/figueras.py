from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Deque, Dict, List, Optional, Set, Tuple

from core.atom import Atom
from core.ring import Ring

from .working_set import prune_side_chains

if TYPE_CHECKING:
    from core.molecule import Molecule


def find_ring(start: Atom) -> Optional[Ring]:
    """Return one smallest ring through `start`, or None.

    Breadth-first search from every neighbour of `start`; the first time two
    search paths meet and share only `start`, their union is the ring.
    Paths are kept as ordered lists so the ring comes out in cyclic order.
    """
    paths: Dict[Atom, List[Atom]] = {start: [start]}
    queue: Deque[Tuple[Atom, Atom]] = deque()
    for nbr in start.neighbours:
        paths[nbr] = [start, nbr]
        queue.append((nbr, start))

    while queue:
        current, source = queue.popleft()
        current_path = paths[current]
        current_set: Set[Atom] = set(current_path)
        for nbr in current.neighbours:
            if nbr is source:
                continue
            nbr_path = paths.get(nbr)
            if nbr_path is None:
                paths[nbr] = current_path + [nbr]
                queue.append((nbr, current))
                continue
            if len(current_set.intersection(nbr_path)) == 1:
                return Ring(current_path + nbr_path[:0:-1])
    return None


def perceive(molecule: "Molecule", working: Optional[Dict[Atom, int]] = None) -> List[Ring]:
    """Iterative single-ring stripping.

    Fast, but on fused or bridged systems the result may be redundant or
    miss rings; use the RP-Path perception for an exact SSSR.
    """
    if working is None:
        working = prune_side_chains(molecule.atoms)
    else:
        working = dict(working)

    rings: List[Ring] = []
    seen: Set[frozenset] = set()
    while working:
        start = max(working, key=lambda atom: atom.degree)
        ring = find_ring(start)
        if ring is None:
            del working[start]
            continue
        if ring.atom_set not in seen:
            seen.add(ring.atom_set)
            rings.append(ring)
        for atom in ring.atoms:
            working.pop(atom, None)
    return rings
