from __future__ import annotations

from collections import deque
from typing import Dict, Iterable

from core.atom import Atom


def prune_side_chains(atoms: Iterable[Atom]) -> Dict[Atom, int]:
    """Strip side chains, leaving only the cyclic core.

    Atoms whose effective degree (neighbours still in the set) drops below 2
    are removed repeatedly until a fixed point is reached.

    Returns an insertion-ordered mapping atom -> effective degree.
    """
    working: Dict[Atom, int] = dict.fromkeys(atoms, 0)
    for atom in working:
        working[atom] = sum(1 for nbr in atom.neighbours if nbr in working)

    pending = deque(atom for atom, degree in working.items() if degree < 2)
    while pending:
        atom = pending.popleft()
        if atom not in working:
            continue
        del working[atom]
        for nbr in atom.neighbours:
            if nbr in working:
                working[nbr] -= 1
                if working[nbr] < 2:
                    pending.append(nbr)
    return working
