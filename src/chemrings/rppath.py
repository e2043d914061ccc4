"""SSSR perception with path-included distance matrices (RP-Path).

Paths are stored as bond bitsets: plain Python ints where bit `n` stands for
the molecule's n-th bond.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from core.atom import Atom
from core.bond import Bond
from core.ring import Ring

from .working_set import prune_side_chains

if TYPE_CHECKING:
    from core.molecule import Molecule

logger = logging.getLogger(__name__)

PathSet = List[int]


@dataclass
class PathMatrices:
    """Distance matrix plus shortest (PID) and shortest+1 (PID+) path sets."""
    size: int
    infinity: int
    distance: List[List[int]] = field(default_factory=list)
    shortest: List[List[PathSet]] = field(default_factory=list)
    longer: List[List[PathSet]] = field(default_factory=list)


@dataclass
class RingCandidate:
    size: int
    shortest: PathSet
    longer: PathSet


def build_matrices(atoms: Sequence[Atom], bond_bits: Dict[Bond, int], bond_count: int) -> PathMatrices:
    n = len(atoms)
    infinity = 2 * bond_count + 1
    index = {atom: i for i, atom in enumerate(atoms)}
    matrices = PathMatrices(
        size=n,
        infinity=infinity,
        distance=[[infinity] * n for _ in range(n)],
        shortest=[[[] for _ in range(n)] for _ in range(n)],
        longer=[[[] for _ in range(n)] for _ in range(n)],
    )
    for i, atom in enumerate(atoms):
        matrices.distance[i][i] = 0
        for bond in atom.bonds:
            j = index.get(bond.other_atom(atom))
            if j is None:
                continue
            matrices.distance[i][j] = 1
            matrices.shortest[i][j] = [bond_bits[bond]]
    return matrices


def _join(left: PathSet, right: PathSet) -> PathSet:
    joined: PathSet = []
    for a in left:
        for b in right:
            if a & b:
                continue
            path = a | b
            if path not in joined:
                joined.append(path)
    return joined


def _extend(target: PathSet, paths: PathSet) -> None:
    for path in paths:
        if path not in target:
            target.append(path)


def relax_row(m: PathMatrices, k: int, i: int) -> None:
    """Relax row `i` through intermediate atom `k`.

    Only row `i` is written, and neither row `k` nor column `k` changes
    during iteration `k`, so rows can be relaxed concurrently.
    """
    if i == k:
        return
    d_ik = m.distance[i][k]
    if d_ik >= m.infinity:
        return
    row_d = m.distance[i]
    row_sp = m.shortest[i]
    row_lp = m.longer[i]
    k_d = m.distance[k]
    k_sp = m.shortest[k]
    sp_ik = row_sp[k]
    for j in range(m.size):
        if j == i or j == k:
            continue
        d_kj = k_d[j]
        if d_kj >= m.infinity:
            continue
        through = d_ik + d_kj
        current = row_d[j]
        if current > through:
            row_lp[j] = row_sp[j] if current == through + 1 else []
            row_d[j] = through
            row_sp[j] = _join(sp_ik, k_sp[j])
        elif current == through:
            _extend(row_sp[j], _join(sp_ik, k_sp[j]))
        elif current == through - 1:
            _extend(row_lp[j], _join(sp_ik, k_sp[j]))


def relax(m: PathMatrices, workers: Optional[int] = None) -> None:
    """Floyd-Warshall style relaxation; each `k` is a barrier."""
    if workers is not None and workers > 1 and m.size > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            for k in range(m.size):
                list(executor.map(partial(relax_row, m, k), range(m.size)))
        return
    for k in range(m.size):
        for i in range(m.size):
            relax_row(m, k, i)


def ring_candidates(m: PathMatrices) -> List[RingCandidate]:
    """Collect ring candidates, stably sorted by ring size."""
    candidates: List[RingCandidate] = []
    for i in range(m.size):
        for j in range(i + 1, m.size):
            d = m.distance[i][j]
            if d == 0 or d >= m.infinity:
                continue
            sp = m.shortest[i][j]
            lp = m.longer[i][j]
            if len(sp) > 1:
                candidates.append(RingCandidate(2 * d, sp, []))
            if sp and lp:
                candidates.append(RingCandidate(2 * d + 1, sp, lp))
    candidates.sort(key=lambda candidate: candidate.size)
    return candidates


def _reduce(vector: int, basis: Dict[int, int]) -> int:
    while vector:
        pivot = vector.bit_length() - 1
        row = basis.get(pivot)
        if row is None:
            return vector
        vector ^= row
    return 0


def _candidate_paths(candidate: RingCandidate) -> List[int]:
    if candidate.size % 2:
        first = candidate.shortest[0]
        return [first | other for other in candidate.longer]
    sp = candidate.shortest
    return [sp[x] | sp[x + 1] for x in range(len(sp) - 1)]


def extract_sssr(candidates: Sequence[RingCandidate], bonds: Sequence[Bond], target: int) -> List[Ring]:
    """Accept linearly independent candidate rings, smallest first.

    Independence is tested by Gaussian elimination over GF(2) against the
    rings already accepted.
    """
    basis: Dict[int, int] = {}
    accepted: set = set()
    rings: List[Ring] = []
    if target <= 0:
        return rings
    for candidate in candidates:
        for bits in _candidate_paths(candidate):
            if bits in accepted or bin(bits).count("1") != candidate.size:
                continue
            reduced = _reduce(bits, basis)
            if not reduced:
                continue
            ring = Ring.from_bonds(bond for n, bond in enumerate(bonds) if bits >> n & 1)
            if ring is None:
                continue
            basis[reduced.bit_length() - 1] = reduced
            accepted.add(bits)
            rings.append(ring)
            if len(rings) == target:
                return rings
    logger.warning("RP-Path found %d of %d expected rings", len(rings), target)
    return rings


def perceive(
    molecule: "Molecule",
    working: Optional[Dict[Atom, int]] = None,
    workers: Optional[int] = None,
) -> List[Ring]:
    """Smallest Set of Smallest Rings of a molecule."""
    target = molecule.theoretical_ring_count
    if target <= 0:
        return []
    if working is None:
        working = prune_side_chains(molecule.atoms)
    if not working:
        return []

    bonds = list(molecule.bonds)
    bond_bits = {bond: 1 << n for n, bond in enumerate(bonds)}
    matrices = build_matrices(list(working), bond_bits, len(bonds))
    relax(matrices, workers)
    candidates = ring_candidates(matrices)
    logger.debug("RP-Path: %d atoms, %d candidates, target %d", matrices.size, len(candidates), target)
    return extract_sssr(candidates, bonds, target)
