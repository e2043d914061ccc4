"""Ring perception engine: side-chain pruning, Figueras BFS and RP-Path SSSR."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, List, Optional, Union

from core.options import PerceptionOptions, RingAlgorithm
from core.ring import Ring

from . import figueras, rppath
from .ordering import sort_rings_for_placement
from .working_set import prune_side_chains

if TYPE_CHECKING:
    from core.molecule import Molecule

logger = logging.getLogger(__name__)


def perceive_rings(
    molecule: "Molecule",
    options: Optional[PerceptionOptions] = None,
    algorithm: Union[RingAlgorithm, str, None] = None,
) -> List[Ring]:
    """Run ring perception over the direct atoms and bonds of `molecule`.

    Acyclic molecules (fewer bonds than atoms) and molecules whose pruned
    working set is empty return no rings without running either algorithm.
    RP-Path is the default; working sets larger than `options.max_atoms`
    fall back to Figueras.
    """
    if options is None:
        options = PerceptionOptions()
    chosen = RingAlgorithm(algorithm if algorithm is not None else options.algorithm)
    if molecule.theoretical_ring_count <= 0:
        return []
    working = prune_side_chains(molecule.atoms)
    if not working:
        return []

    if chosen is RingAlgorithm.RPPATH and options.max_atoms is not None and len(working) > options.max_atoms:
        logger.warning(
            "Molecule %s: %d ring atoms exceed max_atoms=%d, using Figueras",
            molecule.id,
            len(working),
            options.max_atoms,
        )
        chosen = RingAlgorithm.FIGUERAS

    started = time.perf_counter()
    if chosen is RingAlgorithm.RPPATH:
        rings = rppath.perceive(molecule, working, options.workers)
    else:
        rings = figueras.perceive(molecule, working)
    logger.debug(
        "Molecule %s: %d rings via %s in %.2f ms",
        molecule.id,
        len(rings),
        chosen.value,
        (time.perf_counter() - started) * 1000.0,
    )
    return rings


__all__ = [
    "perceive_rings",
    "prune_side_chains",
    "sort_rings_for_placement",
    "figueras",
    "rppath",
]
