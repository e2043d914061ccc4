"""API pública del núcleo químico.

Reexpone las clases del grafo (átomos, enlaces, anillos, moléculas y modelo)
y el registro de elementos para facilitar importaciones.
"""

from core.atom import Atom
from core.bond import Bond, BondDirection, BondOrder, BondStereo
from core.container import ChemistryContainer, GraphChange
from core.elements import (
    Element,
    ElementLike,
    ElementRegistry,
    FunctionalGroup,
    GroupComponent,
    default_registry,
)
from core.errors import ChemGraphError, GraphTopologyError, UnknownElementError
from core.model import Model
from core.molecule import ChemicalName, Molecule, TextualFormula
from core.options import PerceptionOptions, RingAlgorithm
from core.ring import Ring

__all__ = [
    "Atom",
    "Bond",
    "BondDirection",
    "BondOrder",
    "BondStereo",
    "ChemicalName",
    "ChemGraphError",
    "ChemistryContainer",
    "Element",
    "ElementLike",
    "ElementRegistry",
    "FunctionalGroup",
    "GraphChange",
    "GraphTopologyError",
    "GroupComponent",
    "Model",
    "Molecule",
    "PerceptionOptions",
    "Ring",
    "RingAlgorithm",
    "TextualFormula",
    "UnknownElementError",
    "default_registry",
]
