"""API pública de cálculos químicos auxiliares."""

from .formula import concise_formula, format_formula, hill_order, molecular_formula
from .mass import molecular_weight
from .valence import MAX_VALENCE_MAP, implicit_h_count, overvalent_atoms

__all__ = [
    "molecular_formula",
    "format_formula",
    "concise_formula",
    "hill_order",
    "molecular_weight",
    "implicit_h_count",
    "overvalent_atoms",
    "MAX_VALENCE_MAP",
]
