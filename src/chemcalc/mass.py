"""Cálculo de masas moleculares a partir de fórmulas."""

from __future__ import annotations

from typing import Dict, Mapping


def molecular_weight(formula_dict: Dict[str, int], weights: Mapping[str, float]) -> float:
    """Calcula el peso molecular a partir de una fórmula.

    Args:
        formula_dict: Diccionario de elemento -> conteo.
        weights: Pesos atómicos por símbolo (p. ej.,
            `ElementRegistry.atomic_weights()`).

    Returns:
        Masa molecular aproximada en unidades atómicas (u).

    Raises:
        ValueError: Si el peso atómico de un elemento no está disponible.

    Side Effects:
        No tiene efectos laterales.
    """
    total = 0.0
    for element, count in formula_dict.items():
        weight = weights.get(element)
        if weight is None:
            raise ValueError(f"Atomic weight not available for {element}")
        total += weight * count
    return total
