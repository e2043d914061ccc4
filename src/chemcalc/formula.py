"""Cálculo y formateo de fórmulas moleculares.

Este módulo agrega utilidades para contar elementos a partir de los átomos
del grafo (incluidos los H implícitos y la expansión de grupos funcionales)
y formatear la fórmula siguiendo el orden de Hill.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from .valence import implicit_h_count


def molecular_formula(atoms: Iterable) -> Dict[str, int]:
    """Calcula la fórmula molecular como diccionario de elemento -> conteo.

    Args:
        atoms: Átomos del grafo (`core.atom.Atom`).

    Returns:
        Diccionario con símbolos atómicos y sus cantidades totales. Los
        grupos funcionales se expanden a su composición; los pseudo-símbolos
        (p. ej., "R") se conservan.

    Side Effects:
        No tiene efectos laterales; solo calcula y devuelve datos.
    """
    counts: Dict[str, int] = {}

    for atom in atoms:
        for element, count in atom.element.composition:
            counts[element] = counts.get(element, 0) + count
        implicit = implicit_h_count(atom)
        if implicit:
            counts["H"] = counts.get("H", 0) + implicit

    return {element: count for element, count in counts.items() if count > 0}


def hill_order(formula_dict: Dict[str, int]) -> List[str]:
    """Ordena los símbolos según Hill: C, H y luego alfabético."""
    order = []
    if "C" in formula_dict:
        order.append("C")
    if "H" in formula_dict:
        order.append("H")
    for element in sorted(e for e in formula_dict.keys() if e not in {"C", "H"}):
        order.append(element)
    return order


def format_formula(formula_dict: Dict[str, int]) -> str:
    """Formatea una fórmula usando el orden de Hill (C, H, luego alfabético).

    Args:
        formula_dict: Diccionario con símbolos de elementos y cantidades.

    Returns:
        Cadena con la fórmula formateada (p. ej., "C6H6O").

    Side Effects:
        No tiene efectos laterales.
    """
    if not formula_dict:
        return ""
    parts = []
    for element in hill_order(formula_dict):
        count = formula_dict.get(element, 0)
        if count <= 0:
            continue
        parts.append(element if count == 1 else f"{element}{count}")
    return "".join(parts)


def concise_formula(formula_dict: Dict[str, int]) -> str:
    """Formatea una fórmula en estilo espaciado, p. ej. "C 6 H 6 O 1".

    Args:
        formula_dict: Diccionario con símbolos de elementos y cantidades.

    Returns:
        Pares símbolo/conteo separados por espacios, en orden de Hill.
    """
    parts = []
    for element in hill_order(formula_dict):
        count = formula_dict.get(element, 0)
        if count > 0:
            parts.append(f"{element} {count}")
    return " ".join(parts)
