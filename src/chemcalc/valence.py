"""Reglas de valencia: hidrógenos implícitos y detección de sobrevalencia."""

from __future__ import annotations

from typing import Dict, Iterable, List

# Valencias máximas (suma de órdenes de enlace) antes de marcar error.
# Se usa un umbral permisivo para patrones comunes hipervalentes:
# - P(V/VI): fosfatos, fosforanos, PF6-
# - S(IV/VI): sulfóxidos/sulfonas/sulfatos, SF6
# - Halógenos(III/V/VII): interhalógenos, oxoácidos (p. ej., IF7, ClO4-)
# - Xe(II/IV/VI/VIII): fluoruro de xenón y XeO4 en dibujos
MAX_VALENCE_MAP: Dict[str, int] = {
    "H": 1,
    "C": 4,
    "N": 4,
    "O": 3,
    "F": 1,
    "Cl": 7,
    "Br": 7,
    "I": 7,
    "P": 6,
    "S": 6,
    "Xe": 8,
    "Se": 6,
    "Te": 6,
    "As": 6,
    "Sb": 6,
    "Bi": 6,
    "Si": 6,
    "Ge": 6,
    "Sn": 6,
    "Pb": 6,
    "B": 4,
}


def implicit_h_count(atom) -> int:
    """Calcula los hidrógenos implícitos para un átomo.

    Args:
        atom: Átomo del grafo (`core.atom.Atom`).

    Returns:
        Número de H implícitos estimados (>= 0).

    Side Effects:
        No tiene efectos laterales.
    """
    return max(int(atom.implicit_hydrogen_count), 0)


def overvalent_atoms(atoms: Iterable) -> List:
    """Valida valencias máximas según `MAX_VALENCE_MAP`.

    Calcula la suma de órdenes de enlace de cada átomo y
    reporta aquellos que superan la valencia máxima permitida.

    Args:
        atoms: Átomos a revisar.

    Returns:
        Lista de átomos que exceden la valencia permitida.

    Side Effects:
        No tiene efectos laterales; solo calcula y devuelve resultados.
    """
    errors = []
    for atom in atoms:
        expected = MAX_VALENCE_MAP.get(atom.symbol)
        if expected is None:
            continue
        if atom.bond_orders > expected:
            errors.append(atom)
    return errors
