"""Constantes de dibujo y opciones de percepción de anillos.

Los valores numéricos reproducen las métricas de maquetación usadas por el
renderizador: tamaño de fuente por defecto, longitud de enlace de referencia
y tolerancias angulares.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Tamaño de fuente (px) usado para las cajas de símbolo de los átomos.
DEFAULT_FONT_SIZE = 20.0
# Longitud de enlace asumida cuando una molécula no tiene enlaces.
SINGLE_ATOM_PSEUDO_BOND_LENGTH = 40.0
# Un carbono con dos enlaces casi lineales muestra su símbolo.
LINEAR_ANGLE_TOLERANCE_DEG = 8.0


class RingAlgorithm(str, Enum):
    """Algoritmos disponibles para la percepción de anillos."""
    RPPATH = "rppath"
    FIGUERAS = "figueras"


@dataclass
class PerceptionOptions:
    """Configuración del motor de percepción de anillos.

    Attributes:
        algorithm: Algoritmo por defecto de `Molecule.rebuild_rings`.
        workers: Hilos para la relajación de RP-Path (`None` o 1 = secuencial).
        max_atoms: Tamaño máximo del conjunto de trabajo para RP-Path; por
            encima se usa Figueras.
    """
    algorithm: RingAlgorithm = RingAlgorithm.RPPATH
    workers: Optional[int] = None
    max_atoms: Optional[int] = None
