"""Modelo raíz del documento químico.

El `Model` agrupa las moléculas de primer nivel, guarda el registro de
elementos inyectado y las opciones de dibujo y percepción, y ofrece consultas
sobre todo el grafo (caja envolvente, fórmula, reetiquetado).
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF

from chemcalc.formula import concise_formula, molecular_formula
from chemcalc.valence import overvalent_atoms
from core.atom import Atom
from core.container import ChemistryContainer, GraphChange
from core.elements import ElementRegistry, default_registry
from core.geometry import union_rects
from core.molecule import Molecule, RelabelCounters
from core.options import DEFAULT_FONT_SIZE, SINGLE_ATOM_PSEUDO_BOND_LENGTH, PerceptionOptions
from core.ring import Ring


class Model(ChemistryContainer):
    """Contenedor de primer nivel de todas las moléculas de un documento."""

    def __init__(
        self,
        registry: Optional[ElementRegistry] = None,
        font_size: float = DEFAULT_FONT_SIZE,
        options: Optional[PerceptionOptions] = None,
    ) -> None:
        super().__init__()
        self.registry = registry if registry is not None else default_registry()
        self.font_size = font_size
        self.options = options if options is not None else PerceptionOptions()

    def __repr__(self) -> str:
        return f"Model(molecules={len(self._molecules)}, atoms={len(self._all_atoms)})"

    @property
    def model(self) -> "Model":
        return self

    def new_atom(self, symbol: str, x: float = 0.0, y: float = 0.0, **attrs) -> Atom:
        """Crea un átomo (sin añadirlo) resolviendo el símbolo en el registro.

        Args:
            symbol: Símbolo de elemento o de grupo funcional.
            x: Coordenada X.
            y: Coordenada Y.
            **attrs: Atributos adicionales de `Atom` (carga, isótopo, id...).

        Raises:
            UnknownElementError: Si el símbolo no está registrado.
        """
        return Atom(self.registry.get(symbol), QPointF(x, y), **attrs)

    def add_molecule(self, molecule: Molecule) -> GraphChange:
        return self.add_child_molecule(molecule)

    def remove_molecule(self, molecule: Molecule) -> GraphChange:
        return self.remove_child_molecule(molecule)

    # -- conectividad ------------------------------------------------------

    def rebuild_molecules(self) -> List[Molecule]:
        """Recalcula todas las moléculas a partir del conjunto plano de átomos.

        Se descarta la jerarquía existente y cada componente conexo se
        convierte en una molécula de primer nivel, sembrada en el orden
        original de los átomos.

        Returns:
            Las moléculas resultantes.
        """
        pending: Dict[Atom, None] = dict.fromkeys(self._all_atoms)
        for molecule in list(self._molecules):
            molecule._clear_membership()
            self.remove_child_molecule(molecule)
        while pending:
            molecule = Molecule()
            self.add_child_molecule(molecule)
            molecule._flood_fill(next(iter(pending)), pending)
        return list(self._molecules)

    def refresh_molecules(self) -> List[Molecule]:
        """Descarta moléculas vacías y refresca la conectividad del resto.

        Returns:
            La lista de moléculas tras el refresco, incluidas las escindidas.
        """
        for molecule in list(self._molecules):
            if molecule.is_empty:
                self.remove_child_molecule(molecule)
        for molecule in list(self._molecules):
            molecule.refresh()
        return list(self._molecules)

    def relabel(self, include_names: bool = False) -> RelabelCounters:
        counters = RelabelCounters()
        for molecule in self._molecules:
            molecule.relabel(include_names, counters)
        return counters

    # -- consultas globales ------------------------------------------------

    @property
    def rings(self) -> Tuple[Ring, ...]:
        found: List[Ring] = []
        for molecule in self._molecules:
            found.extend(_rings_in(molecule))
        return tuple(found)

    @property
    def bounding_box(self) -> QRectF:
        return union_rects(molecule.bounding_box for molecule in self._molecules if molecule.all_atoms)

    @property
    def mean_bond_length(self) -> float:
        if not self._all_bonds:
            return SINGLE_ATOM_PSEUDO_BOND_LENGTH
        return sum(bond.length for bond in self._all_bonds) / len(self._all_bonds)

    def calculated_formula(self) -> Dict[str, int]:
        return molecular_formula(self._all_atoms)

    def validate(self) -> List[Atom]:
        """Átomos cuya suma de órdenes de enlace supera `MAX_VALENCE_MAP`."""
        return overvalent_atoms(self._all_atoms)

    @property
    def concise_formula(self) -> str:
        """Fórmulas de las moléculas agrupadas, p. ej. "2 C 6 H 6 . H 2 O 1"."""
        counts: Dict[str, int] = {}
        for molecule in self._molecules:
            formula = concise_formula(molecule.calculated_formula())
            counts[formula] = counts.get(formula, 0) + 1
        parts = [formula if count == 1 else f"{count} {formula}" for formula, count in counts.items()]
        return " . ".join(parts)

    # -- transformaciones --------------------------------------------------

    def move_by(self, dx: float, dy: float) -> None:
        for atom in self._all_atoms:
            atom.move_by(dx, dy)

    def reposition(self, x: float, y: float) -> None:
        """Traslada el modelo para que su caja empiece en (x, y)."""
        box = self.bounding_box
        self.move_by(x - box.left(), y - box.top())

    def scale_to_average_bond_length(self, length: float) -> None:
        """Escala todas las posiciones para que la longitud media sea `length`.

        Sin enlaces (o con longitud media nula) no se modifica nada.
        """
        if not self._all_bonds:
            return
        current = self.mean_bond_length
        if current <= 0:
            return
        factor = length / current
        for atom in self._all_atoms:
            position = atom.position
            atom.position = QPointF(position.x() * factor, position.y() * factor)

    def clone(self) -> "Model":
        copy = Model(registry=self.registry, font_size=self.font_size, options=replace(self.options))
        for molecule in self._molecules:
            copy.add_child_molecule(molecule.clone())
        return copy


def _rings_in(molecule: Molecule) -> List[Ring]:
    found = list(molecule.rings)
    for child in molecule.molecules:
        found.extend(_rings_in(child))
    return found
