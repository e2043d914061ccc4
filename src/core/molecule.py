"""Molécula: componente conexo mantenido de átomos y enlaces.

La molécula es dueña de sus átomos, enlaces y anillos; estos solo guardan una
referencia débil hacia ella. Tras cada edición estructural se espera una
llamada a `refresh()`, que reconstruye el componente conexo y separa los
fragmentos desconectados en moléculas hermanas.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF

from chemcalc.formula import concise_formula, molecular_formula
from chemcalc.mass import molecular_weight
import chemrings
from core.atom import Atom, new_id
from core.bond import Bond
from core.container import ChemistryContainer, GraphChange
from core.elements import default_registry
from core.errors import GraphTopologyError
from core.geometry import centroid, convex_hull, union_rects
from core.options import (
    DEFAULT_FONT_SIZE,
    SINGLE_ATOM_PSEUDO_BOND_LENGTH,
    PerceptionOptions,
    RingAlgorithm,
)
from core.ring import Ring

logger = logging.getLogger(__name__)


@dataclass
class ChemicalName:
    """Nombre asociado a una molécula (IUPAC, común, etc.)."""
    value: str
    dict_ref: str = ""
    id: str = ""


@dataclass
class TextualFormula:
    """Fórmula textual asociada a una molécula."""
    value: str
    convention: str = ""
    id: str = ""


@dataclass
class RelabelCounters:
    """Contadores compartidos durante un reetiquetado recursivo."""
    molecules: int = 0
    atoms: int = 0
    bonds: int = 0


class Molecule(ChemistryContainer):
    """Componente conexo del grafo químico.

    `atoms` y `bonds` son los miembros directos; las moléculas hijas (grupos
    de componentes disjuntos) aportan sus miembros a `all_atoms`/`all_bonds`.
    """

    def __init__(self, id: Optional[str] = None) -> None:
        super().__init__()
        self.id = id or new_id()
        self._atoms: Dict[Atom, None] = {}
        self._bonds: Dict[Bond, None] = {}
        self._rings: Optional[List[Ring]] = None
        self._sorted_rings: Optional[List[Ring]] = None
        self._bounding_box: Optional[QRectF] = None
        self._convex_hull: Optional[List[Atom]] = None
        self.names: List[ChemicalName] = []
        self.formulas: List[TextualFormula] = []
        # Moléculas escindidas sin padre que las retenga; se comparte entre todas.
        self._detached_group: List[Molecule] = []

    def __repr__(self) -> str:
        return f"Molecule({self.id!r}, atoms={len(self._atoms)}, bonds={len(self._bonds)})"

    @property
    def atoms(self) -> Tuple[Atom, ...]:
        return tuple(self._atoms)

    @property
    def bonds(self) -> Tuple[Bond, ...]:
        return tuple(self._bonds)

    @property
    def is_empty(self) -> bool:
        return not self._all_atoms and not self._molecules

    @property
    def molecule_count(self) -> int:
        """Número de moléculas en el subárbol, incluida esta."""
        return 1 + sum(child.molecule_count for child in self._molecules)

    @property
    def perception_options(self) -> PerceptionOptions:
        model = self.model
        return model.options if model is not None else PerceptionOptions()

    # -- pertenencia (sin tocar la topología) ------------------------------

    def _claim_atom(self, atom: Atom) -> bool:
        if atom in self._atoms:
            return False
        owner = atom.parent
        if owner is not None and owner is not self:
            owner._release_atom(atom)
        self._atoms[atom] = None
        atom._set_parent(self)
        self._include((atom,), ())
        self._structure_changed()
        return True

    def _release_atom(self, atom: Atom) -> bool:
        if atom not in self._atoms:
            return False
        self._structure_changed()
        del self._atoms[atom]
        if atom.parent is self:
            atom._set_parent(None)
        atom._set_rings([])
        self._exclude((atom,), ())
        return True

    def _claim_bond(self, bond: Bond) -> bool:
        if bond in self._bonds:
            return False
        owner = bond.parent
        if owner is not None and owner is not self:
            owner._release_bond(bond)
        self._bonds[bond] = None
        bond._set_parent(self)
        self._include((), (bond,))
        self._structure_changed()
        return True

    def _release_bond(self, bond: Bond) -> bool:
        if bond not in self._bonds:
            return False
        self._structure_changed()
        del self._bonds[bond]
        if bond.parent is self:
            bond._set_parent(None)
        self._exclude((), (bond,))
        return True

    def _clear_membership(self) -> None:
        """Vacía la molécula (y sus hijas) dejando intacta la topología."""
        for child in list(self._molecules):
            child._clear_membership()
            self.remove_child_molecule(child)
        for bond in list(self._bonds):
            self._release_bond(bond)
        for atom in list(self._atoms):
            self._release_atom(atom)

    def _structure_changed(self) -> None:
        self._invalidate_rings()
        self.reset_geometry()

    # -- API de edición ----------------------------------------------------

    def add_atom(self, atom: Atom) -> GraphChange:
        """Añade un átomo a la molécula.

        Si el átomo pertenecía a otra molécula se traslada. Añadir un átomo ya
        presente no tiene efecto.

        Returns:
            El cambio producido.
        """
        if not self._claim_atom(atom):
            return GraphChange()
        return GraphChange(added_atoms=(atom,))

    def remove_atom(self, atom: Atom) -> GraphChange:
        """Elimina un átomo, retirando antes todos sus enlaces.

        Returns:
            El cambio producido (vacío si el átomo no era miembro).
        """
        if atom not in self._atoms:
            return GraphChange()
        change = GraphChange()
        for bond in atom.bonds:
            owner = bond.parent or self
            change |= owner.remove_bond(bond)
        self._release_atom(atom)
        return change | GraphChange(removed_atoms=(atom,))

    def add_bond(self, bond: Bond) -> GraphChange:
        """Conecta un enlace al grafo y lo añade a la molécula.

        Los extremos que no tengan molécula se añaden; si un extremo
        pertenece a otra molécula, esa molécula se fusiona con esta.

        Returns:
            El cambio producido.

        Raises:
            GraphTopologyError: Si los dos átomos ya están enlazados por otro
                enlace.
        """
        if bond in self._bonds:
            return GraphChange()
        existing = bond.start_atom.bond_between(bond.end_atom)
        if existing is not None and existing is not bond:
            raise GraphTopologyError(
                f"Los átomos {bond.start_atom.id} y {bond.end_atom.id} ya están enlazados por {existing.id}"
            )
        change = GraphChange()
        for atom in bond.atoms:
            owner = atom.parent
            if owner is None:
                change |= self.add_atom(atom)
            elif owner is not self:
                change |= self.merge(owner)
        bond._link()
        self._claim_bond(bond)
        return change | GraphChange(added_bonds=(bond,))

    def remove_bond(self, bond: Bond) -> GraphChange:
        """Desconecta un enlace de sus átomos y lo retira de la molécula.

        No separa fragmentos: para eso se llama después a `refresh()` o
        `split()`.
        """
        if bond not in self._bonds:
            return GraphChange()
        bond._unlink()
        self._release_bond(bond)
        return GraphChange(removed_bonds=(bond,))

    def merge(self, other: "Molecule") -> GraphChange:
        """Absorbe otra molécula: sus átomos, enlaces y moléculas hijas.

        La molécula absorbida se retira de su padre y queda vacía.

        Returns:
            El cambio producido.
        """
        if other is self:
            return GraphChange()
        change = GraphChange(removed_molecules=(other,))
        parent = other.parent
        if parent is not None:
            parent.remove_child_molecule(other)
        for child in list(other._molecules):
            change |= self.add_child_molecule(child)
        moved_atoms = tuple(other._atoms)
        moved_bonds = tuple(other._bonds)
        for atom in moved_atoms:
            self._claim_atom(atom)
        for bond in moved_bonds:
            self._claim_bond(bond)
        return change | GraphChange(added_atoms=moved_atoms, added_bonds=moved_bonds)

    def split(self, atom_a: Atom, atom_b: Atom) -> Optional["Molecule"]:
        """Separa la molécula tras haber eliminado el enlace entre dos átomos.

        Args:
            atom_a: Átomo que permanece en esta molécula.
            atom_b: Átomo del otro lado del enlace eliminado.

        Returns:
            La molécula que ahora contiene `atom_b`, o `None` si ambos átomos
            siguen conectados.
        """
        assert atom_a.bond_between(atom_b) is None, "split() requiere que el enlace ya esté eliminado"
        self._refresh_from(atom_a)
        owner = atom_b.parent
        return owner if owner is not self else None

    # -- conectividad ------------------------------------------------------

    def refresh(self) -> List["Molecule"]:
        """Reconstruye la molécula como un único componente conexo.

        Los átomos no alcanzables desde el primer átomo pasan a moléculas
        nuevas, que se añaden al padre si lo hay. Sin padre, la molécula
        retiene las escindidas y todas pasan a ser hermanas en cuanto una de
        ellas se añade a un contenedor. Después se refrescan las moléculas
        hijas y se descartan las vacías.

        Returns:
            Esta molécula seguida de las moléculas escindidas.
        """
        produced: List[Molecule] = [self]
        if self._atoms:
            produced = self._refresh_from(next(iter(self._atoms)))
        for child in list(self._molecules):
            if child.is_empty:
                self.remove_child_molecule(child)
            else:
                child.refresh()
        return produced

    def _refresh_from(self, seed: Atom) -> List["Molecule"]:
        checklist: Dict[Atom, None] = dict.fromkeys(self._atoms)
        checklist[seed] = None
        for bond in list(self._bonds):
            self._release_bond(bond)
        for atom in list(self._atoms):
            self._release_atom(atom)

        self._flood_fill(seed, checklist)
        produced: List[Molecule] = [self]
        parent = self.parent
        while checklist:
            fragment = Molecule()
            if parent is not None:
                parent.add_child_molecule(fragment)
            else:
                self._hold_detached(fragment)
            fragment._flood_fill(next(iter(checklist)), checklist)
            produced.append(fragment)

        assert all(atom.parent is not None for molecule in produced for atom in molecule._atoms)
        if len(produced) > 1:
            logger.debug("refresh de %s produjo %d moléculas", self.id, len(produced))
        return produced

    def _flood_fill(self, seed: Atom, checklist: Dict[Atom, None]) -> None:
        queue = deque([seed])
        queued = {seed}
        while queue:
            atom = queue.popleft()
            checklist.pop(atom, None)
            self._claim_atom(atom)
            for bond in atom.bonds:
                if bond.parent is not self:
                    self._claim_bond(bond)
                neighbour = bond.other_atom(atom)
                if neighbour not in queued:
                    queued.add(neighbour)
                    queue.append(neighbour)

    def _hold_detached(self, fragment: "Molecule") -> None:
        if not self._detached_group:
            self._detached_group = [self]
        self._detached_group.append(fragment)
        fragment._detached_group = self._detached_group

    def _take_detached_siblings(self) -> List["Molecule"]:
        """Devuelve (y olvida) las moléculas escindidas junto a esta sin padre."""
        group = self._detached_group
        siblings = [molecule for molecule in group if molecule is not self]
        group.clear()
        return siblings

    # -- anillos -----------------------------------------------------------

    @property
    def theoretical_ring_count(self) -> int:
        """Número ciclomático: enlaces - átomos + 1 (0 si está vacía)."""
        if not self._atoms:
            return 0
        return len(self._bonds) - len(self._atoms) + 1

    @property
    def has_rings(self) -> bool:
        return self.theoretical_ring_count > 0

    @property
    def rings_calculated(self) -> bool:
        return self._rings is not None

    @property
    def rings(self) -> Tuple[Ring, ...]:
        self.ensure_rings()
        return tuple(self._rings)

    @property
    def sorted_rings(self) -> Tuple[Ring, ...]:
        """Anillos ordenados para la colocación de dobles enlaces."""
        self.ensure_rings()
        if self._sorted_rings is None:
            self._sorted_rings = chemrings.sort_rings_for_placement(self._rings)
        return tuple(self._sorted_rings)

    def ensure_rings(self) -> None:
        if self._rings is None:
            self.rebuild_rings()

    def rebuild_rings(self, algorithm: Optional[RingAlgorithm] = None) -> List[Ring]:
        """Percibe de nuevo los anillos y reemplaza la caché.

        Args:
            algorithm: Algoritmo a usar; por defecto el de las opciones del
                modelo (RP-Path).

        Returns:
            Lista de anillos encontrados.
        """
        self._invalidate_rings()
        rings = chemrings.perceive_rings(self, self.perception_options, algorithm)
        for ring in rings:
            ring._set_parent(self)
            for atom in ring.atoms:
                atom._rings.append(ring)
        self._rings = rings
        return list(rings)

    def _invalidate_rings(self) -> None:
        if self._rings is None:
            return
        for ring in self._rings:
            for atom in ring.atoms:
                atom._set_rings([])
            ring._set_parent(None)
        self._rings = None
        self._sorted_rings = None

    # -- geometría ---------------------------------------------------------

    def reset_geometry(self) -> None:
        self._bounding_box = None
        self._convex_hull = None
        parent = self.parent
        if parent is not None:
            parent.reset_geometry()

    @property
    def font_size(self) -> float:
        model = self.model
        return model.font_size if model is not None else DEFAULT_FONT_SIZE

    @property
    def bounding_box(self) -> QRectF:
        """Unión de las cajas de símbolo de todos los átomos."""
        if self._bounding_box is None:
            font_size = self.font_size
            self._bounding_box = union_rects(atom.bounding_box(font_size) for atom in self._all_atoms)
        return QRectF(self._bounding_box)

    @property
    def convex_hull(self) -> List[Atom]:
        if self._convex_hull is None:
            self._convex_hull = convex_hull(list(self._all_atoms), lambda atom: atom.position)
        return list(self._convex_hull)

    @property
    def centroid(self) -> QPointF:
        return centroid(atom.position for atom in self._all_atoms)

    @property
    def mean_bond_length(self) -> float:
        if not self._all_bonds:
            return SINGLE_ATOM_PSEUDO_BOND_LENGTH
        return sum(bond.length for bond in self._all_bonds) / len(self._all_bonds)

    def move_by(self, dx: float, dy: float) -> None:
        for atom in self._all_atoms:
            atom.move_by(dx, dy)

    def scale(self, factor: float, origin: Optional[QPointF] = None) -> None:
        """Escala las posiciones respecto a `origin` (por defecto el centroide)."""
        if origin is None:
            origin = self.centroid
        for atom in self._all_atoms:
            offset = atom.position - origin
            atom.position = origin + offset * factor

    # -- fórmulas e identificadores ----------------------------------------

    def calculated_formula(self) -> Dict[str, int]:
        """Fórmula elemento -> conteo, incluidos los H implícitos."""
        return molecular_formula(self._all_atoms)

    @property
    def concise_formula(self) -> str:
        return concise_formula(self.calculated_formula())

    @property
    def molecular_weight(self) -> float:
        """Masa molecular con los pesos del registro del modelo.

        Raises:
            ValueError: Si la fórmula contiene pseudo-símbolos sin peso (p. ej., "R").
        """
        model = self.model
        registry = model.registry if model is not None else default_registry()
        return molecular_weight(self.calculated_formula(), registry.atomic_weights())

    def relabel(self, include_names: bool = False, counters: Optional[RelabelCounters] = None) -> RelabelCounters:
        """Regenera identificadores secuenciales legibles (m1, a1, b1...).

        Args:
            include_names: Si también se renumeran fórmulas y nombres.
            counters: Contadores compartidos con otras moléculas del modelo.

        Returns:
            Los contadores tras el reetiquetado.
        """
        if counters is None:
            counters = RelabelCounters()
        counters.molecules += 1
        self.id = f"m{counters.molecules}"
        for atom in self._atoms:
            counters.atoms += 1
            atom.id = f"a{counters.atoms}"
        for bond in self._bonds:
            counters.bonds += 1
            bond.id = f"b{counters.bonds}"
        if include_names:
            for index, formula in enumerate(self.formulas, start=1):
                formula.id = f"{self.id}.f{index}"
            for index, name in enumerate(self.names, start=1):
                name.id = f"{self.id}.n{index}"
        for child in self._molecules:
            child.relabel(include_names, counters)
        return counters

    def clone(self) -> "Molecule":
        """Copia profunda que conserva identificadores.

        Los elementos (`ElementLike`) se comparten por referencia; átomos,
        enlaces, nombres y moléculas hijas se duplican.
        """
        copy = Molecule(id=self.id)
        atom_map: Dict[Atom, Atom] = {}
        for atom in self._atoms:
            duplicate = atom.copy()
            atom_map[atom] = duplicate
            copy._claim_atom(duplicate)
        for bond in self._bonds:
            copy.add_bond(bond.copy(atom_map))
        copy.names = [replace(name) for name in self.names]
        copy.formulas = [replace(formula) for formula in self.formulas]
        for child in self._molecules:
            copy.add_child_molecule(child.clone())
        return copy
