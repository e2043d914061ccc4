"""Anillos percibidos: átomos en orden cíclico, enlaces, centroide y prioridad."""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from PyQt6.QtCore import QPointF

from core.atom import Atom
from core.bond import Bond, BondDirection, BondOrder
from core.geometry import centroid as mean_point

if TYPE_CHECKING:
    from core.molecule import Molecule

# Prioridad de colocación de dobles enlaces por tamaño (1 = preferente).
RING_PRIORITY: Dict[int, int] = {6: 1, 5: 2, 7: 3, 4: 4, 3: 5}


class Ring:
    """Ciclo simple del grafo.

    El conjunto de átomos y enlaces es inmutable; solo el centroide se
    recalcula cuando se mueve algún átomo miembro.
    """

    def __init__(self, atoms: Sequence[Atom]) -> None:
        if len(atoms) < 3:
            raise ValueError("Un anillo necesita al menos tres átomos")
        self._atoms: Tuple[Atom, ...] = tuple(atoms)
        self._atom_set: FrozenSet[Atom] = frozenset(self._atoms)
        bonds: List[Bond] = []
        for index, atom in enumerate(self._atoms):
            following = self._atoms[(index + 1) % len(self._atoms)]
            bond = atom.bond_between(following)
            if bond is None:
                raise ValueError(f"Los átomos {atom.id} y {following.id} no están enlazados")
            bonds.append(bond)
        self._bonds: Tuple[Bond, ...] = tuple(bonds)
        self._bond_set: FrozenSet[Bond] = frozenset(bonds)
        self._centroid: Optional[QPointF] = None
        self._parent: Optional[weakref.ref] = None

    @classmethod
    def from_bonds(cls, bonds: Iterable[Bond]) -> Optional["Ring"]:
        """Construye un anillo a partir de un conjunto de enlaces.

        Returns:
            El anillo, o `None` si los enlaces no forman un único ciclo simple.
        """
        bond_list = list(bonds)
        if len(bond_list) < 3:
            return None
        incident: Dict[Atom, List[Bond]] = {}
        for bond in bond_list:
            for atom in bond.atoms:
                incident.setdefault(atom, []).append(bond)
        if any(len(members) != 2 for members in incident.values()):
            return None

        start = bond_list[0].start_atom
        order = [start]
        previous_bond = bond_list[0]
        current = previous_bond.other_atom(start)
        while current is not start:
            order.append(current)
            first, second = incident[current]
            previous_bond = second if first is previous_bond else first
            current = previous_bond.other_atom(current)
        if len(order) != len(incident):
            return None
        return cls(order)

    def __repr__(self) -> str:
        return f"Ring({[atom.id for atom in self._atoms]})"

    @property
    def atoms(self) -> Tuple[Atom, ...]:
        return self._atoms

    @property
    def atom_set(self) -> FrozenSet[Atom]:
        return self._atom_set

    @property
    def bonds(self) -> Tuple[Bond, ...]:
        return self._bonds

    @property
    def bond_set(self) -> FrozenSet[Bond]:
        return self._bond_set

    @property
    def size(self) -> int:
        return len(self._atoms)

    @property
    def priority(self) -> int:
        return RING_PRIORITY.get(self.size, 0)

    @property
    def unique_id(self) -> str:
        return "|".join(sorted(atom.id for atom in self._atoms))

    @property
    def double_bond_count(self) -> int:
        return sum(1 for bond in self._bonds if bond.order == BondOrder.DOUBLE)

    @property
    def centroid(self) -> QPointF:
        if self._centroid is None:
            self._centroid = mean_point(atom.position for atom in self._atoms)
        return QPointF(self._centroid)

    def invalidate_centroid(self) -> None:
        self._centroid = None

    @property
    def parent(self) -> Optional["Molecule"]:
        return self._parent() if self._parent is not None else None

    def _set_parent(self, molecule: Optional["Molecule"]) -> None:
        self._parent = weakref.ref(molecule) if molecule is not None else None

    def in_ring(self, atom: Atom) -> bool:
        return atom in self._atom_set

    def traverse(
        self,
        start: Optional[Atom] = None,
        direction: BondDirection = BondDirection.CLOCKWISE,
    ) -> Iterator[Atom]:
        """Recorre los átomos del anillo desde `start` en el sentido pedido.

        El sentido horario se mide en coordenadas de pantalla (Y hacia abajo).
        """
        atoms = list(self._atoms)
        if _signed_area(atoms) < 0:
            atoms.reverse()
        if direction == BondDirection.ANTICLOCKWISE:
            atoms.reverse()
        offset = atoms.index(start) if start is not None else 0
        for index in range(len(atoms)):
            yield atoms[(offset + index) % len(atoms)]


def _signed_area(atoms: Sequence[Atom]) -> float:
    total = 0.0
    for index, atom in enumerate(atoms):
        p0 = atom.position
        p1 = atoms[(index + 1) % len(atoms)].position
        total += p0.x() * p1.y() - p1.x() * p0.y()
    return total / 2.0
