"""Arista del grafo químico: orden, estereoquímica y colocación en anillos."""

from __future__ import annotations

import weakref
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Dict, Optional, Tuple, Union

from PyQt6.QtCore import QPointF

from core.atom import Atom, new_id
from core.errors import GraphTopologyError
from core.geometry import angle_between_deg, cross, vector_length

if TYPE_CHECKING:
    from core.molecule import Molecule
    from core.ring import Ring


class BondOrder(str, Enum):
    """Órdenes de enlace con sus códigos de intercambio."""
    ZERO = "hbond"
    PARTIAL_01 = "partial01"
    SINGLE = "S"
    PARTIAL_12 = "partial12"
    AROMATIC = "A"
    DOUBLE = "D"
    PARTIAL_23 = "partial23"
    TRIPLE = "T"
    UNKNOWN = "other"

    @property
    def numeric(self) -> Optional[float]:
        """Valor numérico del orden (`None` si es desconocido)."""
        return _ORDER_VALUES[self]

    @classmethod
    def parse(cls, text: Union[str, float, int, "BondOrder"]) -> "BondOrder":
        """Convierte códigos ("D") o valores ("2", 2.0) en un `BondOrder`.

        Raises:
            ValueError: Si el texto no corresponde a ningún orden.
        """
        if isinstance(text, BondOrder):
            return text
        key = str(text).strip()
        try:
            return cls(key)
        except ValueError:
            pass
        try:
            value = float(key)
        except ValueError:
            raise ValueError(f"Orden de enlace desconocido: {text!r}") from None
        for order, numeric in _NUMERIC_LOOKUP:
            if numeric == value:
                return order
        raise ValueError(f"Orden de enlace desconocido: {text!r}")


_ORDER_VALUES: Dict[BondOrder, Optional[float]] = {
    BondOrder.ZERO: 0.0,
    BondOrder.PARTIAL_01: 0.5,
    BondOrder.SINGLE: 1.0,
    BondOrder.PARTIAL_12: 1.5,
    BondOrder.AROMATIC: 1.5,
    BondOrder.DOUBLE: 2.0,
    BondOrder.PARTIAL_23: 2.5,
    BondOrder.TRIPLE: 3.0,
    BondOrder.UNKNOWN: None,
}

# Valor numérico -> orden preferido al leer "1.5", "2", etc.
_NUMERIC_LOOKUP: Tuple[Tuple[BondOrder, float], ...] = (
    (BondOrder.ZERO, 0.0),
    (BondOrder.PARTIAL_01, 0.5),
    (BondOrder.SINGLE, 1.0),
    (BondOrder.PARTIAL_12, 1.5),
    (BondOrder.DOUBLE, 2.0),
    (BondOrder.PARTIAL_23, 2.5),
    (BondOrder.TRIPLE, 3.0),
)


class BondStereo(str, Enum):
    """Marcas de estereoquímica almacenadas (no se perciben)."""
    NONE = "none"
    WEDGE = "wedge"
    HATCH = "hatch"
    CIS = "cis"
    TRANS = "trans"
    INDETERMINATE = "indeterminate"


class BondDirection(IntEnum):
    """Lado de un anillo en el que se dibuja la segunda línea de un enlace múltiple."""
    ANTICLOCKWISE = -1
    NONE = 0
    CLOCKWISE = 1


class Bond:
    """Enlace entre dos átomos distintos.

    Crear el objeto no lo conecta al grafo: `Molecule.add_bond` lo registra en
    ambos átomos y `Molecule.remove_bond` lo desconecta.
    """

    def __init__(
        self,
        start_atom: Atom,
        end_atom: Atom,
        order: Union[BondOrder, str] = BondOrder.SINGLE,
        stereo: BondStereo = BondStereo.NONE,
        id: Optional[str] = None,
        explicit_placement: Optional[BondDirection] = None,
    ) -> None:
        if start_atom is end_atom:
            raise GraphTopologyError(f"Un enlace no puede unir el átomo {start_atom.id} consigo mismo")
        self.id = id or new_id()
        self._start_atom = start_atom
        self._end_atom = end_atom
        self._order = BondOrder.parse(order)
        self.stereo = stereo
        self.explicit_placement = explicit_placement
        self._parent: Optional[weakref.ref] = None

    def __repr__(self) -> str:
        return f"Bond({self.id!r}, {self._start_atom.id!r}-{self._end_atom.id!r}, {self._order.value})"

    @property
    def start_atom(self) -> Atom:
        return self._start_atom

    @property
    def end_atom(self) -> Atom:
        return self._end_atom

    @property
    def atoms(self) -> Tuple[Atom, Atom]:
        return (self._start_atom, self._end_atom)

    def other_atom(self, atom: Atom) -> Atom:
        """Devuelve el extremo opuesto a `atom`.

        Raises:
            ValueError: Si `atom` no es extremo de este enlace.
        """
        if atom is self._start_atom:
            return self._end_atom
        if atom is self._end_atom:
            return self._start_atom
        raise ValueError(f"El átomo {atom.id} no pertenece al enlace {self.id}")

    @property
    def order(self) -> BondOrder:
        return self._order

    @order.setter
    def order(self, value: Union[BondOrder, str]) -> None:
        self._order = BondOrder.parse(value)
        for atom in self.atoms:
            atom._invalidate_geometry()

    @property
    def order_value(self) -> Optional[float]:
        return self._order.numeric

    def _link(self) -> None:
        self._start_atom._link_bond(self)
        self._end_atom._link_bond(self)

    def _unlink(self) -> None:
        self._start_atom._unlink_bond(self)
        self._end_atom._unlink_bond(self)

    @property
    def parent(self) -> Optional["Molecule"]:
        return self._parent() if self._parent is not None else None

    def _set_parent(self, molecule: Optional["Molecule"]) -> None:
        self._parent = weakref.ref(molecule) if molecule is not None else None

    # -- anillos -----------------------------------------------------------

    @property
    def rings(self) -> Tuple["Ring", ...]:
        """Anillos de la molécula que contienen este enlace."""
        start_rings = self._start_atom.rings
        return tuple(ring for ring in start_rings if self in ring.bond_set)

    @property
    def is_cyclic(self) -> bool:
        return bool(self.rings)

    @property
    def primary_ring(self) -> Optional["Ring"]:
        """Primer anillo, según el orden de colocación de dobles enlaces, que contiene el enlace."""
        parent = self.parent
        if parent is None:
            return None
        for ring in parent.sorted_rings:
            if self in ring.bond_set:
                return ring
        return None

    @property
    def placement(self) -> BondDirection:
        """Lado de dibujo de la línea secundaria.

        Si no hay colocación explícita se deduce del lado en que queda el
        centroide del anillo primario.
        """
        if self.explicit_placement is not None:
            return self.explicit_placement
        ring = self.primary_ring
        if ring is None:
            return BondDirection.NONE
        side = cross(self._start_atom.position, self._end_atom.position, ring.centroid)
        if side > 0:
            return BondDirection.CLOCKWISE
        if side < 0:
            return BondDirection.ANTICLOCKWISE
        return BondDirection.NONE

    # -- geometría ---------------------------------------------------------

    @property
    def bond_vector(self) -> QPointF:
        return self._end_atom.position - self._start_atom.position

    @property
    def length(self) -> float:
        return vector_length(self.bond_vector)

    @property
    def midpoint(self) -> QPointF:
        start = self._start_atom.position
        end = self._end_atom.position
        return QPointF((start.x() + end.x()) / 2.0, (start.y() + end.y()) / 2.0)

    def angle_between(self, other: "Bond") -> Optional[float]:
        """Ángulo (grados) entre dos enlaces que comparten un átomo.

        Returns:
            El ángulo medido en el átomo común, o `None` si no comparten
            ninguno.
        """
        shared = set(self.atoms) & set(other.atoms)
        if not shared:
            return None
        pivot = shared.pop()
        v0 = self.other_atom(pivot).position - pivot.position
        v1 = other.other_atom(pivot).position - pivot.position
        return angle_between_deg(v0, v1)

    def copy(self, atom_map: Dict[Atom, Atom]) -> "Bond":
        """Copia el enlace sobre los átomos clonados de `atom_map`."""
        return Bond(
            atom_map[self._start_atom],
            atom_map[self._end_atom],
            order=self._order,
            stereo=self.stereo,
            id=self.id,
            explicit_placement=self.explicit_placement,
        )
