"""Nodo del grafo químico: identidad, posición 2-D y enlaces incidentes."""

from __future__ import annotations

import math
import uuid
import weakref
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF

from core.elements import Element, ElementLike, FunctionalGroup
from core.geometry import (
    CompassPoint,
    angle_between_deg,
    compass_offset,
    snap_to_compass,
    square_around,
    vector_length,
)
from core.options import DEFAULT_FONT_SIZE, LINEAR_ANGLE_TOLERANCE_DEG

if TYPE_CHECKING:
    from core.bond import Bond
    from core.model import Model
    from core.molecule import Molecule
    from core.ring import Ring


def new_id() -> str:
    return uuid.uuid4().hex


class Atom:
    """Átomo del grafo químico.

    Los enlaces no se asignan directamente: los registra el propio `Bond` al
    añadirse a una molécula. La referencia a la molécula padre es débil.
    """

    def __init__(
        self,
        element: ElementLike,
        position: Optional[QPointF] = None,
        id: Optional[str] = None,
        formal_charge: Optional[int] = None,
        isotope_number: Optional[int] = None,
        is_doublet_radical: bool = False,
        explicit_c: bool = False,
    ) -> None:
        self.id = id or new_id()
        self._element = element
        self._position = QPointF(position) if position is not None else QPointF()
        self._formal_charge = formal_charge
        self.isotope_number = isotope_number
        self.is_doublet_radical = is_doublet_radical
        self.explicit_c = explicit_c
        self._bonds: Dict["Bond", None] = {}
        self._rings: List["Ring"] = []
        self._parent: Optional[weakref.ref] = None

    def __repr__(self) -> str:
        return f"Atom({self.id!r}, {self.symbol!r})"

    # -- identidad química -------------------------------------------------

    @property
    def element(self) -> ElementLike:
        return self._element

    @element.setter
    def element(self, value: ElementLike) -> None:
        self._element = value
        self._invalidate_geometry()

    @property
    def symbol(self) -> str:
        return self._element.symbol

    @property
    def formal_charge(self) -> Optional[int]:
        return self._formal_charge

    @formal_charge.setter
    def formal_charge(self, value: Optional[int]) -> None:
        self._formal_charge = value
        self._invalidate_geometry()

    # -- posición ----------------------------------------------------------

    @property
    def position(self) -> QPointF:
        return QPointF(self._position)

    @position.setter
    def position(self, value: QPointF) -> None:
        self._position = QPointF(value)
        self._invalidate_geometry()

    def move_by(self, dx: float, dy: float) -> None:
        """Desplaza el átomo e invalida centroides y cajas dependientes."""
        self.position = QPointF(self._position.x() + dx, self._position.y() + dy)

    def _invalidate_geometry(self) -> None:
        for ring in self._rings:
            ring.invalidate_centroid()
        parent = self.parent
        if parent is not None:
            parent.reset_geometry()

    # -- relaciones --------------------------------------------------------

    @property
    def parent(self) -> Optional["Molecule"]:
        return self._parent() if self._parent is not None else None

    def _set_parent(self, molecule: Optional["Molecule"]) -> None:
        self._parent = weakref.ref(molecule) if molecule is not None else None

    @property
    def model(self) -> Optional["Model"]:
        parent = self.parent
        return parent.model if parent is not None else None

    @property
    def bonds(self) -> Tuple["Bond", ...]:
        return tuple(self._bonds)

    def _link_bond(self, bond: "Bond") -> None:
        self._bonds[bond] = None

    def _unlink_bond(self, bond: "Bond") -> None:
        self._bonds.pop(bond, None)

    @property
    def degree(self) -> int:
        return len(self._bonds)

    @property
    def neighbours(self) -> List["Atom"]:
        return [bond.other_atom(self) for bond in self._bonds]

    def neighbours_except(self, *atoms: "Atom") -> List["Atom"]:
        return [atom for atom in self.neighbours if atom not in atoms]

    def bond_between(self, other: "Atom") -> Optional["Bond"]:
        """Devuelve el enlace que une este átomo con `other`, si existe."""
        for bond in self._bonds:
            if bond.other_atom(self) is other:
                return bond
        return None

    @property
    def rings(self) -> Tuple["Ring", ...]:
        parent = self.parent
        if parent is not None:
            parent.ensure_rings()
        return tuple(self._rings)

    def _set_rings(self, rings: List["Ring"]) -> None:
        self._rings = list(rings)

    @property
    def ring_count(self) -> int:
        return len(self.rings)

    @property
    def is_in_ring(self) -> bool:
        return bool(self.rings)

    # -- valencia e hidrógenos ---------------------------------------------

    @property
    def bond_orders(self) -> float:
        """Suma de los órdenes numéricos de los enlaces incidentes."""
        return sum(bond.order_value or 0.0 for bond in self._bonds)

    @property
    def implicit_hydrogen_count(self) -> int:
        """Hidrógenos implícitos según valencia, órdenes de enlace y carga.

        Solo se calculan para los elementos marcados en el registro; el resto
        (metales, gases nobles, grupos funcionales) devuelve 0.

        Returns:
            Número de H implícitos (>= 0).
        """
        element = self._element
        if not isinstance(element, Element) or not element.implicit_hydrogens:
            return 0
        bond_count = int(math.floor(self.bond_orders))
        charge = self._formal_charge or 0
        valence = element.valence_for(bond_count)
        diff = valence - bond_count
        if charge > 0:
            vdiff = 4 - valence
            if charge <= vdiff:
                diff += charge
            else:
                diff = 4 - bond_count - charge + vdiff
        else:
            diff += charge
        return max(diff, 0)

    # -- presentación ------------------------------------------------------

    @property
    def symbol_text(self) -> str:
        """Texto a mostrar en el lienzo; vacío para carbonos implícitos."""
        element = self._element
        if isinstance(element, FunctionalGroup):
            return element.symbol
        if element.symbol != "C":
            return element.symbol
        if self.explicit_c or self.isotope_number is not None:
            return "C"
        if self.degree <= 1:
            return "C"
        if self.degree == 2:
            first, second = self.bonds
            v0 = first.other_atom(self).position - self._position
            v1 = second.other_atom(self).position - self._position
            if abs(180.0 - angle_between_deg(v0, v1)) < LINEAR_ANGLE_TOLERANCE_DEG:
                return "C"
        return ""

    @property
    def hydrogen_orientation(self) -> CompassPoint:
        """Lado en el que se dibujan los H implícitos (opuesto a los enlaces)."""
        balance = QPointF()
        for neighbour in self.neighbours:
            vector = neighbour.position - self._position
            length = vector_length(vector)
            if length > 0:
                balance -= vector / length
        if vector_length(balance) < 1e-6:
            return CompassPoint.EAST
        return snap_to_compass(balance)

    def bounding_box(self, font_size: Optional[float] = None) -> QRectF:
        """Caja del símbolo del átomo, centrada en su posición.

        Args:
            font_size: Tamaño de fuente; por defecto el del modelo padre.

        Returns:
            Rectángulo que cubre el símbolo y, si procede, los H implícitos.
        """
        if font_size is None:
            model = self.model
            font_size = model.font_size if model is not None else DEFAULT_FONT_SIZE
        half = font_size / 2.0
        base = square_around(self._position, font_size)
        text = self.symbol_text
        if not text:
            return base
        box = QRectF(self._position.x() - half, self._position.y() - half, len(text) * font_size, font_size)
        if self.implicit_hydrogen_count > 0:
            box = box.united(base.translated(compass_offset(self.hydrogen_orientation, font_size)))
        return box

    def copy(self) -> "Atom":
        """Copia de valor sin enlaces ni padre, conservando el id."""
        return Atom(
            self._element,
            position=self._position,
            id=self.id,
            formal_charge=self._formal_charge,
            isotope_number=self.isotope_number,
            is_doublet_radical=self.is_doublet_radical,
            explicit_c=self.explicit_c,
        )
