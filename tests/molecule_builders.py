"""Constructores de moléculas de prueba sobre la API del núcleo."""

import math
import os
import sys
from typing import List, Optional, Sequence, Tuple

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from PyQt6.QtCore import QPointF

from core.atom import Atom
from core.bond import Bond, BondOrder
from core.model import Model
from core.molecule import Molecule

BOND_LENGTH = 40.0


def polygon(count: int, cx: float = 0.0, cy: float = 0.0, start_deg: float = 0.0) -> List[QPointF]:
    """Vértices de un polígono regular de lado `BOND_LENGTH`."""
    radius = BOND_LENGTH / (2.0 * math.sin(math.pi / count))
    points = []
    for index in range(count):
        angle = math.radians(start_deg + 360.0 * index / count)
        points.append(QPointF(cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return points


def build(
    model: Model,
    symbols: Sequence[str],
    positions: Sequence[QPointF],
    bonds: Sequence[Tuple[int, int]],
    orders: Optional[Sequence[BondOrder]] = None,
) -> Tuple[Molecule, List[Atom]]:
    """Crea una molécula en `model` a partir de índices de átomos."""
    molecule = Molecule()
    model.add_molecule(molecule)
    atoms = []
    for symbol, position in zip(symbols, positions):
        atom = model.new_atom(symbol, position.x(), position.y())
        molecule.add_atom(atom)
        atoms.append(atom)
    for index, (a, b) in enumerate(bonds):
        order = orders[index] if orders is not None else BondOrder.SINGLE
        molecule.add_bond(Bond(atoms[a], atoms[b], order=order))
    return molecule, atoms


def cycle(model: Model, count: int, symbol: str = "C", orders=None, cx: float = 0.0, cy: float = 0.0):
    bonds = [(i, (i + 1) % count) for i in range(count)]
    return build(model, [symbol] * count, polygon(count, cx, cy), bonds, orders)


def chain(model: Model, symbols: Sequence[str], orders=None):
    positions = [QPointF(BOND_LENGTH * i, 0.0 if i % 2 == 0 else 20.0) for i in range(len(symbols))]
    bonds = [(i, i + 1) for i in range(len(symbols) - 1)]
    return build(model, symbols, positions, bonds, orders)


def benzene(model: Model, cx: float = 0.0, cy: float = 0.0):
    orders = [BondOrder.DOUBLE, BondOrder.SINGLE] * 3
    return cycle(model, 6, orders=orders, cx=cx, cy=cy)


def naphthalene(model: Model, kekule: bool = False):
    """Dos hexágonos que comparten el enlace 0-5."""
    h = BOND_LENGTH * math.sqrt(3.0) / 2.0
    positions = [
        QPointF(h, 20.0),
        QPointF(0.0, 40.0),
        QPointF(-h, 20.0),
        QPointF(-h, -20.0),
        QPointF(0.0, -40.0),
        QPointF(h, -20.0),
        QPointF(2 * h, -40.0),
        QPointF(3 * h, -20.0),
        QPointF(3 * h, 20.0),
        QPointF(2 * h, 40.0),
    ]
    bonds = [(0, 1), (1, 2), (2, 3), (3, 4), (4, 5), (5, 0), (5, 6), (6, 7), (7, 8), (8, 9), (9, 0)]
    orders = None
    if kekule:
        s, d = BondOrder.SINGLE, BondOrder.DOUBLE
        orders = [d, s, d, s, d, s, s, d, s, d, s]
    return build(model, ["C"] * 10, positions, bonds, orders)


def indane(model: Model, aromatic_six: bool = False):
    """Benceno (0-5) fusionado con un ciclopentano por el enlace 0-5."""
    h = BOND_LENGTH * math.sqrt(3.0) / 2.0
    positions = [
        QPointF(h, 20.0),
        QPointF(0.0, 40.0),
        QPointF(-h, 20.0),
        QPointF(-h, -20.0),
        QPointF(0.0, -40.0),
        QPointF(h, -20.0),
        QPointF(h + 38.0, -32.0),
        QPointF(h + 62.0, 0.0),
        QPointF(h + 38.0, 32.0),
    ]
    bonds = [(0, 1), (1, 2), (2, 3), (3, 4), (4, 5), (5, 0), (5, 6), (6, 7), (7, 8), (8, 0)]
    orders = None
    if aromatic_six:
        s, d = BondOrder.SINGLE, BondOrder.DOUBLE
        orders = [d, s, d, s, d, s, s, s, s, s]
    return build(model, ["C"] * 9, positions, bonds, orders)


def norbornane(model: Model):
    """Biciclo[2.2.1]heptano: cabezas de puente 0 y 1, puente de un átomo (6)."""
    positions = [
        QPointF(0.0, 0.0),
        QPointF(80.0, 0.0),
        QPointF(20.0, -35.0),
        QPointF(60.0, -35.0),
        QPointF(20.0, 35.0),
        QPointF(60.0, 35.0),
        QPointF(40.0, 5.0),
    ]
    bonds = [(0, 2), (2, 3), (3, 1), (0, 4), (4, 5), (5, 1), (0, 6), (6, 1)]
    return build(model, ["C"] * 7, positions, bonds)


def cubane(model: Model):
    outer = polygon(4, start_deg=45.0)
    inner = [QPointF(p.x() * 0.4, p.y() * 0.4) for p in outer]
    bonds = [(0, 1), (1, 2), (2, 3), (3, 0), (4, 5), (5, 6), (6, 7), (7, 4), (0, 4), (1, 5), (2, 6), (3, 7)]
    return build(model, ["C"] * 8, outer + inner, bonds)


def biphenyl(model: Model):
    """Dos bencenos unidos por el enlace 0-9; devuelve también ese enlace."""
    positions = polygon(6) + polygon(6, cx=120.0)
    bonds = [(i, (i + 1) % 6) for i in range(6)] + [(6 + i, 6 + (i + 1) % 6) for i in range(6)] + [(0, 9)]
    orders = [BondOrder.DOUBLE, BondOrder.SINGLE] * 6 + [BondOrder.SINGLE]
    molecule, atoms = build(model, ["C"] * 12, positions, bonds, orders)
    return molecule, atoms, atoms[0].bond_between(atoms[9])


def ring_sizes(rings) -> List[int]:
    return sorted(ring.size for ring in rings)
