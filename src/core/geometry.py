"""Utilidades geométricas puras sobre `QPointF`/`QRectF`.

Solo se usan los tipos de valor de QtCore, por lo que no hace falta una
`QApplication` para calcular cajas, envolventes o ángulos.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from PyQt6.QtCore import QPointF, QRectF

T = TypeVar("T")


class CompassPoint(str, Enum):
    """Orientaciones cardinales para colocar etiquetas de hidrógeno."""
    NORTH = "N"
    EAST = "E"
    SOUTH = "S"
    WEST = "W"


def vector_length(vector: QPointF) -> float:
    """Longitud euclídea de un vector."""
    return math.hypot(vector.x(), vector.y())


def distance(p0: QPointF, p1: QPointF) -> float:
    return vector_length(p1 - p0)


def cross(o: QPointF, a: QPointF, b: QPointF) -> float:
    """Producto vectorial 2-D de (a - o) x (b - o)."""
    return (a.x() - o.x()) * (b.y() - o.y()) - (a.y() - o.y()) * (b.x() - o.x())


def angle_between_deg(v0: QPointF, v1: QPointF) -> float:
    """Ángulo (0-180°) entre dos vectores; 0 si alguno es nulo."""
    l0 = vector_length(v0)
    l1 = vector_length(v1)
    if l0 == 0 or l1 == 0:
        return 0.0
    cosine = (v0.x() * v1.x() + v0.y() * v1.y()) / (l0 * l1)
    return math.degrees(math.acos(max(-1.0, min(1.0, cosine))))


def centroid(points: Iterable[QPointF]) -> QPointF:
    """Media aritmética de una colección de puntos (origen si está vacía)."""
    sx = sy = 0.0
    count = 0
    for point in points:
        sx += point.x()
        sy += point.y()
        count += 1
    if count == 0:
        return QPointF()
    return QPointF(sx / count, sy / count)


def square_around(center: QPointF, side: float) -> QRectF:
    half = side / 2.0
    return QRectF(center.x() - half, center.y() - half, side, side)


def union_rects(rects: Iterable[QRectF]) -> QRectF:
    """Une rectángulos; devuelve un `QRectF()` vacío si no hay ninguno."""
    result: Optional[QRectF] = None
    for rect in rects:
        result = QRectF(rect) if result is None else result.united(rect)
    return result if result is not None else QRectF()


def snap_to_compass(vector: QPointF) -> CompassPoint:
    """Redondea un vector a la orientación cardinal más cercana.

    Usa coordenadas de pantalla: la Y positiva apunta hacia el sur.
    """
    if abs(vector.x()) >= abs(vector.y()):
        return CompassPoint.EAST if vector.x() >= 0 else CompassPoint.WEST
    return CompassPoint.SOUTH if vector.y() > 0 else CompassPoint.NORTH


def compass_offset(direction: CompassPoint, step: float) -> QPointF:
    return {
        CompassPoint.NORTH: QPointF(0.0, -step),
        CompassPoint.EAST: QPointF(step, 0.0),
        CompassPoint.SOUTH: QPointF(0.0, step),
        CompassPoint.WEST: QPointF(-step, 0.0),
    }[direction]


def convex_hull(items: Sequence[T], position: Callable[[T], QPointF]) -> List[T]:
    """Envolvente convexa por cadena monótona de Andrew.

    Args:
        items: Elementos a envolver (p. ej., átomos).
        position: Función que devuelve la posición de cada elemento.

    Returns:
        Elementos del contorno en orden, sin repetir el primero. Con menos de
        tres elementos se devuelven todos en el orden (x asc, y desc).
    """
    ordered = sorted(items, key=lambda item: (position(item).x(), -position(item).y()))
    if len(ordered) < 3:
        return list(ordered)

    lower: List[T] = []
    for item in ordered:
        while len(lower) >= 2 and cross(position(lower[-2]), position(lower[-1]), position(item)) <= 0:
            lower.pop()
        lower.append(item)

    upper: List[T] = []
    for item in reversed(ordered):
        while len(upper) >= 2 and cross(position(upper[-2]), position(upper[-1]), position(item)) <= 0:
            upper.pop()
        upper.append(item)

    return lower[:-1] + upper[:-1]
