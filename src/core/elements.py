"""Registro inmutable de elementos químicos y grupos funcionales.

Los átomos referencian un `Element` o un `FunctionalGroup` compartido (no una
copia por átomo). El registro se construye una única vez con
`default_registry()` y se inyecta en el `Model`; no admite mutaciones en
tiempo de ejecución.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Tuple, Union

from core.errors import UnknownElementError

_DATA_DIR = Path(__file__).resolve().parent / "data"
FUNCTIONAL_GROUPS_PATH = _DATA_DIR / "functional_groups.json"

# Elementos para los que se calculan hidrógenos implícitos.
IMPLICIT_HYDROGEN_TARGETS = frozenset(
    {"B", "C", "N", "O", "F", "Si", "P", "S", "Cl", "As", "Se", "Br", "Te", "I", "At"}
)

# (Z, símbolo, nombre, peso atómico, color, valencias)
_ELEMENT_ROWS: Tuple[Tuple[int, str, str, float, str, Tuple[int, ...]], ...] = (
    (1, "H", "Hydrogen", 1.00794, "#FFFFFF", (1,)),
    (2, "He", "Helium", 4.002602, "#D9FFFF", ()),
    (3, "Li", "Lithium", 6.941, "#CC80FF", (1,)),
    (4, "Be", "Beryllium", 9.012182, "#C2FF00", (2,)),
    (5, "B", "Boron", 10.811, "#FFB5B5", (3,)),
    (6, "C", "Carbon", 12.0107, "#000000", (4,)),
    (7, "N", "Nitrogen", 14.0067, "#3050F8", (3, 5)),
    (8, "O", "Oxygen", 15.9994, "#FF0D0D", (2,)),
    (9, "F", "Fluorine", 18.998403, "#90E050", (1,)),
    (10, "Ne", "Neon", 20.1797, "#B3E3F5", ()),
    (11, "Na", "Sodium", 22.98977, "#AB5CF2", (1,)),
    (12, "Mg", "Magnesium", 24.305, "#8AFF00", (2,)),
    (13, "Al", "Aluminium", 26.981538, "#BFA6A6", (3,)),
    (14, "Si", "Silicon", 28.0855, "#F0C8A0", (4,)),
    (15, "P", "Phosphorus", 30.973761, "#FF8000", (3, 5)),
    (16, "S", "Sulfur", 32.065, "#FFFF30", (2, 4, 6)),
    (17, "Cl", "Chlorine", 35.453, "#1FF01F", (1, 3, 5, 7)),
    (18, "Ar", "Argon", 39.948, "#80D1E3", ()),
    (19, "K", "Potassium", 39.0983, "#8F40D4", (1,)),
    (20, "Ca", "Calcium", 40.078, "#3DFF00", (2,)),
    (21, "Sc", "Scandium", 44.95591, "#E6E6E6", (3,)),
    (22, "Ti", "Titanium", 47.867, "#BFC2C7", (2, 3, 4)),
    (23, "V", "Vanadium", 50.9415, "#A6A6AB", (2, 3, 4, 5)),
    (24, "Cr", "Chromium", 51.9961, "#8A99C7", (2, 3, 6)),
    (25, "Mn", "Manganese", 54.938049, "#9C7AC7", (2, 3, 4, 6, 7)),
    (26, "Fe", "Iron", 55.845, "#E06633", (2, 3)),
    (27, "Co", "Cobalt", 58.9332, "#F090A0", (2, 3)),
    (28, "Ni", "Nickel", 58.6934, "#50D050", (2, 3)),
    (29, "Cu", "Copper", 63.546, "#C88033", (1, 2)),
    (30, "Zn", "Zinc", 65.409, "#7D80B0", (2,)),
    (31, "Ga", "Gallium", 69.723, "#C28F8F", (3,)),
    (32, "Ge", "Germanium", 72.64, "#668F8F", (4,)),
    (33, "As", "Arsenic", 74.9216, "#BD80E3", (3, 5)),
    (34, "Se", "Selenium", 78.96, "#FFA100", (2, 4, 6)),
    (35, "Br", "Bromine", 79.904, "#A62929", (1, 3, 5, 7)),
    (36, "Kr", "Krypton", 83.798, "#5CB8D1", ()),
    (37, "Rb", "Rubidium", 85.4678, "#702EB0", (1,)),
    (38, "Sr", "Strontium", 87.62, "#00FF00", (2,)),
    (47, "Ag", "Silver", 107.8682, "#C0C0C0", (1,)),
    (48, "Cd", "Cadmium", 112.411, "#FFD98F", (2,)),
    (49, "In", "Indium", 114.818, "#A67573", (3,)),
    (50, "Sn", "Tin", 118.71, "#668080", (2, 4)),
    (51, "Sb", "Antimony", 121.76, "#9E63B5", (3, 5)),
    (52, "Te", "Tellurium", 127.6, "#D47A00", (2, 4, 6)),
    (53, "I", "Iodine", 126.90447, "#940094", (1, 3, 5, 7)),
    (54, "Xe", "Xenon", 131.293, "#429EB0", (2, 4, 6, 8)),
    (55, "Cs", "Caesium", 132.90545, "#57178F", (1,)),
    (56, "Ba", "Barium", 137.327, "#00C900", (2,)),
    (78, "Pt", "Platinum", 195.078, "#D0D0E0", (2, 4)),
    (79, "Au", "Gold", 196.96655, "#FFD123", (1, 3)),
    (80, "Hg", "Mercury", 200.59, "#B8B8D0", (1, 2)),
    (81, "Tl", "Thallium", 204.3833, "#A6544D", (1, 3)),
    (82, "Pb", "Lead", 207.2, "#575961", (2, 4)),
    (83, "Bi", "Bismuth", 208.98038, "#9E4FB5", (3, 5)),
    (85, "At", "Astatine", 210.0, "#754F45", (1, 3, 5, 7)),
    (86, "Rn", "Radon", 222.0, "#428296", ()),
)


@dataclass(frozen=True)
class Element:
    """Elemento químico de la tabla periódica."""
    symbol: str
    name: str
    atomic_number: int
    atomic_weight: float
    colour: str = "#000000"
    valences: Tuple[int, ...] = ()
    implicit_hydrogens: bool = False

    @property
    def composition(self) -> Tuple[Tuple[str, int], ...]:
        return ((self.symbol, 1),)

    def valence_for(self, bond_count: int) -> int:
        """Devuelve la valencia más baja capaz de acomodar `bond_count`.

        Args:
            bond_count: Suma (entera) de órdenes de enlace del átomo.

        Returns:
            La menor valencia >= `bond_count`; si ninguna alcanza, la mayor
            disponible; 0 si el elemento no declara valencias.
        """
        for valence in self.valences:
            if valence >= bond_count:
                return valence
        if self.valences:
            return self.valences[-1]
        return 0


@dataclass(frozen=True)
class GroupComponent:
    """Componente de un grupo funcional: símbolo y multiplicidad."""
    symbol: str
    count: int = 1


@dataclass(frozen=True)
class FunctionalGroup:
    """Abreviatura de grupo funcional (p. ej., "Ph", "CF3").

    `composition` es la expansión plana a símbolos de elemento, resuelta al
    construir el registro. Los componentes desconocidos (como "R") se
    conservan como pseudo-símbolos.
    """
    symbol: str
    components: Tuple[GroupComponent, ...] = ()
    show_as_symbol: bool = False
    flippable: bool = False
    atomic_weight: float = 0.0
    composition: Tuple[Tuple[str, int], ...] = ()


ElementLike = Union[Element, FunctionalGroup]


class ElementRegistry:
    """Búsqueda inmutable de elementos y grupos funcionales por símbolo."""

    def __init__(
        self,
        elements: Iterable[Element],
        groups: Iterable[FunctionalGroup] = (),
    ) -> None:
        self._elements: Dict[str, Element] = {e.symbol: e for e in elements}
        self._groups: Dict[str, FunctionalGroup] = {g.symbol: g for g in groups}

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._elements or symbol in self._groups

    def __len__(self) -> int:
        return len(self._elements) + len(self._groups)

    @property
    def elements(self) -> Tuple[Element, ...]:
        return tuple(self._elements.values())

    @property
    def groups(self) -> Tuple[FunctionalGroup, ...]:
        return tuple(self._groups.values())

    def element(self, symbol: str) -> Element:
        """Obtiene un elemento por símbolo.

        Raises:
            UnknownElementError: Si el símbolo no es un elemento conocido.
        """
        try:
            return self._elements[symbol]
        except KeyError:
            raise UnknownElementError(symbol) from None

    def group(self, symbol: str) -> FunctionalGroup:
        """Obtiene un grupo funcional por símbolo.

        Raises:
            UnknownElementError: Si el símbolo no es un grupo conocido.
        """
        try:
            return self._groups[symbol]
        except KeyError:
            raise UnknownElementError(symbol) from None

    def get(self, symbol: str) -> ElementLike:
        """Resuelve un símbolo priorizando elementos sobre grupos.

        Args:
            symbol: Símbolo de elemento ("C") o de grupo ("Ph").

        Returns:
            El `Element` o `FunctionalGroup` compartido.

        Raises:
            UnknownElementError: Si el símbolo no está registrado.
        """
        found = self._elements.get(symbol) or self._groups.get(symbol)
        if found is None:
            raise UnknownElementError(symbol)
        return found

    def atomic_weights(self) -> Dict[str, float]:
        """Mapa símbolo -> peso atómico de los elementos registrados."""
        return {symbol: e.atomic_weight for symbol, e in self._elements.items()}


def build_elements() -> List[Element]:
    return [
        Element(
            symbol=symbol,
            name=name,
            atomic_number=number,
            atomic_weight=weight,
            colour=colour,
            valences=valences,
            implicit_hydrogens=symbol in IMPLICIT_HYDROGEN_TARGETS,
        )
        for number, symbol, name, weight, colour, valences in _ELEMENT_ROWS
    ]


def load_functional_groups(
    path: str | Path,
    elements: Mapping[str, Element],
) -> List[FunctionalGroup]:
    """Carga las abreviaturas de grupos funcionales desde JSON.

    Args:
        path: Ruta al archivo JSON con la clave `groups`.
        elements: Elementos ya construidos, para resolver pesos.

    Returns:
        Lista de grupos con peso y composición resueltos.

    Raises:
        ValueError: Si un grupo se referencia a sí mismo de forma cíclica.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    raw: Dict[str, dict] = {entry["symbol"]: entry for entry in data.get("groups", [])}
    resolved: Dict[str, FunctionalGroup] = {}
    for symbol in raw:
        _resolve_group(symbol, raw, elements, resolved, ())
    return [resolved[symbol] for symbol in raw]


def _resolve_group(
    symbol: str,
    raw: Mapping[str, dict],
    elements: Mapping[str, Element],
    resolved: Dict[str, FunctionalGroup],
    stack: Tuple[str, ...],
) -> FunctionalGroup:
    if symbol in resolved:
        return resolved[symbol]
    if symbol in stack:
        raise ValueError(f"Grupo funcional cíclico: {' -> '.join(stack + (symbol,))}")
    entry = raw[symbol]
    components = tuple(GroupComponent(str(s), int(n)) for s, n in entry.get("components", []))

    weight = 0.0
    composition: Dict[str, int] = {}
    for component in components:
        if component.symbol in elements:
            weight += elements[component.symbol].atomic_weight * component.count
            composition[component.symbol] = composition.get(component.symbol, 0) + component.count
        elif component.symbol in raw:
            sub = _resolve_group(component.symbol, raw, elements, resolved, stack + (symbol,))
            weight += sub.atomic_weight * component.count
            for sub_symbol, sub_count in sub.composition:
                composition[sub_symbol] = composition.get(sub_symbol, 0) + sub_count * component.count
        else:
            composition[component.symbol] = composition.get(component.symbol, 0) + component.count

    override = float(entry.get("atomic_weight") or 0.0)
    group = FunctionalGroup(
        symbol=symbol,
        components=components,
        show_as_symbol=bool(entry.get("show_as_symbol", False)),
        flippable=bool(entry.get("flippable", False)),
        atomic_weight=override if override else weight,
        composition=tuple(composition.items()),
    )
    resolved[symbol] = group
    return group


@lru_cache(maxsize=None)
def default_registry() -> ElementRegistry:
    """Construye (una sola vez por proceso) el registro por defecto.

    El coste es la lectura del JSON de grupos y la resolución de sus pesos;
    las llamadas siguientes devuelven la misma instancia inmutable.
    """
    elements = build_elements()
    by_symbol = {e.symbol: e for e in elements}
    groups = load_functional_groups(FUNCTIONAL_GROUPS_PATH, by_symbol)
    return ElementRegistry(elements, groups)
