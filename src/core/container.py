"""Contenedor base compartido por `Molecule` y `Model`.

Cada contenedor mantiene el conjunto completo (`all_atoms`/`all_bonds`) de sus
descendientes y propaga cada alta o baja hacia sus ancestros, de modo que el
`Model` raíz siempre refleja la unión de todas sus moléculas.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from core.atom import Atom
from core.bond import Bond

if TYPE_CHECKING:
    from core.model import Model
    from core.molecule import Molecule

_MISSING = object()


@dataclass(frozen=True)
class GraphChange:
    """Entidades afectadas por una operación de edición del grafo.

    Dos cambios se combinan con `|`; un cambio vacío evalúa a `False`.
    """
    added_atoms: Tuple[Atom, ...] = ()
    removed_atoms: Tuple[Atom, ...] = ()
    added_bonds: Tuple[Bond, ...] = ()
    removed_bonds: Tuple[Bond, ...] = ()
    added_molecules: Tuple["Molecule", ...] = ()
    removed_molecules: Tuple["Molecule", ...] = ()

    def __bool__(self) -> bool:
        return any(
            (
                self.added_atoms,
                self.removed_atoms,
                self.added_bonds,
                self.removed_bonds,
                self.added_molecules,
                self.removed_molecules,
            )
        )

    def __or__(self, other: "GraphChange") -> "GraphChange":
        return GraphChange(
            added_atoms=self.added_atoms + other.added_atoms,
            removed_atoms=self.removed_atoms + other.removed_atoms,
            added_bonds=self.added_bonds + other.added_bonds,
            removed_bonds=self.removed_bonds + other.removed_bonds,
            added_molecules=self.added_molecules + other.added_molecules,
            removed_molecules=self.removed_molecules + other.removed_molecules,
        )


class ChemistryContainer:
    """Base de la jerarquía de contención de átomos, enlaces y moléculas."""

    def __init__(self) -> None:
        self._parent: Optional[weakref.ref] = None
        self._all_atoms: Dict[Atom, None] = {}
        self._all_bonds: Dict[Bond, None] = {}
        self._molecules: List["Molecule"] = []

    @property
    def parent(self) -> Optional["ChemistryContainer"]:
        return self._parent() if self._parent is not None else None

    def _set_parent(self, container: Optional["ChemistryContainer"]) -> None:
        self._parent = weakref.ref(container) if container is not None else None

    @property
    def model(self) -> Optional["Model"]:
        parent = self.parent
        return parent.model if parent is not None else None

    @property
    def all_atoms(self) -> Tuple[Atom, ...]:
        return tuple(self._all_atoms)

    @property
    def all_bonds(self) -> Tuple[Bond, ...]:
        return tuple(self._all_bonds)

    @property
    def molecules(self) -> Tuple["Molecule", ...]:
        return tuple(self._molecules)

    def add_child_molecule(self, molecule: "Molecule") -> GraphChange:
        """Añade una molécula hija y propaga sus átomos y enlaces.

        Si la molécula ya tenía otro padre, primero se retira de él. Añadir una
        hija ya presente no tiene efecto. Las moléculas escindidas junto a ella
        mientras no tenía padre se añaden también.

        Returns:
            El cambio producido (vacío si no hubo alta).
        """
        if any(child is molecule for child in self._molecules):
            return GraphChange()
        previous = molecule.parent
        if previous is not None:
            previous.remove_child_molecule(molecule)
        self._molecules.append(molecule)
        molecule._set_parent(self)
        self._include(molecule.all_atoms, molecule.all_bonds)
        self.reset_geometry()
        change = GraphChange(added_molecules=(molecule,))
        for sibling in molecule._take_detached_siblings():
            change = change | self.add_child_molecule(sibling)
        return change

    def remove_child_molecule(self, molecule: "Molecule") -> GraphChange:
        """Retira una molécula hija y todos sus átomos y enlaces de los ancestros.

        Returns:
            El cambio producido (vacío si la molécula no era hija).
        """
        for index, child in enumerate(self._molecules):
            if child is molecule:
                del self._molecules[index]
                break
        else:
            return GraphChange()
        molecule._set_parent(None)
        self._exclude(molecule.all_atoms, molecule.all_bonds)
        self.reset_geometry()
        return GraphChange(removed_molecules=(molecule,))

    def _include(self, atoms: Iterable[Atom], bonds: Iterable[Bond]) -> None:
        new_atoms = [atom for atom in atoms if atom not in self._all_atoms]
        new_bonds = [bond for bond in bonds if bond not in self._all_bonds]
        if not new_atoms and not new_bonds:
            return
        for atom in new_atoms:
            self._all_atoms[atom] = None
        for bond in new_bonds:
            self._all_bonds[bond] = None
        parent = self.parent
        if parent is not None:
            parent._include(new_atoms, new_bonds)

    def _exclude(self, atoms: Iterable[Atom], bonds: Iterable[Bond]) -> None:
        gone_atoms = [atom for atom in atoms if self._all_atoms.pop(atom, _MISSING) is not _MISSING]
        gone_bonds = [bond for bond in bonds if self._all_bonds.pop(bond, _MISSING) is not _MISSING]
        if not gone_atoms and not gone_bonds:
            return
        parent = self.parent
        if parent is not None:
            parent._exclude(gone_atoms, gone_bonds)

    def reset_geometry(self) -> None:
        """Invalida las cachés geométricas (el contenedor base no tiene)."""
