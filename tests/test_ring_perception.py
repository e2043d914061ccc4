"""Pruebas de la percepción de anillos (RP-Path, Figueras) y su orden de colocación."""

import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from PyQt6.QtCore import QPointF

import chemrings
from chemrings import figueras, rppath
from chemrings.ordering import sort_rings_for_placement
from chemrings.working_set import prune_side_chains
from core.bond import Bond, BondDirection
from core.model import Model
from core.options import PerceptionOptions, RingAlgorithm
from core.ring import Ring
from molecule_builders import (
    benzene,
    build,
    chain,
    cubane,
    cycle,
    indane,
    naphthalene,
    norbornane,
    polygon,
    ring_sizes,
)


def gf2_rank(vectors):
    """Rango sobre GF(2) de vectores representados como enteros."""
    basis = {}
    rank = 0
    for vector in vectors:
        while vector:
            pivot = vector.bit_length() - 1
            if pivot not in basis:
                basis[pivot] = vector
                rank += 1
                break
            vector ^= basis[pivot]
    return rank


def bond_vectors(molecule, rings):
    index = {bond: n for n, bond in enumerate(molecule.bonds)}
    return [sum(1 << index[bond] for bond in ring.bonds) for ring in rings]


def spiro_nonane(model):
    positions = polygon(5, cx=-32.0, start_deg=0.0) + polygon(5, cx=32.0, start_deg=180.0)[1:]
    positions[0] = QPointF(0.0, 0.0)
    bonds = [(0, 1), (1, 2), (2, 3), (3, 4), (4, 0), (0, 5), (5, 6), (6, 7), (7, 8), (8, 0)]
    return build(model, ["C"] * 9, positions, bonds)


class WorkingSetTest(unittest.TestCase):
    def test_acyclic_chain_prunes_to_nothing(self):
        """Verifica que una cadena lineal no deja átomos de trabajo."""
        molecule, _ = chain(Model(), ["C"] * 6)
        self.assertEqual(prune_side_chains(molecule.atoms), {})

    def test_side_chain_removed(self):
        """Verifica que se eliminan las cadenas laterales de un ciclo."""
        model = Model()
        molecule, ring_atoms = cycle(model, 6)
        methyl = model.new_atom("C", 80.0, 0.0)
        ethyl_end = model.new_atom("C", 120.0, 0.0)
        molecule.add_bond(Bond(ring_atoms[0], methyl))
        molecule.add_bond(Bond(methyl, ethyl_end))
        working = prune_side_chains(molecule.atoms)
        self.assertEqual(list(working), ring_atoms)
        self.assertTrue(all(degree == 2 for degree in working.values()))


class RpPathTest(unittest.TestCase):
    def setUp(self):
        self.model = Model()

    def _matrices(self, molecule):
        bonds = list(molecule.bonds)
        bits = {bond: 1 << n for n, bond in enumerate(bonds)}
        matrices = rppath.build_matrices(list(prune_side_chains(molecule.atoms)), bits, len(bonds))
        rppath.relax(matrices)
        return matrices

    def test_benzene_path_matrices(self):
        """Verifica distancias y caminos alternativos en benceno."""
        molecule, _ = benzene(self.model)
        matrices = self._matrices(molecule)
        self.assertEqual(matrices.distance[0][3], 3)
        self.assertEqual(len(matrices.shortest[0][3]), 2)
        self.assertEqual(matrices.distance[0][1], 1)
        self.assertEqual(matrices.longer[0][1], [])
        self.assertEqual([c.size for c in rppath.ring_candidates(matrices)], [6, 6, 6])

    def test_cyclopropane_odd_candidate(self):
        """Verifica el camino más largo en uno para anillos impares."""
        molecule, _ = cycle(self.model, 3)
        matrices = self._matrices(molecule)
        self.assertEqual(len(matrices.longer[0][1]), 1)
        self.assertEqual(ring_sizes(molecule.rings), [3])

    def test_benzene(self):
        """Verifica un único anillo de seis en benceno."""
        molecule, atoms = benzene(self.model)
        rings = molecule.rings
        self.assertEqual(ring_sizes(rings), [6])
        self.assertEqual(rings[0].atom_set, frozenset(atoms))
        self.assertIs(rings[0].parent, molecule)
        self.assertEqual(rings[0].double_bond_count, 3)

    def test_naphthalene(self):
        """Verifica dos anillos de seis que comparten el enlace de fusión."""
        molecule, atoms = naphthalene(self.model)
        rings = molecule.rings
        self.assertEqual(ring_sizes(rings), [6, 6])
        covered = set().union(*(ring.bond_set for ring in rings))
        self.assertEqual(len(covered), 11)
        fusion = atoms[0].bond_between(atoms[5])
        self.assertEqual(len(fusion.rings), 2)
        self.assertEqual(atoms[0].ring_count, 2)
        self.assertEqual(atoms[1].ring_count, 1)
        self.assertTrue(all(ring.size != 10 for ring in rings))

    def test_norbornane(self):
        """Verifica dos anillos de cinco en un sistema con puente."""
        molecule, _ = norbornane(self.model)
        self.assertEqual(ring_sizes(molecule.rings), [5, 5])

    def test_cubane(self):
        """Verifica cinco caras independientes de cuatro miembros en cubano."""
        molecule, _ = cubane(self.model)
        rings = molecule.rings
        self.assertEqual(ring_sizes(rings), [4, 4, 4, 4, 4])
        self.assertEqual(len({ring.unique_id for ring in rings}), 5)
        self.assertEqual(gf2_rank(bond_vectors(molecule, rings)), 5)

    def test_spiro(self):
        """Verifica dos anillos de cinco unidos por un átomo espiro."""
        molecule, atoms = spiro_nonane(self.model)
        self.assertEqual(ring_sizes(molecule.rings), [5, 5])
        self.assertEqual(atoms[0].ring_count, 2)

    def test_ring_count_matches_cyclomatic_number(self):
        """Verifica que el número de anillos coincide con enlaces - átomos + 1."""
        for builder in (benzene, naphthalene, norbornane, cubane, indane):
            molecule = builder(Model())[0]
            rings = molecule.rings
            self.assertEqual(len(rings), molecule.theoretical_ring_count)
            self.assertEqual(gf2_rank(bond_vectors(molecule, rings)), len(rings))

    def test_threaded_relaxation_matches_serial(self):
        """Verifica que la relajación en paralelo da el mismo resultado."""
        serial, _ = cubane(self.model)
        threaded_model = Model(options=PerceptionOptions(workers=4))
        threaded = serial.clone()
        threaded_model.add_molecule(threaded)
        expected = [ring.unique_id for ring in serial.rings]
        found = [ring.unique_id for ring in threaded.rings]
        self.assertEqual(found, expected)

    def test_partial_result_is_logged(self):
        """Verifica que un resultado incompleto se registra como aviso."""
        with self.assertLogs("chemrings.rppath", level="WARNING"):
            self.assertEqual(rppath.extract_sssr([], [], 1), [])


class FiguerasTest(unittest.TestCase):
    def setUp(self):
        self.model = Model(options=PerceptionOptions(algorithm=RingAlgorithm.FIGUERAS))

    def test_find_ring_cyclic_order(self):
        """Verifica que el anillo encontrado conserva el orden cíclico."""
        _, atoms = cycle(self.model, 5)
        ring = figueras.find_ring(atoms[0])
        self.assertEqual(ring.size, 5)
        self.assertIs(ring.atoms[0], atoms[0])
        self.assertEqual(len(ring.bonds), 5)

    def test_find_ring_acyclic(self):
        """Verifica que no hay anillo desde un átomo acíclico."""
        _, atoms = chain(self.model, ["C", "C", "C"])
        self.assertIsNone(figueras.find_ring(atoms[1]))

    def test_benzene_and_naphthalene(self):
        """Verifica benceno y naftaleno con la búsqueda en anchura."""
        molecule, _ = benzene(self.model)
        self.assertEqual(ring_sizes(molecule.rings), [6])
        molecule, _ = naphthalene(self.model)
        self.assertEqual(ring_sizes(molecule.rings), [6, 6])

    def test_spiro(self):
        """Verifica el compuesto espiro con la búsqueda en anchura."""
        molecule, _ = spiro_nonane(self.model)
        self.assertEqual(ring_sizes(molecule.rings), [5, 5])

    def test_explicit_algorithm_overrides_options(self):
        """Verifica que rebuild_rings acepta el algoritmo explícito."""
        molecule, _ = norbornane(Model())
        rings = molecule.rebuild_rings(RingAlgorithm.FIGUERAS)
        self.assertTrue(rings)
        self.assertTrue(all(ring.size == 5 for ring in rings))
        self.assertEqual(ring_sizes(molecule.rebuild_rings()), [5, 5])


class RingCacheTest(unittest.TestCase):
    def setUp(self):
        self.model = Model()

    def test_acyclic_molecule(self):
        """Verifica que una molécula acíclica no tiene anillos y queda calculada."""
        molecule, atoms = chain(self.model, ["C"] * 6)
        self.assertFalse(molecule.has_rings)
        self.assertEqual(molecule.rings, ())
        self.assertTrue(molecule.rings_calculated)
        self.assertFalse(atoms[0].is_in_ring)

    def test_edit_invalidates_rings(self):
        """Verifica que una edición estructural invalida la caché de anillos."""
        molecule, atoms = benzene(self.model)
        self.assertEqual(len(molecule.rings), 1)
        molecule.remove_bond(atoms[0].bond_between(atoms[1]))
        self.assertFalse(molecule.rings_calculated)
        self.assertEqual(atoms[2].rings, ())
        molecule.refresh()
        self.assertEqual(molecule.rings, ())

    def test_rebuild_is_idempotent(self):
        """Verifica que reconstruir los anillos no duplica pertenencias."""
        molecule, atoms = naphthalene(self.model)
        first = [ring.unique_id for ring in molecule.rebuild_rings()]
        second = [ring.unique_id for ring in molecule.rebuild_rings()]
        self.assertEqual(first, second)
        self.assertEqual(atoms[0].ring_count, 2)

    def test_fallback_to_figueras_above_limit(self):
        """Verifica el cambio a Figueras cuando se supera max_atoms."""
        model = Model(options=PerceptionOptions(max_atoms=3))
        molecule, _ = benzene(model)
        with self.assertLogs("chemrings", level="WARNING"):
            rings = molecule.rebuild_rings()
        self.assertEqual(ring_sizes(rings), [6])

    def test_perceive_rings_without_model(self):
        """Verifica la percepción directa sobre una molécula sin modelo."""
        model = Model()
        molecule, _ = cycle(model, 4)
        model.remove_molecule(molecule)
        self.assertIsNone(molecule.model)
        self.assertEqual(ring_sizes(chemrings.perceive_rings(molecule)), [4])


class RingTest(unittest.TestCase):
    def setUp(self):
        self.model = Model()

    def test_ring_requires_bonded_atoms(self):
        """Verifica que un anillo exige al menos tres átomos enlazados."""
        _, atoms = chain(self.model, ["C", "C", "C"])
        with self.assertRaises(ValueError):
            Ring(atoms[:2])
        with self.assertRaises(ValueError):
            Ring(atoms)

    def test_from_bonds(self):
        """Verifica la construcción desde enlaces de un ciclo simple."""
        molecule, atoms = benzene(self.model)
        ring = Ring.from_bonds(reversed(molecule.bonds))
        self.assertEqual(ring.atom_set, frozenset(atoms))
        linear, _ = chain(self.model, ["C"] * 4)
        self.assertIsNone(Ring.from_bonds(linear.bonds))

    def test_from_bonds_rejects_two_cycles(self):
        """Verifica que dos ciclos disjuntos no forman un anillo."""
        first, _ = cycle(self.model, 3)
        second, _ = cycle(self.model, 3, cx=100.0)
        self.assertIsNone(Ring.from_bonds(first.bonds + second.bonds))

    def test_priority_and_id(self):
        """Verifica la prioridad por tamaño y el identificador único."""
        molecule, atoms = benzene(self.model)
        ring = molecule.rings[0]
        self.assertEqual(ring.priority, 1)
        self.assertEqual(ring.unique_id, "|".join(sorted(a.id for a in atoms)))
        big, _ = cycle(self.model, 8, cx=200.0)
        self.assertEqual(big.rings[0].priority, 0)

    def test_centroid_follows_atoms(self):
        """Verifica que el centroide se recalcula al mover un átomo."""
        molecule, atoms = cycle(self.model, 4, cx=50.0, cy=50.0)
        ring = molecule.rings[0]
        self.assertAlmostEqual(ring.centroid.x(), 50.0)
        atoms[0].move_by(40.0, 0.0)
        self.assertAlmostEqual(ring.centroid.x(), 60.0)

    def test_traverse(self):
        """Verifica el recorrido horario y antihorario en coordenadas de pantalla."""
        molecule, atoms = benzene(self.model)
        ring = molecule.rings[0]
        clockwise = list(ring.traverse(atoms[0]))
        self.assertEqual(set(clockwise), set(atoms))
        self.assertEqual(clockwise[:2], [atoms[0], atoms[1]])
        anticlockwise = list(ring.traverse(atoms[0], BondDirection.ANTICLOCKWISE))
        self.assertEqual(anticlockwise[:2], [atoms[0], atoms[5]])


class OrderingTest(unittest.TestCase):
    def setUp(self):
        self.model = Model()

    def test_shared_atoms_first_without_double_bonds(self):
        """Verifica que sin dobles enlaces el anillo con menos pertenencias va primero."""
        molecule, _ = indane(self.model)
        self.assertEqual([ring.size for ring in molecule.sorted_rings], [5, 6])

    def test_double_bonds_dominate(self):
        """Verifica que el anillo con más dobles enlaces va primero."""
        molecule, _ = indane(self.model, aromatic_six=True)
        self.assertEqual([ring.size for ring in molecule.sorted_rings], [6, 5])

    def test_sort_is_stable(self):
        """Verifica que los empates conservan el orden de entrada."""
        first, _ = cycle(self.model, 6)
        second, _ = cycle(self.model, 6, cx=200.0)
        a, b = first.rings[0], second.rings[0]
        self.assertEqual(sort_rings_for_placement([a, b]), [a, b])
        self.assertEqual(sort_rings_for_placement([b, a]), [b, a])

    def test_unlisted_size_goes_last(self):
        """Verifica que los tamaños sin prioridad se colocan al final."""
        small, _ = cycle(self.model, 6)
        large, _ = cycle(self.model, 9, cx=300.0)
        six, nine = small.rings[0], large.rings[0]
        self.assertEqual(sort_rings_for_placement([nine, six]), [six, nine])


if __name__ == "__main__":
    unittest.main()
