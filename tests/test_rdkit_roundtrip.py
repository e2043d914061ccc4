import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from core.bond import BondOrder
from core.model import Model
from molecule_builders import chain, ring_sizes

from chemio.rdkit_io import (
    model_from_molfile,
    model_from_smiles,
    model_to_molfile,
    model_to_rdkit_with_map,
    model_to_smiles,
    ring_sizes_from_rdkit,
)

try:
    from rdkit import Chem
    RDKit_AVAILABLE = True
except Exception:
    Chem = None
    RDKit_AVAILABLE = False

CROSS_CHECK_SMILES = {
    "benzene": "c1ccccc1",
    "naphthalene": "c1ccc2ccccc2c1",
    "indane": "C1Cc2ccccc2C1",
    "norbornane": "C1CC2CCC1C2",
    "spiro": "C1CCC2(C1)CCCC2",
    "cubane": "C12C3C4C1C5C2C3C45",
    "adamantane": "C1C2CC3CC1CC(C2)C3",
    "steroid": "C1CCC2C(C1)CCC1C2CCC2CCCC12",
}


@unittest.skipIf(not RDKit_AVAILABLE, "RDKit no disponible")
class RdkitRoundtripTest(unittest.TestCase):
    def test_model_roundtrip_smiles(self):
        model = Model()
        chain(model, ["C", "C"])

        molfile = model_to_molfile(model)
        model2 = model_from_molfile(molfile)
        smiles = model_to_smiles(model2)

        self.assertIn(smiles, {"CC", "C-C"})

    def test_benzene_is_kekulized(self):
        """Verifica que el benceno aromático se importa con órdenes alternos."""
        model = model_from_smiles("c1ccccc1")
        self.assertEqual(len(model.molecules), 1)
        molecule = model.molecules[0]
        orders = sorted(bond.order.value for bond in molecule.bonds)
        self.assertEqual(orders, ["D", "D", "D", "S", "S", "S"])
        self.assertEqual(molecule.calculated_formula(), {"C": 6, "H": 6})
        self.assertAlmostEqual(model.mean_bond_length, 40.0, places=4)

    def test_fragments_become_molecules(self):
        """Verifica que los fragmentos de una sal son moléculas distintas."""
        model = model_from_smiles("[Na+].[O-]C(=O)C")
        self.assertEqual(len(model.molecules), 2)
        sodium = next(m for m in model.molecules if len(m.atoms) == 1).atoms[0]
        self.assertEqual(sodium.formal_charge, 1)
        self.assertEqual(model.concise_formula, "Na 1 . C 2 H 3 O 2")

    def test_pyrrole_nitrogen_keeps_hydrogen(self):
        """Verifica el H implícito del nitrógeno del pirrol."""
        model = model_from_smiles("c1cc[nH]c1")
        self.assertEqual(model.calculated_formula(), {"C": 4, "H": 5, "N": 1})

    def test_isotope_and_charge_export(self):
        """Verifica la exportación de isótopos y cargas."""
        model = Model()
        _, atoms = chain(model, ["C", "N"], [BondOrder.SINGLE])
        atoms[0].isotope_number = 13
        atoms[1].formal_charge = 1
        mol, id_map = model_to_rdkit_with_map(model)
        self.assertEqual(mol.GetAtomWithIdx(id_map[atoms[0].id]).GetIsotope(), 13)
        self.assertEqual(mol.GetAtomWithIdx(id_map[atoms[1].id]).GetFormalCharge(), 1)
        self.assertEqual(mol.GetNumConformers(), 1)

    def test_invalid_smiles(self):
        """Verifica el error ante SMILES no interpretables."""
        with self.assertRaises(ValueError):
            model_from_smiles("C1CC(")

    def test_ring_sizes_match_rdkit_sssr(self):
        """Verifica que los tamaños de anillo coinciden con el SSSR de RDKit."""
        for name, smiles in CROSS_CHECK_SMILES.items():
            with self.subTest(name=name):
                expected = ring_sizes_from_rdkit(Chem.MolFromSmiles(smiles))
                model = model_from_smiles(smiles)
                self.assertEqual(tuple(ring_sizes(model.rings)), expected)


if __name__ == "__main__":
    unittest.main()
