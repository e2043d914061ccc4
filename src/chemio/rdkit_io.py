from __future__ import annotations

from typing import Dict, Optional, Tuple

from PyQt6.QtCore import QPointF

from core.atom import Atom
from core.bond import Bond, BondOrder, BondStereo
from core.elements import ElementRegistry, FunctionalGroup, default_registry
from core.model import Model
from core.molecule import Molecule
from core.options import SINGLE_ATOM_PSEUDO_BOND_LENGTH

try:
    from rdkit import Chem
    from rdkit.Chem import AllChem
except Exception:  # pragma: no cover - optional dependency at runtime
    Chem = None
    AllChem = None

# Etiqueta con la que se exportan los grupos funcionales como átomos comodín.
GROUP_LABEL_PROP = "atomLabel"


def _require_rdkit():
    if Chem is None or AllChem is None:
        raise RuntimeError("RDKit no disponible")


def _ensure_ring_info(mol) -> None:
    if hasattr(Chem, "FastFindRings"):
        Chem.FastFindRings(mol)
    else:
        Chem.GetSymmSSSR(mol)


def _rdkit_bond_type(order: BondOrder):
    if order in (BondOrder.AROMATIC, BondOrder.PARTIAL_12):
        return Chem.BondType.AROMATIC
    if order == BondOrder.DOUBLE:
        return Chem.BondType.DOUBLE
    if order == BondOrder.TRIPLE:
        return Chem.BondType.TRIPLE
    if order == BondOrder.ZERO:
        return Chem.BondType.ZERO
    return Chem.BondType.SINGLE


def _order_from_rdkit(bond) -> BondOrder:
    bond_type = bond.GetBondType()
    if bond_type == Chem.BondType.DOUBLE:
        return BondOrder.DOUBLE
    if bond_type == Chem.BondType.TRIPLE:
        return BondOrder.TRIPLE
    if bond_type == Chem.BondType.AROMATIC:
        return BondOrder.AROMATIC
    if bond_type == Chem.BondType.ZERO:
        return BondOrder.ZERO
    return BondOrder.SINGLE


def _stereo_from_rdkit(bond) -> BondStereo:
    direction = bond.GetBondDir()
    if direction == Chem.BondDir.BEGINWEDGE:
        return BondStereo.WEDGE
    if direction == Chem.BondDir.BEGINDASH:
        return BondStereo.HATCH
    if direction == Chem.BondDir.UNKNOWN:
        return BondStereo.INDETERMINATE
    return BondStereo.NONE


def model_to_rdkit_with_map(model: Model):
    """Convierte el modelo en un `Chem.Mol` con conformero 2-D.

    Returns:
        Tupla `(mol, id_map)` con `id_map` atom.id -> índice RDKit.
    """
    _require_rdkit()
    rw = Chem.RWMol()
    id_map: Dict[str, int] = {}

    for atom in model.all_atoms:
        if isinstance(atom.element, FunctionalGroup):
            rd_atom = Chem.Atom(0)
            rd_atom.SetProp(GROUP_LABEL_PROP, atom.symbol)
        else:
            rd_atom = Chem.Atom(atom.symbol)
        if atom.formal_charge:
            rd_atom.SetFormalCharge(atom.formal_charge)
        if atom.isotope_number is not None:
            rd_atom.SetIsotope(atom.isotope_number)
        if atom.is_doublet_radical:
            rd_atom.SetNumRadicalElectrons(1)
        id_map[atom.id] = rw.AddAtom(rd_atom)

    for bond in model.all_bonds:
        begin = id_map[bond.start_atom.id]
        end = id_map[bond.end_atom.id]
        bond_type = _rdkit_bond_type(bond.order)
        if bond_type == Chem.BondType.AROMATIC:
            rw.GetAtomWithIdx(begin).SetIsAromatic(True)
            rw.GetAtomWithIdx(end).SetIsAromatic(True)
        if rw.GetBondBetweenAtoms(begin, end) is None:
            rw.AddBond(begin, end, bond_type)
            rd_bond = rw.GetBondBetweenAtoms(begin, end)
            if bond_type == Chem.BondType.AROMATIC:
                rd_bond.SetIsAromatic(True)
            if bond.stereo == BondStereo.WEDGE:
                rd_bond.SetBondDir(Chem.BondDir.BEGINWEDGE)
            elif bond.stereo == BondStereo.HATCH:
                rd_bond.SetBondDir(Chem.BondDir.BEGINDASH)

    mol = rw.GetMol()
    mol.UpdatePropertyCache(strict=False)
    _ensure_ring_info(mol)
    conf = Chem.Conformer(mol.GetNumAtoms())
    for atom in model.all_atoms:
        position = atom.position
        conf.SetAtomPosition(id_map[atom.id], (position.x(), -position.y(), 0.0))
    mol.AddConformer(conf, assignId=True)
    return mol, id_map


def model_to_rdkit(model: Model):
    mol, _ = model_to_rdkit_with_map(model)
    return mol


def model_to_smiles(model: Model) -> str:
    mol = model_to_rdkit(model)
    return Chem.MolToSmiles(mol, canonical=True)


def model_to_molfile(model: Model) -> str:
    mol = model_to_rdkit(model)
    return Chem.MolToMolBlock(mol)


def model_from_molfile(molfile: str, registry: Optional[ElementRegistry] = None) -> Model:
    _require_rdkit()
    mol = Chem.MolFromMolBlock(molfile, sanitize=True)
    return model_from_rdkit(mol, registry)


def model_from_smiles(smiles: str, registry: Optional[ElementRegistry] = None) -> Model:
    _require_rdkit()
    mol = Chem.MolFromSmiles(smiles)
    return model_from_rdkit(mol, registry)


def model_from_rdkit(mol, registry: Optional[ElementRegistry] = None) -> Model:
    """Construye un `Model` a partir de un `Chem.Mol`.

    Las moléculas se kekulizan para que los hidrógenos implícitos se deduzcan
    de órdenes enteros; las coordenadas se invierten en Y (pantalla) y se
    escalan a la longitud de enlace por defecto.

    Raises:
        ValueError: Si `mol` es `None` (entrada no interpretable).
        UnknownElementError: Si un átomo no existe en el registro.
    """
    _require_rdkit()
    if mol is None:
        raise ValueError("Mol inválido")
    mol = Chem.Mol(mol)
    Chem.Kekulize(mol, clearAromaticFlags=True)
    if mol.GetNumConformers() == 0:
        AllChem.Compute2DCoords(mol)
    conf = mol.GetConformer()

    model = Model(registry=registry if registry is not None else default_registry())
    molecule = Molecule()
    idx_map: Dict[int, Atom] = {}

    for rd_atom in mol.GetAtoms():
        idx = rd_atom.GetIdx()
        pos = conf.GetAtomPosition(idx)
        symbol = rd_atom.GetSymbol()
        if rd_atom.GetAtomicNum() == 0 and rd_atom.HasProp(GROUP_LABEL_PROP):
            symbol = rd_atom.GetProp(GROUP_LABEL_PROP)
        atom = Atom(
            model.registry.get(symbol),
            QPointF(pos.x, -pos.y),
            formal_charge=rd_atom.GetFormalCharge() or None,
            isotope_number=rd_atom.GetIsotope() or None,
            is_doublet_radical=rd_atom.GetNumRadicalElectrons() == 1,
        )
        molecule.add_atom(atom)
        idx_map[idx] = atom

    for rd_bond in mol.GetBonds():
        molecule.add_bond(
            Bond(
                idx_map[rd_bond.GetBeginAtomIdx()],
                idx_map[rd_bond.GetEndAtomIdx()],
                order=_order_from_rdkit(rd_bond),
                stereo=_stereo_from_rdkit(rd_bond),
            )
        )

    model.add_molecule(molecule)
    model.rebuild_molecules()
    model.scale_to_average_bond_length(SINGLE_ATOM_PSEUDO_BOND_LENGTH)
    return model


def ring_sizes_from_rdkit(mol) -> Tuple[int, ...]:
    """Tamaños (ordenados) de los anillos SSSR que calcula RDKit."""
    _require_rdkit()
    return tuple(sorted(len(ring) for ring in Chem.GetSSSR(mol)))
