# pdepkin/network_parser.py
"""
Loads a pressure-dependent network case from YAML.

Example:

    id: 7
    core_species: [nC3H7, C2H4, CH3]
    species:
      - name: nC3H7
        id: 1
        formula: C3H7
        thermo: {H298: 24.0, S298: 68.6, Cp: 0.0}       # kcal/mol, cal/(mol K)
        lennard_jones: {sigma: 4.982, epsilon: 266.8}   # angstrom, K
        spectroscopy:
          vibrations: [3000.0, 1450.0, 1000.0]           # cm^-1
          rotations: [0.9]
          hindered_rotors: [[120.0, 350.0]]             # frequency, barrier
          symmetry: 1
    wells:
      - [nC3H7]
      - species: [C2H4, CH3]
        label: C2H4 + CH3
    path_reactions:
      - {reactant: nC3H7, product: C2H4 + CH3, A: 1.2e13, n: 0.0, Ea: 30.0}
"""

import os
import logging

import yaml

from pdepkin.chemistry import (
    Isomer,
    LennardJones,
    PathReaction,
    ReactionNetwork,
    Species,
    SpeciesThermo,
    SpectroscopicData,
)
from pdepkin.kinetics import ArrheniusKinetics

logger = logging.getLogger(__name__)


def _float(value, what):
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Expected a number for {what}, got {value!r}") from None


def parse_spectroscopy(data):
    return SpectroscopicData(
        vibrations=[_float(v, 'vibration') for v in data.get('vibrations', [])],
        rotations=[_float(r, 'rotation') for r in data.get('rotations', [])],
        hindered_rotors=[(_float(f, 'hindered rotor frequency'), _float(b, 'hindered rotor barrier'))
                         for f, b in data.get('hindered_rotors', [])],
        symmetry=int(data.get('symmetry', 1)),
    )


def parse_species(entry, spectroscopy_source=None):
    for key in ('name', 'id', 'formula', 'thermo'):
        if key not in entry:
            raise ValueError(f"Species entry {entry.get('name', entry)} is missing '{key}'")
    name = entry['name']
    thermo = entry['thermo']
    lj = entry.get('lennard_jones')
    spectroscopy = entry.get('spectroscopy')
    mw = entry.get('molecular_weight')
    return Species(
        name=name,
        id=entry['id'],
        formula=entry['formula'],
        thermo=SpeciesThermo(
            H298=_float(thermo['H298'], f"{name} H298"),
            S298=_float(thermo['S298'], f"{name} S298"),
            Cp=_float(thermo.get('Cp', 0.0), f"{name} Cp"),
        ),
        lennard_jones=LennardJones(_float(lj['sigma'], f"{name} sigma"),
                                   _float(lj['epsilon'], f"{name} epsilon")) if lj else None,
        molecular_weight_gmol=_float(mw, f"{name} molecular weight") if mw is not None else None,
        spectroscopic_data=parse_spectroscopy(spectroscopy) if spectroscopy is not None else None,
        spectroscopy_source=spectroscopy_source,
    )


def load_network(network_path, spectroscopy_source=None):
    """
    Load a network definition file.

    Args:
        network_path (str): Path to network.yml
        spectroscopy_source: Callable(species) -> SpectroscopicData used for
            species listed without a 'spectroscopy' block

    Returns:
        tuple: (ReactionNetwork, core species names)
    """
    if not os.path.isfile(network_path):
        raise FileNotFoundError(f"Network file not found: {network_path}")
    with open(network_path, 'r') as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Network file {network_path} does not contain a mapping")

    species = {}
    for entry in data.get('species', []):
        s = parse_species(entry, spectroscopy_source)
        if s.name in species:
            raise ValueError(f"Duplicate species '{s.name}' in {network_path}")
        species[s.name] = s

    uni_isomers, multi_isomers = [], []
    wells = {}
    for entry in data.get('wells', []):
        if isinstance(entry, dict):
            names, label = entry.get('species', []), entry.get('label')
        else:
            names, label = entry, None
        unknown = [n for n in names if n not in species]
        if unknown:
            raise ValueError(f"Well {names} refers to unknown species {unknown}")
        isomer = Isomer([species[n] for n in names], label=label)
        if isomer.label in wells:
            raise ValueError(f"Duplicate well '{isomer.label}' in {network_path}")
        wells[isomer.label] = isomer
        (uni_isomers if isomer.is_unimolecular else multi_isomers).append(isomer)

    path_reactions = []
    for entry in data.get('path_reactions', []):
        for key in ('reactant', 'product'):
            if entry.get(key) not in wells:
                raise ValueError(f"Path reaction {entry} refers to unknown well '{entry.get(key)}'")
        kinetics = ArrheniusKinetics(
            A=_float(entry['A'], 'Arrhenius A'),
            n=_float(entry.get('n', 0.0), 'Arrhenius n'),
            Ea=_float(entry.get('Ea', 0.0), 'Arrhenius Ea'),
        )
        path_reactions.append(PathReaction(wells[entry['reactant']], wells[entry['product']],
                                           kinetics, is_forward=bool(entry.get('forward', True))))

    network = ReactionNetwork(
        id=data.get('id', 0),
        uni_isomers=uni_isomers,
        multi_isomers=multi_isomers,
        path_reactions=path_reactions,
    )
    logger.info(f"Loaded network {network.id}: {len(uni_isomers)} unimolecular wells, "
                f"{len(multi_isomers)} multimolecular wells, {len(path_reactions)} path reactions")
    return network, list(data.get('core_species', []))
