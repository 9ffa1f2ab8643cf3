# pdepkin/solver_input.py
"""
Serialization of a reaction network into the FAME input file.

The format is line oriented: every field is a fixed label left-justified to
column 36 followed by its value and unit. Field order is significant.
"""

import os
import logging
import tempfile
from typing import List, Optional

from scipy import constants

from pdepkin.chemistry import T_REF
from pdepkin.energy_grid import KCAL_TO_KJ
from pdepkin.kinetics import fit_reverse_kinetics

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURES = [300.0, 600.0, 900.0, 1200.0, 1500.0, 1800.0, 2100.0]  # K
DEFAULT_PRESSURES = [0.01, 0.1, 1.0, 10.0, 100.0]  # bar
DEFAULT_CHEBYSHEV_TEMPERATURES = 4
DEFAULT_CHEBYSHEV_PRESSURES = 4

LABEL_WIDTH = 36


class NetworkInputError(ValueError):
    """The network cannot be serialized consistently; the solver must not run."""


class ReactionOrientation:
    """Canonical direction of a path reaction as handed to the solver.

    isomer1/isomer2 are 1-based well indices; isomer1 is always the kinetic
    reactant of `kinetics`.
    """
    def __init__(self, reaction, isomer1, isomer2, reactant, kinetics):
        self.reaction = reaction
        self.isomer1 = isomer1
        self.isomer2 = isomer2
        self.reactant = reactant
        self.kinetics = kinetics


def _line(label, value=''):
    return f"{label:<{LABEL_WIDTH}}{value}\n"


def _fmt(value):
    """Format a number the way the solver reads it (shortest round-trip repr)."""
    if isinstance(value, int):
        return str(value)
    return repr(float(value))


def well_index(network, isomer) -> int:
    """1-based solver index of a well: unimolecular wells first, then multimolecular."""
    try:
        if isomer.is_unimolecular:
            return network.uni_isomers.index(isomer) + 1
        return network.multi_isomers.index(isomer) + len(network.uni_isomers) + 1
    except ValueError:
        kind = 'unimolecular' if isomer.is_unimolecular else 'multimolecular'
        raise NetworkInputError(
            f"Isomer '{isomer}' not found among the {kind} wells of network {network.id}"
        ) from None


def resolve_orientation(reaction, network, reverse_fitter=fit_reverse_kinetics) -> Optional[ReactionOrientation]:
    """
    Work out which well the solver should treat as the reactant of a path reaction.

    Returns None when either endpoint is unresolved. Reactions stored in
    their reverse orientation get kinetics from `reverse_fitter` and swapped
    well indices. The reaction object is not modified.
    """
    if reaction.reactant is None or reaction.product is None:
        return None
    isomer1 = well_index(network, reaction.reactant)
    isomer2 = well_index(network, reaction.product)
    if reaction.is_forward:
        return ReactionOrientation(reaction, isomer1, isomer2, reaction.reactant, reaction.kinetics)
    kinetics = reverse_fitter(reaction)
    return ReactionOrientation(reaction, isomer2, isomer1, reaction.product, kinetics)


def _spectroscopy(species):
    data = species.spectroscopic_data
    if data is None:
        raise NetworkInputError(f"Species '{species.name}' has no spectroscopic data")
    return data


def _unimolecular_block(index, isomer) -> List[str]:
    species = isomer.species[0]
    lj = species.lennard_jones
    if lj is None:
        raise NetworkInputError(f"Species '{species.name}' has no Lennard-Jones parameters")
    if species.molecular_weight is None:
        raise NetworkInputError(f"Species '{species.name}' has no molecular weight")
    data = _spectroscopy(species)
    H = species.enthalpy(T_REF) * KCAL_TO_KJ
    G = species.free_energy(T_REF) * KCAL_TO_KJ

    lines = [
        f"# Unimolecular well {index}: {species.name}({species.id})\n",
        _line("Ground-state energy", f"{_fmt(H)} kJ/mol"),
        _line("Enthalpy of formation", f"{_fmt(H)} kJ/mol"),
        _line("Free energy of formation", f"{_fmt(G)} kJ/mol"),
        _line("LJ sigma parameter", f"{_fmt(lj.sigma * 1e-10)} m"),
        _line("LJ epsilon parameter", f"{_fmt(lj.epsilon * constants.k)} J"),
        _line("Molecular weight", f"{_fmt(species.molecular_weight)} g/mol"),
    ]
    if data.vibrations:
        lines.append(_line("Harmonic oscillators", len(data.vibrations)))
        lines.extend(f"{_fmt(v)} cm^-1\n" for v in data.vibrations)
    if data.rotations:
        lines.append(_line("Rigid rotors", len(data.rotations)))
        lines.extend(f"{_fmt(r)} cm^-1\n" for r in data.rotations)
    if data.hindered_rotors:
        lines.append(_line("Hindered rotors", len(data.hindered_rotors)))
        lines.extend(f"{_fmt(f)} cm^-1\n" for f in data.hindered_frequencies)
        lines.extend(f"{_fmt(b)} cm^-1\n" for b in data.hindered_barriers)
    lines.append(_line("Symmetry number", data.symmetry))
    lines.append("\n")
    return lines


def _multimolecular_block(index, isomer) -> List[str]:
    species = isomer.species
    spectra = [_spectroscopy(s) for s in species]

    def row(label, values, unit=''):
        return _line(label, ''.join(f"{_fmt(v)}{unit}" for v in values))

    title = ' + '.join(f"{s.name}({s.id})" for s in species)
    lines = [
        f"# Multimolecular well {index}: {title}\n",
        _line("Number of species", len(species)),
        row("Ground-state energy", [s.enthalpy(T_REF) * KCAL_TO_KJ for s in species], " kJ/mol    "),
        row("Enthalpy of formation", [s.enthalpy(T_REF) * KCAL_TO_KJ for s in species], " kJ/mol    "),
        row("Free energy of formation", [s.free_energy(T_REF) * KCAL_TO_KJ for s in species], " kJ/mol    "),
    ]

    lines.append(row("Harmonic oscillators", [len(d.vibrations) for d in spectra], " "))
    for d in spectra:
        lines.extend(f"{_fmt(v)} cm^-1\n" for v in d.vibrations)
    lines.append(row("Rigid rotors", [len(d.rotations) for d in spectra], " "))
    for d in spectra:
        lines.extend(f"{_fmt(r)} cm^-1\n" for r in d.rotations)
    lines.append(row("Hindered rotors", [len(d.hindered_rotors) for d in spectra], " "))
    for d in spectra:
        lines.extend(f"{_fmt(f)} cm^-1\n" for f in d.hindered_frequencies)
        lines.extend(f"{_fmt(b)} cm^-1\n" for b in d.hindered_barriers)
    lines.append(row("Symmetry number", [d.symmetry for d in spectra], " "))
    lines.append("\n")
    return lines


def _reaction_block(orientation) -> List[str]:
    kinetics = orientation.kinetics
    Ea = kinetics.Ea
    if Ea < 0:
        logger.warning(
            f"Adjusted activation energy of reaction {orientation.reaction} from {Ea} kcal/mol "
            f"to 0 kcal/mol for FAME calculation."
        )
        Ea = 0.0
    # Transition state sits Ea above the kinetic reactant (isomer 1)
    E0 = orientation.reactant.enthalpy(T_REF) + Ea
    return [
        f"# Reaction {orientation.reaction}:\n",
        _line("Isomer 1", orientation.isomer1),
        _line("Isomer 2", orientation.isomer2),
        _line("Ground-state energy", f"{_fmt(E0 * KCAL_TO_KJ)} kJ/mol"),
        _line("Arrhenius preexponential", f"{_fmt(kinetics.A)} s^-1"),
        _line("Arrhenius activation energy", f"{_fmt(Ea * KCAL_TO_KJ)} kJ/mol"),
        _line("Arrhenius temperature exponent", _fmt(kinetics.n)),
        "\n",
    ]


def build_input(network, settings, grid, bath_gas, mode_name, run_count=0,
                reverse_fitter=fit_reverse_kinetics) -> str:
    """
    Build the complete FAME input text for a network.

    Args:
        network: ReactionNetwork to serialize
        settings (dict): Estimator settings (temperature/pressure ladders, Chebyshev orders)
        grid: EnergyGrid from plan_energy_grid
        bath_gas: BathGasSummary from summarize_bath_gas
        mode_name (str): Solver method name, e.g. 'ReservoirState'
        run_count (int): Run label written into the header comment
        reverse_fitter: Callable returning reverse kinetics for a path reaction

    Returns:
        str: Input file contents

    Raises:
        NetworkInputError: if the network is internally inconsistent
    """
    temperatures = settings.get('temperatures', DEFAULT_TEMPERATURES)
    pressures = settings.get('pressures', DEFAULT_PRESSURES)
    n_cheb_T = settings.get('chebyshev_temperatures', DEFAULT_CHEBYSHEV_TEMPERATURES)
    n_cheb_P = settings.get('chebyshev_pressures', DEFAULT_CHEBYSHEV_PRESSURES)

    # Resolve every reaction before emitting anything
    orientations = []
    for reaction in network.path_reactions:
        orientation = resolve_orientation(reaction, network, reverse_fitter)
        if orientation is None:
            logger.debug(f"Skipping path reaction {reaction} with an unresolved isomer")
            continue
        orientations.append(orientation)

    lines = [
        f"# FAME input for pressure dependent network #{run_count}\n",
        _line("Mode", mode_name),
        _line("Temperatures", len(temperatures)),
    ]
    lines.extend(f"{_fmt(T)} K\n" for T in temperatures)
    lines.append(_line("Pressures", len(pressures)))
    lines.extend(f"{_fmt(P)} bar\n" for P in pressures)
    lines += [
        _line("Grain size", f"{_fmt(grid.grain_size)} kJ/mol"),
        _line("Minimum grain energy", f"{_fmt(grid.min_energy)} kJ/mol"),
        _line("Maximum grain energy", f"{_fmt(grid.max_energy)} kJ/mol"),
        _line("Number of unimolecular wells", len(network.uni_isomers)),
        _line("Number of multimolecular wells", len(network.multi_isomers)),
        _line("Number of reactions", len(orientations)),
        _line("Exponential down parameter", f"{_fmt(bath_gas.exp_down)} kJ/mol"),
        _line("Bath gas LJ sigma parameter", f"{_fmt(bath_gas.sigma)} m"),
        _line("Bath gas LJ epsilon parameter", f"{_fmt(bath_gas.epsilon)} J"),
        _line("Bath gas molecular weight", f"{_fmt(bath_gas.molecular_weight)} g/mol"),
        _line("Number of Chebyshev temperatures", n_cheb_T),
        _line("Number of Chebyshev pressures", n_cheb_P),
        "\n",
    ]

    for i, isomer in enumerate(network.uni_isomers):
        if not isomer.is_unimolecular:
            raise NetworkInputError(f"Well '{isomer}' is listed as unimolecular but has {isomer.num_species} species")
        lines += _unimolecular_block(i + 1, isomer)
    for i, isomer in enumerate(network.multi_isomers):
        if isomer.is_unimolecular:
            raise NetworkInputError(f"Well '{isomer}' is listed as multimolecular but has one species")
        lines += _multimolecular_block(i + 1, isomer)
    for orientation in orientations:
        lines += _reaction_block(orientation)
    lines.append("\n")
    return ''.join(lines)


def write_input_file(path, network, settings, grid, bath_gas, mode_name, run_count=0,
                     reverse_fitter=fit_reverse_kinetics):
    """
    Write the FAME input file for a network.

    The text is built completely before the file is touched and then moved
    into place, so an inconsistent network never leaves a partial input
    file behind. I/O errors propagate to the caller.
    """
    text = build_input(network, settings, grid, bath_gas, mode_name, run_count, reverse_fitter)
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix='.fame_input_', suffix='.tmp', dir=directory)
    try:
        with os.fdopen(fd, 'w') as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    logger.debug(f"Wrote FAME input for network {network.id} to {path}")
    return path
