# pdepkin/energy_grid.py
"""
Energy grain limits for the solver's energy-grained state space.
All energies in kJ/mol.
"""

import math

from scipy import constants

from pdepkin.chemistry import T_REF

KCAL_TO_KJ = 4.184
# Gas constant in kJ/(mol K)
R_KJ = constants.R / 1000.0
DEFAULT_MAX_TEMPERATURE = 2100.0


class EnergyGrid:
    def __init__(self, min_energy, max_energy, grain_size):
        self.min_energy = min_energy
        self.max_energy = max_energy
        self.grain_size = grain_size

    @property
    def num_grains(self):
        return int(round((self.max_energy - self.min_energy) / self.grain_size))

    def __repr__(self):
        return (f"EnergyGrid(min={self.min_energy} kJ/mol, max={self.max_energy} kJ/mol, "
                f"size={self.grain_size} kJ/mol)")


def grain_min_energy(isomers):
    """Lowest isomer enthalpy, rounded down to the nearest 10 kJ/mol."""
    Emin = min(isomer.enthalpy(T_REF) for isomer in isomers) * KCAL_TO_KJ
    return math.floor(Emin / 10.0) * 10.0


def grain_max_energy(isomers, T=DEFAULT_MAX_TEMPERATURE):
    """
    Highest isomer enthalpy plus 100 RT, rounded up to the nearest 10 kJ/mol.

    The margin keeps the equilibrium population of every well inside the
    grid at the hottest temperature of the calculation.
    """
    Emax = max(isomer.enthalpy(T_REF) for isomer in isomers) * KCAL_TO_KJ
    Emax += 100.0 * R_KJ * T
    return math.ceil(Emax / 10.0) * 10.0


def grain_divisor(num_uni_wells):
    """Number of grains across the energy range; coarser for larger networks."""
    if num_uni_wells < 5:
        return 200
    elif num_uni_wells < 10:
        return 100
    elif num_uni_wells < 20:
        return 50
    else:
        return 20


def plan_energy_grid(uni_isomers, multi_isomers, max_temperature=DEFAULT_MAX_TEMPERATURE):
    """
    Compute the minimum energy, maximum energy and grain size for a network.

    Args:
        uni_isomers (list): Unimolecular isomers of the network
        multi_isomers (list): Multimolecular isomers of the network
        max_temperature (float): Highest temperature of the calculation in K

    Returns:
        EnergyGrid
    """
    isomers = list(uni_isomers) + list(multi_isomers)
    if not isomers:
        raise ValueError("Cannot plan an energy grid for a network without isomers")
    Emin = grain_min_energy(isomers)
    Emax = grain_max_energy(isomers, max_temperature)
    size = (Emax - Emin) / grain_divisor(len(uni_isomers))
    return EnergyGrid(Emin, Emax, size)
