"""
Arrhenius kinetics for path reactions and the reverse-kinetics fit used
when a path reaction is stored against its kinetic direction.

Units follow the network files: A in s^-1 (or cm^3/mol/s for bimolecular
steps), Ea in kcal/mol, T in K.
"""

import logging
from typing import Optional, Sequence

import numpy as np
from scipy import constants

logger = logging.getLogger(__name__)

# Gas constant in kcal/(mol K)
R_KCAL = constants.R / constants.calorie / 1000.0
# Standard-state pressure in Pa
P_STANDARD = 1.0e5

DEFAULT_FIT_TEMPERATURES = np.linspace(300.0, 2100.0, 19)


class ArrheniusKinetics:
    """Modified Arrhenius expression k(T) = A * T^n * exp(-Ea / RT)."""

    def __init__(self, A: float, n: float = 0.0, Ea: float = 0.0):
        self.A = float(A)
        self.n = float(n)
        self.Ea = float(Ea)

    def rate_coefficient(self, temperature: float) -> float:
        return self.A * temperature ** self.n * np.exp(-self.Ea / (R_KCAL * temperature))

    def __repr__(self):
        return f"ArrheniusKinetics(A={self.A!r}, n={self.n!r}, Ea={self.Ea!r})"


def equilibrium_constant(reactant, product, temperature: float) -> float:
    """Concentration-based equilibrium constant Kc for reactant <=> product.

    Kc = exp(-dG / RT) * (P0 / RT)^dn, with concentrations in mol/cm^3.
    """
    dG = product.free_energy(temperature) - reactant.free_energy(temperature)
    dn = len(product.species) - len(reactant.species)
    c_standard = P_STANDARD / (constants.R * temperature) * 1.0e-6
    return float(np.exp(-dG / (R_KCAL * temperature)) * c_standard ** dn)


def fit_arrhenius(temperatures: Sequence[float], rates: Sequence[float]) -> ArrheniusKinetics:
    """Least-squares fit of ln k = ln A + n ln T - Ea / RT."""
    T = np.asarray(temperatures, dtype=float)
    k = np.asarray(rates, dtype=float)
    if np.any(k <= 0) or not np.all(np.isfinite(k)):
        raise ValueError("Arrhenius fit requires finite, positive rate coefficients")
    design = np.column_stack([np.ones_like(T), np.log(T), -1.0 / (R_KCAL * T)])
    coeffs, _, _, _ = np.linalg.lstsq(design, np.log(k), rcond=None)
    return ArrheniusKinetics(A=float(np.exp(coeffs[0])), n=float(coeffs[1]), Ea=float(coeffs[2]))


def fit_reverse_kinetics(reaction, temperatures: Optional[Sequence[float]] = None) -> ArrheniusKinetics:
    """Fit Arrhenius kinetics for the product -> reactant direction of a path reaction.

    The reverse rate follows detailed balance, k_r(T) = k_f(T) / Kc(T),
    sampled over the temperature ladder and refitted. The path reaction is
    left untouched.

    Args:
        reaction: PathReaction with resolved reactant and product isomers.
        temperatures: Sampling temperatures in K (defaults to 300-2100 K).

    Returns:
        ArrheniusKinetics for the reverse direction.
    """
    if reaction.reactant is None or reaction.product is None:
        raise ValueError(f"Cannot fit reverse kinetics for {reaction}: unresolved isomer")
    if temperatures is None:
        temperatures = DEFAULT_FIT_TEMPERATURES
    kf = reaction.kinetics
    rates = [
        kf.rate_coefficient(T) / equilibrium_constant(reaction.reactant, reaction.product, T)
        for T in temperatures
    ]
    reverse = fit_arrhenius(temperatures, rates)
    logger.debug(f"Fitted reverse kinetics for {reaction}: {reverse}")
    return reverse
