# pdepkin/bath_gas.py
"""
Collision parameters of the bath gas a reaction system is diluted in.
"""

import os
import logging

import yaml
from scipy import constants

logger = logging.getLogger(__name__)

DEFAULT_COLLIDERS_PATH = os.path.join(os.path.dirname(__file__), 'data', 'colliders.yml')


class BathGasSummary:
    """Mole-fraction-weighted collision parameters of a bath gas.

    exp_down in kJ/mol, sigma in m, epsilon in J, molecular_weight in g/mol.
    """
    def __init__(self, exp_down, sigma, epsilon, molecular_weight):
        self.exp_down = exp_down
        self.sigma = sigma
        self.epsilon = epsilon
        self.molecular_weight = molecular_weight

    def __repr__(self):
        return (f"BathGasSummary(exp_down={self.exp_down}, sigma={self.sigma}, "
                f"epsilon={self.epsilon}, molecular_weight={self.molecular_weight})")


def load_colliders(path=None):
    """Load the collider library (name -> properties dict) from YAML."""
    path = path or DEFAULT_COLLIDERS_PATH
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Collider library not found: {path}")
    with open(path, 'r') as f:
        colliders = yaml.safe_load(f) or {}
    for name, props in colliders.items():
        missing = {'sigma', 'epsilon', 'molecular_weight', 'exp_down'} - set(props)
        if missing:
            raise ValueError(f"Collider '{name}' in {path} is missing {sorted(missing)}")
    return colliders


def summarize_bath_gas(reaction_system, colliders=None):
    """
    Aggregate the bath-gas composition of a reaction system into the four
    scalars the solver needs. Recomputed on every call since the composition
    may change between estimations.

    Args:
        reaction_system: ReactionSystem with a `bath_gas` {name: mole fraction} mapping
        colliders (dict): Collider library; defaults to data/colliders.yml

    Returns:
        BathGasSummary
    """
    if colliders is None:
        colliders = load_colliders()

    composition = reaction_system.bath_gas
    if not composition:
        raise ValueError("Reaction system has no bath gas")
    for name, fraction in composition.items():
        if name not in colliders:
            raise ValueError(f"Unknown bath gas '{name}'. Available: {sorted(colliders)}")
        if fraction < 0:
            raise ValueError(f"Negative mole fraction for bath gas '{name}': {fraction}")
    total = sum(composition.values())
    if total <= 0:
        raise ValueError("Bath gas mole fractions must sum to a positive value")

    exp_down = sigma = epsilon = mw = 0.0
    for name, fraction in composition.items():
        x = fraction / total
        props = colliders[name]
        exp_down += x * props['exp_down']
        sigma += x * props['sigma']
        epsilon += x * props['epsilon']
        mw += x * props['molecular_weight']

    summary = BathGasSummary(
        exp_down=exp_down,
        sigma=sigma * 1e-10,
        epsilon=epsilon * constants.k,
        molecular_weight=mw,
    )
    logger.debug(f"Bath gas {composition}: {summary}")
    return summary
