import re
import logging

logger = logging.getLogger(__name__)

# Atomic masses in amu (from NIST)
ATOMIC_MASSES = {
    'H': 1.008,
    'He': 4.0026,
    'C': 12.011,
    'N': 14.007,
    'O': 15.999,
    'F': 18.998,
    'Ne': 20.180,
    'Si': 28.085,
    'S': 32.06,
    'Cl': 35.45,
    'Ar': 39.948,
    'Kr': 83.798,
    'Br': 79.904,
    'I': 126.90,
    'Xe': 131.29,
}


def parse_formula(formula):
    """
    Split a chemical formula into element counts.

    Examples:
        'C3H7'  -> {'C': 3, 'H': 7}
        'CH3OH' -> {'C': 1, 'H': 4, 'O': 1}
        'Ar'    -> {'Ar': 1}

    Charge suffixes and bracketed state labels (e.g. 'N2[v1]', 'O2+')
    are stripped before parsing.

    Returns:
        dict: element symbol -> count. Empty if nothing could be parsed.
    """
    base = re.sub(r'\[.*?\]', '', formula.strip())
    base = re.sub(r'[+-]\d*$', '', base)

    counts = {}
    for atom, count in re.findall(r'([A-Z][a-z]?)(\d*)', base):
        n = int(count) if count else 1
        counts[atom] = counts.get(atom, 0) + n
    return counts


def atom_count(formula):
    """Total number of atoms in a formula."""
    return sum(parse_formula(formula).values())


def is_monatomic(formula):
    return atom_count(formula) == 1


def molecular_weight(formula):
    """
    Calculate molecular weight in g/mol for a chemical formula.
    Returns None if the formula cannot be parsed or holds an unknown element.
    """
    counts = parse_formula(formula)
    if not counts:
        return None

    total_mass = 0.0
    for atom, n in counts.items():
        if atom not in ATOMIC_MASSES:
            logger.warning(f"Atomic mass for element '{atom}' not found (formula: {formula}).")
            return None
        total_mass += ATOMIC_MASSES[atom] * n
    return total_mass
