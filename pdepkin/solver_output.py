# pdepkin/solver_output.py
"""
Parser for the FAME output file.

Layout:
    header      'Key<whitespace>Value' lines, '#' comments, ended by a blank line
    body        one block per ordered pair of wells (i, j), i != j:
                    a comment line
                    one line per Chebyshev temperature order, holding one
                    coefficient per Chebyshev pressure order
                    a blank separator line

Block (i, j) is the net reaction from well j to well i.
"""

import math
import logging
from pathlib import Path
from typing import Dict, List

import numpy as np

from pdepkin.chebyshev import ChebyshevSurface
from pdepkin.chemistry import NetReaction

logger = logging.getLogger(__name__)

HEADER_FIELDS = {
    "Number of unimolecular wells": 'num_uni_wells',
    "Number of multimolecular wells": 'num_multi_wells',
    "Number of Chebyshev temperatures": 'num_temperatures',
    "Number of Chebyshev pressures": 'num_pressures',
}
T_RANGE_PREFIX = "Temperature range of fit"
P_RANGE_PREFIX = "Pressure range of fit"
REQUIRED_HEADER = ('num_uni_wells', 'num_multi_wells', 'num_temperatures', 'num_pressures',
                   'Tmin', 'Tmax', 'Pmin', 'Pmax')


class SolverOutputError(IOError):
    """The FAME output file is missing, empty or structurally unreadable."""


class ParsedOutput:
    """Net reactions read from one FAME output file.

    `ignored_rate` is True when at least one coefficient block was invalid
    and its reaction was dropped.
    """
    def __init__(self, net_reactions, ignored_rate, header, path=None):
        self.net_reactions = net_reactions
        self.ignored_rate = ignored_rate
        self.header = header
        self.path = path

    @property
    def valid(self) -> bool:
        return not self.ignored_rate


def locate_output_file(output_path, legacy_path=None) -> Path:
    """Return the output file to read, falling back to the legacy name."""
    output_path = Path(output_path)
    if not output_path.exists() and legacy_path is not None:
        output_path = Path(legacy_path)
    if not output_path.exists():
        raise SolverOutputError("FAME output file not found!")
    if output_path.stat().st_size == 0:
        raise SolverOutputError(f"FAME output file {output_path} is empty")
    return output_path


def _parse_range(text):
    tokens = text.split()
    # '<min> <unit or dash> <max> ...'
    return float(tokens[0]), float(tokens[2])


def parse_header(lines) -> Dict:
    """
    Consume header lines from an iterator up to and including the blank terminator.

    Raises:
        SolverOutputError: if the file ends before the header does, or a
            recognised field cannot be read
    """
    header = {}
    for raw in lines:
        line = raw.strip()
        if not line:
            return header
        if line.startswith('#'):
            continue
        try:
            for prefix, key in HEADER_FIELDS.items():
                if line.startswith(prefix):
                    header[key] = int(line[len(prefix):].strip())
                    break
            else:
                if line.startswith(T_RANGE_PREFIX):
                    header['Tmin'], header['Tmax'] = _parse_range(line[len(T_RANGE_PREFIX):])
                elif line.startswith(P_RANGE_PREFIX):
                    header['Pmin'], header['Pmax'] = _parse_range(line[len(P_RANGE_PREFIX):])
        except (ValueError, IndexError) as e:
            raise SolverOutputError(f"Malformed FAME output header line '{line}': {e}") from e
    raise SolverOutputError("FAME output ended inside the header")


def parse_coefficients(rows, num_temperatures, num_pressures):
    """
    Convert coefficient rows into a matrix.

    Returns None when the block is invalid: a coefficient that is zero, NaN,
    infinite or unreadable, or a row that is short.
    """
    if len(rows) < num_temperatures:
        return None
    alpha = np.zeros((num_temperatures, num_pressures))
    for t in range(num_temperatures):
        tokens = rows[t].split()
        if len(tokens) < num_pressures:
            return None
        for p in range(num_pressures):
            try:
                value = float(tokens[p])
            except ValueError:
                return None
            if value == 0.0 or math.isnan(value) or math.isinf(value):
                return None
            alpha[t, p] = value
    return alpha


def pair_reverse_reactions(reactions: List[NetReaction]) -> List[NetReaction]:
    """
    Collapse forward/reverse pairs into one entry each.

    The first-emitted reaction of a pair is kept and the other is attached
    as its reverse (and vice versa). Unpaired reactions are kept as they are.
    """
    kept: List[NetReaction] = []
    for rxn in reactions:
        partner = None
        for other in kept:
            if other.reverse is None and other.reactant is rxn.product and other.product is rxn.reactant:
                partner = other
                break
        if partner is None:
            kept.append(rxn)
        else:
            partner.reverse = rxn
            rxn.reverse = partner
    return kept


def read_output_file(network, output_path, legacy_path=None) -> ParsedOutput:
    """
    Parse a FAME output file into net reactions for a network.

    Args:
        network: ReactionNetwork whose wells the output refers to
        output_path: Expected output file
        legacy_path: File to read instead if the expected one is missing

    Returns:
        ParsedOutput

    Raises:
        SolverOutputError: missing or empty file, or an unusable header
    """
    path = locate_output_file(output_path, legacy_path)
    with open(path, 'r') as f:
        lines = f.read().splitlines()

    it = iter(lines)
    header = parse_header(it)
    missing = [key for key in REQUIRED_HEADER if key not in header]
    if missing:
        raise SolverOutputError(f"FAME output header in {path} is missing {missing}")
    if not 0 < header['Tmin'] < header['Tmax']:
        raise SolverOutputError(f"Invalid temperature range of fit in {path}: {header['Tmin']} - {header['Tmax']} K")
    if not 0 < header['Pmin'] < header['Pmax']:
        raise SolverOutputError(f"Invalid pressure range of fit in {path}: {header['Pmin']} - {header['Pmax']} bar")
    if header['num_temperatures'] < 1 or header['num_pressures'] < 1:
        raise SolverOutputError(f"FAME output in {path} has no Chebyshev coefficients to read")
    num_wells =header['num_uni_wells'] + header['num_multi_wells']
    if (header['num_uni_wells'], header['num_multi_wells']) != (len(network.uni_isomers), len(network.multi_isomers)):
        raise SolverOutputError(
            f"FAME output has {header['num_uni_wells']}+{header['num_multi_wells']} wells, "
            f"network {network.id} has {len(network.uni_isomers)}+{len(network.multi_isomers)}"
        )

    n_T, n_P = header['num_temperatures'], header['num_pressures']
    body = list(it)
    cursor = 0
    block_length = n_T + 2
    reactions: List[NetReaction] = []
    ignored_rate = False
    truncated = False

    for i in range(num_wells):
        for j in range(num_wells):
            if i == j:
                continue
            if cursor >= len(body):
                truncated = True
                break
            block = body[cursor:cursor + block_length]
            cursor += block_length
            alpha = parse_coefficients(block[1:1 + n_T], n_T, n_P)
            # If the fitted rate coefficient is not valid, then don't add the net reaction
            if alpha is None:
                logger.debug(f"Ignoring invalid rate coefficient block for wells {j + 1} -> {i + 1}")
                ignored_rate = True
                continue
            surface = ChebyshevSurface(header['Tmin'], header['Tmax'], header['Pmin'], header['Pmax'], alpha)
            reactions.append(NetReaction(network.well_at(j), network.well_at(i), surface))
        if truncated:
            break

    if truncated:
        logger.warning(f"FAME output {path} ended before all {num_wells * (num_wells - 1)} rate blocks were read")

    net_reactions = pair_reverse_reactions(reactions)
    return ParsedOutput(net_reactions, ignored_rate, header, path)
