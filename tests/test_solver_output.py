import os
import tempfile
import unittest
from pathlib import Path

from pdepkin.solver_output import (
    SolverOutputError,
    pair_reverse_reactions,
    parse_coefficients,
    read_output_file,
)

from network_fixtures import propyl_network

HEADER = """# FAME output
Number of unimolecular wells        2
Number of multimolecular wells      1
Number of Chebyshev temperatures    2
Number of Chebyshev pressures       2
Temperature range of fit            300.0 - 2100.0 K
Pressure range of fit               0.01 - 100.0 bar
Some future field                   42

"""


def block(i, j, rows):
    text = f"# Rate from well {j} to well {i}\n"
    for row in rows:
        text += '    '.join(str(v) for v in row) + "\n"
    return text + "\n"


def all_blocks(n=3, bad=None):
    """Blocks for every ordered pair; `bad` maps (i, j) to replacement rows."""
    bad = bad or {}
    text = ''
    for i in range(1, n + 1):
        for j in range(1, n + 1):
            if i != j:
                text += block(i, j, bad.get((i, j), [[10.0 - i, 0.1], [0.5, float(j)]]))
    return text


class TestReadOutputFile(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)
        self.output = self.dir / 'fame_output.txt'
        self.legacy = self.dir / 'fort.2'
        self.network = propyl_network()

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, text, path=None):
        (path or self.output).write_text(text)

    def test_valid_output(self):
        self.write(HEADER + all_blocks())
        parsed = read_output_file(self.network, self.output, self.legacy)
        self.assertTrue(parsed.valid)
        self.assertEqual(parsed.header['num_temperatures'], 2)
        self.assertEqual(parsed.header['Pmax'], 100.0)
        # 6 ordered pairs collapse to 3 reactions with reverses
        self.assertEqual(len(parsed.net_reactions), 3)
        for rxn in parsed.net_reactions:
            self.assertIsNotNone(rxn.reverse)
            self.assertIs(rxn.reverse.reverse, rxn)
            self.assertIsNot(rxn.reactant, rxn.product)

    def test_block_orientation(self):
        self.write(HEADER + all_blocks())
        parsed = read_output_file(self.network, self.output)
        # First block is (i=1, j=2): net reaction from well 2 to well 1
        first = parsed.net_reactions[0]
        self.assertIs(first.reactant, self.network.uni_isomers[1])
        self.assertIs(first.product, self.network.uni_isomers[0])
        self.assertEqual(first.surface.coeffs[0, 0], 9.0)

    def test_invalid_blocks_ignored(self):
        bad = {(1, 2): [[0.0, 0.1], [0.5, 0.02]], (2, 3): [['nan', 0.1], [0.5, 0.02]],
               (3, 1): [[1.0, 'inf'], [0.5, 0.02]]}
        self.write(HEADER + all_blocks(bad=bad))
        parsed = read_output_file(self.network, self.output)
        self.assertFalse(parsed.valid)
        self.assertTrue(parsed.ignored_rate)
        pairs = {(r.reactant.label, r.product.label) for r in parsed.net_reactions}
        self.assertNotIn(('iC3H7', 'nC3H7'), pairs)
        self.assertNotIn(('C2H4 + CH3', 'iC3H7'), pairs)
        self.assertLessEqual(len(parsed.net_reactions), 3)

    def test_legacy_output_file(self):
        self.write(HEADER + all_blocks(), self.legacy)
        parsed = read_output_file(self.network, self.output, self.legacy)
        self.assertEqual(parsed.path, self.legacy)
        self.assertEqual(len(parsed.net_reactions), 3)

    def test_missing_output(self):
        with self.assertRaisesRegex(SolverOutputError, "FAME output file not found!"):
            read_output_file(self.network, self.output, self.legacy)

    def test_empty_output(self):
        self.write('')
        with self.assertRaises(SolverOutputError):
            read_output_file(self.network, self.output)

    def test_header_without_terminator(self):
        self.write(HEADER.rstrip('\n'))
        with self.assertRaises(SolverOutputError):
            read_output_file(self.network, self.output)

    def test_well_count_mismatch(self):
        self.write(HEADER.replace("wells      1", "wells      2") + all_blocks(4))
        with self.assertRaises(SolverOutputError):
            read_output_file(self.network, self.output)

    def test_degenerate_fit_range(self):
        headers = [
            HEADER.replace("300.0 - 2100.0 K", "300.0 - 300.0 K"),
            HEADER.replace("300.0 - 2100.0 K", "2100.0 - 300.0 K"),
            HEADER.replace("0.01 - 100.0 bar", "100.0 - 0.01 bar"),
            HEADER.replace("0.01 - 100.0 bar", "0.0 - 100.0 bar"),
        ]
        for header in headers:
            self.write(header + all_blocks())
            with self.assertRaises(SolverOutputError):
                read_output_file(self.network, self.output)

    def test_truncated_output(self):
        self.write(HEADER + block(1, 2, [[9.0, 0.1], [0.5, 2.0]]) + block(1, 3, [[9.0, 0.1], [0.5, 3.0]]))
        with self.assertLogs('pdepkin.solver_output', level='WARNING'):
            parsed = read_output_file(self.network, self.output)
        self.assertEqual(len(parsed.net_reactions), 2)


class TestHelpers(unittest.TestCase):
    def test_parse_coefficients(self):
        alpha = parse_coefficients(["1.0 2.0", "3.0 4.0"], 2, 2)
        self.assertEqual(alpha.tolist(), [[1.0, 2.0], [3.0, 4.0]])
        self.assertIsNone(parse_coefficients(["1.0 2.0"], 2, 2))
        self.assertIsNone(parse_coefficients(["1.0", "3.0 4.0"], 2, 2))
        self.assertIsNone(parse_coefficients(["1.0 x", "3.0 4.0"], 2, 2))
        self.assertIsNone(parse_coefficients(["1.0 2.0", "0.0 4.0"], 2, 2))

    def test_unpaired_reaction_kept(self):
        network = propyl_network()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        path = os.path.join(tmp.name, 'fame_output.txt')
        with open(path, 'w') as f:
            f.write(HEADER + all_blocks(bad={(2, 1): [[0.0, 1.0], [1.0, 1.0]]}))
        parsed = read_output_file(network, path)
        unpaired = [r for r in parsed.net_reactions if r.reverse is None]
        self.assertEqual(len(unpaired), 1)
        self.assertEqual(len(pair_reverse_reactions(list(parsed.net_reactions))), 3)


if __name__ == '__main__':
    unittest.main()
