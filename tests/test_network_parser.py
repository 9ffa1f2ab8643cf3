import os
import tempfile
import unittest

import yaml

from pdepkin.chemistry import SpectroscopicData
from pdepkin.network_parser import load_network

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
PROPYL_NETWORK = os.path.join(ROOT, "cases", "propyl_radical", "network.yml")


def species_entry(name, id, formula=None, spectroscopy=True):
    entry = {
        'name': name,
        'id': id,
        'formula': formula or name,
        'thermo': {'H298': 10.0, 'S298': 50.0},
        'lennard_jones': {'sigma': 4.0, 'epsilon': 200.0},
    }
    if spectroscopy:
        entry['spectroscopy'] = {'vibrations': [1000.0], 'rotations': [1.0], 'symmetry': 2}
    return entry


class TestNetworkParser(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, data):
        path = os.path.join(self.tmp.name, 'network.yml')
        with open(path, 'w') as f:
            yaml.safe_dump(data, f)
        return path

    def test_load_case_network(self):
        network, core = load_network(PROPYL_NETWORK)
        self.assertEqual(network.id, 7)
        self.assertEqual([w.label for w in network.uni_isomers], ['nC3H7', 'iC3H7'])
        self.assertEqual([w.label for w in network.multi_isomers], ['C2H4 + CH3', 'C3H6 + H'])
        self.assertEqual(len(network.path_reactions), 4)
        self.assertIn('H', core)

        n_propyl = network.uni_isomers[0].species[0]
        self.assertEqual(n_propyl.spectroscopic_data.hindered_barriers, [1050.0, 1100.0])
        self.assertAlmostEqual(n_propyl.molecular_weight, 3 * 12.011 + 7 * 1.008, places=3)

        addition = network.path_reactions[3]
        self.assertFalse(addition.is_forward)
        self.assertIs(addition.reactant, network.multi_isomers[1])
        self.assertAlmostEqual(addition.kinetics.A, 5.7e9)

        hydrogen = network.multi_isomers[1].species[1]
        self.assertIsNone(hydrogen.spectroscopic_data)
        self.assertTrue(hydrogen.is_monatomic)

    def test_shared_species_objects(self):
        data = {
            'id': 1,
            'species': [species_entry('CH3', 1), species_entry('C2H6', 2), species_entry('H', 3)],
            'wells': [['C2H6'], ['CH3', 'CH3'], ['CH3', 'H']],
            'path_reactions': [{'reactant': 'C2H6', 'product': 'CH3 + CH3', 'A': 1e16, 'Ea': 88.0}],
        }
        network, core = load_network(self.write(data))
        self.assertEqual(core, [])
        self.assertIs(network.multi_isomers[0].species[0], network.multi_isomers[1].species[0])
        self.assertEqual(len(network.species), 3)

    def test_spectroscopy_source(self):
        data = {
            'species': [species_entry('CH3', 1, spectroscopy=False)],
            'wells': [['CH3']],
        }
        source = lambda s: SpectroscopicData([3000.0], [], [], 6)
        network, _ = load_network(self.write(data), spectroscopy_source=source)
        species = network.uni_isomers[0].species[0]
        self.assertEqual(species.generate_spectroscopic_data().symmetry, 6)

    def test_errors(self):
        bad_files = [
            {'species': [species_entry('CH3', 1)], 'wells': [['C2H6']]},
            {'species': [species_entry('CH3', 1), species_entry('CH3', 2)]},
            {'species': [species_entry('CH3', 1)], 'wells': [['CH3'], ['CH3']]},
            {'species': [species_entry('CH3', 1)], 'wells': [['CH3']],
             'path_reactions': [{'reactant': 'CH3', 'product': 'CH4', 'A': 1.0}]},
            {'species': [{'name': 'CH3', 'id': 1}]},
            {'species': [dict(species_entry('CH3', 1), thermo={'H298': 'hot', 'S298': 1.0})]},
        ]
        for data in bad_files:
            with self.assertRaises(ValueError, msg=str(data)):
                load_network(self.write(data))
        with self.assertRaises(FileNotFoundError):
            load_network(os.path.join(self.tmp.name, 'missing.yml'))


if __name__ == '__main__':
    unittest.main()
