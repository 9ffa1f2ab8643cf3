"""Runs main.py on a copy of the propyl radical case with the fake FAME executable."""
import os
import shutil
import tempfile
import unittest

import matplotlib
matplotlib.use('Agg')
import yaml

import main

from network_fixtures import make_fake_fame

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.case_dir = os.path.join(self.tmp.name, 'cases', 'propyl_radical')
        shutil.copytree(os.path.join(ROOT, 'cases', 'propyl_radical'), self.case_dir)
        self.config_path = os.path.join(self.case_dir, 'config.yml')

    def tearDown(self):
        self.tmp.cleanup()

    def configure(self, **behaviour):
        exe = make_fake_fame(os.path.join(self.tmp.name, 'bin'), **behaviour)
        with open(self.config_path) as f:
            config = yaml.safe_load(f)
        config['solver'] = {'executable': str(exe), 'working_dir': 'fame', 'timeout_s': 60}
        config['output']['plot_file'] = 'propyl_radical_kTP.png'
        with open(self.config_path, 'w') as f:
            yaml.safe_dump(config, f)

    def test_run_case(self):
        self.configure()
        status = main.main(['propyl_radical', '--cases-dir', os.path.join(self.tmp.name, 'cases')])
        self.assertEqual(status, 0)
        for name in ('propyl_radical_kTP.txt', 'propyl_radical_net_reactions.yml', 'propyl_radical_kTP.png',
                     os.path.join('fame', '0007_input.txt'), os.path.join('fame', '0007_output.txt')):
            self.assertTrue(os.path.isfile(os.path.join(self.case_dir, name)), msg=name)

        with open(os.path.join(self.case_dir, 'fame', '0007_input.txt')) as f:
            text = f.read()
        self.assertEqual(text.count("# Reaction "), 4)

    def test_not_updated(self):
        self.configure(invalid_modes=['ReservoirState', 'ModifiedStrongCollision'])
        self.assertEqual(main.main([self.config_path]), 2)
        self.assertFalse(os.path.exists(os.path.join(self.case_dir, 'propyl_radical_kTP.txt')))

    def test_unknown_case(self):
        self.assertEqual(main.main(['no_such_case', '--cases-dir', os.path.join(self.tmp.name, 'cases')]), 1)


if __name__ == '__main__':
    unittest.main()
