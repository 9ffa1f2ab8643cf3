import os
import tempfile
import unittest

import jsonschema
import yaml

from pdepkin.case_utils import case_name, discover_cases, resolve_config_path
from pdepkin.config_parser import build_settings, get_mode, load_config
from pdepkin.estimator import DEFAULT_SETTINGS, EstimationMode

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CASES_DIR = os.path.join(ROOT, "cases")

MINIMAL = {
    'network': {'file': 'network.yml'},
    'reaction_system': {'temperature_K': 1000.0, 'pressure_bar': 1.0, 'bath_gas': {'N2': 1.0}},
}


class TestConfigParser(unittest.TestCase):
    def setUp(self):
        self.good_config = os.path.join(CASES_DIR, "propyl_radical", "config.yml")
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, data, name='config.yml'):
        path = os.path.join(self.tmp.name, name)
        with open(path, 'w') as f:
            if isinstance(data, str):
                f.write(data)
            else:
                yaml.safe_dump(data, f)
        return path

    def test_load_good_config(self):
        config = load_config(self.good_config)
        self.assertTrue(os.path.isabs(config['network_file']))
        self.assertTrue(os.path.isfile(config['network_file']))
        self.assertEqual(config['reaction_system']['bath_gas'], {'N2': 0.9, 'Ar': 0.1})
        self.assertEqual(config['solver']['working_dir'],
                         os.path.join(os.path.dirname(os.path.abspath(self.good_config)), 'fame'))
        self.assertIs(get_mode(config), EstimationMode.RESERVOIR_STATE)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_config(os.path.join(CASES_DIR, "propyl_radical", "missing.yml"))

    def test_missing_field(self):
        path = self.write({'network': {'file': 'network.yml'}})
        with self.assertRaises(jsonschema.exceptions.ValidationError):
            load_config(path)

    def test_negative_fraction_rejected(self):
        data = yaml.safe_load(yaml.safe_dump(MINIMAL))
        data['reaction_system']['bath_gas'] = {'N2': -1.0}
        with self.assertRaises(jsonschema.exceptions.ValidationError):
            load_config(self.write(data))

    def test_defaults(self):
        config = load_config(self.write(MINIMAL))
        self.assertEqual(build_settings(config), DEFAULT_SETTINGS)
        self.assertIs(get_mode(config), EstimationMode.RESERVOIR_STATE)
        self.assertEqual(config['solver']['working_dir'], os.path.join(self.tmp.name, 'fame'))
        self.assertIsNone(config['solver']['executable'])

    def test_settings_from_pdep_section(self):
        text = yaml.safe_dump(MINIMAL) + (
            "pdep:\n"
            "  method: modified strong collision\n"
            "  temperatures_K: [500, 1000, 1500]\n"
            "  pressures_bar: [1e-2, 1.0, 1e2]\n"
            "  chebyshev: {temperatures: 6, pressures: 3}\n"
        )
        config = load_config(self.write(text))
        settings = build_settings(config)
        self.assertEqual(settings['temperatures'], [500.0, 1000.0, 1500.0])
        self.assertEqual(settings['pressures'], [0.01, 1.0, 100.0])
        self.assertEqual(settings['chebyshev_temperatures'], 6)
        self.assertEqual(settings['chebyshev_pressures'], 3)
        self.assertIs(get_mode(config), EstimationMode.STRONG_COLLISION)

    def test_unknown_method(self):
        data = dict(MINIMAL, pdep={'method': 'steady state'})
        with self.assertRaises(ValueError):
            load_config(self.write(data))

    def test_jinja2_template(self):
        text = (
            "network:\n  file: network.yml\n"
            "reaction_system:\n"
            "  temperature_K: {{ T }}\n  pressure_bar: {{ P }}\n"
            "  bath_gas:\n    {{ gas }}: 1.0\n"
        )
        path = self.write(text, 'template.yml')
        config = load_config(path, use_jinja2=True, jinja_vars={'T': 1200, 'P': 10.0, 'gas': 'Ar'})
        self.assertEqual(config['reaction_system']['temperature_K'], 1200)
        self.assertEqual(config['reaction_system']['bath_gas'], {'Ar': 1.0})


class TestCaseUtils(unittest.TestCase):
    def test_discover_cases(self):
        self.assertIn('propyl_radical', discover_cases(CASES_DIR))
        self.assertEqual(discover_cases(os.path.join(CASES_DIR, 'nothing_here')), [])

    def test_resolve_config_path(self):
        path = resolve_config_path('propyl_radical', CASES_DIR)
        self.assertEqual(path, os.path.join(CASES_DIR, 'propyl_radical', 'config.yml'))
        self.assertEqual(resolve_config_path(os.path.join(CASES_DIR, 'propyl_radical'), CASES_DIR), path)
        self.assertEqual(case_name(path), 'propyl_radical')

    def test_unknown_case(self):
        with self.assertRaisesRegex(FileNotFoundError, 'propyl_radical'):
            resolve_config_path('no_such_case', CASES_DIR)


if __name__ == '__main__':
    unittest.main()
