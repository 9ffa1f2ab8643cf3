"""
config_parser.py
Loader and validator for pdepkin case config.yml files.
Supports Jinja2 templating for parameter sweeps (e.g. bath gas or pressure ladders).
"""
import os
import json
import logging

import yaml
import jsonschema
from jinja2 import Environment, FileSystemLoader

from pdepkin.estimator import DEFAULT_SETTINGS, EstimationMode

logger = logging.getLogger(__name__)

DEFAULT_WORKING_DIR = 'fame'


def load_schema():
    """Load the config schema from config_schema.json"""
    schema_path = os.path.join(os.path.dirname(__file__), 'config_schema.json')
    with open(schema_path, 'r') as f:
        return json.load(f)


def validate_config_schema(config):
    """
    Validate config against the JSON schema.
    Raises jsonschema.ValidationError if config is invalid.
    """
    try:
        jsonschema.validate(instance=config, schema=load_schema())
    except jsonschema.ValidationError as e:
        logger.error(f"Config validation failed: {e.message} "
                     f"(path: {' -> '.join(str(p) for p in e.path)})")
        raise
    logger.debug("Config validation passed")


def _resolve(base_dir, path):
    if path is None:
        return None
    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return path
    return os.path.join(base_dir, path)


def load_config(config_path, use_jinja2=False, jinja_vars=None, validate=True):
    """
    Loads and validates a pdepkin config.yml file.
    If use_jinja2 is True, renders with Jinja2 before parsing YAML.
    Relative paths (network file, solver root, working directory, outputs)
    are resolved against the config file's folder.

    Args:
        config_path (str): Path to config.yml
        use_jinja2 (bool): Whether to use Jinja2 templating
        jinja_vars (dict): Variables for Jinja2 rendering
        validate (bool): Validate against config_schema.json
    Returns:
        dict: Parsed config dictionary
    """
    if not os.path.isfile(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    config_dir = os.path.dirname(os.path.abspath(config_path))
    if use_jinja2:
        env = Environment(loader=FileSystemLoader(config_dir))
        template = env.get_template(os.path.basename(config_path))
        rendered = template.render(jinja_vars or {})
        config = yaml.safe_load(rendered)
    else:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} does not contain a mapping")

    # Scientific notation like 1e-2 is read as a string by YAML 1.1
    for key in ('temperatures_K', 'pressures_bar'):
        values = config.get('pdep', {}).get(key)
        if values:
            config['pdep'][key] = [float(v) if isinstance(v, str) else v for v in values]

    if validate:
        validate_config_schema(config)

    config['network_file'] = _resolve(config_dir, config['network']['file'])

    solver = config.setdefault('solver', {})
    solver['install_root'] = _resolve(config_dir, solver.get('install_root'))
    solver['executable'] = _resolve(config_dir, solver.get('executable'))
    solver['working_dir'] = _resolve(config_dir, solver.get('working_dir', DEFAULT_WORKING_DIR))

    if 'colliders_file' in config:
        config['colliders_file'] = _resolve(config_dir, config['colliders_file'])

    output = config.setdefault('output', {})
    for key in list(output):
        output[key] = _resolve(config_dir, output[key])

    # Fail early on a misspelled method
    EstimationMode.from_string(config.get('pdep', {}).get('method', 'reservoir state'))
    return config


def build_settings(config):
    """Estimator settings from the 'pdep' section, with defaults for anything unset."""
    pdep = config.get('pdep', {})
    chebyshev = pdep.get('chebyshev', {})
    settings = dict(DEFAULT_SETTINGS)
    if 'temperatures_K' in pdep:
        settings['temperatures'] = [float(T) for T in pdep['temperatures_K']]
    if 'pressures_bar' in pdep:
        settings['pressures'] = [float(P) for P in pdep['pressures_bar']]
    if 'temperatures' in chebyshev:
        settings['chebyshev_temperatures'] = int(chebyshev['temperatures'])
    if 'pressures' in chebyshev:
        settings['chebyshev_pressures'] = int(chebyshev['pressures'])
    if 'grain_max_temperature_K' in pdep:
        settings['grain_max_temperature'] = float(pdep['grain_max_temperature_K'])
    return settings


def get_mode(config):
    return EstimationMode.from_string(config.get('pdep', {}).get('method', 'reservoir state'))
