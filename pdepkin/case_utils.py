# pdepkin/case_utils.py
"""
Utilities for discovering and managing case folders.

A case folder holds a config.yml and the network file it points to:

    cases/<name>/config.yml
    cases/<name>/network.yml
"""
import os


def discover_cases(cases_dir='cases'):
    """
    Discover all valid case folders in the cases/ directory.
    A valid case has a config.yml file.

    Returns:
        list: Sorted case names (subdirectory names)
    """
    if not os.path.isdir(cases_dir):
        return []
    return sorted(
        entry for entry in os.listdir(cases_dir)
        if os.path.isfile(get_case_config_path(entry, cases_dir))
    )


def get_case_config_path(case_name, cases_dir='cases'):
    return os.path.join(cases_dir, case_name, 'config.yml')


def resolve_config_path(case_or_path, cases_dir='cases'):
    """
    Accept either a path to a config file / case folder, or the name of a
    case under cases_dir, and return the config.yml path.
    """
    if os.path.isfile(case_or_path):
        return case_or_path
    if os.path.isdir(case_or_path):
        candidate = os.path.join(case_or_path, 'config.yml')
        if os.path.isfile(candidate):
            return candidate
    candidate = get_case_config_path(case_or_path, cases_dir)
    if os.path.isfile(candidate):
        return candidate
    available = discover_cases(cases_dir)
    raise FileNotFoundError(f"No case or config file '{case_or_path}'. Available cases: {available}")


def case_name(config_path):
    """Case folder name of a config file, e.g. cases/propyl/config.yml -> 'propyl'."""
    return os.path.basename(os.path.dirname(os.path.abspath(config_path)))
