# main.py

import sys
import logging
import argparse

from pdepkin.bath_gas import load_colliders
from pdepkin.case_utils import case_name, resolve_config_path
from pdepkin.chemistry import ReactionSystem
from pdepkin.config_parser import build_settings, get_mode, load_config
from pdepkin.estimator import EstimationContext, EstimationStatus, PDepKineticsEstimator
from pdepkin.network_parser import load_network
from pdepkin.reaction_model import CoreEdgeReactionModel
from pdepkin.results import plot_rate_coefficients, save_results_txt, save_results_yaml
from pdepkin.solver import FameSolver


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Estimate k(T, P) for a pressure-dependent network with FAME.")
    parser.add_argument("case", help="Case name under cases/, a case folder, or a config.yml path")
    parser.add_argument("--cases-dir", default="cases", help="Folder holding case subfolders")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def main(argv=None):
    """
    Run the pressure-dependent kinetics estimation for one case and save
    the net reactions next to its config file.
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config_path = resolve_config_path(args.case, args.cases_dir)
        print(f"Loading configuration from: {config_path}")
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}")
        return 1

    name = config.get('name', case_name(config_path))
    network, core_species = load_network(config['network_file'])
    print(f"Network {network.id} loaded for case '{name}'")

    rs = config['reaction_system']
    reaction_system = ReactionSystem(rs['temperature_K'], rs['pressure_bar'], rs['bath_gas'])
    colliders = load_colliders(config.get('colliders_file'))
    settings = build_settings(config)

    solver_config = config['solver']
    solver = FameSolver(
        executable=solver_config.get('executable'),
        install_root=solver_config.get('install_root'),
    )
    estimator = PDepKineticsEstimator(
        solver,
        solver_config['working_dir'],
        settings=settings,
        reaction_model=CoreEdgeReactionModel(core_species),
        colliders=colliders,
        isolate_networks=solver_config.get('isolate_networks', False),
        timeout=solver_config.get('timeout_s'),
    )

    context = EstimationContext(get_mode(config))
    result = estimator.estimate(network, reaction_system, context)
    print(f"Estimation finished: {result.status.value} ({len(network.net_reactions)} net reactions)")
    if not result.updated:
        return 0 if result.status is EstimationStatus.SKIPPED else 2

    output = config.get('output', {})
    if output.get('results_file'):
        save_results_txt(network, output['results_file'], settings['temperatures'], settings['pressures'])
    if output.get('yaml_file'):
        save_results_yaml(network, output['yaml_file'])
    if output.get('plot_file'):
        plot_rate_coefficients(network, settings['pressures'], output_filename=output['plot_file'])
    return 0


if __name__ == '__main__':
    sys.exit(main())
