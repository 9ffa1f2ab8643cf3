# pdepkin/results.py
"""
Reporting of estimated net reactions: text tables, YAML dumps and k(T) plots.
"""

import logging

import numpy as np
import yaml
import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)


def net_reaction_records(network):
    """Plain-data description of every net reaction (for YAML/JSON output)."""
    records = []
    for rxn in network.net_reactions:
        record = {
            'reactant': rxn.reactant.label,
            'product': rxn.product.label,
            'chebyshev': rxn.surface.to_dict(),
        }
        if rxn.reverse is not None:
            record['reverse'] = {
                'reactant': rxn.reverse.reactant.label,
                'product': rxn.reverse.product.label,
                'chebyshev': rxn.reverse.surface.to_dict(),
            }
        records.append(record)
    return records


def save_results_yaml(network, output_filename):
    data = {
        'network': network.id,
        'net_reactions': net_reaction_records(network),
        'included': [str(r) for r in network.included_reactions],
        'nonincluded': [str(r) for r in network.nonincluded_reactions],
    }
    with open(output_filename, 'w') as f:
        yaml.safe_dump(data, f, sort_keys=False)
    logger.info(f"Net reactions saved to '{output_filename}'")


def save_results_txt(network, output_filename, temperatures, pressures):
    """
    Save k(T, P) of every net reaction (and its reverse) to a text file
    in gnuplot-compatible format: one block per reaction, one row per
    temperature, one column per pressure.
    """
    if not network.net_reactions:
        logger.warning(f"Network {network.id} has no net reactions to save.")
        return

    with open(output_filename, 'w') as f:
        f.write(f"# Net reactions of pressure-dependent network {network.id}\n")
        for net in network.net_reactions:
            for rxn in (net, net.reverse):
                if rxn is None:
                    continue
                f.write(f"\n# {rxn}\n")
                f.write("# T(K)")
                for P in pressures:
                    f.write(f"\t{P:g}bar")
                f.write("\n")
                for T in temperatures:
                    f.write(f"{T:.1f}")
                    for P in pressures:
                        f.write(f"\t{float(rxn.get_rate_coefficient(T, P)):.6e}")
                    f.write("\n")
    logger.info(f"Results successfully saved to '{output_filename}'")


def plot_rate_coefficients(network, pressures, output_filename=None, return_figure=False, num_points=50):
    """
    Plot log10 k against 1000/T for every net reaction, one curve per pressure.

    Args:
        network: ReactionNetwork with net reactions
        pressures (list): Pressures in bar
        output_filename (str, optional): Saves the plot to this file path
        return_figure (bool, optional): Return the figure instead of saving it
        num_points (int): Temperature samples per curve
    """
    reactions = network.net_reactions
    if not reactions:
        logger.warning(f"Network {network.id} has no net reactions to plot.")
        return None

    fig, axes = plt.subplots(len(reactions), 1, figsize=(8, 3.5 * len(reactions)), squeeze=False)
    fig.suptitle(f'Net reactions of network {network.id}', fontsize=14)

    for ax, rxn in zip(axes[:, 0], reactions):
        surface = rxn.surface
        T = np.linspace(surface.Tmin, surface.Tmax, num_points)
        for P in pressures:
            P = min(max(P, surface.Pmin), surface.Pmax)
            ax.plot(1000.0 / T, np.log10(rxn.get_rate_coefficient(T, P)), label=f'{P:g} bar')
        ax.set_title(str(rxn))
        ax.set_xlabel('1000 / T (1/K)')
        ax.set_ylabel('log10 k')
        ax.grid(True, ls='--')
        ax.legend(fontsize='small')

    fig.tight_layout(rect=[0, 0, 1, 0.97])

    if return_figure:
        return fig
    if output_filename:
        fig.savefig(output_filename, dpi=150)
        logger.info(f"Plot successfully saved to '{output_filename}'")
    plt.close(fig)
    return None
