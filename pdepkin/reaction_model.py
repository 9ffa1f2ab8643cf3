# pdepkin/reaction_model.py

import logging

logger = logging.getLogger(__name__)


class CoreEdgeReactionModel:
    """
    Core/edge split of a mechanism.

    A net reaction belongs in the core ("included") when every species on
    both sides is already a core species; anything else stays on the edge.
    """
    def __init__(self, core_species=()):
        self.core_species = set(core_species)

    def add_core_species(self, name):
        self.core_species.add(name)

    def is_core_isomer(self, isomer):
        return all(s.name in self.core_species for s in isomer.species)

    def update_reaction_lists(self, network):
        """Sort the network's net reactions into included and nonincluded lists."""
        included, nonincluded = [], []
        for rxn in network.net_reactions:
            if self.is_core_isomer(rxn.reactant) and self.is_core_isomer(rxn.product):
                included.append(rxn)
            else:
                nonincluded.append(rxn)
        network.included_reactions = included
        network.nonincluded_reactions = nonincluded
        logger.debug(f"Network {network.id}: {len(included)} core, {len(nonincluded)} edge net reactions")
        return included, nonincluded
