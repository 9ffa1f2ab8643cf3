# pdepkin/chemistry.py

import math
import threading

from pdepkin.species_properties import is_monatomic, molecular_weight

T_REF = 298.0


class SpeciesThermo:
    """Constant-Cp thermochemistry referenced to 298 K.

    H298 in kcal/mol, S298 and Cp in cal/(mol K).
    """
    def __init__(self, H298, S298, Cp=0.0):
        self.H298 = float(H298)
        self.S298 = float(S298)
        self.Cp = float(Cp)

    def enthalpy(self, T):
        return self.H298 + self.Cp * (T - T_REF) / 1000.0

    def entropy(self, T):
        return self.S298 + self.Cp * math.log(T / T_REF)

    def free_energy(self, T):
        return self.enthalpy(T) - T * self.entropy(T) / 1000.0


class LennardJones:
    """Lennard-Jones collision parameters: sigma in angstrom, epsilon/k_B in K."""
    def __init__(self, sigma, epsilon):
        self.sigma = float(sigma)
        self.epsilon = float(epsilon)


class SpectroscopicData:
    """Vibrational and rotational modes of a species, all in cm^-1."""
    def __init__(self, vibrations=(), rotations=(), hindered_rotors=(), symmetry=1):
        self.vibrations = [float(v) for v in vibrations]
        self.rotations = [float(r) for r in rotations]
        self.hindered_rotors = [(float(f), float(b)) for f, b in hindered_rotors]
        self.symmetry = int(symmetry)

    @property
    def hindered_frequencies(self):
        return [f for f, _ in self.hindered_rotors]

    @property
    def hindered_barriers(self):
        return [b for _, b in self.hindered_rotors]


class Species:
    """A chemical species with the thermo and spectroscopic data the solver needs."""

    def __init__(self, name, id, formula, thermo, lennard_jones=None,
                 molecular_weight_gmol=None, spectroscopic_data=None, spectroscopy_source=None):
        self.name = name
        self.id = int(id)
        self.formula = formula
        self.thermo = thermo
        self.lennard_jones = lennard_jones
        if molecular_weight_gmol is None:
            molecular_weight_gmol = molecular_weight(formula)
        self.molecular_weight = molecular_weight_gmol
        self.spectroscopic_data = spectroscopic_data
        self.spectroscopy_source = spectroscopy_source
        self._lock = threading.Lock()

    @property
    def is_monatomic(self):
        return is_monatomic(self.formula)

    def has_spectroscopic_data(self):
        return self.spectroscopic_data is not None

    def generate_spectroscopic_data(self):
        """
        Populate spectroscopic data on demand.

        Safe to call repeatedly and from several threads: the source runs at
        most once per species. Atoms have no internal modes, so a monatomic
        species without a source gets empty data.
        """
        with self._lock:
            if self.spectroscopic_data is not None:
                return self.spectroscopic_data
            if self.spectroscopy_source is not None:
                data = self.spectroscopy_source(self)
            elif self.is_monatomic:
                data = SpectroscopicData()
            else:
                raise ValueError(f"No spectroscopic data source available for species '{self.name}'")
            if data is None:
                raise ValueError(f"Spectroscopic data source returned nothing for species '{self.name}'")
            self.spectroscopic_data = data
            return data

    def enthalpy(self, T):
        return self.thermo.enthalpy(T)

    def entropy(self, T):
        return self.thermo.entropy(T)

    def free_energy(self, T):
        return self.thermo.free_energy(T)

    def __str__(self):
        return f"{self.name}({self.id})"

    def __repr__(self):
        return f"Species({self.name!r}, id={self.id})"


class Isomer:
    """A well on the potential energy surface: one or more species in contact."""

    def __init__(self, species, label=None):
        self.species = tuple(species)
        if not self.species:
            raise ValueError("An isomer needs at least one species")
        self.label = label or ' + '.join(s.name for s in self.species)

    @property
    def is_unimolecular(self):
        return len(self.species) == 1

    @property
    def num_species(self):
        return len(self.species)

    @property
    def all_monatomic(self):
        return all(s.is_monatomic for s in self.species)

    def enthalpy(self, T=T_REF):
        return sum(s.enthalpy(T) for s in self.species)

    def free_energy(self, T=T_REF):
        return sum(s.free_energy(T) for s in self.species)

    def __str__(self):
        return self.label

    def __repr__(self):
        return f"Isomer({self.label!r})"


class PathReaction:
    """An elementary step between two wells with Arrhenius kinetics.

    `kinetics` describes reactant -> product. When `is_forward` is False the
    step is stored against its kinetic direction and the solver is given
    the fitted reverse kinetics instead.
    """
    def __init__(self, reactant, product, kinetics, is_forward=True):
        self.reactant = reactant
        self.product = product
        self.kinetics = kinetics
        self.is_forward = is_forward

    def __str__(self):
        return f"{self.reactant} <=> {self.product}"


class NetReaction:
    """A pressure-dependent reaction between two wells derived from solver output."""

    def __init__(self, reactant, product, surface, reverse=None):
        self.reactant = reactant
        self.product = product
        self.surface = surface
        self.reverse = reverse

    def get_rate_coefficient(self, T, P):
        return self.surface.get_rate_coefficient(T, P)

    def __str__(self):
        return f"{self.reactant} -> {self.product}"

    def __repr__(self):
        return f"NetReaction({self.reactant.label!r} -> {self.product.label!r})"


class ReactionNetwork:
    """A pressure-dependent network of wells and the path reactions connecting them."""

    def __init__(self, id, uni_isomers=(), multi_isomers=(), path_reactions=(), altered=True):
        self.id = int(id)
        self.uni_isomers = list(uni_isomers)
        self.multi_isomers = list(multi_isomers)
        self.path_reactions = list(path_reactions)
        self.net_reactions = []
        self.included_reactions = []
        self.nonincluded_reactions = []
        self.altered = altered

    @property
    def isomers(self):
        return self.uni_isomers + self.multi_isomers

    @property
    def num_wells(self):
        return len(self.uni_isomers) + len(self.multi_isomers)

    @property
    def species(self):
        """Unique species of all wells, in order of first appearance."""
        seen = []
        for isomer in self.isomers:
            for s in isomer.species:
                if not any(s is other for other in seen):
                    seen.append(s)
        return seen

    def well_at(self, index):
        """Isomer for a 0-based well index (unimolecular wells first)."""
        n_uni = len(self.uni_isomers)
        if index < n_uni:
            return self.uni_isomers[index]
        return self.multi_isomers[index - n_uni]

    def __str__(self):
        return f"PDepNetwork #{self.id}"


class ReactionSystem:
    """Present conditions of the reactor the network is embedded in."""

    def __init__(self, temperature, pressure, bath_gas):
        self.temperature = float(temperature)  # K
        self.pressure = float(pressure)  # bar
        self.bath_gas = dict(bath_gas)  # collider name -> mole fraction
