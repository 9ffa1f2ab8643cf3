# pdepkin/estimator.py
"""
Pressure-dependent kinetics estimation for reaction networks via FAME.

For each altered network the estimator plans the energy grid, summarizes the
bath gas, writes the FAME input, runs FAME and reads the net reactions back.
When the reservoir-state method yields invalid rate coefficients the network
is re-run once with the modified strong collision method.

Run state (method and run counter) travels in an EstimationContext that is
passed into every call and returned, updated, with the result.
"""

import enum
import logging
import threading
import weakref
from pathlib import Path
from typing import List, Optional, Tuple

from pdepkin.bath_gas import summarize_bath_gas
from pdepkin.energy_grid import DEFAULT_MAX_TEMPERATURE, plan_energy_grid
from pdepkin.kinetics import fit_reverse_kinetics
from pdepkin.solver_input import (
    DEFAULT_CHEBYSHEV_PRESSURES,
    DEFAULT_CHEBYSHEV_TEMPERATURES,
    DEFAULT_PRESSURES,
    DEFAULT_TEMPERATURES,
    NetworkInputError,
    write_input_file,
)
from pdepkin.solver_output import read_output_file
from pdepkin.workspace import SolverWorkspace

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    'temperatures': DEFAULT_TEMPERATURES,
    'pressures': DEFAULT_PRESSURES,
    'chebyshev_temperatures': DEFAULT_CHEBYSHEV_TEMPERATURES,
    'chebyshev_pressures': DEFAULT_CHEBYSHEV_PRESSURES,
    'grain_max_temperature': DEFAULT_MAX_TEMPERATURE,
}


class EstimationMode(enum.Enum):
    """Master-equation approximation requested from FAME. NONE cannot be run."""
    NONE = ''
    STRONG_COLLISION = 'ModifiedStrongCollision'
    RESERVOIR_STATE = 'ReservoirState'

    @classmethod
    def from_string(cls, text: str) -> 'EstimationMode':
        key = text.strip().lower().replace('_', ' ').replace('-', ' ')
        aliases = {
            'modified strong collision': cls.STRONG_COLLISION,
            'modifiedstrongcollision': cls.STRONG_COLLISION,
            'strong collision': cls.STRONG_COLLISION,
            'msc': cls.STRONG_COLLISION,
            'reservoir state': cls.RESERVOIR_STATE,
            'reservoirstate': cls.RESERVOIR_STATE,
            'rs': cls.RESERVOIR_STATE,
        }
        if key not in aliases:
            raise ValueError(f"Unknown pressure-dependence method: '{text}'. "
                             "Use 'modified strong collision' or 'reservoir state'.")
        return aliases[key]


class EstimationStatus(enum.Enum):
    UPDATED = 'updated'
    SKIPPED = 'skipped'
    NOT_UPDATED = 'not updated'


class EstimationContext:
    """Method in use and number of completed FAME estimations so far.

    Read-only: `with_mode` and `advanced` return new contexts.
    """
    __slots__ = ('_mode', '_run_count')

    def __init__(self, mode: EstimationMode = EstimationMode.RESERVOIR_STATE, run_count: int = 0):
        self._mode = mode
        self._run_count = run_count

    @property
    def mode(self) -> EstimationMode:
        return self._mode

    @property
    def run_count(self) -> int:
        return self._run_count

    def with_mode(self, mode: EstimationMode) -> 'EstimationContext':
        return EstimationContext(mode, self.run_count)

    def advanced(self) -> 'EstimationContext':
        return EstimationContext(self.mode, self.run_count + 1)

    def __eq__(self, other):
        if not isinstance(other, EstimationContext):
            return NotImplemented
        return (self.mode, self.run_count) == (other.mode, other.run_count)

    def __hash__(self):
        return hash((self.mode, self.run_count))

    def __repr__(self):
        return f"EstimationContext(mode={self.mode.name}, run_count={self.run_count})"


class EstimationResult:
    def __init__(self, network, status: EstimationStatus, context: EstimationContext,
                 ignored_rate: bool = False, fallback_used: bool = False, archived_files=()):
        self.network = network
        self.status = status
        self.context = context
        self.ignored_rate = ignored_rate
        self.fallback_used = fallback_used
        self.archived_files = list(archived_files)

    @property
    def updated(self) -> bool:
        return self.status is EstimationStatus.UPDATED

    def __repr__(self):
        return f"EstimationResult(network={self.network.id}, status={self.status.value}, context={self.context})"


_workspace_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_workspace_locks_guard = threading.Lock()


def _workspace_lock(directory: Path) -> threading.Lock:
    """One lock per working directory: FAME's file names are fixed inside it.

    Entries are held weakly and vanish once no caller holds the lock.
    """
    key = str(Path(directory).resolve())
    with _workspace_locks_guard:
        lock = _workspace_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _workspace_locks[key] = lock
        return lock


def is_estimable(network) -> bool:
    """Whether a network has anything for FAME to do."""
    # Networks whose multimolecular wells are all atoms have no internal energy structure
    if network.multi_isomers and all(isomer.all_monatomic for isomer in network.multi_isomers):
        logger.debug(f"Skipping network {network.id}: multimolecular wells are all monatomic")
        return False
    if not network.path_reactions:
        logger.warning("Empty pressure-dependent network detected. Skipping.")
        return False
    return True


def ensure_spectroscopic_data(network) -> None:
    for isomer in network.isomers:
        for species in isomer.species:
            if not species.has_spectroscopic_data():
                species.generate_spectroscopic_data()


class PDepKineticsEstimator:
    """
    Estimates k(T, P) for pressure-dependent networks by running FAME.

    Args:
        solver: FameSolver (anything with run(workspace, timeout, cancel_event))
        working_dir: Directory FAME runs in
        settings (dict): Temperature/pressure ladders, Chebyshev orders and
            grain_max_temperature; missing keys take DEFAULT_SETTINGS
        reaction_model: Core/edge model updated after every successful estimation
        colliders (dict): Bath gas collider library (None loads the default)
        reverse_fitter: Reverse-kinetics fit for reverse-stored path reactions
        isolate_networks (bool): Give each network its own working subdirectory
        timeout (float): Time limit per FAME run in seconds
    """

    def __init__(self, solver, working_dir, settings=None, reaction_model=None, colliders=None,
                 reverse_fitter=fit_reverse_kinetics, isolate_networks=False, timeout=None):
        self.solver = solver
        self.working_dir = Path(working_dir)
        self.settings = dict(DEFAULT_SETTINGS)
        self.settings.update(settings or {})
        self.reaction_model = reaction_model
        self.colliders = colliders
        self.reverse_fitter = reverse_fitter
        self.isolate_networks = isolate_networks
        self.timeout = timeout

    def estimate(self, network, reaction_system, context: Optional[EstimationContext] = None,
                 cancel_event: Optional[threading.Event] = None) -> EstimationResult:
        """
        Estimate the net reactions of one network.

        Returns an EstimationResult whose context carries the run counter
        (advanced on success) and the caller's original method. A network
        that cannot be serialized is logged and returned NOT_UPDATED without
        running FAME. Fatal errors (input I/O, FAME launch/exit, unreadable
        output) propagate.
        """
        if context is None:
            context = EstimationContext()
        if context.mode is EstimationMode.NONE:
            raise ValueError("Pressure-dependence method is not set")

        # No update needed if network is not altered
        if not network.altered:
            return EstimationResult(network, EstimationStatus.SKIPPED, context)
        if not is_estimable(network):
            return EstimationResult(network, EstimationStatus.SKIPPED, context)

        ensure_spectroscopic_data(network)

        workspace = SolverWorkspace.for_network(self.working_dir, network.id, self.isolate_networks)
        with _workspace_lock(workspace.directory):
            try:
                self._write_input(network, reaction_system, context, workspace)
            except NetworkInputError as e:
                logger.error(f"Cannot write FAME input for network {network.id}: {e}")
                return EstimationResult(network, EstimationStatus.NOT_UPDATED, context)
            parsed = self._run_fame(network, workspace, cancel_event)
            if parsed.valid:
                network.net_reactions = parsed.net_reactions
                if self.reaction_model is not None:
                    self.reaction_model.update_reaction_lists(network)
                network.altered = False
                archived = workspace.archive(network.id)
                logger.info(f"FAME execution for network {network.id} complete.")
                return EstimationResult(network, EstimationStatus.UPDATED, context.advanced(),
                                        archived_files=archived)

        logger.warning("One or more rate coefficients in FAME output was invalid.")
        if context.mode is EstimationMode.RESERVOIR_STATE:
            logger.warning("Falling back to modified strong collision mode for this network.")
            retry = self.estimate(network, reaction_system,
                                  context.with_mode(EstimationMode.STRONG_COLLISION), cancel_event)
            return EstimationResult(network, retry.status, retry.context.with_mode(context.mode),
                                    ignored_rate=True, fallback_used=True,
                                    archived_files=retry.archived_files)

        logger.warning(f"Network {network.id} left unchanged; it will be re-estimated on a later call.")
        return EstimationResult(network, EstimationStatus.NOT_UPDATED, context, ignored_rate=True)

    def _write_input(self, network, reaction_system, context, workspace):
        grid = plan_energy_grid(network.uni_isomers, network.multi_isomers,
                                self.settings['grain_max_temperature'])
        bath_gas = summarize_bath_gas(reaction_system, self.colliders)
        logger.debug(f"Network {network.id}: {grid}, {bath_gas}")
        write_input_file(workspace.input_path, network, self.settings, grid, bath_gas,
                         context.mode.value, context.run_count, self.reverse_fitter)

    def _run_fame(self, network, workspace, cancel_event):
        self.solver.run(workspace, timeout=self.timeout, cancel_event=cancel_event)
        return read_output_file(network, workspace.output_path, workspace.legacy_output_path)

    def estimate_all(self, networks, reaction_system,
                     context: Optional[EstimationContext] = None) -> Tuple[List[EstimationResult], EstimationContext]:
        """Estimate networks one after another, threading the context through."""
        if context is None:
            context = EstimationContext()
        results = []
        for network in networks:
            result = self.estimate(network, reaction_system, context)
            context = result.context
            results.append(result)
        return results, context
