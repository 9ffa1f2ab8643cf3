# pdepkin/solver.py
"""
FAME (master-equation solver) process interface.

FAME takes no command-line arguments: it reads `fame_input.txt` from its
working directory and writes `fame_output.txt` next to it. This module only
launches the executable and classifies how the process ended; reading the
output is done by `solver_output`.
"""

import os
import shutil
import logging
import subprocess
import threading
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

# Executable location relative to an installation root
EXECUTABLE_RELPATH = Path("software") / "fame" / "fame.exe"
ROOT_ENV_VAR = "FAME_ROOT"
POLL_INTERVAL_S = 0.1


class SolverInvocationError(RuntimeError):
    """FAME could not be launched or did not exit cleanly."""


class SolverTimeoutError(SolverInvocationError):
    """FAME was killed after exceeding its time limit."""


class SolverCancelledError(SolverInvocationError):
    """FAME was killed because the caller cancelled the run."""


class FameSolver:
    """FAME executable wrapper."""

    def __init__(self, executable: Optional[str] = None, install_root: Optional[str] = None,
                 timeout: Optional[float] = None):
        """Locate the executable.

        Args:
            executable: Explicit path to the FAME executable.
            install_root: Installation root holding software/fame/fame.exe.
            timeout: Default time limit per run in seconds (None waits forever).
        """
        if executable is None:
            executable = self._auto_detect_executable(install_root)
        if not executable or not Path(executable).exists():
            raise FileNotFoundError(
                "FAME executable not found. Set solver.install_root/solver.executable "
                f"in the config, or the {ROOT_ENV_VAR} environment variable."
            )
        self.executable = str(Path(executable).resolve())
        self.timeout = timeout

    @staticmethod
    def _auto_detect_executable(install_root: Optional[str] = None) -> Optional[str]:
        """Attempt to locate the FAME executable.

        Search order:
          1. <install_root>/software/fame/fame.exe
          2. $FAME_ROOT/software/fame/fame.exe
          3. "fame" or "fame.exe" in PATH
        Returns first existing path or None.
        """
        roots: List[str] = []
        if install_root:
            roots.append(install_root)
        if os.environ.get(ROOT_ENV_VAR):
            roots.append(os.environ[ROOT_ENV_VAR])
        for root in roots:
            candidate = Path(root) / EXECUTABLE_RELPATH
            if candidate.exists():
                return str(candidate)
        for name in ["fame", "fame.exe"]:
            found = shutil.which(name)
            if found:
                return found
        return None

    def run(self, workspace, timeout: Optional[float] = None,
            cancel_event: Optional[threading.Event] = None) -> None:
        """Run FAME in the workspace directory and block until it exits.

        The expected output file is truncated first so that a result left
        over from an earlier run can never be read back.

        Args:
            workspace: SolverWorkspace holding fame_input.txt
            timeout: Time limit in seconds; overrides the instance default
            cancel_event: Set by another thread to abort the run

        Raises:
            SolverInvocationError: launch failure or non-zero exit
            SolverTimeoutError: time limit exceeded
            SolverCancelledError: cancel_event was set
        """
        if timeout is None:
            timeout = self.timeout
        workspace.touch_output()

        logger.info(f"Running FAME in {workspace.directory}...")
        try:
            process = subprocess.Popen(
                [self.executable],
                cwd=str(workspace.directory),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise SolverInvocationError(f"Error while launching FAME ({self.executable}): {e}") from e

        waited = 0.0
        while True:
            if cancel_event is not None and cancel_event.is_set():
                self._kill(process)
                raise SolverCancelledError("FAME run cancelled")
            if timeout is not None and waited >= timeout:
                self._kill(process)
                raise SolverTimeoutError(f"FAME timed out after {timeout} s")
            step = POLL_INTERVAL_S if timeout is None else max(min(POLL_INTERVAL_S, timeout - waited), 0.0)
            try:
                stdout, stderr = process.communicate(timeout=step)
                break
            except subprocess.TimeoutExpired:
                waited += step

        if stdout:
            logger.debug(f"FAME stdout:\n{stdout}")
        if process.returncode != 0:
            raise SolverInvocationError(
                f"FAME exited with status {process.returncode}: {stderr.strip() if stderr else ''}"
            )

    @staticmethod
    def _kill(process):
        process.kill()
        process.communicate()
