# pdepkin/workspace.py
"""
Working-directory handle for one FAME invocation.

FAME reads and writes fixed file names in its working directory. A
SolverWorkspace carries those paths explicitly so callers never rely on a
hidden current directory, and so each network can get its own directory
when networks are estimated side by side.
"""

import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

INPUT_FILENAME = 'fame_input.txt'
OUTPUT_FILENAME = 'fame_output.txt'
LEGACY_OUTPUT_FILENAME = 'fort.2'


def archive_prefix(network_id: int) -> str:
    """Zero-padded network id used to name archived solver files, e.g. 7 -> '0007'."""
    return f"{network_id:04d}"


class SolverWorkspace:
    def __init__(self, directory):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    @classmethod
    def for_network(cls, root, network_id: int, isolate: bool = False) -> 'SolverWorkspace':
        """Shared workspace at `root`, or a private `network_XXXX` subdirectory when isolating."""
        root = Path(root)
        if isolate:
            return cls(root / f"network_{archive_prefix(network_id)}")
        return cls(root)

    @property
    def input_path(self) -> Path:
        return self.directory / INPUT_FILENAME

    @property
    def output_path(self) -> Path:
        return self.directory / OUTPUT_FILENAME

    @property
    def legacy_output_path(self) -> Path:
        return self.directory / LEGACY_OUTPUT_FILENAME

    def touch_output(self) -> Path:
        """Leave an empty output file for FAME to write into.

        Without it FAME falls back to writing 'fort.2'. Any stale legacy
        output is removed so it cannot be mistaken for this run's result.
        """
        if self.legacy_output_path.exists():
            self.legacy_output_path.unlink()
        with open(self.output_path, 'w'):
            pass
        return self.output_path

    def archive(self, network_id: int):
        """Rename input/output to '<id>_input.txt' / '<id>_output.txt'. Returns the new paths."""
        prefix = archive_prefix(network_id)
        archived = []
        output = self.output_path
        if not output.exists() and self.legacy_output_path.exists():
            output = self.legacy_output_path
        for source, suffix in ((self.input_path, 'input'), (output, 'output')):
            target = self.directory / f"{prefix}_{suffix}.txt"
            if not source.exists():
                logger.warning(f"Cannot archive missing file {source}")
                continue
            os.replace(source, target)
            archived.append(target)
        return archived

    def __repr__(self):
        return f"SolverWorkspace({str(self.directory)!r})"
