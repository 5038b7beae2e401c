"""
Atomic file writer for generated output.

Ensures that an interrupted run never leaves a partially written file.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from .errors import FileOperationError

logger = logging.getLogger(__name__)


class AtomicWriter:
    """Writes files by replacing them in a single step.

    1. Write to a temporary file in the target directory
    2. Atomically replace the target file

    On POSIX systems the final rename is atomic when source and destination
    share a filesystem, which the temporary file's location guarantees.
    """

    def write(self, path: Path | str, content: str) -> None:
        """Write content to a file atomically.

        Args:
            path: Target file path (parent directories are created)
            content: Content to write

        Raises:
            FileOperationError: If a file operation fails
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path_str = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", text=True)
        except OSError as e:
            raise FileOperationError(f"Failed to prepare output file {path}: {e}", str(path)) from e

        temp_path = Path(temp_path_str)
        try:
            with open(temp_fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
            temp_path.replace(path)
        except OSError as e:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    logger.debug("Could not remove temporary file %s", temp_path)
            raise FileOperationError(f"Failed to write output file {path}: {e}", str(path)) from e
        logger.debug("Wrote %d bytes to %s", len(content), path)

    def write_if_not_exists(self, path: Path | str, content: str) -> None:
        """Write content only if the file doesn't exist yet.

        Raises:
            FileOperationError: If the file already exists
        """
        path = Path(path)
        if path.exists():
            raise FileOperationError(f"File already exists: {path}", str(path))
        self.write(path, content)
