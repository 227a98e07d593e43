"""Daemon PID file management."""

import logging
from pathlib import Path
from typing import Optional

import psutil  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


class PIDFileManager:
    """Manages daemon PID file."""

    def __init__(self, pid_file: Path):
        """Initialize PID file manager.

        Args:
            pid_file: Path to PID file
        """
        self.pid_file = pid_file
        self.pid_file.parent.mkdir(parents=True, exist_ok=True)

    def write(self, pid: int) -> None:
        """Write PID to file."""
        try:
            with open(self.pid_file, "w") as f:
                f.write(str(pid))
            logger.debug(f"PID {pid} written to {self.pid_file}")
        except OSError as e:
            logger.error(f"Failed to write PID file: {e}")

    def read(self) -> Optional[int]:
        """Read PID from file.

        Returns:
            PID or None if file doesn't exist or is invalid
        """
        if not self.pid_file.exists():
            return None

        try:
            with open(self.pid_file, "r") as f:
                return int(f.read().strip())
        except (ValueError, OSError) as e:
            logger.error(f"Failed to read PID file: {e}")
            return None

    def remove(self) -> None:
        """Remove PID file."""
        if self.pid_file.exists():
            try:
                self.pid_file.unlink()
                logger.debug(f"PID file {self.pid_file} removed")
            except OSError as e:
                logger.error(f"Failed to remove PID file: {e}")

    def is_running(self) -> bool:
        """Check if the process named in the PID file is alive."""
        pid = self.read()
        if pid is None:
            return False
        return bool(psutil.pid_exists(pid))
