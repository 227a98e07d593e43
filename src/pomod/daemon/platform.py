"""Platform-specific utilities for daemon operations."""

import platform
from enum import Enum
from pathlib import Path
from typing import Tuple


class Platform(Enum):
    """Known platforms."""

    LINUX = "linux"
    MACOS = "darwin"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


def get_platform() -> Platform:
    """Detect the current platform.

    Returns:
        Platform enum value
    """
    system = platform.system().lower()
    if system == "linux":
        return Platform.LINUX
    elif system == "darwin":
        return Platform.MACOS
    elif system == "windows":
        return Platform.WINDOWS
    else:
        return Platform.UNKNOWN


def get_runtime_dir() -> Path:
    """Get (and create) the directory holding the socket and PID file."""
    runtime_dir = Path.home() / ".pomod" / "runtime"
    runtime_dir.mkdir(parents=True, exist_ok=True)
    return runtime_dir


def get_ipc_socket_path() -> Path:
    """Get the default IPC socket path.

    Raises:
        RuntimeError: If platform has no Unix domain sockets
    """
    if get_platform() not in (Platform.LINUX, Platform.MACOS):
        raise RuntimeError(f"Unsupported platform: {platform.system()}")
    return get_runtime_dir() / "pomod.sock"


def get_pid_file_path() -> Path:
    """Get the PID file path for the daemon."""
    return get_runtime_dir() / "pomod.pid"


def get_log_file_path() -> Path:
    """Get the daemon log file path."""
    log_dir = Path.home() / ".pomod" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "pomod.log"


def is_daemon_supported() -> Tuple[bool, str]:
    """Check if the daemon is supported on this platform.

    Returns:
        Tuple of (is_supported, reason)
    """
    plat = get_platform()

    if plat in (Platform.LINUX, Platform.MACOS):
        return True, "Platform supported"

    return False, f"Unsupported platform: {platform.system()} (Unix domain sockets required)"
