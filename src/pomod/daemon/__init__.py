"""pomod daemon - background service owning the pomodoro session.

The daemon provides:
- The single in-memory session and its phase scheduler
- Desktop notifications on phase changes
- IPC interface for CLI communication
"""

from pomod.daemon.daemon import DaemonError, PomodoroDaemon
from pomod.daemon.ipc import IPCClient, IPCError, IPCServer
from pomod.daemon.service import AlreadyRunningError, PomodoroService

__all__ = [
    "DaemonError",
    "PomodoroDaemon",
    "IPCClient",
    "IPCError",
    "IPCServer",
    "AlreadyRunningError",
    "PomodoroService",
]
