"""Main daemon implementation."""

import logging
import os
import signal
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from pomod import __version__
from pomod.core.clock import Clock
from pomod.core.config import ConfigManager
from pomod.core.models import SessionDefaults
from pomod.core.scheduler import PhaseNotifier, PhaseScheduler
from pomod.core.session import SessionManager
from pomod.daemon.ipc import IPCServer
from pomod.daemon.pidfile import PIDFileManager
from pomod.daemon.platform import (
    get_log_file_path,
    get_pid_file_path,
    is_daemon_supported,
)
from pomod.daemon.service import PomodoroService
from pomod.notifier import Notifier

logger = logging.getLogger(__name__)


class DaemonError(Exception):
    """Daemon-related error."""

    pass


class PomodoroDaemon:
    """Pomodoro timer daemon.

    Owns the single session of the process, the scheduler driving it and
    the IPC server clients talk to.
    """

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        socket_path: Optional[Path] = None,
        pid_file: Optional[Path] = None,
        notifier: Optional[PhaseNotifier] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize daemon.

        Args:
            config: Configuration manager (default: load from default location)
            socket_path: IPC socket path (default: from config, then platform)
            pid_file: PID file path (default: platform-specific)
            notifier: Phase notifier (default: desktop notifications from config)
            clock: Time source (default: system clock)

        Raises:
            DaemonError: If daemon is not supported on this platform
        """
        supported, reason = is_daemon_supported()
        if not supported:
            raise DaemonError(reason)

        self.config = config or ConfigManager()
        if socket_path is None and self.config.get("daemon.socket_path"):
            socket_path = Path(self.config.get("daemon.socket_path")).expanduser()

        self.manager = SessionManager(clock=clock)
        self.scheduler = PhaseScheduler(
            self.manager, notifier=notifier or Notifier.from_config(self.config)
        )
        self.service = PomodoroService(
            self.manager, self.scheduler, SessionDefaults.from_config(self.config)
        )
        self.pid_manager = PIDFileManager(pid_file or get_pid_file_path())
        self.ipc_server = IPCServer(socket_path)

        self.running = False
        self.started_at: Optional[datetime] = None
        self._shutdown_event = threading.Event()
        self._stop_lock = threading.Lock()

    def start(self, foreground: bool = False) -> None:
        """Start the daemon and block until it is shut down.

        Args:
            foreground: Run in foreground (don't daemonize)

        Raises:
            DaemonError: If daemon is already running or fails to start
        """
        if self.pid_manager.is_running():
            raise DaemonError("Daemon is already running")

        self._setup_logging()

        logger.info("Starting pomod daemon...")

        if not foreground:
            self._daemonize()

        self.pid_manager.write(os.getpid())
        self._setup_signal_handlers()
        self._register_ipc_handlers()

        try:
            self.ipc_server.start()
        except OSError as e:
            logger.error(f"Failed to start IPC server: {e}")
            self.cleanup()
            raise DaemonError(f"Failed to start IPC server: {e}")

        self.running = True
        self.started_at = datetime.now()
        logger.info(f"Daemon started (PID: {os.getpid()})")

        self._shutdown_event.wait()

    def stop(self) -> None:
        """Stop the daemon gracefully."""
        with self._stop_lock:
            if self._shutdown_event.is_set():
                return

            logger.info("Stopping daemon...")
            self.running = False

            self.service.shutdown()
            self.ipc_server.stop()
            self.cleanup()
            self._shutdown_event.set()

        logger.info("Daemon stopped")

    def cleanup(self) -> None:
        """Clean up daemon resources."""
        self.pid_manager.remove()

    def _setup_logging(self) -> None:
        """Setup daemon logging."""
        log_level = getattr(logging, self.config.get("daemon.log_level", "INFO"))

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        file_handler = logging.FileHandler(get_log_file_path())
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        # Console handler (for foreground mode)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    def _daemonize(self) -> None:
        """Daemonize the process (Unix double-fork)."""
        try:
            pid = os.fork()
            if pid > 0:
                sys.exit(0)

            # Decouple from parent environment
            os.chdir("/")
            os.setsid()
            os.umask(0o022)

            pid = os.fork()
            if pid > 0:
                sys.exit(0)

            # Redirect standard file descriptors
            sys.stdout.flush()
            sys.stderr.flush()
            with open(os.devnull, "r") as devnull:
                os.dup2(devnull.fileno(), sys.stdin.fileno())
            with open(os.devnull, "a+") as devnull:
                os.dup2(devnull.fileno(), sys.stdout.fileno())
            with open(os.devnull, "a+") as devnull:
                os.dup2(devnull.fileno(), sys.stderr.fileno())

        except OSError as e:
            logger.error(f"Failed to daemonize: {e}")
            sys.exit(1)

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

    def _signal_handler(self, signum: int, frame: Any) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.stop()

    def _register_ipc_handlers(self) -> None:
        """Register IPC request handlers."""
        self.ipc_server.register_handler("ping", self._handle_ping)
        self.ipc_server.register_handler("status", self._handle_status)
        self.ipc_server.register_handler("shutdown", self._handle_shutdown)
        self.ipc_server.register_handler("start", self.service.start)
        self.ipc_server.register_handler("stop", self.service.stop)
        self.ipc_server.register_handler("get_state", self.service.get_state)

    def _handle_ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle ping request."""
        return {"pong": True, "timestamp": datetime.now().isoformat()}

    def _handle_status(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle daemon status request."""
        return {
            "running": self.running,
            "pid": os.getpid(),
            "version": __version__,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "socket_path": str(self.ipc_server.socket_path),
            "scheduler_armed": self.scheduler.is_running,
            "session": self.manager.snapshot().to_dict(),
        }

    def _handle_shutdown(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle shutdown request.

        The daemon is stopped on a separate thread so the response is sent
        before the IPC server goes away.
        """
        threading.Thread(target=self.stop, daemon=True).start()
        return {"stopping": True}
