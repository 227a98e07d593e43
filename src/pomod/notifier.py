"""Desktop notifications for phase changes."""

import logging
from typing import Any, Optional

from plyer import notification  # type: ignore[import-untyped]

from pomod.core.models import Phase

logger = logging.getLogger(__name__)

APP_NAME = "Pomodoro Timer"

PHASE_MESSAGES = {
    Phase.STOPPED: "Session's over! Go rest!",
    Phase.WORKING: "Back to work!",
    Phase.SHORT_BREAK: "Short break started, stand up and stretch!",
    Phase.LONG_BREAK: "Long break started, have some rest!",
}


class Notifier:
    """Send desktop notifications."""

    def __init__(self, enabled: bool = True, backend: str = "auto", timeout: int = 4):
        """Initialize notifier.

        Args:
            enabled: Whether notifications are enabled
            backend: Notification backend ('auto' uses plyer)
            timeout: Display duration in seconds
        """
        self.enabled = enabled
        self.backend = backend
        self.timeout = timeout
        self._notifier: Optional[Any] = notification if enabled else None

    @classmethod
    def from_config(cls, config: Any) -> "Notifier":
        """Create a notifier from the ``notifications`` config section."""
        return cls(
            enabled=config.get("notifications.enabled", True),
            backend=config.get("notifications.backend", "auto"),
            timeout=config.get("notifications.timeout", 4),
        )

    def send(self, title: str, message: str, timeout: Optional[int] = None) -> None:
        """Send a desktop notification.

        Args:
            title: Notification title
            message: Notification message
            timeout: Display duration in seconds (default: notifier timeout)
        """
        if not self.enabled or not self._notifier:
            return

        try:
            self._notifier.notify(
                title=title,
                message=message,
                app_name=APP_NAME,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except Exception as e:
            # Notifications are non-critical
            logger.warning(f"Notification not delivered: {e}")

    def notify(self, phase: Phase) -> None:
        """Announce that the session entered ``phase``."""
        self.send(title=APP_NAME, message=PHASE_MESSAGES[phase])
