"""pomod - a lightweight pomodoro timer daemon and client."""

__version__ = "0.1.0"
