"""Exception hierarchy for mcmonitor."""


class MonitorError(Exception):
    """Base class for errors raised by mcmonitor."""


class ConfigError(MonitorError):
    """Invalid configuration key or value."""


class CommandError(MonitorError):
    """An OS sampling command failed or timed out."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"{command!r}: {reason}")
        self.command = command
        self.reason = reason
