"""
Device command errors

Both kinds mean "device currently unreachable". They are not retried here.
"""

from .models import CommandOutcome, ErrorKind


class DeviceCommandError(Exception):
    """A command could not be delivered to the device"""

    kind: ErrorKind = ErrorKind.CONNECT_FAILED

    def __init__(self, message: str, command: str):
        self.command = command
        super().__init__(message)

    @property
    def outcome(self) -> CommandOutcome:
        return CommandOutcome(succeeded=False, command=self.command, error_kind=self.kind)


class DeviceConnectError(DeviceCommandError):
    """Host refused, unreachable or unresolvable"""

    kind = ErrorKind.CONNECT_FAILED


class DeviceTimeoutError(DeviceCommandError):
    """No settlement within the configured timeout"""

    kind = ErrorKind.TIMEOUT
