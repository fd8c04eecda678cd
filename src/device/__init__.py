"""
Device module for EO1 command delivery
"""

from .commands import (
    Command, DisplayImage, DisplayVideo, Resume, SetTag, SetBrightness, SetOptions,
    AUTO_BRIGHTNESS, QUIET_HOURS_DISABLED, encode_command
)
from .endpoint import DeviceEndpoint, DEFAULT_DEVICE_PORT, validate_ipv4
from .exceptions import DeviceCommandError, DeviceConnectError, DeviceTimeoutError
from .models import CommandOutcome, ErrorKind
from .socket_client import DeviceSocket

__all__ = [
    'Command', 'DisplayImage', 'DisplayVideo', 'Resume', 'SetTag', 'SetBrightness', 'SetOptions',
    'AUTO_BRIGHTNESS', 'QUIET_HOURS_DISABLED', 'encode_command',
    'DeviceEndpoint', 'DEFAULT_DEVICE_PORT', 'validate_ipv4',
    'DeviceCommandError', 'DeviceConnectError', 'DeviceTimeoutError',
    'CommandOutcome', 'ErrorKind', 'DeviceSocket'
]
