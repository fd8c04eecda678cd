"""
EO1 command types and wire encoding

Protocol: plain text, comma-delimited, one command per connection.
No escaping is done here; callers keep tags and ids free of commas and newlines.
"""

from typing import Union
from dataclasses import dataclass

AUTO_BRIGHTNESS = -1
QUIET_HOURS_DISABLED = -1


@dataclass(frozen=True)
class DisplayImage:
    photo_id: str


@dataclass(frozen=True)
class DisplayVideo:
    photo_id: str


@dataclass(frozen=True)
class Resume:
    """Skip to next slideshow item / resume slideshow"""


@dataclass(frozen=True)
class SetTag:
    tag: str


@dataclass(frozen=True)
class SetBrightness:
    level: float  # 0.0-1.0, or AUTO_BRIGHTNESS


@dataclass(frozen=True)
class SetOptions:
    brightness: float
    interval_minutes: int
    quiet_start_hour: int = QUIET_HOURS_DISABLED
    quiet_end_hour: int = QUIET_HOURS_DISABLED


Command = Union[DisplayImage, DisplayVideo, Resume, SetTag, SetBrightness, SetOptions]


def format_number(value: Union[int, float]) -> str:
    """Format a number the way the device expects (1.0 -> "1", 0.5 -> "0.5")"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_command(command: Command) -> str:
    """Map a command to the exact line sent to the device (without newline)"""
    if isinstance(command, DisplayImage):
        return f"image,{command.photo_id}"
    if isinstance(command, DisplayVideo):
        return f"video,{command.photo_id}"
    if isinstance(command, Resume):
        # Trailing comma is required by the device
        return "resume,"
    if isinstance(command, SetTag):
        return f"tag,{command.tag}"
    if isinstance(command, SetBrightness):
        return f"brightness,{format_number(command.level)}"
    if isinstance(command, SetOptions):
        fields = [
            format_number(command.brightness),
            format_number(command.interval_minutes),
            format_number(command.quiet_start_hour),
            format_number(command.quiet_end_hour),
        ]
        return "options," + ",".join(fields)
    raise TypeError(f"Unsupported command type: {type(command).__name__}")
