"""Golden wire strings for every EO1 command."""

import pytest

from device import (
    DisplayImage, DisplayVideo, Resume, SetTag, SetBrightness, SetOptions,
    AUTO_BRIGHTNESS, QUIET_HOURS_DISABLED, encode_command
)
from device.commands import format_number


@pytest.mark.parametrize(
    ("command", "expected"),
    [
        (DisplayImage("53412345678"), "image,53412345678"),
        (DisplayVideo("49876543210"), "video,49876543210"),
        (Resume(), "resume,"),
        (SetTag("sunset"), "tag,sunset"),
        (SetBrightness(0.5), "brightness,0.5"),
        (SetBrightness(AUTO_BRIGHTNESS), "brightness,-1"),
        (SetBrightness(1.0), "brightness,1"),
        (SetBrightness(0), "brightness,0"),
        (SetOptions(0.75, 10, 22, 7), "options,0.75,10,22,7"),
        (SetOptions(AUTO_BRIGHTNESS, 5, QUIET_HOURS_DISABLED, QUIET_HOURS_DISABLED), "options,-1,5,-1,-1"),
    ],
)
def test_encode_command(command, expected) -> None:
    assert encode_command(command) == expected


def test_resume_keeps_trailing_comma() -> None:
    assert encode_command(Resume()).endswith(",")


def test_encoded_commands_have_no_newline() -> None:
    for command in (Resume(), SetTag("art"), SetOptions(0.2, 1, 0, 23)):
        assert "\n" not in encode_command(command)


def test_encode_unknown_command_raises() -> None:
    with pytest.raises(TypeError):
        encode_command("resume")


def test_format_number() -> None:
    assert format_number(-1.0) == "-1"
    assert format_number(0.25) == "0.25"
    assert format_number(12) == "12"
