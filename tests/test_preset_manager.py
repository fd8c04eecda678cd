"""Tests for built-in and user preset storage."""

import json

import pytest

from preset_manager import PresetManager, build_preset, slugify

BUILTINS = {"sunset": {"name": "Sunsets", "type": "tag", "tag": "sunset"}}


@pytest.fixture
def manager(tmp_path):
    return PresetManager(str(tmp_path / "presets.json"), builtin_presets=BUILTINS)


@pytest.mark.parametrize(
    ("name", "expected"),
    [("Misty Mornings!", "misty-mornings"), ("  B&W  Street ", "b-w-street"), ("!!!", "")],
)
def test_slugify(name, expected) -> None:
    assert slugify(name) == expected


def test_build_preset_uses_type_field() -> None:
    assert build_preset("Pool", "group", "14660092@N20") == {
        "name": "Pool", "type": "group", "groupId": "14660092@N20"
    }
    with pytest.raises(ValueError):
        build_preset("Pool", "explore", "x")


def test_list_marks_builtins(manager) -> None:
    assert manager.list_presets() == {
        "sunset": {"name": "Sunsets", "type": "tag", "tag": "sunset", "id": "sunset", "builtin": True}
    }


def test_add_and_delete_user_preset(manager, tmp_path) -> None:
    saved = manager.add_preset(build_preset("Foggy Hills", "tag", "fog"))

    assert saved["id"] == "foggy-hills"
    assert saved["builtin"] is False
    assert json.loads((tmp_path / "presets.json").read_text()) == {
        "foggy-hills": {"name": "Foggy Hills", "type": "tag", "tag": "fog"}
    }
    assert set(manager.list_presets()) == {"sunset", "foggy-hills"}

    assert manager.delete_preset("foggy-hills") is True
    assert manager.delete_preset("foggy-hills") is False
    assert set(manager.list_presets()) == {"sunset"}


def test_user_preset_overrides_builtin_with_same_id(manager) -> None:
    manager.add_preset(build_preset("Sunset", "user", "12345@N00"))

    preset = manager.list_presets()["sunset"]

    assert preset["builtin"] is False
    assert preset["userId"] == "12345@N00"


def test_add_rejects_name_without_slug(manager) -> None:
    with pytest.raises(ValueError):
        manager.add_preset(build_preset("???", "tag", "fog"))


def test_unreadable_file_gives_no_user_presets(manager, tmp_path) -> None:
    (tmp_path / "presets.json").write_text("[not json")

    assert manager.load_user_presets() == {}
    assert set(manager.list_presets()) == {"sunset"}


def test_builtins_cannot_be_deleted(manager) -> None:
    assert manager.is_builtin("sunset")
    assert manager.delete_preset("sunset") is False
    assert "sunset" in manager.list_presets()
