"""
Preset Manager
Named Flickr sources (tag, user, group, gallery, album) the EO1 can be pointed at.
Built-in presets come from the config file; user presets live in presets.json.
"""

import os
import re
import json
import logging
import threading
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_PRESETS_FILE = "config/presets.json"
MAX_PRESET_NAME_LENGTH = 50

# Preset type -> field holding its Flickr identifier
PRESET_ID_FIELDS = {
    "tag": "tag",
    "user": "userId",
    "group": "groupId",
    "gallery": "galleryId",
    "album": "albumId",
}


def slugify(name: str) -> str:
    """'Misty Mornings!' -> 'misty-mornings'"""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def build_preset(name: str, preset_type: str, value: str, **extra) -> Dict[str, Any]:
    if preset_type not in PRESET_ID_FIELDS:
        raise ValueError(f"Unknown preset type: {preset_type}")
    preset = {"name": name, "type": preset_type, PRESET_ID_FIELDS[preset_type]: value}
    preset.update({k: v for k, v in extra.items() if v is not None})
    return preset


class PresetManager:
    """Merges built-in presets with user presets stored as JSON"""

    def __init__(self, presets_file: str = DEFAULT_PRESETS_FILE,
                 builtin_presets: Optional[Dict[str, Dict[str, Any]]] = None):
        self.presets_file = Path(presets_file)
        self.builtin_presets = builtin_presets or {}
        self._lock = threading.Lock()

    def load_user_presets(self) -> Dict[str, Dict[str, Any]]:
        """User presets, or {} when the file is missing or unreadable"""
        try:
            with open(self.presets_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (ValueError, OSError) as e:
            logger.warning(f"Ignoring unreadable presets file {self.presets_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring presets file {self.presets_file}: root is not an object")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, dict)}

    def _save_user_presets(self, presets: Dict[str, Dict[str, Any]]) -> None:
        self.presets_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.presets_file.with_suffix(self.presets_file.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(presets, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.presets_file)

    def list_presets(self) -> Dict[str, Dict[str, Any]]:
        """All presets keyed by id; a user preset overrides a built-in with the same id"""
        merged = {}
        for preset_id, preset in self.builtin_presets.items():
            merged[preset_id] = {**preset, "id": preset_id, "builtin": True}
        for preset_id, preset in self.load_user_presets().items():
            merged[preset_id] = {**preset, "id": preset_id, "builtin": False}
        return merged

    def add_preset(self, preset: Dict[str, Any]) -> Dict[str, Any]:
        """Store a user preset under an id slugged from its name"""
        preset_id = slugify(preset.get("name") or "")
        if not preset_id:
            raise ValueError("Could not generate valid ID from name")

        with self._lock:
            presets = self.load_user_presets()
            presets[preset_id] = preset
            self._save_user_presets(presets)

        logger.info(f"Saved preset '{preset_id}' ({preset.get('type')})")
        return {**preset, "id": preset_id, "builtin": False}

    def is_builtin(self, preset_id: str) -> bool:
        return preset_id in self.builtin_presets

    def delete_preset(self, preset_id: str) -> bool:
        """Remove a user preset; False if there is none with this id"""
        with self._lock:
            presets = self.load_user_presets()
            if preset_id not in presets:
                return False
            del presets[preset_id]
            self._save_user_presets(presets)

        logger.info(f"Deleted preset '{preset_id}'")
        return True
