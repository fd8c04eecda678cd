"""
Settings Manager
Persistent storage of app settings (Flickr key, device config, current source, history)
in a JSON file

Keys are camelCase (apiKey, userId, currentSource, updatedAt) so settings.json stays
readable by earlier controller releases.
"""

import os
import json
import logging
import threading
from copy import deepcopy
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "config/settings.json"
DEFAULT_HISTORY_LIMIT = 50


def mask_secret(value: Optional[str]) -> str:
    """Show only the last four characters of a secret"""
    if not value:
        return ""
    return "••••••••" + value[-4:]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SettingsManager:
    """
    Loads, updates and saves settings.json

    Methods are synchronous; async callers run the mutating ones in a worker thread.
    """

    def __init__(self, settings_file: str = DEFAULT_SETTINGS_FILE,
                 history_limit: int = DEFAULT_HISTORY_LIMIT,
                 default_device: Optional[Dict[str, Any]] = None):
        self.settings_file = Path(settings_file)
        self.history_limit = history_limit
        self.default_device = default_device or {"ip": "192.168.1.43", "port": 12345}
        self.settings: Dict[str, Any] = {}
        self.loaded = False
        self._lock = threading.RLock()

    def _defaults(self) -> Dict[str, Any]:
        device = dict(self.default_device)
        if os.environ.get('EO1_IP'):
            device['ip'] = os.environ['EO1_IP']
        if os.environ.get('EO1_PORT', '').isdigit():
            device['port'] = int(os.environ['EO1_PORT'])
        return {
            "flickr": {
                "apiKey": os.environ.get('FLICKR_API_KEY', ''),
                "userId": os.environ.get('FLICKR_USER_ID', '')
            },
            "device": device,
            "currentSource": None,  # what's currently displayed on the EO1
            "history": []
        }

    def _fill_missing(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Replace absent, null or mistyped sections with defaults"""
        defaults = self._defaults()
        for section in ('flickr', 'device'):
            if not isinstance(data.get(section), dict):
                data[section] = defaults[section]
        if not isinstance(data.get('currentSource'), dict):
            data['currentSource'] = None
        if not isinstance(data.get('history'), list):
            data['history'] = []
        return data

    def load(self) -> Dict[str, Any]:
        """Load settings from file, creating defaults if missing or unreadable"""
        with self._lock:
            try:
                with open(self.settings_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("settings root must be an object")
                self.settings = self._fill_missing(data)
                logger.info(f"Settings loaded from {self.settings_file}")
            except FileNotFoundError:
                logger.info(f"No settings file at {self.settings_file}, creating defaults")
                self.settings = self._defaults()
                self.save()
            except (ValueError, OSError) as e:
                logger.warning(f"Could not read {self.settings_file} ({e}), using defaults")
                self.settings = self._defaults()
                self.save()
            self.loaded = True

            # Fill empty values from environment
            flickr = self.settings['flickr']
            if not flickr.get('apiKey') and os.environ.get('FLICKR_API_KEY'):
                flickr['apiKey'] = os.environ['FLICKR_API_KEY']
            if not flickr.get('userId') and os.environ.get('FLICKR_USER_ID'):
                flickr['userId'] = os.environ['FLICKR_USER_ID']

            return self.settings

    def save(self) -> None:
        with self._lock:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.settings_file.with_suffix(self.settings_file.suffix + '.tmp')
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.settings_file)

    def _ensure_loaded(self) -> None:
        if not self.loaded:
            self.load()

    def get_all(self) -> Dict[str, Any]:
        self._ensure_loaded()
        return deepcopy(self.settings)

    # ================== DEVICE ==================

    def get_device(self) -> Dict[str, Any]:
        self._ensure_loaded()
        return dict(self.settings['device'])

    def update_device(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self._ensure_loaded()
            self.settings['device'].update(updates)
            self.save()
            logger.info(f"Device settings updated: {updates}")
            return dict(self.settings['device'])

    # ================== FLICKR ==================

    def get_flickr(self) -> Dict[str, Any]:
        """Flickr settings plus where the API key came from"""
        self._ensure_loaded()
        flickr = dict(self.settings['flickr'])

        source = None
        if flickr.get('apiKey'):
            env_key = os.environ.get('FLICKR_API_KEY')
            source = '.env file' if env_key and flickr['apiKey'] == env_key else 'saved settings'
        flickr['source'] = source
        return flickr

    def update_flickr(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Merge {apiKey?, userId?} into the Flickr section"""
        with self._lock:
            self._ensure_loaded()
            self.settings['flickr'].update(updates)
            self.save()
            logger.info(f"Flickr settings updated: {sorted(updates)}")
            return dict(self.settings['flickr'])

    def get_api_key(self) -> str:
        self._ensure_loaded()
        return self.settings['flickr'].get('apiKey') or ''

    # ================== CURRENT SOURCE / HISTORY ==================

    def get_current_source(self) -> Optional[Dict[str, Any]]:
        self._ensure_loaded()
        return self.settings.get('currentSource')

    def set_current_source(self, source: Dict[str, Any]) -> Dict[str, Any]:
        """Record what the EO1 is showing: {type, value, name?, url?, thumbnailUrl?}"""
        with self._lock:
            self._ensure_loaded()
            self.settings['currentSource'] = {**source, "updatedAt": _utc_now()}
            self.save()
            return self.settings['currentSource']

    def add_to_history(self, item: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Most recent first; an item shown again moves to the front"""
        with self._lock:
            self._ensure_loaded()
            history = [h for h in self.settings['history'] if h.get('id') != item.get('id')]
            history.insert(0, {**item, "displayedAt": _utc_now()})
            self.settings['history'] = history[:self.history_limit]
            self.save()
            return self.settings['history']

    def get_history(self) -> List[Dict[str, Any]]:
        self._ensure_loaded()
        return list(self.settings['history'])
