"""
Configuration loader for EO1 Web Controller
Loads and validates configuration from YAML files, with environment overrides
"""

import os
import yaml
import logging
import ipaddress
from typing import Dict, Any
from pathlib import Path
from datetime import datetime
import pytz

from preset_manager import PRESET_ID_FIELDS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yaml"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load configuration from YAML file with validation
    """
    try:
        config_file = Path(config_path)
        if not config_file.exists():
            logger.error(f"Configuration file not found: {config_path}")
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r') as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError("Configuration root must be a mapping")

        config = _apply_defaults(config)
        _validate_sections(config)
        config = _apply_env_overrides(config)

        _validate_config(config)

        logger.info(f"Configuration loaded from {config_path}")
        return config

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise


def _validate_sections(config: Dict) -> None:
    """Every known section must be a mapping"""
    for section in ['device', 'discovery', 'api', 'flickr', 'settings', 'logging']:
        if not isinstance(config.get(section), dict):
            raise ValueError(f"Configuration section '{section}' must be a mapping")


def _validate_config(config: Dict) -> None:
    """Validate value ranges"""
    device = config['device']
    try:
        ipaddress.IPv4Address(str(device['host']))
    except ipaddress.AddressValueError:
        raise ValueError(f"device.host is not a valid IPv4 address: {device['host']}")

    if not isinstance(device['port'], int) or not 1 <= device['port'] <= 65535:
        raise ValueError("device.port must be an integer between 1 and 65535")

    for field in ['timeout_seconds', 'grace_delay_seconds']:
        value = device[field]
        if not isinstance(value, (int, float)) or value < 0:
            raise ValueError(f"device.{field} must be a non-negative number")
    if device['timeout_seconds'] <= device['grace_delay_seconds']:
        raise ValueError("device.timeout_seconds must be greater than device.grace_delay_seconds")

    discovery = config['discovery']
    if discovery['probe_timeout_seconds'] <= 0:
        raise ValueError("discovery.probe_timeout_seconds must be positive")
    if discovery['max_concurrent_probes'] < 1:
        raise ValueError("discovery.max_concurrent_probes must be at least 1")

    if config['settings']['history_limit'] < 1:
        raise ValueError("settings.history_limit must be at least 1")

    presets = config['presets']
    if not isinstance(presets, dict):
        raise ValueError("Configuration section 'presets' must be a mapping")
    for preset_id, preset in presets.items():
        if not isinstance(preset, dict) or not preset.get('name'):
            raise ValueError(f"presets.{preset_id} must be a mapping with a name")
        id_field = PRESET_ID_FIELDS.get(preset.get('type'))
        if not id_field or not preset.get(id_field):
            raise ValueError(f"presets.{preset_id} needs a valid type and its '{id_field or 'type'}' value")


def _apply_section_defaults(config: Dict, section: str, defaults: Dict) -> None:
    if config.get(section) is None:
        config[section] = {}
    if not isinstance(config[section], dict):
        return
    for key, default_value in defaults.items():
        if key not in config[section]:
            config[section][key] = default_value


def _apply_defaults(config: Dict) -> Dict:
    """Apply default values to configuration"""

    # Device defaults (EO1 listens on 12345)
    _apply_section_defaults(config, 'device', {
        'host': '192.168.1.43',
        'port': 12345,
        'timeout_seconds': 5,
        'grace_delay_seconds': 0.1
    })

    # Discovery defaults
    _apply_section_defaults(config, 'discovery', {
        'probe_timeout_seconds': 0.5,
        'max_concurrent_probes': 254
    })

    # API defaults
    _apply_section_defaults(config, 'api', {
        'host': '0.0.0.0',
        'port': 3000,
        'cors_origins': ['*']
    })

    # Flickr defaults
    _apply_section_defaults(config, 'flickr', {
        'base_url': 'https://api.flickr.com/services/rest/',
        'timeout_seconds': 15,
        'per_page': 24
    })

    # Settings file defaults
    _apply_section_defaults(config, 'settings', {
        'file': 'config/settings.json',
        'presets_file': 'config/presets.json',
        'history_limit': 50
    })

    # Built-in presets: id -> {name, type, tag|userId|groupId|galleryId|albumId}
    if config.get('presets') is None:
        config['presets'] = {}

    # Logging defaults
    _apply_section_defaults(config, 'logging', {
        'level': 'INFO',
        'file': 'logs/eo1_controller.log',
        'console_output': True,
        'timezone': 'UTC'
    })

    return config


def _apply_env_overrides(config: Dict) -> Dict:
    """Environment variables win over the YAML file"""
    if os.environ.get('EO1_IP'):
        config['device']['host'] = os.environ['EO1_IP']
    if os.environ.get('EO1_PORT'):
        try:
            config['device']['port'] = int(os.environ['EO1_PORT'])
        except ValueError:
            logger.warning(f"Ignoring invalid EO1_PORT: {os.environ['EO1_PORT']}")
    if os.environ.get('HOST'):
        config['api']['host'] = os.environ['HOST']
    if os.environ.get('PORT'):
        try:
            config['api']['port'] = int(os.environ['PORT'])
        except ValueError:
            logger.warning(f"Ignoring invalid PORT: {os.environ['PORT']}")
    return config


class TimezoneFormatter(logging.Formatter):
    """Formatter that renders timestamps in a configured timezone"""

    def __init__(self, fmt=None, tz_name: str = 'UTC'):
        super().__init__(fmt)
        try:
            self.tz = pytz.timezone(tz_name)
        except pytz.UnknownTimeZoneError:
            self.tz = pytz.utc

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        if datefmt:
            return dt.strftime(datefmt)
        else:
            # Default format: YYYY-MM-DD HH:MM:SS TZ
            return dt.strftime('%Y-%m-%d %H:%M:%S %Z')


def setup_logging(config: Dict) -> None:
    """Setup logging based on configuration"""
    log_config = config.get('logging', {})
    level = log_config.get('level', 'INFO')
    tz_name = log_config.get('timezone', 'UTC')

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = TimezoneFormatter(log_format, tz_name)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        handlers=[]
    )
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))

    if log_config.get('console_output', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    log_file = log_config.get('file')
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logger.info(f"Logging configured: level={level}, timezone={tz_name}, "
                f"console={log_config.get('console_output', True)}, file={log_file}")


def get_sample_config() -> Dict:
    """Return a sample configuration for reference"""
    return {
        "device": {
            "host": "192.168.1.43",
            "port": 12345,
            "timeout_seconds": 5,
            "grace_delay_seconds": 0.1
        },
        "discovery": {
            "probe_timeout_seconds": 0.5,
            "max_concurrent_probes": 254
        },
        "api": {
            "host": "0.0.0.0",
            "port": 3000,
            "cors_origins": ["*"]
        },
        "flickr": {
            "base_url": "https://api.flickr.com/services/rest/",
            "timeout_seconds": 15,
            "per_page": 24
        },
        "settings": {
            "file": "config/settings.json",
            "presets_file": "config/presets.json",
            "history_limit": 50
        },
        "presets": {
            "sunset": {"name": "Sunsets", "type": "tag", "tag": "sunset"}
        },
        "logging": {
            "level": "INFO",
            "file": "logs/eo1_controller.log",
            "console_output": True,
            "timezone": "UTC"
        }
    }
