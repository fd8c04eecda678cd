"""
API module for EO1 control and Flickr browsing
"""

from .main_api import ControllerAPI
from .device_routes import create_device_routes
from .settings_routes import create_settings_routes
from .flickr_routes import create_flickr_routes
from .system_routes import create_system_routes

__all__ = [
    'ControllerAPI', 'create_device_routes', 'create_settings_routes',
    'create_flickr_routes', 'create_system_routes'
]
