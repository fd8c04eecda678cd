"""
Controller Server - wires settings, device socket, discovery, Flickr and the HTTP API
"""

import logging
from typing import Dict
import uvicorn

# Local imports
from config_loader import load_config, setup_logging
from settings_manager import SettingsManager
from preset_manager import PresetManager
from device import DeviceEndpoint, DeviceSocket
from discovery import NetworkDiscovery
from flickr_client import FlickrClient
from api.main_api import ControllerAPI

logger = logging.getLogger(__name__)


def create_components(config: Dict) -> Dict:
    """Build all services from loaded configuration"""
    device_config = config['device']
    settings_config = config['settings']

    settings = SettingsManager(
        settings_file=settings_config['file'],
        history_limit=settings_config['history_limit'],
        default_device={"ip": device_config['host'], "port": device_config['port']}
    )
    saved = settings.load()

    # Saved settings win over config/env defaults
    host = saved['device'].get('ip') or device_config['host']
    port = saved['device'].get('port') or device_config['port']
    endpoint = DeviceEndpoint(
        host=host,
        port=int(port),
        timeout_seconds=device_config['timeout_seconds'],
        grace_delay_seconds=device_config['grace_delay_seconds']
    )

    discovery_config = config['discovery']
    discovery = NetworkDiscovery(
        endpoint,
        probe_timeout=discovery_config['probe_timeout_seconds'],
        max_concurrent_probes=discovery_config['max_concurrent_probes']
    )

    flickr_config = config['flickr']
    flickr = FlickrClient(
        settings.get_api_key(),
        base_url=flickr_config['base_url'],
        timeout_seconds=flickr_config['timeout_seconds']
    )

    presets = PresetManager(settings_config['presets_file'], builtin_presets=config['presets'])

    device_socket = DeviceSocket(endpoint)
    api = ControllerAPI(device_socket, discovery, settings, flickr, presets, config)

    return {
        "settings": settings,
        "endpoint": endpoint,
        "device_socket": device_socket,
        "discovery": discovery,
        "flickr": flickr,
        "presets": presets,
        "api": api
    }


class ControllerServer:
    """Main server running the EO1 controller API"""

    def __init__(self, config_path: str = "config/config.yaml"):
        self.config = load_config(config_path)
        setup_logging(self.config)

        components = create_components(self.config)
        self.settings = components['settings']
        self.endpoint = components['endpoint']
        self.flickr = components['flickr']
        self.api = components['api']

        self.server = None

    async def start(self):
        """Start the HTTP API server"""
        logger.info("Starting EO1 Web Controller...")
        await self._start_api_server()

    async def stop(self):
        """Stop the server gracefully"""
        logger.info("Stopping server...")
        if self.server:
            self.server.should_exit = True
        logger.info("Server stopped")

    async def _start_api_server(self):
        """Start the FastAPI server"""
        config = uvicorn.Config(
            self.api.app,
            host=self.config['api']['host'],
            port=self.config['api']['port'],
            log_level="info",
            access_log=False  # We handle our own logging
        )

        self.server = uvicorn.Server(config)

        logger.info(f"Device:  {self.endpoint.host}:{self.endpoint.port}")
        if self.flickr.api_key:
            logger.info("Flickr:  API key configured")
        else:
            logger.info("Flickr:  no API key - add one in Settings")
        logger.info(f"Starting API server on {self.config['api']['host']}:{self.config['api']['port']}")
        logger.info(f"API documentation: http://localhost:{self.config['api']['port']}/docs")

        await self.server.serve()
