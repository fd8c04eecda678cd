"""
Main FastAPI application setup

Local HTTP API for the EO1 Web Controller
Provides REST endpoints for device control, network scans, settings and Flickr browsing
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Dict
import logging

from device import DeviceSocket, DeviceCommandError
from discovery import NetworkDiscovery
from flickr_client import FlickrClient, FlickrAPIError
from preset_manager import PresetManager

# Import modular route factories
from .device_routes import create_device_routes
from .settings_routes import create_settings_routes
from .flickr_routes import create_flickr_routes
from .system_routes import create_system_routes

logger = logging.getLogger(__name__)


class ControllerAPI:
    """Local HTTP API for EO1 control, discovery, settings and Flickr browsing"""

    def __init__(self, device_socket: DeviceSocket, discovery: NetworkDiscovery,
                 settings_manager, flickr_client: FlickrClient, preset_manager: PresetManager,
                 config: Dict):
        self.device_socket = device_socket
        self.discovery = discovery
        self.settings = settings_manager
        self.flickr = flickr_client
        self.presets = preset_manager
        self.config = config
        self.app = FastAPI(
            title="EO1 Web Controller",
            description="Local API for Electric Objects EO1 control and Flickr browsing",
            version="1.0.0"
        )
        self._setup_middleware()
        self._setup_error_handlers()
        self._setup_routes()

    def _setup_middleware(self):
        cors_origins = self.config.get('api', {}).get('cors_origins', ['*'])
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_methods=["*"],
            allow_headers=["*"]
        )

    def _setup_error_handlers(self):
        """Map device and Flickr failures onto HTTP status codes"""

        @self.app.exception_handler(DeviceCommandError)
        async def device_error_handler(request: Request, exc: DeviceCommandError):
            logger.error(f"Device command '{exc.command}' failed ({exc.kind.value}): {exc}")
            return JSONResponse(
                status_code=503,
                content={
                    "error": "Device not reachable",
                    "message": str(exc),
                    "kind": exc.kind.value
                }
            )

        @self.app.exception_handler(FlickrAPIError)
        async def flickr_error_handler(request: Request, exc: FlickrAPIError):
            logger.error(f"Flickr error on {request.url.path}: {exc}")
            return JSONResponse(
                status_code=502,
                content={"error": "Flickr API error", "message": str(exc)}
            )

    def _setup_routes(self):
        """Setup FastAPI routes using modular approach"""
        scan_timeout = self.config.get('discovery', {}).get('probe_timeout_seconds')
        per_page = self.config.get('flickr', {}).get('per_page', 24)

        self.app.include_router(create_device_routes(
            self.device_socket, self.discovery, self.settings, scan_timeout
        ))
        self.app.include_router(create_settings_routes(
            self.device_socket.endpoint, self.settings, self.flickr, self.presets
        ))
        self.app.include_router(create_flickr_routes(self.flickr, per_page))
        self.app.include_router(create_system_routes(self.device_socket, self.flickr))
