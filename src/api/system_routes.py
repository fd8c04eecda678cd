"""
System health API routes
"""

from fastapi import APIRouter
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def create_system_routes(device_socket, flickr_client):
    """Create system monitoring routes"""
    router = APIRouter(prefix="/api/system", tags=["system"])

    @router.get("/health")
    async def system_health():
        """
        Process health. The device is reported from configuration only;
        probing the command port without a command destabilises the EO1.
        """
        return {
            "status": "healthy",
            "device": device_socket.check_connection(),
            "flickr": {"hasApiKey": bool(flickr_client.api_key)},
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    return router
