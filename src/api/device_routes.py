"""
Device control API routes
Commands are sent over the EO1 socket; display commands also update current source and history
"""

import re
import asyncio
import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from device import DeviceSocket, AUTO_BRIGHTNESS, QUIET_HOURS_DISABLED
from discovery import NetworkDiscovery, SubnetDetectionError

logger = logging.getLogger(__name__)

_PHOTO_ID_PATTERN = re.compile(r"^\d+$")
MAX_TAG_LENGTH = 100


# Request models
class MediaRequest(BaseModel):
    title: Optional[str] = None
    thumbnailUrl: Optional[str] = None
    owner: Optional[str] = None


class BrightnessRequest(BaseModel):
    level: Optional[float] = None
    auto: bool = False


class TagRequest(BaseModel):
    tag: Optional[str] = None
    name: Optional[str] = None


class OptionsRequest(BaseModel):
    brightness: float = AUTO_BRIGHTNESS
    interval: int = 5
    startHour: int = QUIET_HOURS_DISABLED
    endHour: int = QUIET_HOURS_DISABLED


class ScanRequest(BaseModel):
    subnet: Optional[str] = None


def _validate_photo_id(photo_id: str) -> None:
    if not photo_id or not _PHOTO_ID_PATTERN.match(photo_id):
        raise HTTPException(status_code=400, detail="Invalid photo ID")


def _validate_tag(tag: Optional[str]) -> str:
    """Tags go onto the wire unescaped, so commas and newlines are refused"""
    if not tag or not isinstance(tag, str) or len(tag) > MAX_TAG_LENGTH:
        raise HTTPException(status_code=400, detail="Invalid tag")
    tag = tag.strip()
    if not tag or any(ch in tag for ch in (",", "\n", "\r")):
        raise HTTPException(status_code=400, detail="Invalid tag")
    return tag


def _valid_hour(hour: int) -> bool:
    return hour == QUIET_HOURS_DISABLED or 0 <= hour <= 23


def create_device_routes(device_socket: DeviceSocket, discovery: NetworkDiscovery,
                         settings_manager, scan_timeout: Optional[float] = None):
    """Create device control routes"""
    router = APIRouter(prefix="/api/device", tags=["device"])

    def _record_display(media: str, photo_id: str, request: Optional[MediaRequest]):
        """Runs in a worker thread: both calls write settings.json"""
        request = request or MediaRequest()
        label = "Photo" if media == "photo" else "Video"
        title = request.title or f"{label} {photo_id}"

        settings_manager.set_current_source({
            "type": media,
            "value": photo_id,
            "name": title,
            "url": f"https://www.flickr.com/photos/{request.owner or 'any'}/{photo_id}/",
            "thumbnailUrl": request.thumbnailUrl
        })
        settings_manager.add_to_history({
            "id": photo_id,
            "owner": request.owner,
            "title": title,
            "thumbnailUrl": request.thumbnailUrl,
            "media": media
        })

    @router.get("/status")
    async def get_device_status():
        """Configured device info (does not connect, to avoid crashing the EO1)"""
        info = device_socket.check_connection()
        return {"ip": info["host"], "port": info["port"]}

    @router.post("/skip")
    async def skip():
        """Skip to next slideshow item"""
        await device_socket.resume()
        return {"success": True, "action": "skip"}

    @router.post("/resume")
    async def resume():
        """Resume slideshow (alias for skip)"""
        await device_socket.resume()
        return {"success": True, "action": "resume"}

    @router.post("/image/{photo_id}")
    async def display_image(photo_id: str, request: Optional[MediaRequest] = None):
        """Display a specific Flickr image"""
        _validate_photo_id(photo_id)
        await device_socket.display_image(photo_id)
        await asyncio.to_thread(_record_display, "photo", photo_id, request)
        return {"success": True, "action": "displayImage", "photoId": photo_id}

    @router.post("/video/{photo_id}")
    async def display_video(photo_id: str, request: Optional[MediaRequest] = None):
        """Display a specific Flickr video"""
        _validate_photo_id(photo_id)
        await device_socket.display_video(photo_id)
        await asyncio.to_thread(_record_display, "video", photo_id, request)
        return {"success": True, "action": "displayVideo", "photoId": photo_id}

    @router.post("/brightness")
    async def set_brightness(request: BrightnessRequest):
        """Set screen brightness: {level: 0.0-1.0} or {auto: true}"""
        if request.auto:
            await device_socket.set_brightness(AUTO_BRIGHTNESS)
            return {"success": True, "action": "brightness", "auto": True}

        if request.level is None or not 0 <= request.level <= 1:
            raise HTTPException(
                status_code=400,
                detail="Invalid brightness level. Must be 0.0-1.0 or { auto: true }"
            )
        await device_socket.set_brightness(request.level)
        return {"success": True, "action": "brightness", "level": request.level}

    @router.post("/tag")
    async def set_tag(request: TagRequest):
        """Change the Flickr tag the EO1 shows"""
        tag = _validate_tag(request.tag)
        await device_socket.set_tag(tag)

        await asyncio.to_thread(settings_manager.set_current_source, {
            "type": "tag",
            "value": tag,
            "name": request.name or tag,
            "url": f"https://www.flickr.com/photos/tags/{quote(tag, safe='')}/"
        })
        return {"success": True, "action": "setTag", "tag": tag}

    @router.post("/options")
    async def set_options(request: OptionsRequest):
        """Update brightness, interval and quiet hours at once"""
        if request.brightness != AUTO_BRIGHTNESS and not 0 <= request.brightness <= 1:
            raise HTTPException(status_code=400, detail="Brightness must be -1 (auto) or 0.0-1.0")
        if not 1 <= request.interval <= 60:
            raise HTTPException(status_code=400, detail="Interval must be 1-60 minutes")
        if not _valid_hour(request.startHour):
            raise HTTPException(status_code=400, detail="Start hour must be -1 (disabled) or 0-23")
        if not _valid_hour(request.endHour):
            raise HTTPException(status_code=400, detail="End hour must be -1 (disabled) or 0-23")

        await device_socket.set_options(
            request.brightness, request.interval, request.startHour, request.endHour
        )
        return {
            "success": True,
            "action": "setOptions",
            "options": {
                "brightness": request.brightness,
                "interval": request.interval,
                "startHour": request.startHour,
                "endHour": request.endHour
            }
        }

    @router.post("/scan")
    async def scan_network(request: Optional[ScanRequest] = None):
        """Scan a /24 for EO1 devices (port 12345); subnet is auto-detected if omitted"""
        subnet = request.subnet if request and request.subnet else None
        try:
            result = await discovery.scan_network(subnet, scan_timeout)
        except SubnetDetectionError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return {"success": True, **result.to_dict()}

    return router
