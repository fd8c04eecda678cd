"""
Settings API routes
Device IP and Flickr credentials, presets, current source and display history
"""

import asyncio
import logging
from typing import Dict, Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from device import DeviceEndpoint, validate_ipv4
from flickr_client import FlickrAPIError, FlickrClient, parse_flickr_url
from preset_manager import PresetManager, PRESET_ID_FIELDS, MAX_PRESET_NAME_LENGTH, build_preset
from settings_manager import mask_secret

logger = logging.getLogger(__name__)


class SettingsUpdateRequest(BaseModel):
    deviceIp: Optional[str] = None


class FlickrSettingsRequest(BaseModel):
    apiKey: Optional[str] = None
    userId: Optional[str] = None


class PresetRequest(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    type: Optional[str] = None
    value: Optional[str] = None


class ParseUrlRequest(BaseModel):
    url: Optional[str] = None


class CurrentSourceRequest(BaseModel):
    type: Optional[str] = None
    value: Optional[str] = None
    name: Optional[str] = None
    url: Optional[str] = None


def _flickr_summary(flickr: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "apiKey": mask_secret(flickr.get("apiKey")),
        "userId": flickr.get("userId") or "",
        "hasApiKey": bool(flickr.get("apiKey"))
    }


async def _preset_from_url(name: str, url: str, flickr_client: FlickrClient) -> Dict[str, Any]:
    """Build a preset from a Flickr URL, resolving user and group path names to NSIDs"""
    parsed = parse_flickr_url(url)
    if not parsed or parsed["type"] not in PRESET_ID_FIELDS:
        raise HTTPException(status_code=400, detail="Invalid Flickr URL")

    preset_type = parsed["type"]
    value = parsed["value"]
    extra = {"url": url}

    try:
        if preset_type == "group":
            value = await flickr_client.resolve_group_id(value)
        elif preset_type == "album":
            extra["userId"] = await flickr_client.resolve_user_id(parsed["userId"])
        elif preset_type == "user":
            value = await flickr_client.resolve_user_id(value)
    except FlickrAPIError as e:
        lookup = parsed.get("userId") if preset_type == "album" else parsed["value"]
        raise HTTPException(
            status_code=400, detail=f"Could not resolve {preset_type} \"{lookup}\": {e}"
        )

    return build_preset(name, preset_type, value, **extra)


def create_settings_routes(endpoint: DeviceEndpoint, settings_manager, flickr_client: FlickrClient,
                           preset_manager: PresetManager):
    """Create settings routes"""
    router = APIRouter(prefix="/api/settings", tags=["settings"])

    @router.get("")
    async def get_settings():
        """Current settings with the API key masked"""
        flickr = settings_manager.get_flickr()
        host, port = endpoint.snapshot()
        return {"device": {"ip": host, "port": port}, "flickr": _flickr_summary(flickr)}

    @router.put("")
    async def update_settings(request: SettingsUpdateRequest):
        """Change the device IP; takes effect for the next command or scan"""
        if request.deviceIp:
            try:
                device_ip = validate_ipv4(request.deviceIp)
            except ValueError:
                raise HTTPException(status_code=400, detail="Invalid IP address format")

            endpoint.set_host(device_ip)
            await asyncio.to_thread(settings_manager.update_device, {"ip": device_ip})

        return {"success": True}

    @router.get("/flickr")
    async def get_flickr_settings():
        flickr = settings_manager.get_flickr()
        return {**_flickr_summary(flickr), "source": flickr.get("source")}

    @router.put("/flickr")
    async def update_flickr_settings(request: FlickrSettingsRequest):
        updates = request.model_dump(exclude_none=True)
        updated = await asyncio.to_thread(settings_manager.update_flickr, updates)

        if request.apiKey:
            flickr_client.set_api_key(request.apiKey)

        return {"success": True, "flickr": _flickr_summary(updated)}

    # ================== PRESETS ==================

    @router.get("/presets")
    async def get_presets():
        """Built-in presets merged with user presets"""
        presets = await asyncio.to_thread(preset_manager.list_presets)
        return {"presets": presets}

    @router.post("/presets")
    async def add_preset(request: PresetRequest):
        """Save a preset from {name, url} or {name, type, value}"""
        name = request.name
        if not name or len(name) > MAX_PRESET_NAME_LENGTH:
            raise HTTPException(
                status_code=400, detail=f"Name is required (max {MAX_PRESET_NAME_LENGTH} characters)"
            )

        if request.url:
            preset = await _preset_from_url(name, request.url, flickr_client)
        elif request.type and request.value:
            if request.type not in PRESET_ID_FIELDS:
                raise HTTPException(
                    status_code=400,
                    detail=f"Type must be one of: {', '.join(PRESET_ID_FIELDS)}"
                )
            preset = build_preset(name, request.type, request.value)
        else:
            raise HTTPException(status_code=400, detail="Either url or type+value is required")

        try:
            saved = await asyncio.to_thread(preset_manager.add_preset, preset)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return {"success": True, "preset": saved}

    @router.delete("/presets/{preset_id}")
    async def delete_preset(preset_id: str):
        deleted = await asyncio.to_thread(preset_manager.delete_preset, preset_id)
        if deleted:
            return {"success": True}
        if preset_manager.is_builtin(preset_id):
            raise HTTPException(status_code=400, detail="Cannot delete built-in presets")
        raise HTTPException(status_code=404, detail="Preset not found")

    @router.post("/parse-url")
    async def parse_url(request: ParseUrlRequest):
        """Identify a pasted Flickr URL without saving anything"""
        if not request.url:
            raise HTTPException(status_code=400, detail="URL is required")
        parsed = parse_flickr_url(request.url)
        if not parsed:
            raise HTTPException(status_code=400, detail="Invalid Flickr URL")
        return parsed

    # ================== CURRENT SOURCE / HISTORY ==================

    @router.get("/current-source")
    async def get_current_source():
        """What the EO1 was last told to show"""
        return {"currentSource": settings_manager.get_current_source()}

    @router.put("/current-source")
    async def set_current_source(request: CurrentSourceRequest):
        if not request.type or not request.value:
            raise HTTPException(status_code=400, detail="type and value are required")

        current = await asyncio.to_thread(
            settings_manager.set_current_source, request.model_dump(exclude_none=True)
        )
        return {"success": True, "currentSource": current}

    @router.get("/history")
    async def get_history():
        return {"history": settings_manager.get_history()}

    return router
