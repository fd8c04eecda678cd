"""
Flickr API Client
Wrapper for the Flickr REST API calls the controller needs

API methods used:
- flickr.photos.search - Search photos by tags, or by text with filters
- flickr.people.getPublicPhotos - Get user's public photos
- flickr.photos.getSizes - Get available sizes for a photo
- flickr.photos.getInfo - Get photo metadata
- flickr.photosets.getList / getPhotos - Albums and their photos
- flickr.groups.pools.getPhotos - Group pool photos
- flickr.galleries.getPhotos - Gallery photos
- flickr.interestingness.getList - Explore
- flickr.urls.lookupUser / lookupGroup - Resolve path names to NSIDs
"""

import re
import asyncio
import logging
from typing import Dict, Any, Optional
from urllib.parse import urlparse, parse_qs, unquote

import aiohttp

from http_helper import create_flickr_session

logger = logging.getLogger(__name__)

FLICKR_REST_URL = "https://api.flickr.com/services/rest/"
MAX_PER_PAGE = 500
PHOTO_EXTRAS = "media,url_sq,url_m,url_l,url_o,original_format,o_dims,width_l,height_l,width_m,height_m"


class FlickrAPIError(Exception):
    """Flickr returned an error or could not be reached"""


class FlickrClient:
    """Async Flickr REST client"""

    def __init__(self, api_key: str, base_url: str = FLICKR_REST_URL, timeout_seconds: float = 15):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds

        if not api_key:
            logger.warning("No Flickr API key configured. Add one in Settings.")

    def set_api_key(self, api_key: str) -> None:
        self.api_key = api_key
        logger.info("Flickr API key updated")

    async def request(self, method: str, **params) -> Dict[str, Any]:
        """Call a Flickr API method and return the decoded JSON body"""
        if not self.api_key:
            raise FlickrAPIError("No Flickr API key configured")

        query = {
            "method": method,
            "api_key": self.api_key,
            "format": "json",
            "nojsoncallback": 1,
        }
        query.update({k: v for k, v in params.items() if v is not None})

        try:
            async with create_flickr_session(self.timeout_seconds) as session:
                async with session.get(self.base_url, params=query) as response:
                    if response.status != 200:
                        raise FlickrAPIError(f"Flickr API error: {response.status}")
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Flickr request {method} failed: {e}")
            raise FlickrAPIError(f"Flickr API error: {str(e) or type(e).__name__}") from e
        except ValueError as e:
            logger.error(f"Flickr request {method} returned a non-JSON body: {e}")
            raise FlickrAPIError("Flickr API error: invalid response body") from e

        if not isinstance(data, dict):
            raise FlickrAPIError("Flickr API error: unexpected response format")
        if data.get("stat") == "fail":
            raise FlickrAPIError(data.get("message") or "Flickr API error")

        return data

    async def get_user_photos(self, user_id: str, page: int = 1, per_page: int = 24) -> Dict[str, Any]:
        return await self.request(
            "flickr.people.getPublicPhotos",
            user_id=user_id,
            per_page=min(per_page, MAX_PER_PAGE),
            page=page,
            extras=PHOTO_EXTRAS,
            sort="date-posted-desc"
        )

    async def search_by_tag(self, tags: str, page: int = 1, per_page: int = 24) -> Dict[str, Any]:
        return await self.request(
            "flickr.photos.search",
            tags=tags,
            per_page=min(per_page, MAX_PER_PAGE),
            page=page,
            extras=PHOTO_EXTRAS,
            sort="date-posted-desc"
        )

    async def advanced_search(self, search_params: Dict[str, Any], page: int = 1,
                              per_page: int = 24) -> Dict[str, Any]:
        """
        Text search with the filters a flickr.com/search URL carries:
        orientation, min_width, min_height, content_type
        (1=photos, 2=screenshots, 3=other, 4=photos+screenshots)
        """
        params: Dict[str, Any] = {
            "text": search_params.get("text"),
            "per_page": min(per_page, MAX_PER_PAGE),
            "page": page,
            "extras": PHOTO_EXTRAS,
            "sort": "relevance"
        }
        if search_params.get("orientation"):
            params["orientation"] = search_params["orientation"]
        if search_params.get("min_width"):
            params["dimension_search_mode"] = "min"
            params["width"] = search_params["min_width"]
        if search_params.get("min_height"):
            params["dimension_search_mode"] = "min"
            params["height"] = search_params["min_height"]
        if search_params.get("content_type"):
            params["content_type"] = search_params["content_type"]

        return await self.request("flickr.photos.search", **params)

    async def get_photo_sizes(self, photo_id: str) -> Dict[str, Any]:
        return await self.request("flickr.photos.getSizes", photo_id=photo_id)

    async def get_photo_info(self, photo_id: str) -> Dict[str, Any]:
        return await self.request("flickr.photos.getInfo", photo_id=photo_id)

    # ================== ALBUMS / GROUPS / GALLERIES ==================

    async def get_photosets(self, user_id: str) -> Dict[str, Any]:
        return await self.request(
            "flickr.photosets.getList",
            user_id=user_id,
            per_page=100,
            primary_photo_extras="url_sq,url_m"
        )

    async def get_photoset_photos(self, photoset_id: str, user_id: str, page: int = 1,
                                  per_page: int = 24) -> Dict[str, Any]:
        return await self.request(
            "flickr.photosets.getPhotos",
            photoset_id=photoset_id,
            user_id=user_id,
            page=page,
            per_page=min(per_page, MAX_PER_PAGE),
            extras=PHOTO_EXTRAS
        )

    async def get_group_photos(self, group_id: str, page: int = 1, per_page: int = 24) -> Dict[str, Any]:
        return await self.request(
            "flickr.groups.pools.getPhotos",
            group_id=group_id,
            page=page,
            per_page=min(per_page, MAX_PER_PAGE),
            extras=PHOTO_EXTRAS
        )

    async def get_gallery_photos(self, gallery_id: str, page: int = 1, per_page: int = 24) -> Dict[str, Any]:
        return await self.request(
            "flickr.galleries.getPhotos",
            gallery_id=gallery_id,
            page=page,
            per_page=min(per_page, MAX_PER_PAGE),
            extras=PHOTO_EXTRAS
        )

    async def get_interesting_photos(self, page: int = 1, per_page: int = 24) -> Dict[str, Any]:
        """Today's Explore selection"""
        return await self.request(
            "flickr.interestingness.getList",
            page=page,
            per_page=min(per_page, MAX_PER_PAGE),
            extras=PHOTO_EXTRAS
        )

    # ================== ID RESOLUTION ==================

    async def resolve_user_id(self, username: str) -> str:
        """Path name -> NSID ("12345678@N00"); NSIDs are returned unchanged"""
        if "@" in username:
            return username
        result = await self.request(
            "flickr.urls.lookupUser", url=f"https://www.flickr.com/photos/{username}/"
        )
        try:
            return result["user"]["id"]
        except (KeyError, TypeError):
            raise FlickrAPIError(f"User not found: {username}") from None

    async def resolve_group_id(self, group_path: str) -> str:
        """Group slug -> NSID; NSIDs are returned unchanged"""
        if "@" in group_path:
            return group_path
        result = await self.request(
            "flickr.urls.lookupGroup", url=f"https://www.flickr.com/groups/{group_path}/"
        )
        try:
            return result["group"]["id"]
        except (KeyError, TypeError):
            raise FlickrAPIError(f"Group not found: {group_path}") from None


def _int_or_none(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def transform_photo(photo: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a Flickr photo record for the browser"""
    # Prefer original dimensions, then large, then medium
    width = _int_or_none(photo.get("o_width")) or _int_or_none(photo.get("width_l")) \
        or _int_or_none(photo.get("width_m"))
    height = _int_or_none(photo.get("o_height")) or _int_or_none(photo.get("height_l")) \
        or _int_or_none(photo.get("height_m"))

    return {
        "id": photo.get("id"),
        "title": photo.get("title"),
        "media": photo.get("media") or "photo",
        "thumbnailUrl": photo.get("url_sq") or photo.get("url_m"),
        "mediumUrl": photo.get("url_m"),
        "largeUrl": photo.get("url_l"),
        "originalUrl": photo.get("url_o"),
        "width": width,
        "height": height
    }


def _map_content_types(raw: str) -> Optional[int]:
    # Web uses 0=photos, 2=screenshots; API uses 1=photos, 2=screenshots, 4=both
    types = {_int_or_none(t) for t in raw.split(",")}
    if 0 in types and 2 in types:
        return 4
    if 0 in types:
        return 1
    if 2 in types:
        return 2
    return None


def parse_flickr_url(url: str) -> Optional[Dict[str, Any]]:
    """
    Work out what a Flickr URL points at.
    Returns {type, value, ...} for search, explore, group, gallery, album, tag
    and user URLs, or None for anything else.
    """
    normalised = url.strip()
    if not normalised.lower().startswith("http"):
        normalised = "https://" + normalised

    try:
        parsed = urlparse(normalised)
    except ValueError:
        return None

    if not parsed.hostname or "flickr.com" not in parsed.hostname:
        return None

    path = parsed.path

    if re.match(r"^/search/?$", path, re.I):
        params = parse_qs(parsed.query)
        text = params.get("text", [None])[0]
        if not text:
            return None
        search_params: Dict[str, Any] = {"text": text}
        if params.get("orientation"):
            search_params["orientation"] = params["orientation"][0]
        if _int_or_none(params.get("width", [None])[0]):
            search_params["min_width"] = int(params["width"][0])
        if _int_or_none(params.get("height", [None])[0]):
            search_params["min_height"] = int(params["height"][0])
        if params.get("content_types"):
            content_type = _map_content_types(params["content_types"][0])
            if content_type:
                search_params["content_type"] = content_type
        return {"type": "search", "value": text, "searchParams": search_params}

    if re.match(r"^/explore/?$", path, re.I):
        return {"type": "explore", "value": "explore"}

    match = re.search(r"/groups/([^/]+)", path, re.I)
    if match:
        return {"type": "group", "value": unquote(match.group(1))}

    match = re.search(r"/photos/[^/]+/galleries/(\d+)", path, re.I)
    if match:
        return {"type": "gallery", "value": match.group(1)}

    match = re.search(r"/photos/([^/]+)/albums/(\d+)", path, re.I)
    if match:
        return {"type": "album", "value": match.group(2), "userId": unquote(match.group(1))}

    match = re.search(r"/photos/tags/([^/]+)", path, re.I)
    if match:
        return {"type": "tag", "value": unquote(match.group(1))}

    match = re.search(r"/photos/([^/]+)", path, re.I)
    if match:
        user_id = unquote(match.group(1))
        if user_id != "tags":
            return {"type": "user", "value": user_id}

    return None
