"""
Flickr API routes
Photo browsing and search for picking what the EO1 shows
"""

import re
import logging
from typing import Dict, Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from flickr_client import FlickrClient, transform_photo

logger = logging.getLogger(__name__)

_PHOTO_ID_PATTERN = re.compile(r"^\d+$")


class AdvancedSearchRequest(BaseModel):
    text: Optional[str] = None
    orientation: Optional[str] = None
    min_width: Optional[int] = None
    min_height: Optional[int] = None
    content_type: Optional[int] = None


def _photo_page(result: Dict[str, Any], key: str = "photos") -> Dict[str, Any]:
    """Flatten a paged Flickr photo listing ("photos" or "photoset" envelope)"""
    photos = result.get(key) or {}
    return {
        "photos": [transform_photo(p) for p in photos.get("photo", [])],
        "page": int(photos.get("page", 1)),
        "pages": int(photos.get("pages", 0)),
        "perPage": int(photos.get("perpage", 0)),
        "total": int(photos.get("total", 0))
    }


def _transform_album(album: Dict[str, Any]) -> Dict[str, Any]:
    extras = album.get("primary_photo_extras") or {}
    return {
        "id": album.get("id"),
        "title": (album.get("title") or {}).get("_content"),
        "description": (album.get("description") or {}).get("_content"),
        "photoCount": int(album.get("photos", 0)),
        "videoCount": int(album.get("videos", 0)),
        "primaryPhoto": {
            "id": album.get("primary"),
            "thumbnailUrl": extras.get("url_sq"),
            "mediumUrl": extras.get("url_m")
        }
    }


def _validate_photo_id(photo_id: str) -> None:
    if not _PHOTO_ID_PATTERN.match(photo_id):
        raise HTTPException(status_code=400, detail="Invalid photo ID")


def create_flickr_routes(flickr_client: FlickrClient, default_per_page: int = 24):
    """Create Flickr browsing routes"""
    router = APIRouter(prefix="/api/flickr", tags=["flickr"])

    @router.get("/user/{user_id}/photos")
    async def get_user_photos(user_id: str, page: int = 1, per_page: Optional[int] = None):
        """Public photos from a Flickr user, newest first"""
        result = await flickr_client.get_user_photos(user_id, page, per_page or default_per_page)
        return _photo_page(result)

    @router.get("/user/{user_id}/albums")
    async def get_user_albums(user_id: str):
        result = await flickr_client.get_photosets(user_id)
        photosets = result.get("photosets") or {}
        return {
            "albums": [_transform_album(a) for a in photosets.get("photoset", [])],
            "total": int(photosets.get("total", 0))
        }

    @router.get("/album/{album_id}/photos")
    async def get_album_photos(album_id: str, user_id: Optional[str] = None, page: int = 1,
                               per_page: Optional[int] = None):
        """Photos in an album; Flickr needs the owner's id as well"""
        if not user_id:
            raise HTTPException(status_code=400, detail="User ID is required")

        result = await flickr_client.get_photoset_photos(
            album_id, user_id, page, per_page or default_per_page
        )
        return {
            **_photo_page(result, "photoset"),
            "albumId": album_id,
            "albumTitle": (result.get("photoset") or {}).get("title")
        }

    @router.get("/group/{group_id}/photos")
    async def get_group_photos(group_id: str, page: int = 1, per_page: Optional[int] = None):
        result = await flickr_client.get_group_photos(group_id, page, per_page or default_per_page)
        return {**_photo_page(result), "groupId": group_id}

    @router.get("/gallery/{gallery_id}/photos")
    async def get_gallery_photos(gallery_id: str, page: int = 1, per_page: Optional[int] = None):
        result = await flickr_client.get_gallery_photos(gallery_id, page, per_page or default_per_page)
        return {**_photo_page(result), "galleryId": gallery_id}

    @router.get("/explore")
    async def get_explore_photos(page: int = 1, per_page: Optional[int] = None):
        """Flickr Explore (interestingness)"""
        result = await flickr_client.get_interesting_photos(page, per_page or default_per_page)
        return _photo_page(result)

    @router.get("/search")
    async def search(tags: Optional[str] = None, page: int = 1, per_page: Optional[int] = None):
        """Search photos by tag(s)"""
        if not tags:
            raise HTTPException(status_code=400, detail="Tags parameter is required")

        result = await flickr_client.search_by_tag(tags, page, per_page or default_per_page)
        return {**_photo_page(result), "tags": tags}

    @router.post("/search/advanced")
    async def advanced_search(request: AdvancedSearchRequest, page: int = 1,
                              per_page: Optional[int] = None):
        """Text search with the filters of a pasted flickr.com/search URL"""
        if not request.text:
            raise HTTPException(status_code=400, detail="Search text is required")

        search_params = request.model_dump(exclude_none=True)
        result = await flickr_client.advanced_search(search_params, page, per_page or default_per_page)
        return {**_photo_page(result), "searchParams": search_params}

    @router.get("/photo/{photo_id}/sizes")
    async def get_photo_sizes(photo_id: str):
        _validate_photo_id(photo_id)
        result = await flickr_client.get_photo_sizes(photo_id)

        sizes = {}
        for size in result.get("sizes", {}).get("size", []):
            key = re.sub(r"\s+", "_", size["label"].lower())
            sizes[key] = {
                "label": size["label"],
                "width": int(size["width"]),
                "height": int(size["height"]),
                "source": size.get("source"),
                "url": size.get("url")
            }

        return {
            "photoId": photo_id,
            "sizes": sizes,
            "canDownload": result.get("sizes", {}).get("candownload") == 1
        }

    @router.get("/photo/{photo_id}/info")
    async def get_photo_info(photo_id: str):
        _validate_photo_id(photo_id)
        result = await flickr_client.get_photo_info(photo_id)
        photo = result["photo"]

        return {
            "id": photo["id"],
            "title": photo.get("title", {}).get("_content"),
            "description": photo.get("description", {}).get("_content"),
            "owner": {
                "id": photo.get("owner", {}).get("nsid"),
                "username": photo.get("owner", {}).get("username"),
                "realname": photo.get("owner", {}).get("realname")
            },
            "dates": {
                "taken": photo.get("dates", {}).get("taken"),
                "posted": photo.get("dates", {}).get("posted")
            },
            "media": photo.get("media"),
            "tags": [t.get("raw") for t in photo.get("tags", {}).get("tag", [])]
        }

    return router
