# HTTP Helper for outbound API connections
# Session configuration for Flickr REST calls

import aiohttp
import logging

logger = logging.getLogger(__name__)

USER_AGENT = "EO1-Web-Controller/1.0"


def create_flickr_session(timeout_seconds: float = 15) -> aiohttp.ClientSession:
    """
    Create properly configured aiohttp session for Flickr API calls
    One short-lived session per request; connections are not kept around
    """
    connector = aiohttp.TCPConnector(
        limit_per_host=4,
        force_close=True            # Force connection cleanup
    )

    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=timeout_seconds),
        headers={"User-Agent": USER_AGENT}
    )
