"""
HTTP utilities for CryptoNews.
"""
import logging
from typing import Any, Dict, Optional

import aiohttp
import async_timeout

logger = logging.getLogger(__name__)

USER_AGENT = 'CryptoNews/0.1 News Aggregator'
REQUEST_TIMEOUT = 10  # seconds

FEED_ACCEPT = 'application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5'


def build_headers(user_agent: Optional[str] = None, accept: Optional[str] = None) -> Dict[str, str]:
    headers = {'User-Agent': user_agent or USER_AGENT}
    if accept:
        headers['Accept'] = accept
    return headers


def create_session(user_agent: Optional[str] = None, accept: Optional[str] = None) -> aiohttp.ClientSession:
    """Create an aiohttp session identifying itself with the client user agent."""
    return aiohttp.ClientSession(headers=build_headers(user_agent, accept))


async def fetch_bytes(session: aiohttp.ClientSession, url: str, timeout: float = REQUEST_TIMEOUT) -> bytes:
    """
    GET a URL and return the raw body, leaving decoding to the caller.

    Raises:
        aiohttp.ClientError: On connection errors and non-2xx responses
        asyncio.TimeoutError: If the request exceeds the timeout
    """
    async with async_timeout.timeout(timeout):
        async with session.get(url) as response:
            response.raise_for_status()
            body = await response.read()
            logger.debug(f"GET {url} -> {response.status} ({len(body)} bytes)")
            return body


async def fetch_json(session: aiohttp.ClientSession, url: str, timeout: float = REQUEST_TIMEOUT) -> Any:
    """
    GET a URL and decode the JSON body.
    """
    async with async_timeout.timeout(timeout):
        async with session.get(url) as response:
            response.raise_for_status()
            return await response.json(content_type=None)
