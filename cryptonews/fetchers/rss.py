"""
RSS/Atom feed client for CryptoNews.
"""
import asyncio
import logging
import re
import warnings
import xml.etree.ElementTree as ET
from typing import List, Optional, Union

import aiohttp
from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

from cryptonews.config import Config, config as default_config
from cryptonews.core.article import RawItem, Source
from cryptonews.errors import FetchError
from cryptonews.utils.http import FEED_ACCEPT, REQUEST_TIMEOUT, create_session, fetch_bytes

logger = logging.getLogger(__name__)

MAX_ITEMS_PER_SOURCE = 20

NS = {
    'atom': 'http://www.w3.org/2005/Atom',
    'media': 'http://search.yahoo.com/mrss/',
    'dc': 'http://purl.org/dc/elements/1.1/',
    'content': 'http://purl.org/rss/1.0/modules/content/',
}


def _text(elem: ET.Element, path: str) -> Optional[str]:
    found = elem.find(path, NS)
    if found is None:
        return None
    text = ''.join(found.itertext()).strip()
    return text or None


def _attr(elem: ET.Element, path: str, name: str) -> Optional[str]:
    found = elem.find(path, NS)
    if found is None:
        return None
    return found.get(name) or None


def content_snippet(html: Optional[str]) -> Optional[str]:
    """
    Plain-text version of an item's HTML content.
    """
    if not html:
        return None
    if '<' not in html and '&' not in html:
        return html.strip() or None

    with warnings.catch_warnings():
        warnings.simplefilter('ignore', MarkupResemblesLocatorWarning)
        text = BeautifulSoup(html, 'html.parser').get_text(separator=' ', strip=True)
    return re.sub(r'\s+', ' ', text).strip() or None


def _parse_rss_item(item: ET.Element) -> RawItem:
    description = _text(item, 'description')
    content = _text(item, 'content:encoded') or description

    return RawItem(
        title=_text(item, 'title'),
        link=_text(item, 'link'),
        description=description,
        content=content,
        content_snippet=content_snippet(content),
        pub_date=_text(item, 'pubDate') or _text(item, 'dc:date'),
        creator=_text(item, 'dc:creator') or _text(item, 'author'),
        enclosure_url=_attr(item, 'enclosure', 'url'),
        media_content_url=_attr(item, './/media:content', 'url'),
        media_thumbnail_url=_attr(item, './/media:thumbnail', 'url'),
    )


def _parse_atom_entry(entry: ET.Element) -> RawItem:
    link = None
    enclosure = None
    for link_elem in entry.findall('atom:link', NS):
        rel = link_elem.get('rel', 'alternate')
        if rel == 'alternate' and link is None:
            link = link_elem.get('href')
        elif rel == 'enclosure' and enclosure is None:
            enclosure = link_elem.get('href')

    description = _text(entry, 'atom:summary')
    content = _text(entry, 'atom:content') or description

    return RawItem(
        title=_text(entry, 'atom:title'),
        link=link,
        description=description,
        content=content,
        content_snippet=content_snippet(content),
        pub_date=_text(entry, 'atom:published') or _text(entry, 'atom:updated'),
        creator=_text(entry, 'atom:author/atom:name'),
        enclosure_url=enclosure,
        media_content_url=_attr(entry, './/media:content', 'url'),
        media_thumbnail_url=_attr(entry, './/media:thumbnail', 'url'),
    )


def parse_feed(document: Union[bytes, str], limit: int = MAX_ITEMS_PER_SOURCE) -> List[RawItem]:
    """
    Parse an RSS 2.0 or Atom document into raw items.

    Args:
        document: The feed XML
        limit: Maximum number of items to return (0 = no limit)

    Returns:
        List of RawItem objects, in feed order

    Raises:
        ET.ParseError: If the document is not well-formed XML
        ValueError: If the document is XML but not a supported feed
    """
    root = ET.fromstring(document)

    if root.tag == 'rss':
        entries = root.findall('./channel/item')
        parse = _parse_rss_item
    elif root.tag == f"{{{NS['atom']}}}feed":
        entries = root.findall('atom:entry', NS)
        parse = _parse_atom_entry
    else:
        raise ValueError(f"Unsupported feed document: <{root.tag}>")

    if limit:
        entries = entries[:limit]
    return [parse(entry) for entry in entries]


class FeedClient:
    """
    Fetches and parses one feed source per call. No retries.
    """
    def __init__(self, timeout: Optional[float] = None, max_items: Optional[int] = None,
                 user_agent: Optional[str] = None, settings: Optional[Config] = None):
        settings = settings or default_config
        self.timeout = timeout or settings.get('feeds.timeout_seconds', REQUEST_TIMEOUT)
        self.max_items = max_items if max_items is not None else settings.get('feeds.max_items', MAX_ITEMS_PER_SOURCE)
        self.user_agent = user_agent or settings.get('feeds.user_agent')
        self._session = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """
        Lazy initialization of aiohttp session.
        """
        if self._session is None:
            self._session = create_session(self.user_agent, FEED_ACCEPT)
        return self._session

    async def close_session(self):
        """Close aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def fetch(self, source: Source) -> List[RawItem]:
        """
        Fetch one source's items.

        Args:
            source: The feed to fetch

        Returns:
            Up to max_items raw items

        Raises:
            FetchError: On transport, HTTP status or parse failures
        """
        try:
            document = await fetch_bytes(self.session, source.url, self.timeout)
            items = parse_feed(document, self.max_items)
        except (aiohttp.ClientError, asyncio.TimeoutError, ET.ParseError, ValueError) as e:
            raise FetchError(source.name, e) from e

        logger.debug(f"Parsed {len(items)} items from {source.name}")
        return items
