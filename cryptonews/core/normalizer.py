"""
Normalization of raw feed items into articles.

Everything in this module is a pure function: no network, no storage.
"""
import re
import base64
import hashlib
from datetime import datetime
from typing import Dict, List, Optional

from cryptonews.config import DEFAULT_CONFIG
from cryptonews.core.article import Article, RawItem, Source
from cryptonews.utils.dates import parse_datetime, to_iso

MAX_DESCRIPTION_LENGTH = 300
ELLIPSIS = '...'
FINGERPRINT_LENGTH = 12
DEFAULT_TITLE = 'Untitled'

CATEGORY_KEYWORDS: Dict[str, List[str]] = DEFAULT_CONFIG['categories']

TAG_PATTERN = re.compile(r'<[^>]*>')
IMG_PATTERN = re.compile(r'<img[^>]+src="([^"]+)"', re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r'\s+')

# Decoded in this order, so "&amp;lt;" ends up as "<"
HTML_ENTITIES = (
    ('&amp;', '&'),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&quot;', '"'),
    ('&#39;', "'"),
    ('&nbsp;', ' '),
)


def clean_description(text: Optional[str]) -> str:
    """
    Strip markup, decode common entities and truncate to 300 characters.

    Args:
        text: Raw description, possibly containing HTML

    Returns:
        Plain text of at most MAX_DESCRIPTION_LENGTH characters
    """
    clean = TAG_PATTERN.sub('', text or '')
    for entity, char in HTML_ENTITIES:
        clean = clean.replace(entity, char)
    clean = clean.strip()

    if len(clean) > MAX_DESCRIPTION_LENGTH:
        clean = clean[:MAX_DESCRIPTION_LENGTH - len(ELLIPSIS)] + ELLIPSIS
    return clean


def categorize(title: Optional[str], content: Optional[str],
               keywords: Optional[Dict[str, List[str]]] = None) -> str:
    """
    Pick the first category whose keyword list matches the text.

    Args:
        title: Article title
        content: Article text or snippet
        keywords: Ordered mapping of category to keywords

    Returns:
        The matching category, or 'general'
    """
    text = f"{title or ''} {content or ''}".lower()

    for category, words in (keywords or CATEGORY_KEYWORDS).items():
        if any(word.lower() in text for word in words):
            return category

    return 'general'


def fingerprint(value: str) -> str:
    digest = hashlib.sha256(value.encode('utf-8')).digest()
    return base64.urlsafe_b64encode(digest).decode('ascii')[:FINGERPRINT_LENGTH]


def slugify(name: str) -> str:
    return WHITESPACE_PATTERN.sub('-', name.strip().lower())


def generate_article_id(source: str, url: Optional[str], index: int) -> str:
    """
    Build a stable article id from the source name and the article URL.

    Items without a URL fall back to their position in the feed.
    """
    return f"{slugify(source)}-{fingerprint(url or f'{source}-{index}')}"


def extract_image_url(item: RawItem) -> Optional[str]:
    """
    Find an image for the item: enclosure, media:content, media:thumbnail,
    then the first <img> tag in the content.
    """
    for candidate in (item.enclosure_url, item.media_content_url, item.media_thumbnail_url):
        if candidate:
            return candidate

    match = IMG_PATTERN.search(item.content or '')
    if match:
        return match.group(1)

    return None


def normalize_item(source: Source, item: RawItem, index: int, fetched_at: datetime,
                   keywords: Optional[Dict[str, List[str]]] = None) -> Article:
    """
    Turn one raw feed item into an Article.

    Args:
        source: The feed the item came from
        item: The parsed item
        index: Position of the item in the feed
        fetched_at: When the feed was fetched
        keywords: Category keyword table

    Returns:
        Normalized Article
    """
    fetched_iso = to_iso(fetched_at)
    published = parse_datetime(item.pub_date)
    url = (item.link or '').strip()

    return Article(
        id=generate_article_id(source.name, url, index),
        title=(item.title or '').strip() or DEFAULT_TITLE,
        description=clean_description(item.content_snippet or item.content or item.description),
        url=url,
        source=source.name,
        source_icon=source.icon,
        published_at=to_iso(published) if published else fetched_iso,
        category=categorize(item.title, item.content_snippet, keywords),
        fetched_at=fetched_iso,
        image_url=extract_image_url(item),
        author=item.creator or None,
    )
