"""
Article data model for CryptoNews.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

CATEGORIES = ('breaking', 'analysis', 'regulation', 'defi', 'nft', 'general')


@dataclass(frozen=True)
class Source:
    """
    A configured feed provider.
    """
    name: str
    url: str
    icon: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Source":
        return cls(name=data['name'], url=data['url'], icon=data.get('icon', ''))


def sources_from_config(entries: List[Dict[str, Any]]) -> List[Source]:
    return [Source.from_dict(entry) for entry in entries or []]


@dataclass
class RawItem:
    """
    One item as parsed from a feed, before normalization.
    """
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    content_snippet: Optional[str] = None
    pub_date: Optional[str] = None
    creator: Optional[str] = None
    enclosure_url: Optional[str] = None
    media_content_url: Optional[str] = None
    media_thumbnail_url: Optional[str] = None


@dataclass(frozen=True)
class Article:
    """
    Represents one normalized news article.
    """
    id: str
    title: str
    description: str
    url: str
    source: str
    source_icon: str
    published_at: str
    category: str
    fetched_at: str
    image_url: Optional[str] = None
    author: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase field names of the storage documents."""
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'url': self.url,
            'source': self.source,
            'sourceIcon': self.source_icon,
            'publishedAt': self.published_at,
            'category': self.category,
            'fetchedAt': self.fetched_at,
        }
        if self.image_url:
            data['imageUrl'] = self.image_url
        if self.author:
            data['author'] = self.author
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Article":
        return cls(
            id=data['id'],
            title=data['title'],
            description=data.get('description', ''),
            url=data.get('url', ''),
            source=data.get('source', ''),
            source_icon=data.get('sourceIcon', ''),
            published_at=data['publishedAt'],
            category=data.get('category', 'general'),
            fetched_at=data.get('fetchedAt', data['publishedAt']),
            image_url=data.get('imageUrl'),
            author=data.get('author'),
        )
