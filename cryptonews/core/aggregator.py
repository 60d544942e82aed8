"""
Multi-source news aggregation for CryptoNews.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from tqdm.asyncio import tqdm_asyncio

from cryptonews.config import Config, config as default_config
from cryptonews.core.article import Article, Source, sources_from_config
from cryptonews.core.normalizer import normalize_item
from cryptonews.errors import FetchError
from cryptonews.fetchers.rss import FeedClient
from cryptonews.utils.dates import parse_datetime, utc_now

logger = logging.getLogger(__name__)

TITLE_KEY_LENGTH = 50
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class SourceResult:
    """
    Outcome of fetching a single source: either articles or an error.
    """
    source: Source
    articles: List[Article] = field(default_factory=list)
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AggregationResult:
    articles: List[Article]
    failures: Dict[str, FetchError] = field(default_factory=dict)
    fetched_count: int = 0

    @property
    def failed_sources(self) -> List[str]:
        return list(self.failures)


def normalize_url(url: str) -> str:
    url = re.sub(r'\?.*$', '', (url or '').lower())
    return re.sub(r'/$', '', url)


def dedup_key(article: Article) -> str:
    """
    Key that collapses the same story reported under the same URL and title.
    """
    title = re.sub(r'[^a-z0-9]', '', article.title.lower())
    return f"{normalize_url(article.url)}-{title[:TITLE_KEY_LENGTH]}"


def deduplicate(articles: List[Article]) -> List[Article]:
    """
    Keep the first article seen for each dedup key.
    """
    seen: Dict[str, Article] = {}
    for article in articles:
        key = dedup_key(article)
        if key not in seen:
            seen[key] = article
    return list(seen.values())


def sort_by_published(articles: List[Article]) -> List[Article]:
    """Most recent first; equal timestamps keep their order."""
    return sorted(
        articles,
        key=lambda a: parse_datetime(a.published_at) or EPOCH,
        reverse=True
    )


class NewsAggregator:
    """
    Fetches every configured source concurrently and merges the results.
    """
    def __init__(self, sources: Optional[List[Source]] = None, client: Optional[FeedClient] = None,
                 settings: Optional[Config] = None, show_progress: bool = False):
        self.settings = settings or default_config
        self.sources = sources if sources is not None else sources_from_config(self.settings.get('feeds.sources'))
        self.client = client or FeedClient(settings=self.settings)
        self.keywords = self.settings.get('categories')
        self.show_progress = show_progress

    async def _fetch_source(self, source: Source) -> SourceResult:
        fetched_at = utc_now()
        try:
            items = await self.client.fetch(source)
        except FetchError as e:
            return SourceResult(source, error=e)
        except Exception as e:
            logger.exception(f"Unexpected error fetching {source.name}")
            return SourceResult(source, error=FetchError(source.name, e))

        articles = [
            normalize_item(source, item, index, fetched_at, self.keywords)
            for index, item in enumerate(items)
        ]
        return SourceResult(source, articles=articles)

    async def fetch_all(self) -> AggregationResult:
        """
        Fetch all sources, isolating failures per source.

        Returns:
            AggregationResult with deduplicated articles sorted newest first,
            plus the sources that failed
        """
        logger.info(f"Fetching from {len(self.sources)} RSS feeds...")

        try:
            results = await tqdm_asyncio.gather(
                *(self._fetch_source(source) for source in self.sources),
                desc="Fetching feeds",
                disable=not self.show_progress
            )
        finally:
            await self.client.close_session()

        merged: List[Article] = []
        failures: Dict[str, FetchError] = {}
        for result in results:
            if result.ok:
                merged.extend(result.articles)
                logger.info(f"{result.source.name}: {len(result.articles)} articles")
            else:
                failures[result.source.name] = result.error
                logger.error(f"{result.source.name}: {result.error.message}")

        articles = sort_by_published(deduplicate(merged))

        logger.info(
            f"Total: {len(articles)} unique articles from {len(results) - len(failures)}/{len(results)} feeds"
        )
        return AggregationResult(articles=articles, failures=failures, fetched_count=len(merged))
