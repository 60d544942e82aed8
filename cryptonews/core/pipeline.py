"""
Daily run: fetch news and market data, compose the briefing, store it all.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from cryptonews.core.aggregator import NewsAggregator
from cryptonews.core.article import Article
from cryptonews.core.briefing import Briefing
from cryptonews.core.market import MarketSnapshot
from cryptonews.core.store import NewsStore
from cryptonews.errors import FetchError
from cryptonews.fetchers.market import MarketDataFetcher
from cryptonews.summarizers.composer import BriefingComposer

logger = logging.getLogger(__name__)


@dataclass
class DailyRun:
    date: str
    articles: List[Article]
    market: MarketSnapshot
    briefing: Optional[Briefing] = None
    failures: Dict[str, FetchError] = field(default_factory=dict)


class DailyPipeline:
    """
    Wires the aggregator, market data fetcher, composer and store together.
    """
    def __init__(self, store: NewsStore, aggregator: NewsAggregator,
                 market_fetcher: MarketDataFetcher, composer: BriefingComposer):
        self.store = store
        self.aggregator = aggregator
        self.market_fetcher = market_fetcher
        self.composer = composer

    async def run(self, date: str, skip_briefing: bool = False) -> DailyRun:
        """
        Run the pipeline for one date.

        Storage errors propagate; feed and generation failures do not.

        Args:
            date: Date key (YYYY-MM-DD) to store the results under
            skip_briefing: Fetch and store news without generating a briefing

        Returns:
            DailyRun with everything that was stored
        """
        logger.info(f"Starting daily run for {date}")

        aggregation, market = await asyncio.gather(
            self.aggregator.fetch_all(),
            self.market_fetcher.get_market_snapshot(),
        )

        briefing = None
        if not skip_briefing:
            try:
                briefing = await self.composer.compose(aggregation.articles, market)
            finally:
                await self.composer.close()

        self.store.store_articles(date, aggregation.articles)
        self.store.store_market_data(date, market)
        if briefing is not None:
            self.store.store_summary(date, briefing)
        self.store.touch_day(date)

        if aggregation.failures:
            logger.warning(f"Failed sources: {', '.join(aggregation.failed_sources)}")
        logger.info(
            f"Daily run for {date} complete: {len(aggregation.articles)} articles"
            + (f", briefing by {briefing.model}" if briefing else "")
        )

        return DailyRun(
            date=date,
            articles=aggregation.articles,
            market=market,
            briefing=briefing,
            failures=aggregation.failures,
        )
