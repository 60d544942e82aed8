"""
Command-line interface for CryptoNews.
"""
import os
import sys
import argparse
import logging
import asyncio
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from cryptonews.config import Config, config as default_config
from cryptonews.core.aggregator import NewsAggregator
from cryptonews.core.article import Article
from cryptonews.core.briefing import Briefing
from cryptonews.core.market import MarketSnapshot
from cryptonews.core.pipeline import DailyPipeline
from cryptonews.core.store import NewsStore
from cryptonews.errors import CryptoNewsError
from cryptonews.fetchers.market import MarketDataFetcher
from cryptonews.formatters.html import HtmlConverter
from cryptonews.formatters.markdown import MarkdownFormatter
from cryptonews.summarizers.composer import BriefingComposer
from cryptonews.utils.dates import is_valid_date, today

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, log_dir: Optional[str] = None):
    """
    Log to stderr and to a dated log file.
    """
    handlers = [logging.StreamHandler()]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(
            logging.FileHandler(os.path.join(log_dir, f"cryptonews_{datetime.now().strftime('%Y%m%d')}.log"))
        )

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="CryptoNews - Daily crypto news and market briefing")
    parser.add_argument("--date", help="Date to run for (YYYY-MM-DD, default: today UTC)", default=None)
    parser.add_argument("--config", help="Path to a YAML or JSON config file")
    parser.add_argument("--db", help="Path to the SQLite database")
    parser.add_argument("--skip-briefing", action="store_true", help="Fetch and store news without a briefing")
    parser.add_argument("--output-dir", help="Write a Markdown and HTML digest to this directory")
    parser.add_argument("--show", action="store_true", help="Render stored news for the date without fetching")
    parser.add_argument("--list-dates", action="store_true", help="List dates with stored news")
    parser.add_argument("--limit", type=int, help="Maximum number of articles to show", default=50)
    parser.add_argument("--log-dir", help="Directory for log files", default=os.getenv('CRYPTONEWS_LOG_DIR'))
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def write_digest(output_dir: str, date: str, articles: List[Article],
                 briefing: Optional[Briefing], market: Optional[MarketSnapshot]) -> Dict[str, str]:
    """
    Write the Markdown digest and its HTML version.

    Returns:
        Dict of generated file paths
    """
    os.makedirs(output_dir, exist_ok=True)

    markdown = MarkdownFormatter().format_digest(date, articles, briefing, market)
    markdown_path = Path(output_dir) / f"crypto_daily_{date}.md"
    markdown_path.write_text(markdown, encoding='utf-8')

    html_path = HtmlConverter().convert_file(
        markdown_path,
        Path(output_dir) / f"crypto_daily_{date}.html",
        title=f"Crypto Daily - {date}"
    )

    logger.info(f"Generated digest files: {markdown_path}, {html_path}")
    return {"markdown": str(markdown_path), "html": str(html_path)}


def build_pipeline(settings: Config, store: NewsStore) -> DailyPipeline:
    return DailyPipeline(
        store=store,
        aggregator=NewsAggregator(settings=settings, show_progress=True),
        market_fetcher=MarketDataFetcher(settings=settings),
        composer=BriefingComposer(settings=settings),
    )


async def async_main(args) -> int:
    """
    Main entry point for the application.
    """
    load_dotenv(override=True)

    settings = Config(args.config) if args.config else default_config
    date = args.date or today()
    if not is_valid_date(date):
        logger.error(f"Invalid date format: {date}. Use YYYY-MM-DD")
        return 1

    store = NewsStore(args.db or settings.get('storage.path'))

    if args.list_dates:
        for stored_date in store.get_available_dates():
            print(stored_date)
        return 0

    if args.show:
        daily = store.get_daily_news(date, limit=args.limit)
        if daily is None and not args.date:
            latest = store.get_latest_date()
            if latest:
                logger.info(f"No news stored for {date}, showing latest date {latest}")
                date = latest
                daily = store.get_daily_news(date, limit=args.limit)
        if daily is None:
            logger.error(f"No news data available for {date}")
            return 1
        if args.output_dir:
            write_digest(args.output_dir, date, daily.articles, daily.briefing, daily.market)
        else:
            print(MarkdownFormatter().format_digest(date, daily.articles, daily.briefing, daily.market))
        return 0

    run = await build_pipeline(settings, store).run(date, skip_briefing=args.skip_briefing)

    if not run.articles:
        logger.warning("No articles were fetched")
    if args.output_dir:
        write_digest(args.output_dir, date, run.articles[:args.limit], run.briefing, run.market)

    logger.info("CryptoNews run completed successfully")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the command-line script.
    """
    args = parse_args(argv)
    configure_logging(args.verbose, args.log_dir)
    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 1
    except CryptoNewsError as e:
        logger.error(f"{e.__class__.__name__}: {e.message}")
        return 1
    except Exception as e:
        logger.exception(f"An error occurred: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
