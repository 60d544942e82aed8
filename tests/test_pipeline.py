"""Tests for cryptonews.core.pipeline."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from cryptonews.core.aggregator import AggregationResult
from cryptonews.core.briefing import Briefing
from cryptonews.core.pipeline import DailyPipeline
from cryptonews.core.store import NewsStore
from cryptonews.errors import FetchError, PersistenceError


@pytest.fixture
def store(tmp_path):
    return NewsStore(tmp_path / "news.db")


@pytest.fixture
def briefing():
    return Briefing(
        title="Markets Steady",
        summary="Quiet day.",
        bullet_points=["BTC flat"],
        sentiment="neutral",
        generated_at="2024-05-01T13:00:00+00:00",
        model="test-model",
    )


def _pipeline(store, articles, market, briefing, failures=None):
    aggregator = MagicMock()
    aggregator.fetch_all = AsyncMock(return_value=AggregationResult(
        articles=articles, failures=failures or {}, fetched_count=len(articles)
    ))
    market_fetcher = MagicMock()
    market_fetcher.get_market_snapshot = AsyncMock(return_value=market)
    composer = MagicMock()
    composer.compose = AsyncMock(return_value=briefing)
    composer.close = AsyncMock()
    return DailyPipeline(store=store, aggregator=aggregator, market_fetcher=market_fetcher, composer=composer)


def test_run_stores_everything(store, make_article, make_market, briefing) -> None:
    articles = [make_article(id="a"), make_article(id="b", published_at="2024-05-01T11:00:00+00:00")]
    market = make_market(fear_greed=70, label="Greed")
    pipeline = _pipeline(store, articles, market, briefing,
                         failures={"Decrypt": FetchError("Decrypt", ConnectionError())})

    run = asyncio.run(pipeline.run("2024-05-01"))

    assert run.briefing == briefing
    assert list(run.failures) == ["Decrypt"]
    pipeline.composer.compose.assert_awaited_once_with(articles, market)
    pipeline.composer.close.assert_awaited_once()

    daily = store.get_daily_news("2024-05-01")
    assert [a.id for a in daily.articles] == ["a", "b"]
    assert daily.market == market
    assert daily.briefing == briefing
    assert daily.created_at is not None


def test_skip_briefing(store, make_article, make_market, briefing) -> None:
    pipeline = _pipeline(store, [make_article()], make_market(), briefing)

    run = asyncio.run(pipeline.run("2024-05-01", skip_briefing=True))

    assert run.briefing is None
    pipeline.composer.compose.assert_not_awaited()
    assert store.get_stored_summary("2024-05-01") is None
    assert store.get_available_dates() == ["2024-05-01"]


def test_no_articles_still_stores_day(store, make_market, briefing) -> None:
    pipeline = _pipeline(store, [], make_market(), briefing)

    asyncio.run(pipeline.run("2024-05-01"))

    assert store.get_articles("2024-05-01") == []
    assert store.get_stored_summary("2024-05-01") == briefing


def test_storage_errors_propagate(make_article, make_market, briefing) -> None:
    store = MagicMock()
    store.store_articles.side_effect = PersistenceError("disk full")
    pipeline = _pipeline(store, [make_article()], make_market(), briefing)

    with pytest.raises(PersistenceError):
        asyncio.run(pipeline.run("2024-05-01"))
