import pytest

from cryptonews.core.article import Article, RawItem, Source
from cryptonews.core.market import MarketSnapshot, TopMover


def build_article(id="coindesk-abc", title="Bitcoin holds steady", url="https://example.com/a",
                  source="CoinDesk", published_at="2024-05-01T12:00:00+00:00", category="general",
                  description="", **kwargs):
    return Article(
        id=id,
        title=title,
        description=description,
        url=url,
        source=source,
        source_icon=kwargs.pop("source_icon", "https://example.com/favicon.ico"),
        published_at=published_at,
        category=category,
        fetched_at=kwargs.pop("fetched_at", "2024-05-01T13:00:00+00:00"),
        **kwargs
    )


def build_market(fear_greed=50, label="Neutral", change=0.0, gainers=None, losers=None):
    return MarketSnapshot(
        fear_greed_index=fear_greed,
        fear_greed_label=label,
        btc_dominance=52.34,
        total_market_cap=2.45e12,
        total_volume_24h=87.6e9,
        market_cap_change_24h=change,
        top_gainers=gainers or [],
        top_losers=losers or [],
        timestamp="2024-05-01T12:00:00+00:00",
    )


@pytest.fixture
def make_article():
    return build_article


@pytest.fixture
def make_market():
    return build_market


@pytest.fixture
def movers():
    return (
        [TopMover(symbol="SOL", change_percent_24h=12.34), TopMover(symbol="ADA", change_percent_24h=8.0)],
        [TopMover(symbol="DOGE", change_percent_24h=-7.56)],
    )


@pytest.fixture
def source():
    return Source(name="The Block", url="https://www.theblock.co/rss.xml", icon="https://www.theblock.co/favicon.ico")


@pytest.fixture
def raw_item():
    return RawItem(
        title="Bitcoin holds steady",
        link="https://www.theblock.co/post/1",
        description="<p>Markets were quiet.</p>",
        content="<p>Markets were quiet.</p>",
        content_snippet="Markets were quiet.",
        pub_date="Wed, 01 May 2024 12:00:00 GMT",
        creator="Jane Doe",
    )
