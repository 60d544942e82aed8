"""Tests for cryptonews.summarizers.composer."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import openai
import pytest

from cryptonews.config import Config
from cryptonews.core.briefing import FALLBACK_MODEL
from cryptonews.summarizers.composer import BriefingComposer, build_prompt, format_market_data
from cryptonews.summarizers.fallback import generate_fallback_briefing

MODEL_RESPONSE = """TITLE: Solana Steals the Spotlight

SUMMARY:
Solana rallied as traders rotated into large-cap altcoins.

BULLET_POINTS:
- SOL up 12%
- DOGE lags

SENTIMENT: bullish
"""


def _fake_client(content=None, error=None):
    client = MagicMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        message = SimpleNamespace(content=content)
        client.chat.completions.create = AsyncMock(
            return_value=SimpleNamespace(choices=[SimpleNamespace(message=message)])
        )
    return client


@pytest.fixture
def settings():
    settings = Config()
    settings.config['openai']['model'] = 'test-model'
    settings.config['openai']['api_key'] = None
    return settings


@pytest.fixture
def articles(make_article):
    return [
        make_article(id=f"a{i}", title=f"Headline {i}", source="CoinDesk" if i % 2 else "Decrypt")
        for i in range(20)
    ]


class TestBuildPrompt:
    def test_includes_at_most_fifteen_headlines(self, articles, make_market) -> None:
        prompt = build_prompt(articles, make_market())

        assert "1. [Decrypt] Headline 0" in prompt
        assert "15. [Decrypt] Headline 14" in prompt
        assert "Headline 15" not in prompt
        assert "SENTIMENT: [bullish/bearish/neutral]" in prompt

    def test_market_data_is_signed(self, make_market, movers) -> None:
        gainers, losers = movers
        text = format_market_data(make_market(fear_greed=25, label="Extreme Fear", change=-3.456,
                                              gainers=gainers, losers=losers))

        assert "- Fear & Greed Index: 25 (Extreme Fear)" in text
        assert "- BTC Dominance: 52.3%" in text
        assert "- Total Market Cap: $2.45T" in text
        assert "- 24h Volume: $87.6B" in text
        assert "- Market Cap Change (24h): -3.46%" in text
        assert "- Top Gainer: SOL (+12.3%)" in text
        assert "- Top Loser: DOGE (-7.6%)" in text

    def test_mover_lines_omitted_when_absent(self, make_market) -> None:
        text = format_market_data(make_market(change=1.5))

        assert "- Market Cap Change (24h): +1.50%" in text
        assert "Top Gainer" not in text
        assert "Top Loser" not in text


class TestBriefingComposer:
    def test_parses_model_response(self, settings, articles, make_market) -> None:
        client = _fake_client(content=MODEL_RESPONSE)
        composer = BriefingComposer(settings=settings, client=client)

        briefing = asyncio.run(composer.compose(articles, make_market()))

        assert briefing.title == "Solana Steals the Spotlight"
        assert briefing.summary == "Solana rallied as traders rotated into large-cap altcoins."
        assert briefing.bullet_points == ["SOL up 12%", "DOGE lags"]
        assert briefing.sentiment == "bullish"
        assert briefing.model == "test-model"
        assert not briefing.is_fallback

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 1024
        assert "Headline 0" in kwargs["messages"][0]["content"]

    def test_request_error_falls_back(self, settings, articles, make_market) -> None:
        composer = BriefingComposer(settings=settings, client=_fake_client(error=openai.OpenAIError("boom")))

        briefing = asyncio.run(composer.compose(articles, make_market()))

        assert briefing.model == FALLBACK_MODEL

    def test_empty_content_falls_back(self, settings, articles, make_market) -> None:
        composer = BriefingComposer(settings=settings, client=_fake_client(content=""))
        assert asyncio.run(composer.compose(articles, make_market())).is_fallback

    def test_unexpected_error_falls_back(self, settings, articles, make_market) -> None:
        composer = BriefingComposer(settings=settings, client=_fake_client(error=RuntimeError("bug")))
        assert asyncio.run(composer.compose(articles, make_market())).is_fallback

    def test_missing_api_key_falls_back(self, settings, articles, make_market, monkeypatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        composer = BriefingComposer(settings=settings)

        briefing = asyncio.run(composer.compose(articles, make_market()))

        assert briefing.is_fallback
        assert composer._client is None

    def test_fallback_matches_rule_based_briefing(self, settings, make_market, movers) -> None:
        gainers, losers = movers
        market = make_market(fear_greed=30, label="Fear", change=-3.0, gainers=gainers, losers=losers)
        composer = BriefingComposer(settings=settings, client=_fake_client(error=openai.OpenAIError("boom")))

        briefing = asyncio.run(composer.compose([], market))
        expected = generate_fallback_briefing(market)

        assert briefing.title == expected.title
        assert briefing.summary == expected.summary
        assert briefing.bullet_points == expected.bullet_points
        assert briefing.sentiment == expected.sentiment == "bearish"

    def test_explicit_model_overrides_settings(self, settings) -> None:
        assert BriefingComposer(settings=settings, model="other").model == "other"

    def test_close_releases_client(self, settings) -> None:
        client = AsyncMock()
        composer = BriefingComposer(settings=settings, client=client)

        asyncio.run(composer.close())

        client.close.assert_awaited_once()
        assert composer._client is None
