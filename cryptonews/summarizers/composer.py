"""
Daily briefing generation for CryptoNews.

The composer asks the language model for a sectioned briefing and parses it.
If anything on that path fails (missing API key, request error, unusable
response) it returns the rule-based fallback briefing instead, so callers
always get a complete Briefing.
"""
import os
import logging
import threading
from typing import List, Optional

import openai
from openai import AsyncOpenAI

from cryptonews.config import Config, config as default_config
from cryptonews.core.article import Article
from cryptonews.core.briefing import Briefing
from cryptonews.core.market import MarketSnapshot
from cryptonews.errors import ConfigurationError, GenerationError
from cryptonews.summarizers.fallback import generate_fallback_briefing
from cryptonews.summarizers.parser import parse_briefing_response
from cryptonews.utils.dates import now_iso

logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'gpt-4o-mini'
MAX_TOKENS = 1024
MAX_HEADLINES = 15

PROMPT_TEMPLATE = """You are a crypto market analyst providing a daily briefing for traders. Based on today's news and market data, write a concise summary.

TODAY'S TOP HEADLINES:
{headlines}

MARKET DATA:
{market_data}

Please provide your response in EXACTLY this format:

TITLE: [A compelling 5-10 word headline summarizing today's market]

SUMMARY:
[2-3 paragraphs summarizing the key developments traders need to know. Focus on actionable insights and what's driving the market today.]

BULLET_POINTS:
- [Key takeaway 1]
- [Key takeaway 2]
- [Key takeaway 3]
- [Key takeaway 4 if relevant]
- [Key takeaway 5 if relevant]

SENTIMENT: [bullish/bearish/neutral]"""


def format_headlines(articles: List[Article], limit: int = MAX_HEADLINES) -> str:
    return '\n'.join(
        f"{i}. [{article.source}] {article.title}"
        for i, article in enumerate(articles[:limit], 1)
    )


def format_market_data(market: MarketSnapshot) -> str:
    lines = [
        f"- Fear & Greed Index: {market.fear_greed_index} ({market.fear_greed_label})",
        f"- BTC Dominance: {market.btc_dominance:.1f}%",
        f"- Total Market Cap: ${market.total_market_cap / 1e12:.2f}T",
        f"- 24h Volume: ${market.total_volume_24h / 1e9:.1f}B",
        f"- Market Cap Change (24h): {market.market_cap_change_24h:+.2f}%",
    ]
    if market.top_gainer:
        lines.append(f"- Top Gainer: {market.top_gainer.symbol} ({market.top_gainer.change_percent_24h:+.1f}%)")
    if market.top_loser:
        lines.append(f"- Top Loser: {market.top_loser.symbol} ({market.top_loser.change_percent_24h:+.1f}%)")
    return '\n'.join(lines)


def build_prompt(articles: List[Article], market: MarketSnapshot, limit: int = MAX_HEADLINES) -> str:
    """
    Build the briefing prompt from the most recent headlines and market data.
    """
    return PROMPT_TEMPLATE.format(
        headlines=format_headlines(articles, limit),
        market_data=format_market_data(market)
    )


class BriefingComposer:
    """
    Produces exactly one Briefing per call, from the model or the fallback.
    """
    def __init__(self, settings: Optional[Config] = None, client: Optional[AsyncOpenAI] = None,
                 model: Optional[str] = None):
        """
        Initialize the BriefingComposer.

        Args:
            settings: Configuration to read the model settings and API key from
            client: Pre-built OpenAI client; created lazily when omitted
            model: Model name, overrides openai.model
        """
        self.settings = settings or default_config
        self.model = model or self.settings.get('openai.model', DEFAULT_MODEL)
        self.max_tokens = self.settings.get('openai.max_tokens', MAX_TOKENS)
        self.timeout = self.settings.get('openai.timeout_seconds', 30)
        self.max_headlines = self.settings.get('briefing.max_headlines', MAX_HEADLINES)
        self._client = client
        self._client_lock = threading.Lock()

    def _api_key(self) -> str:
        api_key = self.settings.get('openai.api_key') or os.getenv('OPENAI_API_KEY')
        if not api_key:
            raise ConfigurationError(
                "OpenAI API key not configured. Set openai.api_key or OPENAI_API_KEY.",
                {"key": "openai.api_key"}
            )
        return api_key

    @property
    def client(self) -> AsyncOpenAI:
        """
        The OpenAI client, created on first use.

        Raises:
            ConfigurationError: If no API key is configured
        """
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = AsyncOpenAI(
                        api_key=self._api_key(),
                        timeout=self.timeout,
                        max_retries=0
                    )
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def _generate(self, prompt: str) -> str:
        client = self.client
        try:
            response = await client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{'role': 'user', 'content': prompt}]
            )
        except openai.OpenAIError as e:
            raise GenerationError(f"OpenAI request failed: {e}", {"model": self.model}) from e

        if not response.choices or not response.choices[0].message.content:
            raise GenerationError("Unexpected response from OpenAI: no text content", {"model": self.model})

        return response.choices[0].message.content

    async def compose(self, articles: List[Article], market: MarketSnapshot) -> Briefing:
        """
        Generate the daily briefing.

        Args:
            articles: Articles sorted newest first; only the first
                max_headlines are used
            market: Current market statistics

        Returns:
            A Briefing from the model, or the fallback briefing
        """
        logger.info("Generating daily briefing...")
        prompt = build_prompt(articles, market, self.max_headlines)

        try:
            sections = parse_briefing_response(await self._generate(prompt))
        except (ConfigurationError, GenerationError) as e:
            logger.warning(f"Briefing generation failed, using fallback: {e.message}")
            return generate_fallback_briefing(market)
        except Exception as e:
            logger.exception(f"Unexpected error generating briefing, using fallback: {e}")
            return generate_fallback_briefing(market)

        logger.info(f"Generated briefing with {self.model}: {sections.title}")
        return Briefing(
            title=sections.title,
            summary=sections.summary,
            bullet_points=sections.bullet_points,
            sentiment=sections.sentiment,
            generated_at=now_iso(),
            model=self.model,
        )
