"""
Markdown formatting for CryptoNews daily digests.
"""
import logging
from typing import Dict, List, Optional

from cryptonews.core.article import CATEGORIES, Article
from cryptonews.core.briefing import Briefing
from cryptonews.core.market import MarketSnapshot
from cryptonews.utils.dates import parse_datetime

logger = logging.getLogger(__name__)

CATEGORY_TITLES = {
    'breaking': 'Breaking',
    'analysis': 'Analysis',
    'regulation': 'Regulation',
    'defi': 'DeFi',
    'nft': 'NFTs',
    'general': 'General',
}

SENTIMENT_LABELS = {
    'bullish': 'Bullish',
    'bearish': 'Bearish',
    'neutral': 'Neutral',
}


class MarkdownFormatter:
    """
    Formats a day's briefing, market data and articles as Markdown.
    """
    def format_briefing(self, briefing: Briefing) -> str:
        content = [
            f"## {briefing.title}",
            "",
            f"**Sentiment:** {SENTIMENT_LABELS.get(briefing.sentiment, briefing.sentiment)}",
            "",
            briefing.summary,
            "",
        ]
        for point in briefing.bullet_points:
            content.append(f"- {point}")
        if briefing.bullet_points:
            content.append("")

        source = "rule-based summary" if briefing.is_fallback else briefing.model
        content.append(f"*Generated {briefing.generated_at} ({source})*")
        return "\n".join(content)

    def format_market(self, market: MarketSnapshot) -> str:
        content = [
            "## Market Overview",
            "",
            "| Metric | Value |",
            "| --- | --- |",
            f"| Fear & Greed Index | {market.fear_greed_index} ({market.fear_greed_label}) |",
            f"| Total Market Cap | ${market.total_market_cap / 1e12:.2f}T |",
            f"| 24h Volume | ${market.total_volume_24h / 1e9:.1f}B |",
            f"| Market Cap Change (24h) | {market.market_cap_change_24h:+.2f}% |",
            f"| BTC Dominance | {market.btc_dominance:.1f}% |",
        ]
        if market.top_gainers:
            movers = ", ".join(f"{m.symbol} ({m.change_percent_24h:+.1f}%)" for m in market.top_gainers)
            content.append(f"| Top Gainers | {movers} |")
        if market.top_losers:
            movers = ", ".join(f"{m.symbol} ({m.change_percent_24h:+.1f}%)" for m in market.top_losers)
            content.append(f"| Top Losers | {movers} |")
        return "\n".join(content)

    def format_article(self, article: Article) -> str:
        metadata = [f"**Source:** {article.source}"]
        if article.author:
            metadata.append(f"**Author:** {article.author}")
        published = parse_datetime(article.published_at)
        if published:
            metadata.append(f"**Published:** {published.strftime('%B %d, %Y %H:%M UTC')}")

        content = [f"#### [{article.title}]({article.url})" if article.url else f"#### {article.title}"]
        content.append(" ".join(metadata))
        if article.description:
            content.append("")
            content.append(article.description)
        return "\n".join(content)

    def format_digest(self, date: str, articles: List[Article],
                      briefing: Optional[Briefing] = None,
                      market: Optional[MarketSnapshot] = None) -> str:
        """
        Format the full daily digest.

        Args:
            date: The digest date (YYYY-MM-DD)
            articles: Articles sorted newest first
            briefing: Daily briefing, if one was generated
            market: Market snapshot, if available

        Returns:
            Markdown document
        """
        content = [f"# Crypto Daily - {date}", ""]

        if briefing:
            content.extend([self.format_briefing(briefing), ""])
        if market:
            content.extend([self.format_market(market), ""])

        grouped: Dict[str, List[Article]] = {}
        for article in articles:
            grouped.setdefault(article.category, []).append(article)

        content.append(f"## Headlines ({len(articles)})")
        content.append("")
        extra = [c for c in grouped if c not in CATEGORIES]
        for category in list(CATEGORIES) + extra:
            if category not in grouped:
                continue
            content.append(f"### {CATEGORY_TITLES.get(category, category.title())}")
            content.append("")
            for article in grouped[category]:
                content.append(self.format_article(article))
                content.append("")

        logger.debug(f"Formatted digest for {date} with {len(articles)} articles")
        return "\n".join(content)
