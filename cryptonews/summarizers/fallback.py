"""
Rule-based briefing used when the language model is unavailable.
"""
from typing import List

from cryptonews.core.briefing import FALLBACK_MODEL, Briefing
from cryptonews.core.market import MarketSnapshot
from cryptonews.utils.dates import now_iso


def fear_greed_phrase(index: float) -> str:
    if index >= 60:
        return 'showing optimism'
    if index <= 40:
        return 'showing caution'
    return 'neutral'


def market_trend(change: float) -> str:
    if change >= 2:
        return 'rallying'
    if change <= -2:
        return 'declining'
    return 'trading sideways'


def fallback_sentiment(index: float, change: float) -> str:
    if index >= 55 and change >= 1:
        return 'bullish'
    if index <= 45 and change <= -1:
        return 'bearish'
    return 'neutral'


def fallback_title(market: MarketSnapshot) -> str:
    change = market.market_cap_change_24h
    direction = 'Up' if change >= 0 else 'Down'
    return f"Crypto Markets {direction} {abs(change):.1f}% - {market.fear_greed_label}"


def fallback_summary(market: MarketSnapshot) -> str:
    change = market.market_cap_change_24h
    gainer = market.top_gainer

    first = (
        f"The cryptocurrency market is {market_trend(change)} today with the total market cap "
        f"{'increasing' if change >= 0 else 'decreasing'} by {abs(change):.2f}%. "
        f"The Fear & Greed Index sits at {market.fear_greed_index}, indicating the market is "
        f"{fear_greed_phrase(market.fear_greed_index)}."
    )
    second = (
        f"Bitcoin dominance stands at {market.btc_dominance:.1f}%, with total 24-hour trading volume "
        f"reaching ${market.total_volume_24h / 1e9:.1f} billion across all exchanges."
    )
    if gainer:
        second += f" Leading today's gainers is {gainer.symbol} with a {gainer.change_percent_24h:.1f}% gain."

    return f"{first}\n\n{second}"


def fallback_bullet_points(market: MarketSnapshot) -> List[str]:
    bullets = [
        f"Fear & Greed Index: {market.fear_greed_index} ({market.fear_greed_label})",
        f"Total market cap: ${market.total_market_cap / 1e12:.2f} trillion",
        f"BTC dominance: {market.btc_dominance:.1f}%",
    ]
    if market.top_gainer:
        bullets.append(f"Top gainer: {market.top_gainer.symbol} ({market.top_gainer.change_percent_24h:+.1f}%)")
    if market.top_loser:
        bullets.append(f"Top loser: {market.top_loser.symbol} ({market.top_loser.change_percent_24h:+.1f}%)")
    return bullets


def generate_fallback_briefing(market: MarketSnapshot) -> Briefing:
    """
    Build a complete briefing from market data alone.

    Args:
        market: Current market statistics

    Returns:
        Briefing tagged with the fallback model marker
    """
    return Briefing(
        title=fallback_title(market),
        summary=fallback_summary(market),
        bullet_points=fallback_bullet_points(market),
        sentiment=fallback_sentiment(market.fear_greed_index, market.market_cap_change_24h),
        generated_at=now_iso(),
        model=FALLBACK_MODEL,
    )
