"""
Market data fetcher for CryptoNews.

Collects the Fear & Greed Index (alternative.me) and global market data and
top movers (CoinGecko). Each endpoint degrades to neutral defaults on failure
so a snapshot is always returned.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import aiohttp
import backoff

from cryptonews.config import Config, config as default_config
from cryptonews.core.market import MarketSnapshot, TopMover
from cryptonews.errors import MarketDataError
from cryptonews.utils.dates import now_iso, to_iso
from cryptonews.utils.http import create_session, fetch_json

logger = logging.getLogger(__name__)

TOP_MOVERS = 5


def parse_fear_greed(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Parse an alternative.me /fng response.

    Raises:
        MarketDataError: If the payload holds no readings
    """
    data = payload.get('data') or []
    if not data:
        raise MarketDataError("No Fear & Greed data returned")

    current = data[0]
    value = int(current['value'])
    previous = int(data[1]['value']) if len(data) > 1 else value

    return {
        'value': value,
        'label': current.get('value_classification', 'Neutral'),
        'timestamp': to_iso(datetime.fromtimestamp(int(current['timestamp']), tz=timezone.utc)),
        'previous_close': previous,
        'change': value - previous,
    }


def _to_mover(coin: Dict[str, Any]) -> TopMover:
    return TopMover(
        symbol=(coin.get('symbol') or '').upper(),
        name=coin.get('name', ''),
        price=coin.get('current_price') or 0.0,
        change_percent_24h=coin.get('price_change_percentage_24h') or 0.0,
        volume_24h=coin.get('total_volume') or 0.0,
        image=coin.get('image'),
    )


def parse_top_movers(coins: List[Dict[str, Any]], limit: int = TOP_MOVERS) -> Tuple[List[TopMover], List[TopMover]]:
    """
    Split a CoinGecko /coins/markets response into gainers and losers.

    Returns:
        (gainers, losers), each ordered from the largest move
    """
    ranked = sorted(coins, key=lambda c: c.get('price_change_percentage_24h') or 0, reverse=True)
    gainers = [_to_mover(c) for c in ranked[:limit]]
    losers = [_to_mover(c) for c in reversed(ranked[-limit:])] if limit else []
    return gainers, losers


def parse_global(payload: Dict[str, Any]) -> Dict[str, float]:
    data = payload.get('data') or {}
    return {
        'btc_dominance': (data.get('market_cap_percentage') or {}).get('btc') or 0.0,
        'total_market_cap': (data.get('total_market_cap') or {}).get('usd') or 0.0,
        'total_volume_24h': (data.get('total_volume') or {}).get('usd') or 0.0,
        'market_cap_change_24h': data.get('market_cap_change_percentage_24h_usd') or 0.0,
    }


class MarketDataFetcher:
    """
    Fetches the market snapshot used by the daily briefing.
    """
    def __init__(self, settings: Optional[Config] = None):
        self.settings = settings or default_config
        self.timeout = self.settings.get('market.timeout_seconds', 15)
        self.top_movers = self.settings.get('market.top_movers', TOP_MOVERS)
        self.user_agent = self.settings.get('feeds.user_agent')
        self._session = None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = create_session(self.user_agent, 'application/json')
        return self._session

    async def close_session(self):
        if self._session is not None:
            await self._session.close()
            self._session = None

    @backoff.on_exception(
        backoff.expo,
        (aiohttp.ClientError, asyncio.TimeoutError),
        max_tries=3
    )
    async def _get_json(self, url: str) -> Any:
        return await fetch_json(self.session, url, self.timeout)

    async def _request(self, name: str, url: str) -> Any:
        try:
            return await self._get_json(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise MarketDataError(f"Error fetching {name}: {e}", {"url": url}) from e

    async def get_fear_greed_index(self) -> Dict[str, Any]:
        logger.info("Fetching Fear & Greed Index...")
        try:
            payload = await self._request('Fear & Greed Index', self.settings.get('market.fear_greed_url'))
            return parse_fear_greed(payload)
        except (MarketDataError, KeyError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error fetching Fear & Greed: {e}")
            return {'value': 50, 'label': 'Neutral', 'timestamp': now_iso()}

    async def get_top_movers(self) -> Tuple[List[TopMover], List[TopMover]]:
        logger.info("Fetching top movers from CoinGecko...")
        try:
            coins = await self._request('top movers', self.settings.get('market.markets_url'))
            if not isinstance(coins, list):
                raise MarketDataError("Unexpected top movers payload")
            return parse_top_movers(coins, self.top_movers)
        except (MarketDataError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error fetching top movers: {e}")
            return [], []

    async def get_global_market_data(self) -> Dict[str, float]:
        logger.info("Fetching global market data...")
        try:
            payload = await self._request('global market data', self.settings.get('market.global_url'))
            return parse_global(payload)
        except (MarketDataError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error fetching global market data: {e}")
            return {
                'btc_dominance': 0.0,
                'total_market_cap': 0.0,
                'total_volume_24h': 0.0,
                'market_cap_change_24h': 0.0,
            }

    async def get_market_snapshot(self) -> MarketSnapshot:
        """
        Fetch all market data in parallel.

        Returns:
            MarketSnapshot, with defaults for any endpoint that failed
        """
        try:
            fear_greed, (gainers, losers), global_data = await asyncio.gather(
                self.get_fear_greed_index(),
                self.get_top_movers(),
                self.get_global_market_data(),
            )
        finally:
            await self.close_session()

        return MarketSnapshot(
            fear_greed_index=fear_greed['value'],
            fear_greed_label=fear_greed['label'],
            btc_dominance=global_data['btc_dominance'],
            total_market_cap=global_data['total_market_cap'],
            total_volume_24h=global_data['total_volume_24h'],
            market_cap_change_24h=global_data['market_cap_change_24h'],
            top_gainers=gainers,
            top_losers=losers,
            timestamp=now_iso(),
        )
