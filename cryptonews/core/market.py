"""
Market statistics consumed by the briefing.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class TopMover:
    symbol: str
    change_percent_24h: float
    name: str = ""
    price: float = 0.0
    volume_24h: float = 0.0
    image: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'symbol': self.symbol,
            'name': self.name,
            'price': self.price,
            'changePercent24h': self.change_percent_24h,
            'volume24h': self.volume_24h,
        }
        if self.image:
            data['image'] = self.image
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TopMover":
        return cls(
            symbol=data['symbol'],
            change_percent_24h=data.get('changePercent24h', 0.0),
            name=data.get('name', ''),
            price=data.get('price', 0.0),
            volume_24h=data.get('volume24h', 0.0),
            image=data.get('image'),
        )


@dataclass(frozen=True)
class MarketSnapshot:
    """
    Aggregate market statistics observed at one point in time.
    """
    fear_greed_index: int
    fear_greed_label: str
    btc_dominance: float
    total_market_cap: float
    total_volume_24h: float
    market_cap_change_24h: float
    top_gainers: List[TopMover] = field(default_factory=list)
    top_losers: List[TopMover] = field(default_factory=list)
    timestamp: str = ""

    @property
    def top_gainer(self) -> Optional[TopMover]:
        return self.top_gainers[0] if self.top_gainers else None

    @property
    def top_loser(self) -> Optional[TopMover]:
        return self.top_losers[0] if self.top_losers else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fearGreedIndex': self.fear_greed_index,
            'fearGreedLabel': self.fear_greed_label,
            'btcDominance': self.btc_dominance,
            'totalMarketCap': self.total_market_cap,
            'totalVolume24h': self.total_volume_24h,
            'marketCapChange24h': self.market_cap_change_24h,
            'topGainers': [mover.to_dict() for mover in self.top_gainers],
            'topLosers': [mover.to_dict() for mover in self.top_losers],
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketSnapshot":
        return cls(
            fear_greed_index=int(data.get('fearGreedIndex', 50)),
            fear_greed_label=data.get('fearGreedLabel', 'Neutral'),
            btc_dominance=data.get('btcDominance', 0.0),
            total_market_cap=data.get('totalMarketCap', 0.0),
            total_volume_24h=data.get('totalVolume24h', 0.0),
            market_cap_change_24h=data.get('marketCapChange24h', 0.0),
            top_gainers=[TopMover.from_dict(m) for m in data.get('topGainers', [])],
            top_losers=[TopMover.from_dict(m) for m in data.get('topLosers', [])],
            timestamp=data.get('timestamp', ''),
        )
