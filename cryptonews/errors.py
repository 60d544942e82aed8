"""
Exception hierarchy for CryptoNews.
"""
from typing import Dict, Optional


class CryptoNewsError(Exception):
    """Base exception for cryptonews"""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FetchError(CryptoNewsError):
    """A single feed source could not be fetched or parsed"""
    def __init__(self, source: str, cause: Exception):
        super().__init__(
            f"Failed to fetch {source}: {cause}",
            {"source": source, "cause": repr(cause)}
        )
        self.source = source
        self.cause = cause


class ConfigurationError(CryptoNewsError):
    """A required setting or credential is not configured"""
    pass


class GenerationError(CryptoNewsError):
    """The language model call failed or returned an unusable response"""
    pass


class PersistenceError(CryptoNewsError):
    """Storage read/write failure"""
    pass


class MarketDataError(CryptoNewsError):
    """A market data endpoint failed"""
    pass
