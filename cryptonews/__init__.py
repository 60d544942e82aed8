"""
CryptoNews - Daily Crypto News Aggregator

Collects crypto news from multiple RSS feeds into a deduplicated, categorized
daily collection and turns it, together with market statistics, into a daily
market briefing.
"""

__version__ = "0.1.0"
