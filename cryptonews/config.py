"""
Configuration management for CryptoNews.
"""
import os
import copy
import json
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

from cryptonews.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_CONFIG = {
    "feeds": {
        "timeout_seconds": 10,
        "max_items": 20,
        "user_agent": "CryptoNews/0.1 News Aggregator",
        "sources": [
            {
                "name": "CoinDesk",
                "url": "https://www.coindesk.com/arc/outboundfeeds/rss/",
                "icon": "https://www.coindesk.com/favicon.ico"
            },
            {
                "name": "Cointelegraph",
                "url": "https://cointelegraph.com/rss",
                "icon": "https://cointelegraph.com/favicon.ico"
            },
            {
                "name": "Decrypt",
                "url": "https://decrypt.co/feed",
                "icon": "https://decrypt.co/favicon.ico"
            },
            {
                "name": "The Block",
                "url": "https://www.theblock.co/rss.xml",
                "icon": "https://www.theblock.co/favicon.ico"
            },
            {
                "name": "Bitcoin Magazine",
                "url": "https://bitcoinmagazine.com/feed",
                "icon": "https://bitcoinmagazine.com/favicon.ico"
            }
        ]
    },
    # Order matters: the first category with a matching keyword wins
    "categories": {
        "regulation": [
            "sec", "regulation", "regulatory", "law", "legal", "court",
            "lawsuit", "ban", "government", "congress", "senate", "policy"
        ],
        "defi": [
            "defi", "decentralized finance", "lending", "borrowing", "liquidity",
            "yield", "staking", "amm", "dex", "swap"
        ],
        "nft": [
            "nft", "non-fungible", "opensea", "collectible", "digital art", "metaverse"
        ],
        "breaking": [
            "breaking", "urgent", "just in", "alert", "crash", "surge",
            "plunge", "hack", "exploit"
        ],
        "analysis": [
            "analysis", "outlook", "forecast", "prediction", "opinion",
            "review", "deep dive"
        ]
    },
    "openai": {
        "model": "gpt-4o-mini",
        "max_tokens": 1024,
        "timeout_seconds": 30,
        "api_key": None
    },
    "briefing": {
        "max_headlines": 15
    },
    "market": {
        "timeout_seconds": 15,
        "top_movers": 5,
        "fear_greed_url": "https://api.alternative.me/fng/?limit=2",
        "markets_url": (
            "https://api.coingecko.com/api/v3/coins/markets?"
            "vs_currency=usd&order=market_cap_desc&per_page=200&page=1"
            "&sparkline=false&price_change_percentage=24h"
        ),
        "global_url": "https://api.coingecko.com/api/v3/global"
    },
    "storage": {
        "path": "data/cryptonews.db",
        "articles_per_day": 50
    }
}


class Config:
    """
    Configuration manager for CryptoNews.
    """
    def __init__(self, config_path: Optional[str] = None, env_prefix: str = 'CRYPTONEWS_'):
        """
        Initialize the Config.

        Args:
            config_path: Path to a YAML or JSON configuration file
            env_prefix: Prefix of environment variables that override settings
        """
        self.config_path = config_path
        self.env_prefix = env_prefix
        self.config = self._load_config()

    def _load_config(self) -> Dict:
        """
        Load configuration from file or use defaults.

        Returns:
            Configuration dictionary
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path:
            path = Path(self.config_path)
            if path.exists():
                try:
                    with open(path, 'r') as f:
                        if path.suffix.lower() in ['.yaml', '.yml']:
                            user_config = yaml.safe_load(f) or {}
                        elif path.suffix.lower() == '.json':
                            user_config = json.load(f)
                        else:
                            raise ConfigurationError(f"Unsupported config file format: {path.suffix}")
                except (OSError, ValueError, yaml.YAMLError) as e:
                    raise ConfigurationError(
                        f"Error loading config from {self.config_path}: {e}",
                        {"path": str(path)}
                    ) from e

                self._update_dict(config, user_config)
            else:
                logger.warning(f"Config file {self.config_path} not found. Using default configuration")

        self._override_from_env(config)

        return config

    def _update_dict(self, target: Dict, source: Dict) -> None:
        """
        Recursively update a dictionary.

        Args:
            target: Target dictionary to update
            source: Source dictionary with new values
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _override_from_env(self, config: Dict) -> None:
        """
        Override configuration with environment variables.

        Nested keys are separated by a double underscore, so
        CRYPTONEWS_OPENAI__MAX_TOKENS sets openai.max_tokens.

        Args:
            config: Configuration dictionary to update
        """
        for key, value in os.environ.items():
            if not key.startswith(self.env_prefix) or key == f"{self.env_prefix}CONFIG_PATH":
                continue

            parts = key[len(self.env_prefix):].lower().split('__')

            current = config
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]

            try:
                current[parts[-1]] = json.loads(value)
            except json.JSONDecodeError:
                current[parts[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key path (e.g., 'feeds.timeout_seconds')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        current = self.config

        for part in key.split('.'):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current

    def require(self, key: str) -> Any:
        """
        Get a configuration value that must be set.

        Raises:
            ConfigurationError: If the value is missing or empty
        """
        value = self.get(key)
        if value in (None, ""):
            raise ConfigurationError(f"{key} is not configured", {"key": key})
        return value

    def save(self, path: Optional[str] = None) -> None:
        """
        Save the current configuration to a YAML or JSON file.
        """
        save_path = path or self.config_path
        if not save_path:
            raise ConfigurationError("No path specified for saving configuration")

        path = Path(save_path)
        if path.suffix.lower() in ['.yaml', '.yml']:
            with open(path, 'w') as f:
                yaml.safe_dump(self.config, f, default_flow_style=False, sort_keys=False)
        elif path.suffix.lower() == '.json':
            with open(path, 'w') as f:
                json.dump(self.config, f, indent=2)
        else:
            raise ConfigurationError(f"Unsupported config file format: {path.suffix}")


# Global configuration instance
config = Config(os.getenv('CRYPTONEWS_CONFIG_PATH'))

def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value from the global configuration.

    Args:
        key: Dot-separated key path (e.g., 'openai.model')
        default: Default value if key not found

    Returns:
        Configuration value
    """
    return config.get(key, default)
