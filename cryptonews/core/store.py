"""
SQLite storage for daily articles, market data and briefings.
"""
import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from cryptonews.core.article import Article
from cryptonews.core.briefing import Briefing
from cryptonews.core.market import MarketSnapshot
from cryptonews.errors import PersistenceError
from cryptonews.utils.dates import now_iso

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data") / "cryptonews.db"

SCHEMA = """
CREATE TABLE IF NOT EXISTS days (
    date TEXT PRIMARY KEY,
    data TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS articles (
    date TEXT NOT NULL,
    id TEXT NOT NULL,
    published_at TEXT NOT NULL,
    data TEXT NOT NULL,
    PRIMARY KEY (date, id)
);
CREATE INDEX IF NOT EXISTS idx_articles_published ON articles (date, published_at);
"""


@dataclass
class DailyNews:
    """
    Everything stored for one date.
    """
    date: str
    briefing: Optional[Briefing] = None
    market: Optional[MarketSnapshot] = None
    articles: List[Article] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class NewsStore:
    """
    Stores articles and summaries keyed by date.

    Each date has a JSON day document (merge-written) and a set of article
    rows that is fully replaced on every store.
    """
    def __init__(self, db_path: Union[str, Path] = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self):
        """Create the database directory and tables."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot create storage directory: {e}", {"path": str(self.db_path)}) from e
        with self._connect() as conn:
            conn.executescript(SCHEMA)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """
        Open a connection; commit on success, roll back on error.

        Raises:
            PersistenceError: On any SQLite error
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open database: {e}", {"path": str(self.db_path)}) from e

        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            raise PersistenceError(f"Storage error: {e}", {"path": str(self.db_path)}) from e
        finally:
            conn.close()

    def _read_day(self, conn: sqlite3.Connection, date: str) -> Optional[Dict[str, Any]]:
        row = conn.execute("SELECT data FROM days WHERE date = ?", (date,)).fetchone()
        return json.loads(row[0]) if row else None

    def _merge_day(self, conn: sqlite3.Connection, date: str, fields: Dict[str, Any]) -> None:
        document = self._read_day(conn, date) or {}
        document.update(fields)
        document['date'] = date
        conn.execute(
            "INSERT OR REPLACE INTO days (date, data) VALUES (?, ?)",
            (date, json.dumps(document))
        )

    def store_articles(self, date: str, articles: List[Article]) -> None:
        """
        Replace all articles stored for a date in one transaction.
        """
        logger.info(f"Storing {len(articles)} articles for {date}")
        with self._connect() as conn:
            conn.execute("DELETE FROM articles WHERE date = ?", (date,))
            conn.executemany(
                "INSERT OR REPLACE INTO articles (date, id, published_at, data) VALUES (?, ?, ?, ?)",
                [
                    (date, article.id, article.published_at, json.dumps(article.to_dict()))
                    for article in articles
                ]
            )
            self._merge_day(conn, date, {})
        logger.info(f"Stored {len(articles)} articles for {date}")

    def get_articles(self, date: str, limit: int = 50) -> List[Article]:
        """
        Get articles for a date, most recent first.
        """
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT data
                FROM articles
                WHERE date = ?
                ORDER BY published_at DESC, rowid ASC
                LIMIT ?
                """,
                (date, limit)
            ).fetchall()
        return [Article.from_dict(json.loads(row[0])) for row in rows]

    def get_available_dates(self, limit: int = 30) -> List[str]:
        """
        Get dates with stored news, most recent first.
        """
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT date FROM days ORDER BY date DESC LIMIT ?",
                (limit,)
            ).fetchall()
        return [row[0] for row in rows]

    def get_latest_date(self) -> Optional[str]:
        dates = self.get_available_dates(limit=1)
        return dates[0] if dates else None

    def store_summary(self, date: str, briefing: Briefing) -> None:
        """
        Merge the briefing into the day document.
        """
        logger.info(f"Storing summary for {date}")
        with self._connect() as conn:
            self._merge_day(conn, date, {'aiSummary': briefing.to_dict(), 'updatedAt': now_iso()})

    def get_stored_summary(self, date: str) -> Optional[Briefing]:
        with self._connect() as conn:
            document = self._read_day(conn, date)
        if not document or not document.get('aiSummary'):
            return None
        return Briefing.from_dict(document['aiSummary'])

    def store_market_data(self, date: str, market: MarketSnapshot) -> None:
        logger.info(f"Storing market data for {date}")
        with self._connect() as conn:
            self._merge_day(conn, date, {'marketOverview': market.to_dict(), 'updatedAt': now_iso()})

    def get_stored_market_data(self, date: str) -> Optional[MarketSnapshot]:
        with self._connect() as conn:
            document = self._read_day(conn, date)
        if not document or not document.get('marketOverview'):
            return None
        return MarketSnapshot.from_dict(document['marketOverview'])

    def touch_day(self, date: str) -> None:
        """
        Record that a run completed for the date.
        """
        with self._connect() as conn:
            document = self._read_day(conn, date) or {}
            timestamp = now_iso()
            self._merge_day(conn, date, {
                'createdAt': document.get('createdAt', timestamp),
                'updatedAt': timestamp,
            })

    def get_daily_news(self, date: str, limit: int = 50) -> Optional[DailyNews]:
        """
        Get the day document and its articles, or None if nothing is stored.
        """
        with self._connect() as conn:
            document = self._read_day(conn, date)
        if document is None:
            return None

        summary = document.get('aiSummary')
        market = document.get('marketOverview')
        return DailyNews(
            date=date,
            briefing=Briefing.from_dict(summary) if summary else None,
            market=MarketSnapshot.from_dict(market) if market else None,
            articles=self.get_articles(date, limit),
            created_at=document.get('createdAt'),
            updated_at=document.get('updatedAt'),
        )
