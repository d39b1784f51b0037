"""
Quote enrichment for watchlist entries.

Each symbol is fetched independently and concurrently; a failed fetch leaves
that entry's price fields empty instead of failing the batch.
"""
import asyncio
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from services.quote_service.quote_client import Quote, QuoteSource
from services.quote_service.utils import log_execution_time

logger = logging.getLogger(__name__)


@dataclass
class EnrichedEntry:
    """Watchlist entry merged with its latest quote."""
    id: str
    symbol: str
    company: str
    added_at: Optional[datetime]
    price: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None

    @classmethod
    def from_entry(cls, entry: Any, quote: Optional[Quote] = None) -> "EnrichedEntry":
        """
        Build from a stored entry and an optional quote.

        Args:
            entry: Object with id, symbol, company and added_at attributes
            quote: Quote for the symbol, or None if it could not be fetched
        """
        enriched = cls(
            id=str(entry.id),
            symbol=entry.symbol,
            company=entry.company,
            added_at=entry.added_at
        )
        if quote is not None:
            enriched.price = quote.price
            enriched.change = quote.change
            enriched.change_percent = quote.change_percent
        return enriched

    @property
    def has_quote(self) -> bool:
        return self.price is not None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["added_at"] = self.added_at.isoformat() if self.added_at else None
        return data


class QuoteEnricher:
    """Merges live quotes into watchlist entries."""

    def __init__(self, quote_source: QuoteSource, max_concurrency: int = 8):
        """
        Initialize the enricher.

        Args:
            quote_source: Source used for per-symbol quotes
            max_concurrency: Maximum number of quote requests in flight
        """
        self.quote_source = quote_source
        self.max_concurrency = max(1, max_concurrency)

    async def _fetch_quote(self, symbol: str, semaphore: asyncio.Semaphore) -> Optional[Quote]:
        async with semaphore:
            try:
                return await asyncio.to_thread(self.quote_source.get_quote, symbol)
            except Exception as e:
                logger.warning(f"Quote unavailable for {symbol}: {e}")
                return None

    @log_execution_time
    async def enrich(self, entries: Sequence[Any]) -> List[EnrichedEntry]:
        """
        Fetch quotes for all entries concurrently.

        Args:
            entries: Watchlist entries

        Returns:
            Enriched entries in the same order as the input
        """
        if not entries:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)
        quotes = await asyncio.gather(
            *(self._fetch_quote(entry.symbol, semaphore) for entry in entries)
        )

        missing = sum(1 for quote in quotes if quote is None)
        if missing:
            logger.info(f"Enriched {len(entries)} entries, {missing} without quotes")

        return [EnrichedEntry.from_entry(entry, quote) for entry, quote in zip(entries, quotes)]

    def enrich_sync(self, entries: Sequence[Any]) -> List[EnrichedEntry]:
        """Blocking wrapper around enrich() for callers without an event loop."""
        return asyncio.run(self.enrich(entries))
