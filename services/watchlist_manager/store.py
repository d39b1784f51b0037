"""
Watchlist store adapter.

Create/find/count/delete over persisted watchlist entries keyed by
``(user_id, symbol)``. SQLAlchemy errors are translated into
``StoreError`` so callers never depend on the database driver. Errors
raised by the driver itself outside SQLAlchemy's wrapping (parameter
encoding, for one) are translated the same way.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.database.models import WatchlistEntry

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Persistence backend failed or was unreachable."""
    pass


class DuplicateEntryError(StoreError):
    """Create rejected by the (user_id, symbol) uniqueness constraint."""
    pass


class WatchlistStore:
    """
    SQLAlchemy-backed watchlist store.

    Every method is scoped to a single user id; there is no query that
    spans users.
    """

    def __init__(self, db_session: Session):
        """
        Initialize the store.

        Args:
            db_session: SQLAlchemy database session
        """
        self.db = db_session

    def _entry_query(self, user_id: str, symbol: str):
        return self.db.query(WatchlistEntry).filter(
            and_(
                WatchlistEntry.user_id == user_id,
                WatchlistEntry.symbol == symbol
            )
        )

    def find(self, user_id: str, symbol: str) -> Optional[WatchlistEntry]:
        """
        Find the entry for a user and symbol.

        Returns:
            The entry, or None if the symbol is not on the user's watchlist

        Raises:
            StoreError: If the query fails
        """
        try:
            return self._entry_query(user_id, symbol).first()
        except Exception as e:
            raise StoreError(f"find failed for {user_id}/{symbol}: {e}") from e

    def count(self, user_id: str, symbol: str) -> int:
        """
        Count entries for a user and symbol (0 or 1 under the uniqueness constraint).

        Raises:
            StoreError: If the query fails
        """
        try:
            return self._entry_query(user_id, symbol).count()
        except Exception as e:
            raise StoreError(f"count failed for {user_id}/{symbol}: {e}") from e

    def create(
        self,
        user_id: str,
        symbol: str,
        company: str,
        added_at: Optional[datetime] = None
    ) -> WatchlistEntry:
        """
        Persist a new entry.

        Args:
            user_id: Owning user's identifier
            symbol: Ticker symbol
            company: Company display name
            added_at: Creation time (defaults to now)

        Returns:
            The stored entry with its id assigned

        Raises:
            DuplicateEntryError: If the user already has this symbol
            StoreError: If the insert fails for any other reason
        """
        entry = WatchlistEntry(
            user_id=user_id,
            symbol=symbol,
            company=company,
            added_at=added_at or datetime.utcnow()
        )

        try:
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEntryError(f"{symbol} already on watchlist of {user_id}") from e
        except Exception as e:
            self.db.rollback()
            raise StoreError(f"create failed for {user_id}/{symbol}: {e}") from e

        logger.debug(f"Created watchlist entry {entry.id} ({user_id} -> {symbol})")
        return entry

    def delete(self, entry: WatchlistEntry) -> None:
        """
        Delete an entry.

        Raises:
            StoreError: If the delete fails
        """
        try:
            self.db.delete(entry)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            raise StoreError(f"delete failed for entry {entry.id}: {e}") from e

        logger.debug(f"Deleted watchlist entry {entry.id} ({entry.user_id} -> {entry.symbol})")

    def list_symbols(self, user_id: str) -> List[str]:
        """
        Symbols on a user's watchlist, in storage order.

        Raises:
            StoreError: If the query fails
        """
        try:
            rows = self.db.query(WatchlistEntry.symbol).filter(
                WatchlistEntry.user_id == user_id
            ).all()
        except Exception as e:
            raise StoreError(f"symbol listing failed for {user_id}: {e}") from e

        return [str(row.symbol) for row in rows]

    def list_entries(self, user_id: str) -> List[WatchlistEntry]:
        """
        Entries on a user's watchlist, newest first.

        Raises:
            StoreError: If the query fails
        """
        try:
            return self.db.query(WatchlistEntry).filter(
                WatchlistEntry.user_id == user_id
            ).order_by(
                desc(WatchlistEntry.added_at),
                desc(WatchlistEntry.id)
            ).all()
        except Exception as e:
            raise StoreError(f"entry listing failed for {user_id}: {e}") from e
