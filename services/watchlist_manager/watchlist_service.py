"""
Watchlist service.

Read and toggle operations over a user's watchlist. Every operation has a
documented fallback and none of them raise:

- list_symbols / list_entries: empty list when the user is unknown or the
  store fails
- is_watchlisted: False when input is missing, the user is unknown, or the
  store fails
- toggle: a ToggleResult carrying the error message
"""

import logging
from typing import List, Optional

from shared.monitoring.structured_logger import log_business_event
from shared.utilities.validators import is_blank, validate_symbol
from shared.database.models import WatchlistEntry
from services.watchlist_manager.results import (
    Outcome, Result, ToggleResult,
    INVALID_DATA, USER_NOT_FOUND, UPDATE_FAILED
)
from services.watchlist_manager.store import WatchlistStore, StoreError, DuplicateEntryError
from services.watchlist_manager.user_directory import UserDirectory, UserRef

logger = logging.getLogger(__name__)


class WatchlistService:
    """
    Per-user watchlist operations built on a store and a user directory.
    """

    def __init__(self, store: WatchlistStore, directory: UserDirectory):
        """
        Initialize the watchlist service.

        Args:
            store: Watchlist store adapter
            directory: User directory used to resolve emails
        """
        self.store = store
        self.directory = directory

    def resolve_user(self, email: Optional[str]) -> Result[UserRef]:
        """
        Resolve an email to the owning user.

        Args:
            email: Login email

        Returns:
            Result with outcome OK, NOT_FOUND or STORE_ERROR
        """
        return self.directory.find_by_email(email)

    def list_symbols(self, email: Optional[str]) -> List[str]:
        """
        Get the symbols on a user's watchlist.

        Args:
            email: Login email

        Returns:
            Symbols in storage order, or an empty list
        """
        user = self.resolve_user(email)
        if user.outcome == Outcome.NOT_FOUND:
            return []
        if user.outcome == Outcome.STORE_ERROR:
            logger.error(f"list_symbols: user lookup failed for {email}: {user.reason}")
            return []

        try:
            return self.store.list_symbols(user.value.identifier)
        except StoreError as e:
            logger.error(f"list_symbols error: {e}")
            return []

    def is_watchlisted(self, symbol: Optional[str], email: Optional[str]) -> bool:
        """
        Check whether a symbol is on a user's watchlist.

        Args:
            symbol: Ticker symbol
            email: Login email

        Returns:
            True if the entry exists; False otherwise, including on errors
        """
        if is_blank(email) or not validate_symbol(symbol):
            return False

        user = self.resolve_user(email)
        if user.outcome == Outcome.NOT_FOUND:
            return False
        if user.outcome == Outcome.STORE_ERROR:
            logger.error(f"is_watchlisted: user lookup failed for {email}: {user.reason}")
            return False

        try:
            return self.store.count(user.value.identifier, symbol) > 0
        except StoreError as e:
            logger.error(f"is_watchlisted error: {e}")
            return False

    def toggle(self, symbol: Optional[str], company: Optional[str], email: Optional[str]) -> ToggleResult:
        """
        Add the symbol if absent, remove it if present.

        Args:
            symbol: Ticker symbol
            company: Company display name, stored only when adding; the symbol
                stands in when it is blank
            email: Login email

        Returns:
            ToggleResult; ``added`` tells which way the toggle went
        """
        if is_blank(email) or not validate_symbol(symbol):
            return ToggleResult.failed(INVALID_DATA)

        user = self.resolve_user(email)
        if user.outcome == Outcome.NOT_FOUND:
            return ToggleResult.failed(USER_NOT_FOUND)
        if user.outcome == Outcome.STORE_ERROR:
            logger.error(f"toggle: user lookup failed for {email}: {user.reason}")
            return ToggleResult.failed(UPDATE_FAILED)

        user_id = user.value.identifier

        try:
            existing = self.store.find(user_id, symbol)

            if existing is not None:
                self.store.delete(existing)
                log_business_event(logger, "watchlist_removed", user_id=user_id, symbol=symbol)
                return ToggleResult.succeeded(added=False)

            try:
                self.store.create(user_id, symbol, symbol if is_blank(company) else company)
            except DuplicateEntryError:
                # Lost a race with a concurrent add; the symbol is on the list
                logger.warning(f"Concurrent add of {symbol} for {user_id}; keeping existing entry")
                return ToggleResult.succeeded(added=True)

            log_business_event(logger, "watchlist_added", user_id=user_id, symbol=symbol)
            return ToggleResult.succeeded(added=True)

        except StoreError as e:
            logger.error(f"toggle error: {e}")
            return ToggleResult.failed(UPDATE_FAILED)

    def list_entries(self, email: Optional[str]) -> List[WatchlistEntry]:
        """
        Get full watchlist entries for a user, newest first.

        Args:
            email: Login email

        Returns:
            Entries sorted by added_at descending, or an empty list
        """
        user = self.resolve_user(email)
        if user.outcome == Outcome.NOT_FOUND:
            return []
        if user.outcome == Outcome.STORE_ERROR:
            logger.error(f"list_entries: user lookup failed for {email}: {user.reason}")
            return []

        try:
            return self.store.list_entries(user.value.identifier)
        except StoreError as e:
            logger.error(f"list_entries error: {e}")
            return []
