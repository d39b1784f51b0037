"""
Watchlist Manager Service

Per-user watchlist storage and the toggle/read operations built on it.
"""

from .watchlist_service import WatchlistService
from .store import WatchlistStore, StoreError, DuplicateEntryError
from .user_directory import UserDirectory, UserRef, to_user_ref
from .results import Outcome, Result, ToggleResult

__all__ = [
    'WatchlistService',
    'WatchlistStore',
    'StoreError',
    'DuplicateEntryError',
    'UserDirectory',
    'UserRef',
    'to_user_ref',
    'Outcome',
    'Result',
    'ToggleResult',
]
