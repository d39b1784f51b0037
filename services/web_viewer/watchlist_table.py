"""
Watchlist table model.

Holds the rows the user currently sees and one toggle control per row.
Rows are dropped as soon as their control reports a tentative removal.
What happens to a dropped row when the server then rejects the removal is
set by RowRemovalPolicy:

- DROP_ON_REQUEST: the row stays gone; only the control itself reverts
- RESTORE_ON_FAILURE: the row is put back where it was

Either way a notice is queued so the failure is not silent.
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

from tabulate import tabulate

from services.quote_service.enrichment import EnrichedEntry
from services.watchlist_manager.results import ToggleResult
from services.web_viewer.formatting import price_cell, change_cell, change_direction
from services.web_viewer.toggle_control import (
    ToggleControl, ToggleEvent, ToggleCall, ControlVariant
)

logger = logging.getLogger(__name__)

EMPTY_TITLE = "Your watchlist is empty"
EMPTY_DESCRIPTION = "Start tracking company stocks by adding them to your watchlist."
EMPTY_ACTION = "Browse Stocks"
COLUMNS = ["Symbol", "Company", "Price", "Change", "Action"]


class RowRemovalPolicy(str, Enum):
    """What to do with an optimistically dropped row when the removal fails."""
    DROP_ON_REQUEST = "drop_on_request"
    RESTORE_ON_FAILURE = "restore_on_failure"


class WatchlistTable:
    """
    Client-side watchlist view with optimistic row removal.
    """

    def __init__(
        self,
        entries: Sequence[EnrichedEntry],
        email: Optional[str],
        policy: RowRemovalPolicy = RowRemovalPolicy.DROP_ON_REQUEST,
        currency_symbol: str = "$"
    ):
        """
        Initialize the table.

        Args:
            entries: Enriched entries, in display order
            email: Signed-in user's email
            policy: Row handling when a removal fails
            currency_symbol: Symbol used in the price column
        """
        self.rows: List[EnrichedEntry] = list(entries)
        self.email = email
        self.policy = RowRemovalPolicy(policy)
        self.currency_symbol = currency_symbol
        self.notices: List[str] = []
        self._dropped: Dict[str, Tuple[int, EnrichedEntry]] = {}
        self.controls: Dict[str, ToggleControl] = {
            entry.symbol: ToggleControl(
                symbol=entry.symbol,
                company=entry.company,
                is_member=True,
                email=email,
                variant=ControlVariant.ICON,
                on_change=self.handle_change
            )
            for entry in self.rows
        }

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def symbols(self) -> List[str]:
        return [row.symbol for row in self.rows]

    def _drop_row(self, symbol: str) -> None:
        for index, row in enumerate(self.rows):
            if row.symbol == symbol:
                if self.policy == RowRemovalPolicy.RESTORE_ON_FAILURE:
                    self._dropped[symbol] = (index, row)
                del self.rows[index]
                logger.debug(f"Dropped {symbol} from table")
                return

    def _restore_row(self, symbol: str) -> None:
        dropped = self._dropped.pop(symbol, None)
        if dropped is None:
            return
        index, row = dropped
        self.rows.insert(min(index, len(self.rows)), row)
        logger.debug(f"Restored {symbol} to table")

    def handle_change(self, symbol: str, is_member: bool, event: ToggleEvent) -> None:
        """Listener wired into every row's toggle control."""
        if event == ToggleEvent.TOGGLE_REQUESTED:
            if not is_member:
                self._drop_row(symbol)
            return

        if event == ToggleEvent.TOGGLE_SUCCEEDED:
            self._dropped.pop(symbol, None)
            return

        if event == ToggleEvent.TOGGLE_FAILED:
            self.notices.append(f"Could not update {symbol}. Please try again.")
            if is_member and self.policy == RowRemovalPolicy.RESTORE_ON_FAILURE:
                self._restore_row(symbol)

    def toggle(self, symbol: str, toggle_call: ToggleCall) -> Optional[ToggleResult]:
        """
        Activate the control for a symbol.

        Returns:
            The server's ToggleResult, or None if there is no such control
            or the activation was ignored
        """
        control = self.controls.get(symbol)
        if control is None:
            logger.warning(f"No watchlist control for {symbol}")
            return None
        return control.activate(toggle_call)

    def pop_notices(self) -> List[str]:
        notices, self.notices = self.notices, []
        return notices

    def display_rows(self) -> List[Dict[str, Any]]:
        """Formatted cells for every visible row."""
        return [
            {
                "symbol": row.symbol,
                "company": row.company,
                "price": price_cell(row.price, self.currency_symbol),
                "change": change_cell(row.change, row.change_percent),
                "direction": change_direction(row.change),
                "href": f"/stocks/{quote(row.symbol, safe='')}",
                "control": self.controls[row.symbol],
            }
            for row in self.rows
        ]

    def render_text(self) -> str:
        """Terminal rendering."""
        if self.is_empty:
            return f"{EMPTY_TITLE}\n{EMPTY_DESCRIPTION}"

        rows = [
            [row["symbol"], row["company"], row["price"], row["change"], row["control"].title]
            for row in self.display_rows()
        ]
        return tabulate(rows, headers=COLUMNS, tablefmt='grid')
