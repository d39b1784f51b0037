"""
Watchlist toggle control.

Client-side state for one add/remove control. The control flips its
membership flag as soon as it is activated, tells its parent, calls the
server, and flips back only if the server reports failure.

Transition table (phase, event) -> phase:

    IDLE      + TOGGLE_REQUESTED -> IN_FLIGHT
    SETTLED   + TOGGLE_REQUESTED -> IN_FLIGHT
    IN_FLIGHT + TOGGLE_SUCCEEDED -> SETTLED
    IN_FLIGHT + TOGGLE_FAILED    -> SETTLED   (membership flag reverted)

Any other combination is ignored, which is how repeated activation while a
request is in flight is dropped.
"""
import logging
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from shared.utilities.validators import is_blank
from services.watchlist_manager.results import ToggleResult

logger = logging.getLogger(__name__)


class ControlPhase(str, Enum):
    """Lifecycle phase of a toggle control."""
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SETTLED = "settled"


class ToggleEvent(str, Enum):
    """Events driving a toggle control."""
    TOGGLE_REQUESTED = "toggle_requested"
    TOGGLE_SUCCEEDED = "toggle_succeeded"
    TOGGLE_FAILED = "toggle_failed"


class ControlVariant(str, Enum):
    """Visual variant of the control."""
    BUTTON = "button"
    ICON = "icon"


TRANSITIONS: Dict[Tuple[ControlPhase, ToggleEvent], ControlPhase] = {
    (ControlPhase.IDLE, ToggleEvent.TOGGLE_REQUESTED): ControlPhase.IN_FLIGHT,
    (ControlPhase.SETTLED, ToggleEvent.TOGGLE_REQUESTED): ControlPhase.IN_FLIGHT,
    (ControlPhase.IN_FLIGHT, ToggleEvent.TOGGLE_SUCCEEDED): ControlPhase.SETTLED,
    (ControlPhase.IN_FLIGHT, ToggleEvent.TOGGLE_FAILED): ControlPhase.SETTLED,
}

# (symbol, is_member, event) -> None
ChangeListener = Callable[[str, bool, ToggleEvent], None]
ToggleCall = Callable[[str, str, str], ToggleResult]


class ToggleControl:
    """
    Optimistic add/remove control for a single symbol.
    """

    def __init__(
        self,
        symbol: str,
        company: str,
        is_member: bool,
        email: Optional[str] = None,
        variant: ControlVariant = ControlVariant.BUTTON,
        show_trash_icon: bool = False,
        on_change: Optional[ChangeListener] = None
    ):
        """
        Initialize the control.

        Args:
            symbol: Ticker symbol
            company: Company name sent along when adding
            is_member: Whether the symbol is currently on the watchlist
            email: Signed-in user's email; without it the control is inert
            variant: Button or icon rendering
            show_trash_icon: Show a trash icon on a member button
            on_change: Parent listener for membership changes
        """
        self.symbol = symbol
        self.company = company
        self.is_member = bool(is_member)
        self.email = email
        self.variant = ControlVariant(variant)
        self.show_trash_icon = show_trash_icon
        self.on_change = on_change
        self.phase = ControlPhase.IDLE
        self.pending_target: Optional[bool] = None
        self.last_error: Optional[str] = None

    def dispatch(self, event: ToggleEvent) -> bool:
        """
        Apply an event to the phase.

        Returns:
            True if the transition exists, False if the event was ignored
        """
        next_phase = TRANSITIONS.get((self.phase, event))
        if next_phase is None:
            logger.debug(f"{self.symbol}: ignoring {event.value} in phase {self.phase.value}")
            return False
        self.phase = next_phase
        return True

    def _notify(self, event: ToggleEvent) -> None:
        if self.on_change is not None:
            self.on_change(self.symbol, self.is_member, event)

    def request(self) -> bool:
        """
        Start a toggle: flip the flag and notify the parent.

        Returns:
            True if the toggle started, False if it was ignored
        """
        if is_blank(self.email):
            logger.warning("User not logged in; ignoring watchlist toggle")
            return False

        if not self.dispatch(ToggleEvent.TOGGLE_REQUESTED):
            return False

        self.last_error = None
        self.pending_target = not self.is_member
        self.is_member = self.pending_target
        self._notify(ToggleEvent.TOGGLE_REQUESTED)
        return True

    def settle(self, result: ToggleResult) -> None:
        """
        Finish a toggle with the server's answer.

        The parent is notified either way; on failure the flag reverts first.
        """
        if result.success:
            if self.dispatch(ToggleEvent.TOGGLE_SUCCEEDED):
                self.pending_target = None
                self._notify(ToggleEvent.TOGGLE_SUCCEEDED)
            return

        if not self.dispatch(ToggleEvent.TOGGLE_FAILED):
            return

        self.is_member = not self.pending_target
        self.pending_target = None
        self.last_error = result.error
        logger.error(f"Failed to toggle watchlist for {self.symbol}: {result.error}")
        self._notify(ToggleEvent.TOGGLE_FAILED)

    def activate(self, toggle: ToggleCall) -> Optional[ToggleResult]:
        """
        Handle a user activation end to end.

        Args:
            toggle: Server call taking (symbol, company, email)

        Returns:
            The server's ToggleResult, or None if the activation was ignored
        """
        if not self.request():
            return None

        try:
            result = toggle(self.symbol, self.company, self.email)
        except Exception as e:
            logger.error(f"Watchlist toggle call for {self.symbol} raised: {e}")
            result = ToggleResult.failed(str(e))

        self.settle(result)
        return result

    def sync(self, is_member: bool) -> None:
        """Adopt a fresh server value unless a toggle is in flight."""
        if self.phase != ControlPhase.IN_FLIGHT:
            self.is_member = bool(is_member)

    @property
    def in_flight(self) -> bool:
        return self.phase == ControlPhase.IN_FLIGHT

    @property
    def disabled(self) -> bool:
        if self.variant == ControlVariant.BUTTON and is_blank(self.email):
            return True
        return self.in_flight

    @property
    def label(self) -> str:
        if self.in_flight:
            return "Processing..."
        if self.variant == ControlVariant.ICON:
            return ""
        return "Remove from Watchlist" if self.is_member else "Add to Watchlist"

    @property
    def icon(self) -> Optional[str]:
        """Icon drawn on the control: "star" for the icon variant, "trash" or None for buttons."""
        if self.variant == ControlVariant.ICON:
            return "star"
        if self.show_trash_icon and self.is_member and not self.in_flight:
            return "trash"
        return None

    @property
    def title(self) -> str:
        if self.is_member:
            return f"Remove {self.symbol} from watchlist"
        return f"Add {self.symbol} to watchlist"
