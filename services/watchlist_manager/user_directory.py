"""
User directory lookup.

Resolves a login email to the identifier that owns watchlist entries.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from shared.database.models import User
from shared.utilities.validators import is_blank
from services.watchlist_manager.results import Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRef:
    """Normalized user identity."""
    identifier: str


def to_user_ref(record: Optional[User]) -> Optional[UserRef]:
    """
    Normalize a user record to a UserRef.

    The explicit ``public_id`` wins; otherwise the generic record id is used.

    Args:
        record: User record or None

    Returns:
        UserRef, or None if the record carries no usable identifier
    """
    if record is None:
        return None

    if not is_blank(record.public_id):
        return UserRef(identifier=record.public_id)

    if record.id is not None:
        return UserRef(identifier=str(record.id))

    return None


class UserDirectory:
    """Read-only view of the users table."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def find_by_email(self, email: Optional[str]) -> Result[UserRef]:
        """
        Look up a user by email.

        Args:
            email: Login email

        Returns:
            Result with the UserRef, NOT_FOUND for an empty email or unknown
            user, STORE_ERROR if the query failed
        """
        if is_blank(email):
            return Result.not_found("empty email")

        try:
            record = self.db.query(User).filter(User.email == email).first()
        except Exception as e:
            logger.error(f"User lookup failed for {email}: {e}")
            return Result.store_error(str(e))

        user_ref = to_user_ref(record)
        if user_ref is None:
            return Result.not_found(f"no user for {email}")

        return Result.ok(user_ref)
