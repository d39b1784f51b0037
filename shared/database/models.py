"""
Database models for the stock watchlist service.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Index, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    """
    User directory record.

    Owned by the authentication system; the watchlist service only reads it.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, comment="Generic record identifier")
    public_id = Column(String(64), unique=True, nullable=True, comment="Explicit user identifier, if issued")
    email = Column(String(255), unique=True, index=True, nullable=False, comment="Login email (lookup key)")
    name = Column(String(100), comment="Display name")
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<User id={self.id} email={self.email!r}>"


class WatchlistEntry(Base):
    """Watchlist entry: one tracked symbol for one user."""
    __tablename__ = "watchlist"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True, comment="Owning user's identifier")
    symbol = Column(String(20), nullable=False, comment="Ticker symbol, stored as given")
    company = Column(String(200), nullable=False, comment="Company name captured when added")
    added_at = Column(DateTime, nullable=False, default=datetime.utcnow, comment="Date added to watchlist")

    __table_args__ = (
        UniqueConstraint('user_id', 'symbol', name='uq_watchlist_user_symbol'),
        Index('ix_watchlist_user_added', 'user_id', 'added_at'),
    )

    def to_dict(self) -> dict:
        """Plain-record view of the entry."""
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "symbol": self.symbol,
            "company": self.company,
            "added_at": self.added_at.isoformat() if self.added_at else None,
        }

    def __repr__(self):
        return f"<WatchlistEntry {self.user_id} -> {self.symbol}>"
