"""
Pytest configuration and fixtures.
"""
import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.database.models import Base, User, WatchlistEntry
from services.watchlist_manager.store import WatchlistStore
from services.watchlist_manager.user_directory import UserDirectory
from services.watchlist_manager.watchlist_service import WatchlistService
from services.quote_service.quote_client import Quote, QuoteSource, QuoteNotFoundError


@pytest.fixture(scope="session")
def test_db_engine():
    """Create test database engine."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine, checkfirst=True)
    yield engine
    Base.metadata.drop_all(bind=engine, checkfirst=True)


@pytest.fixture(scope="function")
def test_db_session(test_db_engine):
    """Create test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)
    session = SessionLocal()
    yield session

    # Clean up all data after each test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def sample_user(test_db_session):
    """User with an explicit public id."""
    user = User(email="trader@example.com", public_id="usr_trader", name="Trader")
    test_db_session.add(user)
    test_db_session.commit()
    test_db_session.refresh(user)
    return user


@pytest.fixture
def legacy_user(test_db_session):
    """User without a public id; identified by record id."""
    user = User(email="legacy@example.com", name="Legacy")
    test_db_session.add(user)
    test_db_session.commit()
    test_db_session.refresh(user)
    return user


@pytest.fixture
def watchlist_service(test_db_session):
    """Watchlist service over the test database."""
    return WatchlistService(WatchlistStore(test_db_session), UserDirectory(test_db_session))


@pytest.fixture
def sample_entries(test_db_session, sample_user):
    """Three entries added on consecutive days (MSFT newest)."""
    base = datetime(2024, 3, 1, 9, 30)
    entries = [
        WatchlistEntry(user_id="usr_trader", symbol="AAPL", company="Apple Inc.", added_at=base),
        WatchlistEntry(user_id="usr_trader", symbol="NVDA", company="NVIDIA Corporation", added_at=base + timedelta(days=1)),
        WatchlistEntry(user_id="usr_trader", symbol="MSFT", company="Microsoft Corporation", added_at=base + timedelta(days=2)),
    ]
    for entry in entries:
        test_db_session.add(entry)
    test_db_session.commit()
    return entries


class FakeQuoteSource(QuoteSource):
    """Quote source serving fixed quotes; unknown symbols fail."""

    def __init__(self, quotes=None, failing=()):
        self.quotes = quotes or {}
        self.failing = set(failing)
        self.calls = []

    def get_quote(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        if symbol in self.failing:
            raise RuntimeError(f"quote source down for {symbol}")
        if symbol not in self.quotes:
            raise QuoteNotFoundError(f"No quote data for {symbol}")
        price, change, change_percent = self.quotes[symbol]
        return Quote(symbol=symbol, price=price, change=change, change_percent=change_percent)


@pytest.fixture
def fake_quote_source():
    """Quotes for AAPL and MSFT; BAD always fails."""
    return FakeQuoteSource(
        quotes={
            "AAPL": (189.5, 1.25, 0.66),
            "MSFT": (415.1, -3.2, -0.76),
            "NVDA": (880.0, 12.0, 1.38),
        },
        failing={"BAD"}
    )
