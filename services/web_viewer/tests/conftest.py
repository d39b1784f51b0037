"""
Pytest configuration and fixtures for web_viewer tests.
"""
import sys
from pathlib import Path
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from shared.database.models import Base, User, WatchlistEntry
from services.quote_service.quote_client import Quote, QuoteSource, QuoteNotFoundError
from services.quote_service.enrichment import QuoteEnricher
from services.web_viewer.main import app, get_db, get_quote_enricher


# Test database URL (in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite:///:memory:"

TEST_EMAIL = "trader@example.com"


class StaticQuoteSource(QuoteSource):
    """Fixed quotes; anything else has no data."""

    QUOTES = {
        "AAPL": Quote(symbol="AAPL", price=189.5, change=1.25, change_percent=0.66),
        "MSFT": Quote(symbol="MSFT", price=1415.1, change=-3.2, change_percent=-0.76),
    }

    def get_quote(self, symbol: str) -> Quote:
        if symbol not in self.QUOTES:
            raise QuoteNotFoundError(f"No quote data for {symbol}")
        return self.QUOTES[symbol]


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_db(test_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine
    )
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(test_engine):
    """Create a test client with dependency overrides."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine
    )

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quote_enricher] = lambda: QuoteEnricher(StaticQuoteSource())
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Headers carrying the signed-in user's email."""
    return {"X-User-Email": TEST_EMAIL}


@pytest.fixture
def sample_user(test_db):
    """Signed-in user with a public id."""
    user = User(email=TEST_EMAIL, public_id="usr_trader", name="Trader")
    test_db.add(user)
    test_db.commit()
    test_db.refresh(user)
    return user


@pytest.fixture
def sample_entries(test_db, sample_user):
    """AAPL, NOQUOTE and MSFT, added on consecutive days (MSFT newest)."""
    base_date = datetime(2024, 3, 1, 9, 30)
    entries = [
        WatchlistEntry(user_id="usr_trader", symbol="AAPL", company="Apple Inc.", added_at=base_date),
        WatchlistEntry(user_id="usr_trader", symbol="NOQUOTE", company="Delisted Co.",
                       added_at=base_date + timedelta(days=1)),
        WatchlistEntry(user_id="usr_trader", symbol="MSFT", company="Microsoft Corporation",
                       added_at=base_date + timedelta(days=2)),
    ]

    for entry in entries:
        test_db.add(entry)
    test_db.commit()

    return entries
