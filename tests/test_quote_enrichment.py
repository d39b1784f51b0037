"""
Tests for quote lookup and watchlist enrichment.
"""
import asyncio
import threading
import time
import pytest
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock

import requests

from shared.configs.config import Settings
from services.quote_service.enrichment import QuoteEnricher, EnrichedEntry
from services.quote_service.quote_client import (
    FinnhubQuoteSource, Quote, QuoteSource,
    QuoteError, QuoteNotFoundError, QuoteUnavailableError
)


def make_entry(symbol, company=None, entry_id=1):
    return SimpleNamespace(
        id=entry_id,
        symbol=symbol,
        company=company or f"{symbol} Inc.",
        added_at=datetime(2024, 3, 1)
    )


def make_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


@pytest.fixture
def quote_settings():
    return Settings(
        finnhub_api_key="test-token",
        finnhub_base_url="https://finnhub.test/api/v1",
        quote_max_attempts=3,
        quote_requests_per_second=1000.0
    )


class TestQuoteEnricher:
    """Tests for concurrent, failure-isolated enrichment."""

    def test_enrichment_independence(self, fake_quote_source):
        """A failing symbol keeps its place and loses only its price fields."""
        entries = [make_entry("AAPL", entry_id=1), make_entry("BAD", entry_id=2), make_entry("MSFT", entry_id=3)]
        enricher = QuoteEnricher(fake_quote_source)

        result = asyncio.run(enricher.enrich(entries))

        assert [e.symbol for e in result] == ["AAPL", "BAD", "MSFT"]
        assert [e.id for e in result] == ["1", "2", "3"]

        assert result[0].price == 189.5
        assert result[0].change == 1.25
        assert result[0].change_percent == 0.66

        assert result[1].price is None
        assert result[1].change is None
        assert result[1].change_percent is None
        assert result[1].has_quote is False

        assert result[2].price == 415.1
        assert result[2].change == -3.2

    def test_unknown_symbol_has_no_quote(self, fake_quote_source):
        result = QuoteEnricher(fake_quote_source).enrich_sync([make_entry("ZZZZ")])
        assert result[0].price is None
        assert result[0].company == "ZZZZ Inc."

    def test_empty_input(self, fake_quote_source):
        assert QuoteEnricher(fake_quote_source).enrich_sync([]) == []
        assert fake_quote_source.calls == []

    def test_every_symbol_fetched_once(self, fake_quote_source):
        entries = [make_entry(s) for s in ["AAPL", "MSFT", "NVDA"]]
        QuoteEnricher(fake_quote_source).enrich_sync(entries)
        assert sorted(fake_quote_source.calls) == ["AAPL", "MSFT", "NVDA"]

    def test_fetches_run_concurrently_within_limit(self):
        """Slow quotes overlap, but never more than max_concurrency at a time."""

        class SlowSource(QuoteSource):
            def __init__(self):
                self.active = 0
                self.peak = 0
                self.lock = threading.Lock()

            def get_quote(self, symbol):
                with self.lock:
                    self.active += 1
                    self.peak = max(self.peak, self.active)
                time.sleep(0.05)
                with self.lock:
                    self.active -= 1
                return Quote(symbol=symbol, price=10.0, change=0.1, change_percent=1.0)

        source = SlowSource()
        entries = [make_entry(f"S{i}", entry_id=i) for i in range(6)]

        result = QuoteEnricher(source, max_concurrency=2).enrich_sync(entries)

        assert [e.symbol for e in result] == [f"S{i}" for i in range(6)]
        assert all(e.price == 10.0 for e in result)
        assert source.peak == 2

    def test_to_dict(self):
        entry = EnrichedEntry.from_entry(
            make_entry("AAPL"),
            Quote(symbol="AAPL", price=100.0, change=-1.0, change_percent=-0.99)
        )
        data = entry.to_dict()
        assert data["symbol"] == "AAPL"
        assert data["price"] == 100.0
        assert data["added_at"] == "2024-03-01T00:00:00"


class TestFinnhubQuoteSource:
    """Tests for the Finnhub client."""

    def test_quote_source_is_abstract(self):
        with pytest.raises(TypeError):
            QuoteSource()

        class Incomplete(QuoteSource):
            pass

        with pytest.raises(TypeError):
            Incomplete()

    def test_get_quote_parses_payload(self, quote_settings):
        session = MagicMock()
        session.get.return_value = make_response(payload={"c": 189.5, "d": 1.25, "dp": 0.66, "pc": 188.25})
        source = FinnhubQuoteSource(settings=quote_settings, session=session)

        quote = source.get_quote("AAPL")

        assert quote == Quote(symbol="AAPL", price=189.5, change=1.25, change_percent=0.66)
        args, kwargs = session.get.call_args
        assert args[0] == "https://finnhub.test/api/v1/quote"
        assert kwargs["params"] == {"symbol": "AAPL", "token": "test-token"}
        assert kwargs["timeout"] == quote_settings.quote_timeout_seconds

    def test_zero_price_is_not_found(self, quote_settings):
        session = MagicMock()
        session.get.return_value = make_response(payload={"c": 0, "d": None, "dp": None})
        source = FinnhubQuoteSource(settings=quote_settings, session=session)

        with pytest.raises(QuoteNotFoundError):
            source.get_quote("NOPE")

    def test_missing_change_fields(self, quote_settings):
        session = MagicMock()
        session.get.return_value = make_response(payload={"c": 12.5, "d": None, "dp": None})
        source = FinnhubQuoteSource(settings=quote_settings, session=session)

        quote = source.get_quote("XYZ")
        assert quote.price == 12.5
        assert quote.change is None
        assert quote.change_percent is None

    def test_server_error_retried_then_raised(self, quote_settings, monkeypatch):
        monkeypatch.setattr(time, "sleep", lambda seconds: None)
        session = MagicMock()
        session.get.return_value = make_response(status_code=503)
        source = FinnhubQuoteSource(settings=quote_settings, session=session)

        with pytest.raises(QuoteUnavailableError):
            source.get_quote("AAPL")

        assert session.get.call_count == 3

    def test_transient_failure_recovers(self, quote_settings, monkeypatch):
        monkeypatch.setattr(time, "sleep", lambda seconds: None)
        session = MagicMock()
        session.get.side_effect = [
            requests.ConnectionError("reset"),
            make_response(payload={"c": 50.0, "d": 0.5, "dp": 1.0}),
        ]
        source = FinnhubQuoteSource(settings=quote_settings, session=session)

        assert source.get_quote("AAPL").price == 50.0
        assert session.get.call_count == 2

    def test_auth_error_not_retried(self, quote_settings):
        session = MagicMock()
        session.get.return_value = make_response(status_code=401)
        source = FinnhubQuoteSource(settings=quote_settings, session=session)

        with pytest.raises(QuoteError) as exc_info:
            source.get_quote("AAPL")

        assert not isinstance(exc_info.value, QuoteUnavailableError)
        assert session.get.call_count == 1

    def test_enricher_tolerates_http_failures(self, quote_settings, monkeypatch):
        monkeypatch.setattr(time, "sleep", lambda seconds: None)

        def fake_get(url, params, timeout):
            if params["symbol"] == "BAD":
                raise requests.Timeout("read timed out")
            return make_response(payload={"c": 10.0, "d": 1.0, "dp": 10.0})

        session = MagicMock()
        session.get.side_effect = fake_get
        source = FinnhubQuoteSource(settings=quote_settings, session=session)

        result = QuoteEnricher(source).enrich_sync(
            [make_entry("AAPL"), make_entry("BAD"), make_entry("MSFT")]
        )

        assert [e.price for e in result] == [10.0, None, 10.0]
