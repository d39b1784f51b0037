"""
Quote source client.

Fetches the latest price, absolute change and percent change for a ticker
from Finnhub's quote endpoint.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import requests

from shared.configs.config import Settings, get_settings
from services.quote_service.utils import RateLimiter, retry_on_error, safe_float_conversion

logger = logging.getLogger(__name__)


class QuoteError(Exception):
    """Quote could not be obtained for a symbol."""
    pass


class QuoteNotFoundError(QuoteError):
    """The quote source has no data for the symbol."""
    pass


class QuoteUnavailableError(QuoteError):
    """The quote source failed, timed out, or rejected the request."""
    pass


@dataclass(frozen=True)
class Quote:
    """Latest quote for a symbol."""
    symbol: str
    price: float
    change: Optional[float]
    change_percent: Optional[float]


class QuoteSource(ABC):
    """Interface for anything that can produce a Quote for a symbol."""

    @abstractmethod
    def get_quote(self, symbol: str) -> Quote:
        """
        Fetch the latest quote.

        Raises:
            QuoteError: If no quote can be produced
        """
        pass


class FinnhubQuoteSource(QuoteSource):
    """
    Quote source backed by the Finnhub REST API.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Finnhub client.

        Args:
            api_key: Finnhub API token (defaults to settings)
            base_url: API base URL (defaults to settings)
            timeout: Per-request timeout in seconds (defaults to settings)
            settings: Settings instance (defaults to cached settings)
            session: requests session to reuse connections
        """
        settings = settings or get_settings()
        self.api_key = api_key or settings.finnhub_api_key
        self.base_url = (base_url or settings.finnhub_base_url).rstrip('/')
        self.timeout = timeout or settings.quote_timeout_seconds
        self.session = session or requests.Session()
        self.rate_limiter = RateLimiter(requests_per_second=settings.quote_requests_per_second)
        self._fetch = retry_on_error(
            max_attempts=settings.quote_max_attempts,
            exceptions=(QuoteUnavailableError,)
        )(self._fetch_once)

        if not self.api_key:
            logger.warning("FINNHUB_API_KEY is not set; quote requests will be rejected")

    def _fetch_once(self, symbol: str) -> dict:
        self.rate_limiter.wait()

        try:
            response = self.session.get(
                f"{self.base_url}/quote",
                params={"symbol": symbol, "token": self.api_key or ""},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise QuoteUnavailableError(f"Quote request for {symbol} failed: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            raise QuoteUnavailableError(f"Quote source returned {response.status_code} for {symbol}")

        if response.status_code != 200:
            # Auth and bad-request errors will not succeed on retry
            raise QuoteError(f"Quote source returned {response.status_code} for {symbol}")

        try:
            return response.json()
        except ValueError as e:
            raise QuoteError(f"Invalid quote payload for {symbol}: {e}") from e

    def get_quote(self, symbol: str) -> Quote:
        """
        Fetch the latest quote for a symbol.

        Args:
            symbol: Ticker symbol

        Returns:
            Quote with price, change and change percent

        Raises:
            QuoteNotFoundError: If Finnhub has no price for the symbol
            QuoteError: If the request fails after retries
        """
        logger.debug(f"Fetching quote for {symbol}")
        payload = self._fetch(symbol) or {}

        price = safe_float_conversion(payload.get("c"))
        if not price:
            # Finnhub answers unknown symbols with zeroed fields
            raise QuoteNotFoundError(f"No quote data for {symbol}")

        return Quote(
            symbol=symbol,
            price=price,
            change=safe_float_conversion(payload.get("d")),
            change_percent=safe_float_conversion(payload.get("dp"))
        )
