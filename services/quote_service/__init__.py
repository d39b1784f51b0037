"""
Quote Service

Live quote lookup and watchlist enrichment.
"""

from .quote_client import (
    Quote,
    QuoteSource,
    FinnhubQuoteSource,
    QuoteError,
    QuoteNotFoundError,
    QuoteUnavailableError,
)
from .enrichment import QuoteEnricher, EnrichedEntry

__all__ = [
    'Quote',
    'QuoteSource',
    'FinnhubQuoteSource',
    'QuoteError',
    'QuoteNotFoundError',
    'QuoteUnavailableError',
    'QuoteEnricher',
    'EnrichedEntry',
]
