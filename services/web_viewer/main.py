"""
Web Viewer Service - Main entry point.
Serves the watchlist page and the watchlist JSON API.
"""
import sys
import uuid
from pathlib import Path
from functools import lru_cache
from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime

# Add shared directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from shared.configs.config import get_settings
from shared.database.connection import get_db
from shared.monitoring.structured_logger import (
    setup_service_logger, set_request_context, clear_request_context, log_error
)
from services.watchlist_manager import WatchlistService, WatchlistStore, UserDirectory
from services.quote_service import QuoteEnricher, FinnhubQuoteSource
from services.web_viewer.formatting import price_cell, change_cell
from services.web_viewer.rendering import render_page
from services.web_viewer.session import SessionInfo, get_session, require_session
from services.web_viewer.watchlist_table import WatchlistTable, RowRemovalPolicy
from pydantic import BaseModel

settings = get_settings()

# Configure logging
logger = setup_service_logger(
    "web_viewer",
    level=settings.log_level,
    log_file=settings.log_file,
    json_format=settings.log_format == "json"
)

# Create FastAPI app
app = FastAPI(
    title="Stock Watchlist",
    description="Personal stock watchlist with live quotes",
    version="1.0.0"
)

# Mount static files
static_path = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(static_path)), name="static")


# Pydantic models for API requests and responses
class WatchlistEntryData(BaseModel):
    """Watchlist entry with quote fields."""
    id: str
    symbol: str
    company: str
    added_at: Optional[datetime]
    price: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    price_display: str
    change_display: str


class WatchlistResponse(BaseModel):
    """Response model for the enriched watchlist."""
    entries: List[WatchlistEntryData]


class SymbolsResponse(BaseModel):
    """Response model for watchlist symbols."""
    symbols: List[str]


class WatchlistStatusResponse(BaseModel):
    """Response model for a membership check."""
    symbol: str
    is_watchlisted: bool


class ToggleRequest(BaseModel):
    """Request body for a watchlist toggle."""
    symbol: str
    company: str = ""


class ToggleResponse(BaseModel):
    """Response model for a watchlist toggle."""
    success: bool
    added: Optional[bool] = None
    error: Optional[str] = None


def get_watchlist_service(db: Session = Depends(get_db)) -> WatchlistService:
    """Watchlist service bound to the request's database session."""
    return WatchlistService(WatchlistStore(db), UserDirectory(db))


@lru_cache()
def get_quote_enricher() -> QuoteEnricher:
    """Shared quote enricher (reuses the HTTP session across requests)."""
    return QuoteEnricher(FinnhubQuoteSource(), max_concurrency=settings.max_concurrent_quotes)


def row_removal_policy() -> RowRemovalPolicy:
    if settings.restore_rows_on_failure:
        return RowRemovalPolicy.RESTORE_ON_FAILURE
    return RowRemovalPolicy.DROP_ON_REQUEST


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Attach request id and caller email to log records."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    set_request_context(
        request_id=request_id,
        user_email=request.headers.get(settings.session_header)
    )
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/", include_in_schema=False)
async def root():
    """Send visitors to their watchlist."""
    return RedirectResponse(url="/watchlist")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "web_viewer",
        "timestamp": datetime.utcnow().isoformat()
    }


@app.get("/watchlist", response_class=HTMLResponse)
async def watchlist_page(
    session: Optional[SessionInfo] = Depends(get_session),
    service: WatchlistService = Depends(get_watchlist_service),
    enricher: QuoteEnricher = Depends(get_quote_enricher)
):
    """
    Render the signed-in user's watchlist.

    Unauthenticated visitors are redirected to the sign-in page.
    """
    if session is None:
        return RedirectResponse(url=settings.sign_in_path, status_code=303)

    email = session.user.email
    entries = service.list_entries(email)
    enriched = await enricher.enrich(entries)

    table = WatchlistTable(
        enriched,
        email=email,
        policy=row_removal_policy(),
        currency_symbol=settings.currency_symbol
    )
    return HTMLResponse(content=render_page(table, settings.app_name))


@app.get("/api/watchlist", response_model=WatchlistResponse)
async def get_watchlist(
    session: SessionInfo = Depends(require_session),
    service: WatchlistService = Depends(get_watchlist_service),
    enricher: QuoteEnricher = Depends(get_quote_enricher)
):
    """
    Get the user's watchlist with live quotes, newest first.

    Entries whose quote could not be fetched carry null price fields and
    "N/A" display strings.
    """
    try:
        entries = service.list_entries(session.user.email)
        enriched = await enricher.enrich(entries)

        logger.info(f"Retrieved {len(enriched)} watchlist entries")

        return WatchlistResponse(entries=[
            WatchlistEntryData(
                **entry.to_dict(),
                price_display=price_cell(entry.price, settings.currency_symbol),
                change_display=change_cell(entry.change, entry.change_percent)
            )
            for entry in enriched
        ])

    except HTTPException:
        raise
    except Exception as e:
        log_error(logger, e, {"endpoint": "/api/watchlist"})
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/watchlist/symbols", response_model=SymbolsResponse)
async def get_watchlist_symbols(
    session: SessionInfo = Depends(require_session),
    service: WatchlistService = Depends(get_watchlist_service)
):
    """Get the symbols on the user's watchlist."""
    return SymbolsResponse(symbols=service.list_symbols(session.user.email))


@app.get("/api/watchlist/{symbol}/status", response_model=WatchlistStatusResponse)
async def get_watchlist_status(
    symbol: str,
    session: SessionInfo = Depends(require_session),
    service: WatchlistService = Depends(get_watchlist_service)
):
    """Check whether a symbol is on the user's watchlist."""
    return WatchlistStatusResponse(
        symbol=symbol,
        is_watchlisted=service.is_watchlisted(symbol, session.user.email)
    )


@app.post("/api/watchlist/toggle", response_model=ToggleResponse, response_model_exclude_none=True)
async def toggle_watchlist(
    payload: ToggleRequest,
    session: SessionInfo = Depends(require_session),
    service: WatchlistService = Depends(get_watchlist_service)
):
    """
    Add the symbol if it is not on the watchlist, remove it if it is.

    Service-level failures come back as {"success": false, "error": ...}
    with status 200.
    """
    result = service.toggle(payload.symbol, payload.company, session.user.email)
    return ToggleResponse(**result.to_dict())


if __name__ == "__main__":
    import uvicorn

    logger.info("=" * 60)
    logger.info("Stock Watchlist Web Viewer")
    logger.info("=" * 60)

    uvicorn.run(
        app,
        host=settings.web_host,
        port=settings.web_port,
        log_level="info"
    )
