"""
Watchlist Manager Service - Main Entry Point

CLI interface for viewing and toggling a user's stock watchlist.
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from shared.configs.config import get_settings
from shared.database.connection import get_db
from shared.monitoring.structured_logger import setup_service_logger, set_request_context
from services.watchlist_manager.store import WatchlistStore
from services.watchlist_manager.user_directory import UserDirectory
from services.watchlist_manager.watchlist_service import WatchlistService
from services.quote_service import QuoteEnricher, FinnhubQuoteSource, EnrichedEntry
from services.web_viewer.watchlist_table import WatchlistTable, RowRemovalPolicy
from services.web_viewer.toggle_control import ToggleControl

settings = get_settings()


def build_table(entries, email: str) -> WatchlistTable:
    policy = (
        RowRemovalPolicy.RESTORE_ON_FAILURE
        if settings.restore_rows_on_failure
        else RowRemovalPolicy.DROP_ON_REQUEST
    )
    return WatchlistTable(entries, email=email, policy=policy, currency_symbol=settings.currency_symbol)


def cmd_list(args, service: WatchlistService):
    """List the watchlist with live quotes."""
    entries = service.list_entries(args.email)

    if args.no_quotes:
        enriched = [EnrichedEntry.from_entry(entry) for entry in entries]
    else:
        enricher = QuoteEnricher(FinnhubQuoteSource(), max_concurrency=settings.max_concurrent_quotes)
        enriched = enricher.enrich_sync(entries)

    print(f"\n{'='*80}")
    print(f"WATCHLIST - {len(enriched)} stocks")
    print(f"{'='*80}\n")
    print(build_table(enriched, args.email).render_text())


def cmd_symbols(args, service: WatchlistService):
    """Print watchlist symbols, one per line."""
    for symbol in service.list_symbols(args.email):
        print(symbol)


def cmd_check(args, service: WatchlistService):
    """Check whether a symbol is on the watchlist."""
    if service.is_watchlisted(args.symbol, args.email):
        print(f"\n✓ {args.symbol} is on the watchlist")
    else:
        print(f"\n✗ {args.symbol} is not on the watchlist")


def cmd_toggle(args, service: WatchlistService) -> bool:
    """Add or remove a symbol through the toggle control."""
    control = ToggleControl(
        symbol=args.symbol,
        company=args.company or args.symbol,
        is_member=service.is_watchlisted(args.symbol, args.email),
        email=args.email
    )

    result = control.activate(service.toggle)

    if result is None:
        print(f"\n✗ Toggle for {args.symbol} was ignored")
        return False

    if result.success:
        action = "Added" if result.added else "Removed"
        direction = "to" if result.added else "from"
        print(f"\n✓ {action} {args.symbol} {direction} watchlist")
        return True

    print(f"\n✗ Failed to toggle {args.symbol}: {result.error}")
    return False


def main():
    """Main entry point for watchlist manager CLI."""
    parser = argparse.ArgumentParser(
        description='Watchlist Manager - View and update a stock watchlist'
    )

    parser.add_argument('--email', required=True, help='Email of the watchlist owner')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # List command
    list_parser = subparsers.add_parser('list', help='List watchlist with live quotes')
    list_parser.add_argument('--no-quotes', action='store_true', help='Skip quote lookups')

    # Symbols command
    subparsers.add_parser('symbols', help='Print watchlist symbols')

    # Check command
    check_parser = subparsers.add_parser('check', help='Check whether a symbol is watchlisted')
    check_parser.add_argument('symbol', help='Ticker symbol')

    # Toggle command
    toggle_parser = subparsers.add_parser('toggle', help='Add or remove a symbol')
    toggle_parser.add_argument('symbol', help='Ticker symbol')
    toggle_parser.add_argument('--company', help='Company name (defaults to the symbol)')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logger = setup_service_logger(
        "watchlist_manager",
        level=settings.log_level,
        log_file=settings.log_file,
        json_format=settings.log_format == "json"
    )
    set_request_context(user_email=args.email)

    # Initialize database and service
    db_gen = get_db()
    db = next(db_gen)
    service = WatchlistService(WatchlistStore(db), UserDirectory(db))

    try:
        # Execute command
        if args.command == 'list':
            cmd_list(args, service)
        elif args.command == 'symbols':
            cmd_symbols(args, service)
        elif args.command == 'check':
            cmd_check(args, service)
        elif args.command == 'toggle':
            if not cmd_toggle(args, service):
                sys.exit(1)

    except Exception as e:
        logger.error(f"Error executing command: {str(e)}", exc_info=True)
        print(f"\n✗ Error: {str(e)}")
        sys.exit(1)

    finally:
        db_gen.close()


if __name__ == '__main__':
    main()
