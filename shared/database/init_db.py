"""
Database initialization script for the stock watchlist service.

This script can be used to:
1. Create all database tables
2. Drop or recreate them
3. Seed a user record for local development
"""
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from shared.database.connection import engine, get_db_session, init_db
from shared.database.models import Base, User
from shared.configs.config import get_settings


EXPECTED_TABLES = ['users', 'watchlist']


def create_tables():
    """Create all database tables using SQLAlchemy."""
    print("Creating database tables...")
    init_db()
    print("✓ All tables created successfully!")


def drop_tables():
    """Drop all database tables."""
    print("Dropping all database tables...")
    Base.metadata.drop_all(bind=engine)
    print("✓ All tables dropped!")


def show_tables():
    """Show all tables in the database."""
    from sqlalchemy import inspect

    inspector = inspect(engine)
    tables = inspector.get_table_names()

    print(f"\nDatabase tables ({len(tables)}):")
    for table in tables:
        print(f"  - {table}")

    return tables


def verify_schema():
    """Verify that all expected tables exist."""
    existing_tables = show_tables()

    print("\nSchema verification:")
    all_exist = True
    for table in EXPECTED_TABLES:
        exists = table in existing_tables
        status = "✓" if exists else "✗"
        print(f"  {status} {table}")
        if not exists:
            all_exist = False

    if all_exist:
        print("\n✓ All expected tables exist!")
    else:
        print("\n✗ Some tables are missing!")

    return all_exist


def seed_user(email: str, public_id: Optional[str] = None, name: Optional[str] = None) -> None:
    """Insert a user record unless one with the same email exists."""
    with get_db_session() as db:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"User {email} already exists (id={existing.id})")
            return

        db.add(User(email=email, public_id=public_id, name=name))
        print(f"✓ Seeded user {email}")


def main():
    """Main function."""
    import argparse

    parser = argparse.ArgumentParser(
        description='Database initialization script for the stock watchlist service'
    )
    parser.add_argument(
        'command',
        choices=['create', 'drop', 'recreate', 'show', 'verify', 'seed-user'],
        help='Command to execute'
    )
    parser.add_argument('email', nargs='?', help='Email for seed-user')
    parser.add_argument('--public-id', help='Explicit user identifier for seed-user')
    parser.add_argument('--name', help='Display name for seed-user')
    parser.add_argument(
        '--force',
        action='store_true',
        help='Force execution without confirmation'
    )

    args = parser.parse_args()

    settings = get_settings()
    print(f"Database URL: {settings.database_url.split('@')[1] if '@' in settings.database_url else settings.database_url}")
    print()

    if args.command == 'create':
        create_tables()
        verify_schema()

    elif args.command == 'drop':
        if not args.force:
            confirm = input("⚠️  This will drop all tables and data. Are you sure? (yes/no): ")
            if confirm.lower() != 'yes':
                print("Aborted.")
                return
        drop_tables()

    elif args.command == 'recreate':
        if not args.force:
            confirm = input("⚠️  This will drop and recreate all tables. All data will be lost. Are you sure? (yes/no): ")
            if confirm.lower() != 'yes':
                print("Aborted.")
                return
        drop_tables()
        create_tables()
        verify_schema()

    elif args.command == 'show':
        show_tables()

    elif args.command == 'verify':
        verify_schema()

    elif args.command == 'seed-user':
        if not args.email:
            parser.error("seed-user requires an email")
        seed_user(args.email, public_id=args.public_id, name=args.name)


if __name__ == '__main__':
    main()
