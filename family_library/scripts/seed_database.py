"""
Database seeding script.

Creates the tables of the relational backend and loads the demo household
(the 张家 family with its bookshelves, books, lending and reading history).

Run with: python -m family_library.scripts.seed_database [--database-url URL] [--reset]
"""

import argparse

from family_library.core.config import get_settings
from family_library.core.database import Base, build_engine, build_session_factory, create_tables
from family_library.storage import SqlStorage
from family_library.storage.sample_data import SAMPLE_USERS


def seed(database_url: str, reset: bool = False) -> bool:
    """
    Seed the database at ``database_url``.

    Args:
        database_url: SQLAlchemy URL of the target database
        reset: Drop every table first

    Returns:
        True if data was loaded, False if the household was already there
    """
    engine = build_engine(database_url)

    if reset:
        print("Dropping existing tables...")
        Base.metadata.drop_all(bind=engine)

    print("Creating database tables...")
    create_tables(engine)
    print("Tables created.")

    storage = SqlStorage(build_session_factory(engine))
    if storage.get_user_by_username(SAMPLE_USERS[0]["username"]):
        print("Sample data already present, nothing to do.")
        return False

    print("Seeding sample household...")
    storage.initialize_sample_data()
    print(
        f"Seeded {len(storage.get_all_users())} users, "
        f"{len(storage.get_all_bookshelves())} bookshelves, "
        f"{len(storage.get_all_books())} books."
    )
    return True


def main():
    parser = argparse.ArgumentParser(description="Seed the family library database")
    parser.add_argument(
        "--database-url",
        default=get_settings().DATABASE_URL,
        help="SQLAlchemy database URL (defaults to DATABASE_URL)",
    )
    parser.add_argument("--reset", action="store_true", help="Drop all tables before seeding")
    args = parser.parse_args()

    seed(args.database_url, reset=args.reset)


if __name__ == "__main__":
    main()
