"""Shoe ordering database management CLI.

Creates and drops the ordering schema and loads the starter catalog.

Usage:
    python src/manage.py setup-db       # Create all tables
    python src/manage.py drop-db        # Drop all tables
    python src/manage.py seed-catalog   # Add the sample shoes to an empty catalog
"""

import argparse
import sys


def setup_database():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Creating ordering database schema...")
    setup_db(ordering)
    print("Done.")


def drop_database():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Dropping ordering database schema...")
    drop_db(ordering)
    print("Done.")


def seed_catalog():
    from ordering.catalogue.seed import seed_catalog as seed
    from ordering.domain import ordering

    ordering.init()
    with ordering.domain_context():
        added = seed()
    print(f"Added {added} products." if added else "Catalog already has products; nothing added.")


def main():
    parser = argparse.ArgumentParser(description="Shoe ordering database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed-catalog", help="Add the sample shoes to an empty catalog")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-catalog":
        seed_catalog()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
