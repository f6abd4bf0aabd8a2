"""Product Reviews database management CLI.

Provides commands to create and drop the database schema of the
product_reviews domain.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    """Create the product_reviews database schema."""
    from product_reviews.domain import reviews
    from product_reviews.utils.db import setup_db

    print("Initializing product_reviews domain...")
    reviews.init()
    print("Creating product_reviews database schema...")
    setup_db(reviews)
    print("Done.")


def drop_database():
    """Drop the product_reviews database schema."""
    from product_reviews.domain import reviews
    from product_reviews.utils.db import drop_db

    print("Initializing product_reviews domain...")
    reviews.init()
    print("Dropping product_reviews database schema...")
    drop_db(reviews)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Product Reviews database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
