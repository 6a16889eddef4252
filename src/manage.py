"""Shipping database management CLI.

Usage:
    python src/manage.py setup-db   # Create shipment and projection tables
    python src/manage.py drop-db    # Drop them
"""

import argparse
import sys


def setup_database():
    from shipping.domain import shipping
    from shipping.utils.db import setup_db

    print("Initializing shipping domain...")
    shipping.init()
    prepared = setup_db(shipping)
    if not prepared:
        print("  No relational provider configured; nothing to create.")
    for name in prepared:
        print(f"  Schema ready on provider '{name}'.")
    print("Done.")


def drop_database():
    from shipping.domain import shipping
    from shipping.utils.db import drop_db

    print("Initializing shipping domain...")
    shipping.init()
    for name in drop_db(shipping):
        print(f"  Schema dropped on provider '{name}'.")
    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Shipping database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
