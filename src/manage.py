"""Carts management CLI.

Usage:
    python src/manage.py setup-db                  # Create cart and product tables
    python src/manage.py drop-db                   # Drop them
    python src/manage.py seed-products products.json
    python src/manage.py sweep [--as-of ISO-8601] [--abandon-after-hours N] [--retention-days N]
"""

import argparse
import json
import sys
from datetime import datetime, timedelta


def _domain():
    from carts.domain import carts

    carts.init()
    return carts


def setup_database():
    from carts.utils.db import setup_db

    print("Creating carts database schema...")
    setup_db(_domain())
    print("Done.")


def drop_database():
    from carts.utils.db import drop_db

    print("Dropping carts database schema...")
    drop_db(_domain())
    print("Done.")


def seed_products(path):
    """Load products from a JSON list of {"id"?, "name", "price"}."""
    from carts.catalogue.product import RegisterProduct

    with open(path, encoding="utf-8") as fh:
        products = json.load(fh)

    domain = _domain()
    with domain.domain_context():
        for entry in products:
            product_id = domain.process(
                RegisterProduct(
                    product_id=entry.get("id"),
                    name=entry["name"],
                    price=entry["price"],
                ),
                asynchronous=False,
            )
            print(f"  {product_id}  {entry['name']}  {entry['price']}")

    print(f"Seeded {len(products)} products.")


def sweep(as_of=None, abandon_after_hours=None, retention_days=None):
    from carts.cart.abandonment import AbandonmentSweeper, run_abandonment_sweep

    domain = _domain()
    with domain.domain_context():
        sweeper = AbandonmentSweeper(
            abandon_after=timedelta(hours=abandon_after_hours) if abandon_after_hours is not None else None,
            retention=timedelta(days=retention_days) if retention_days is not None else None,
        )
        report = run_abandonment_sweep(as_of=as_of, sweeper=sweeper)

    print(json.dumps(report.as_dict(), indent=2))
    return 1 if report.failures else 0


def main():
    parser = argparse.ArgumentParser(description="Carts management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    seed_parser = subparsers.add_parser("seed-products", help="Load catalogue products from JSON")
    seed_parser.add_argument("path", help="JSON file with a list of products")

    sweep_parser = subparsers.add_parser("sweep", help="Run one cart abandonment sweep")
    sweep_parser.add_argument("--as-of", type=datetime.fromisoformat, default=None)
    sweep_parser.add_argument("--abandon-after-hours", type=float, default=None)
    sweep_parser.add_argument("--retention-days", type=float, default=None)

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-products":
        seed_products(args.path)
    elif args.command == "sweep":
        sys.exit(sweep(args.as_of, args.abandon_after_hours, args.retention_days))


if __name__ == "__main__":
    main()
