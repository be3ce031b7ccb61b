"""Periodic runner for the cart abandonment sweep.

Runs the sweep every CART_SWEEP_INTERVAL_SECONDS inside the carts domain
context. Runs never overlap: a tick that fires while the previous sweep is
still going is skipped by the sweep's own single-flight guard.

Usage:
    python src/scheduler.py            # Loop forever
    python src/scheduler.py --once     # Single sweep, then exit
"""

import argparse
import asyncio

import structlog

logger = structlog.get_logger(__name__)


def _sweep_once(domain):
    from carts.cart.abandonment import run_abandonment_sweep

    with domain.domain_context():
        return run_abandonment_sweep()


async def run(domain, interval_seconds, once=False):
    while True:
        report = await asyncio.to_thread(_sweep_once, domain)
        logger.info(
            "Scheduled cart sweep finished",
            marked_count=report.marked_count,
            deleted_count=report.deleted_count,
            failure_count=len(report.failures),
            skipped=report.skipped,
        )
        if once:
            return report
        await asyncio.sleep(interval_seconds)


def main():
    from carts.config import load_settings
    from carts.domain import carts

    settings = load_settings()

    parser = argparse.ArgumentParser(description="Carts abandonment sweep scheduler")
    parser.add_argument("--once", action="store_true", help="Run a single sweep and exit")
    parser.add_argument(
        "--interval",
        type=float,
        default=settings.sweep_interval_seconds,
        help="Seconds between sweeps (default: CART_SWEEP_INTERVAL_SECONDS)",
    )
    args = parser.parse_args()

    carts.init()
    asyncio.run(run(carts, args.interval, once=args.once))


if __name__ == "__main__":
    main()
