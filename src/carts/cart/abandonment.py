"""Cart abandonment sweep — flags idle carts and purges expired ones.

Designed to be triggered periodically by an external scheduler (cron, K8s
CronJob, ``src/scheduler.py``) or the maintenance API endpoint. Each run does
two independent passes:

1. Mark pass: one set-based update moving active carts idle beyond the
   threshold to abandoned.
2. Delete pass: every abandoned cart past the retention window is deleted in
   its own unit of work. A failing cart is logged and reported; it never
   stops or rolls back the others.

The sweep never raises. Its outcome is a ``SweepReport``.
"""

import threading
from dataclasses import asdict, dataclass, field, replace
from datetime import timedelta
from functools import reduce

import structlog
from protean.core.unit_of_work import UnitOfWork
from protean.utils.globals import current_domain

from carts.cart.cart import Cart
from carts.clock import as_naive_utc
from carts.config import load_settings

logger = structlog.get_logger(__name__)

_sweep_lock = threading.Lock()


@dataclass(frozen=True)
class SweepFailure:
    cart_id: str | None
    error: str
    stage: str = "delete"


@dataclass(frozen=True)
class SweepReport:
    marked_count: int = 0
    deleted_count: int = 0
    failures: tuple[SweepFailure, ...] = field(default_factory=tuple)
    skipped: bool = False

    def with_failure(self, cart_id, error, stage="delete") -> "SweepReport":
        failure = SweepFailure(cart_id=cart_id, error=str(error), stage=stage)
        return replace(self, failures=self.failures + (failure,))

    def as_dict(self) -> dict:
        return asdict(self)


class AbandonmentSweeper:
    def __init__(self, abandon_after: timedelta | None = None, retention: timedelta | None = None):
        settings = load_settings()
        self.abandon_after = abandon_after if abandon_after is not None else settings.abandon_after
        self.retention = retention if retention is not None else settings.retention

    def run(self, as_of=None) -> SweepReport:
        as_of = as_naive_utc(as_of)
        logger.info(
            "Starting cart abandonment sweep",
            as_of=as_of.isoformat(),
            abandon_after_hours=self.abandon_after.total_seconds() / 3600,
            retention_days=self.retention.total_seconds() / 86400,
        )

        report = self._mark_pass(SweepReport(), as_of)
        report = self._delete_pass(report, as_of)

        logger.info(
            "Cart abandonment sweep complete",
            marked_count=report.marked_count,
            deleted_count=report.deleted_count,
            failure_count=len(report.failures),
        )
        return report

    def _mark_pass(self, report: SweepReport, as_of) -> SweepReport:
        try:
            with UnitOfWork():
                marked = current_domain.repository_for(Cart).abandon_inactive(self.abandon_after, as_of=as_of)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to mark inactive carts as abandoned", error=str(exc))
            return report.with_failure(None, exc, stage="mark")

        if marked:
            logger.info("Marked inactive carts as abandoned", marked_count=marked)
        return replace(report, marked_count=report.marked_count + marked)

    def _delete_pass(self, report: SweepReport, as_of) -> SweepReport:
        try:
            expired = current_domain.repository_for(Cart).expired_abandoned_carts(self.retention, as_of=as_of)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to fetch expired abandoned carts", error=str(exc))
            return report.with_failure(None, exc, stage="fetch")

        if not expired:
            logger.info("No expired abandoned carts found")
            return report

        return reduce(self._delete_one, expired, report)

    def _delete_one(self, report: SweepReport, cart: Cart) -> SweepReport:
        cart_id = str(cart.id)
        try:
            with UnitOfWork():
                deleted = current_domain.repository_for(Cart).delete_if_abandoned(cart)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to remove abandoned cart", cart_id=cart_id, error=str(exc))
            return report.with_failure(cart_id, exc)

        if not deleted:
            return report

        logger.info(
            "Removed abandoned cart",
            cart_id=cart_id,
            last_interaction_at=str(cart.last_interaction_at),
        )
        return replace(report, deleted_count=report.deleted_count + 1)


def run_abandonment_sweep(as_of=None, sweeper: AbandonmentSweeper | None = None) -> SweepReport:
    """Run one sweep unless another run in this process is still in flight."""
    if not _sweep_lock.acquire(blocking=False):
        logger.warning("Cart abandonment sweep already running, skipping")
        return SweepReport(skipped=True)
    try:
        return (sweeper or AbandonmentSweeper()).run(as_of=as_of)
    finally:
        _sweep_lock.release()
