"""Cart tunables read from the environment.

Protean infrastructure (databases, event store) is configured in
``domain.toml``; the values here are the business timings of the cart
lifecycle.
"""

import os
from dataclasses import dataclass
from datetime import timedelta


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class CartSettings:
    abandon_after: timedelta
    retention: timedelta
    sweep_interval_seconds: float
    session_secret_key: str


def load_settings() -> CartSettings:
    return CartSettings(
        abandon_after=timedelta(hours=_env_number("CART_ABANDON_AFTER_HOURS", 3)),
        retention=timedelta(days=_env_number("CART_RETENTION_DAYS", 7)),
        sweep_interval_seconds=_env_number("CART_SWEEP_INTERVAL_SECONDS", 3600),
        session_secret_key=os.getenv("SESSION_SECRET_KEY", "carts-dev-secret"),
    )
