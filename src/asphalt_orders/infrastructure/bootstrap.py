"""Composition root: binds the JSON repository, Stripe and the lock registry.

Handlers and adapters never construct infrastructure themselves; they ask
this module for it.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from asphalt_orders.application.order_locks import OrderLocks
from asphalt_orders.infrastructure.config import settings
from asphalt_orders.infrastructure.payments.stripe_payment_processor import (
    StripePaymentProcessor,
)
from asphalt_orders.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def data_dir() -> Path:
    return settings.DATA_DIR or _DEFAULT_DATA_DIR


@lru_cache(maxsize=None)
def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(data_dir() / "orders.json")


@lru_cache(maxsize=None)
def order_locks() -> OrderLocks:
    return OrderLocks()


def payment_processor() -> StripePaymentProcessor:
    return StripePaymentProcessor(settings.STRIPE_SECRET_KEY)
