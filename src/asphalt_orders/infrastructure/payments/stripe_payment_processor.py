"""Stripe implementation of the PaymentProcessor port.

Holds are PaymentIntents created with ``capture_method="manual"``; completion
captures part or all of the held amount.  Connection errors are retried
(captures carry an idempotency key, so a retry never charges twice).  Every
other Stripe error is translated into PaymentProcessorError.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import stripe
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from asphalt_orders.domain.exceptions import PaymentProcessorError
from asphalt_orders.domain.gateway.payment_processor import (
    CaptureConfirmation,
    PaymentAuthorization,
    PaymentProcessor,
)
from asphalt_orders.infrastructure.config import settings

logger = logging.getLogger(__name__)


class StripePaymentProcessor(PaymentProcessor):
    """Payment processor backed by Stripe PaymentIntents."""

    def __init__(self, api_key: str):
        if not api_key:
            raise PaymentProcessorError("STRIPE_SECRET_KEY is not configured")
        self.api_key = api_key

    def authorize(self, amount_minor: int, currency: str, metadata: dict[str, str]) -> PaymentAuthorization:
        intent = self._call(
            "authorize",
            stripe.PaymentIntent.create,
            amount=amount_minor,
            currency=currency,
            capture_method="manual",
            metadata=metadata,
            description="Asphalt Plant Order Authorization",
        )
        return PaymentAuthorization(
            id=intent.id,
            status=intent.status,
            client_secret=getattr(intent, "client_secret", None),
        )

    def capture(
        self,
        payment_intent_id: str,
        amount_minor: int,
        metadata: dict[str, str],
        idempotency_key: str,
    ) -> CaptureConfirmation:
        intent = self._call(
            "capture",
            stripe.PaymentIntent.capture,
            payment_intent_id,
            amount_to_capture=amount_minor,
            metadata=metadata,
            idempotency_key=idempotency_key,
        )
        return CaptureConfirmation(
            id=intent.id,
            status=intent.status,
            amount_captured=getattr(intent, "amount_received", amount_minor),
        )

    def cancel(self, payment_intent_id: str) -> None:
        self._call("cancel", stripe.PaymentIntent.cancel, payment_intent_id)

    # --- Internal helpers -----------------------------------------------------

    def _call(self, action: str, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a Stripe operation, translating its errors."""
        try:
            return self._send(operation, *args, **kwargs)
        except stripe.CardError as exc:
            logger.warning("[STRIPE] %s declined: %s", action, exc.user_message)
            raise PaymentProcessorError(
                f"Payment {action} declined", declined=True, detail=exc.user_message
            ) from exc
        except stripe.StripeError as exc:
            logger.error("[STRIPE] %s failed: %s", action, exc.user_message or exc)
            raise PaymentProcessorError(
                f"Payment {action} failed", detail=exc.user_message or str(exc)
            ) from exc

    @retry(
        stop=stop_after_attempt(settings.MAX_RETRIES),
        wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
        retry=retry_if_exception_type(stripe.APIConnectionError),
        reraise=True,
    )
    def _send(self, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return operation(*args, api_key=self.api_key, **kwargs)
