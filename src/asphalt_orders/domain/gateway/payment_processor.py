"""Abstract payment processor.

The plant places a hold for the 110% ceiling when the order is taken and
captures the real amount, never more than the hold, once delivery is done.
Concrete processors live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentAuthorization:
    id: str
    status: str
    client_secret: str | None = None


@dataclass(frozen=True)
class CaptureConfirmation:
    id: str
    status: str
    amount_captured: int


class PaymentProcessor(ABC):

    @abstractmethod
    def authorize(
        self,
        amount_minor: int,
        currency: str,
        metadata: dict[str, str],
    ) -> PaymentAuthorization:
        """Place a manual-capture hold for *amount_minor*."""

    @abstractmethod
    def capture(
        self,
        payment_intent_id: str,
        amount_minor: int,
        metadata: dict[str, str],
        idempotency_key: str,
    ) -> CaptureConfirmation:
        """Capture up to the held amount.

        Raises PaymentProcessorError when the processor refuses or fails.
        """

    @abstractmethod
    def cancel(self, payment_intent_id: str) -> None:
        """Release an uncaptured hold."""
