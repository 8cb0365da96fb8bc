"""Application service: Create Order use case.

Places the 110% authorization hold with the payment processor and then
persists the order.  Nothing is saved if the processor refuses the hold,
and the hold is released again if the order cannot be saved.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from asphalt_orders.application.dto import OrderDTO
from asphalt_orders.domain.exceptions import ValidationError
from asphalt_orders.domain.gateway.payment_processor import PaymentProcessor
from asphalt_orders.domain.model.order import Order
from asphalt_orders.domain.model.value_objects import Money, Tonnage, format_tons
from asphalt_orders.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)

MIN_AUTHORIZATION_CENTS = 50


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        payment_processor: PaymentProcessor,
        currency: str = "usd",
    ) -> None:
        self._order_repo = order_repo
        self._payment_processor = payment_processor
        self._currency = currency

    def handle(
        self,
        customer_name: str,
        mix_type: str,
        tonnage: str | Decimal,
        price_per_ton: str | Decimal,
    ) -> OrderDTO:
        """Create a new asphalt order.

        Steps:
        1. Let the Order aggregate derive the ceiling and the hold amount.
        2. Ask the processor to authorize the hold (manual capture).
        3. Attach the authorization and persist.
        """
        order = Order.create(
            customer_name=customer_name,
            mix_type=mix_type,
            tonnage=Tonnage.of(tonnage),
            price_per_ton=Money.of(price_per_ton),
        )

        hold_cents = order.authorized_amount.cents
        if hold_cents < MIN_AUTHORIZATION_CENTS:
            raise ValidationError("Authorization amount must be at least $0.50")

        authorization = self._payment_processor.authorize(
            hold_cents,
            self._currency,
            {
                "order_type": "asphalt_order",
                "customer_name": order.customer_name,
                "mix_type": order.mix_type,
                "original_tonnage": format_tons(order.original_tonnage),
            },
        )
        order.payment_intent_id = authorization.id

        try:
            self._order_repo.add(order)
        except Exception:
            logger.error(
                "[ORDERS] saving order for %s failed; releasing hold %s",
                order.customer_name,
                authorization.id,
            )
            self._payment_processor.cancel(authorization.id)
            raise

        logger.info(
            "[ORDERS] order #%s created: %s tons of %s, hold %s (%s)",
            order.id,
            format_tons(order.original_tonnage),
            order.mix_type,
            order.authorized_amount,
            authorization.id,
        )
        return OrderDTO.from_order(order)
