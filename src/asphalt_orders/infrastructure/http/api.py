"""HTTP surface of the load ledger and payment capture.

Routes receive the repository, the locks and the payment processor as
FastAPI dependencies.  Domain errors become JSON ``{"error", "details"}``
bodies with a status code chosen by exception type.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Header, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from asphalt_orders.application.append_load import AppendLoadHandler
from asphalt_orders.application.complete_order import CompleteOrderHandler
from asphalt_orders.application.dto import LoadRequest
from asphalt_orders.application.order_locks import OrderLocks
from asphalt_orders.application.show_progress import ShowProgressHandler
from asphalt_orders.domain.exceptions import (
    ConcurrencyConflictError,
    DomainException,
    EntityNotFoundError,
    PaymentProcessorError,
    ValidationError,
)
from asphalt_orders.domain.gateway.payment_processor import PaymentProcessor
from asphalt_orders.domain.repository.order_repository import OrderRepository
from asphalt_orders.infrastructure import bootstrap
from asphalt_orders.infrastructure.config import settings
from asphalt_orders.infrastructure.http.schemas import (
    CaptureResponse,
    CompleteOrder,
    ErrorResponse,
    LoadCreate,
    LoadCreated,
    ProgressResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["orders"])


def get_order_repository() -> OrderRepository:
    return bootstrap.order_repository()


def get_order_locks() -> OrderLocks:
    return bootstrap.order_locks()


def get_payment_processor() -> PaymentProcessor:
    return bootstrap.payment_processor()


@router.post(
    "/loads",
    response_model=LoadCreated,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Record a delivered load",
)
def create_load(
    payload: LoadCreate,
    x_actor_id: str | None = Header(None),
    repo: OrderRepository = Depends(get_order_repository),
    locks: OrderLocks = Depends(get_order_locks),
):
    """Append a load to an order's ledger.

    Rejected with 400 when the load would breach the 110% ceiling or is
    below the minimum load size. A warning is returned when the load
    completes or exceeds the original order.
    """
    result = AppendLoadHandler(repo, locks).handle(
        LoadRequest(
            order_id=payload.order_id,
            tonnage_delivered=payload.tonnage_delivered,
            truck_id=payload.truck_id,
            driver_name=payload.driver_name,
            ticket_number=payload.ticket_number,
            notes=payload.notes,
        ),
        actor_id=x_actor_id or "unknown",
    )
    return LoadCreated(
        load_id=result.load_id,
        load_number=result.load_number,
        total_delivered=result.total_delivered,
        warning=result.warning,
    )


@router.post(
    "/orders/{order_id}/complete",
    response_model=CaptureResponse,
    response_model_exclude_none=True,
    responses={402: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Capture payment and complete the order",
)
def complete_order(
    order_id: int,
    payload: CompleteOrder | None = None,
    repo: OrderRepository = Depends(get_order_repository),
    locks: OrderLocks = Depends(get_order_locks),
    processor: PaymentProcessor = Depends(get_payment_processor),
):
    """Capture the delivered amount, capped at the hold, and complete the order."""
    result = CompleteOrderHandler(repo, processor, locks).handle(order_id)
    return CaptureResponse(
        captured_amount=float(result.captured_amount),
        message=result.message,
        excess_amount=float(result.excess_amount) if result.excess_amount is not None else None,
    )


@router.get(
    "/orders/{order_id}/progress",
    response_model=ProgressResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delivery progress",
)
def get_progress(order_id: int, repo: OrderRepository = Depends(get_order_repository)):
    progress, _ = ShowProgressHandler(repo).handle(order_id)
    return ProgressResponse(
        phase=progress.phase.value,
        progress_percentage=float(progress.progress_percentage),
        status_message=progress.status_message,
    )


@router.get("/health", tags=["health"])
def health_check():
    return {"service": settings.SERVICE_NAME, "status": "healthy"}


# --- Error mapping ------------------------------------------------------------

def _status_for(exc: DomainException) -> int:
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, EntityNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ConcurrencyConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, PaymentProcessorError) and exc.declined:
        return status.HTTP_402_PAYMENT_REQUIRED
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    body = {"error": str(exc)}
    if isinstance(exc, PaymentProcessorError) and exc.detail:
        body["details"] = exc.detail
    return JSONResponse(status_code=_status_for(exc), content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": problems})


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    bootstrap.configure_logging()
    app = FastAPI(
        title="Asphalt Orders",
        description="Load ledger and payment capture for asphalt plant orders",
        version="1.0.0",
    )
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)
    logger.info("[HTTP] %s ready", settings.SERVICE_NAME)
    return app
