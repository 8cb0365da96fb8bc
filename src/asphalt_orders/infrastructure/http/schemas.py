"""Request and response bodies of the HTTP API.

The wire format is camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class LoadCreate(BaseModel):
    """A delivered load as reported by the plant."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(..., alias="orderId")
    tonnage_delivered: Decimal = Field(..., alias="tonnageDelivered")
    truck_id: str | None = Field(None, alias="truckId")
    driver_name: str | None = Field(None, alias="driverName")
    ticket_number: str | None = Field(None, alias="ticketNumber", description="Plant ticket number.")
    notes: str | None = None


class LoadCreated(BaseModel):
    load_id: str = Field(..., serialization_alias="loadId")
    load_number: int = Field(..., serialization_alias="loadNumber")
    total_delivered: str = Field(..., serialization_alias="totalDelivered")
    warning: str | None = None


class CompleteOrder(BaseModel):
    """Completion takes no parameters; the ledger decides the amount."""

    model_config = ConfigDict(extra="forbid")


class CaptureResponse(BaseModel):
    captured_amount: float
    message: str
    excess_amount: float | None = None


class ProgressResponse(BaseModel):
    phase: str
    progress_percentage: float = Field(..., serialization_alias="progressPercentage")
    status_message: str = Field(..., serialization_alias="statusMessage")


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
