"""
Pydantic request / response schemas for the REST API.

JSON bodies use camelCase keys (``trackingNumber``, ``currentLocation``);
requests also accept the snake_case field names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from src.domain.enums import ShipmentStatus


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Shared ────────────────────────────────────────────────────────────


class Location(ApiModel):
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)
    address: str = Field("", max_length=255)

    def as_tuple(self) -> tuple[float, float, str]:
        return (self.longitude, self.latitude, self.address)


class Dimensions(ApiModel):
    """Package size in centimetres."""

    length: float = Field(0, ge=0)
    width: float = Field(0, ge=0)
    height: float = Field(0, ge=0)


class ShipmentItem(ApiModel):
    description: str = Field(..., min_length=1, max_length=255, pattern=r"\S")
    quantity: int = Field(1, ge=1)
    weight_kg: float = Field(0, ge=0)
    dimensions: Dimensions = Field(default_factory=Dimensions)


# ── Requests ──────────────────────────────────────────────────────────


class CheckpointCreateRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=120)
    location: Location
    reached: bool = False
    estimated_arrival: Optional[datetime] = None
    notes: Optional[str] = None


class CheckpointUpdateRequest(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    location: Optional[Location] = None
    reached: Optional[bool] = None
    estimated_arrival: Optional[datetime] = None
    notes: Optional[str] = None


class ShipmentCreateRequest(ApiModel):
    customer_name: str = Field(..., min_length=1, max_length=120)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=40)
    description: Optional[str] = None
    weight_kg: Optional[float] = Field(None, gt=0)
    origin: Location
    destination: Location
    current_location: Optional[Location] = None
    estimated_delivery: Optional[datetime] = None
    items: list[ShipmentItem] = Field(..., min_length=1)
    checkpoints: list[CheckpointCreateRequest] = []


class LocationUpdateRequest(ApiModel):
    location: Location
    status: Optional[ShipmentStatus] = Field(
        None, description="Optional status change applied with the new position."
    )
    description: Optional[str] = Field(None, max_length=500)


class StatusUpdateRequest(ApiModel):
    status: ShipmentStatus
    description: Optional[str] = Field(None, max_length=500)


# ── Responses ─────────────────────────────────────────────────────────


class CheckpointResponse(ApiModel):
    id: int
    name: str
    location: Location
    reached: bool
    reached_at: Optional[datetime] = None
    estimated_arrival: Optional[datetime] = None
    notes: Optional[str] = None


class ShipmentResponse(ApiModel):
    tracking_number: str
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    description: Optional[str] = None
    weight_kg: Optional[float] = None
    origin: Location
    destination: Location
    current_location: Optional[Location] = None
    status: ShipmentStatus
    progress: int = Field(..., ge=0, le=100)
    estimated_delivery: Optional[datetime] = None
    items: list[ShipmentItem] = []
    checkpoints: list[CheckpointResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ShipmentListResponse(ApiModel):
    items: list[ShipmentResponse]
    total: int
    limit: int
    offset: int


class DistanceResponse(ApiModel):
    tracking_number: str
    total_distance: float
    distance_traveled: float
    remaining_distance: float
    unit: str = "km"


class EtaResponse(ApiModel):
    tracking_number: str
    status: ShipmentStatus
    remaining_distance: float
    average_speed_kmh: float
    estimated_arrival: Optional[datetime] = None


class HistoryEventResponse(ApiModel):
    status: ShipmentStatus
    description: str
    location: Optional[Location] = None
    timestamp: Optional[datetime] = None


class HealthResponse(ApiModel):
    status: str = "ok"
    database: str = "connected"
