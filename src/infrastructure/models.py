"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``shipments``        -- one row per tracked parcel
* ``shipment_items``   -- the goods packed in a shipment
* ``checkpoints``      -- named waypoints on a shipment's route
* ``shipment_events``  -- status / location history, append-only

Coordinates are stored as plain float columns: the progress engine only
needs point-to-point arithmetic, never spatial queries.

Indexes
-------
* **Unique B-Tree** on ``tracking_number`` (every API lookup goes through it).
* **B-Tree** on ``status`` for the list filter and on the foreign keys.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base
from src.domain.enums import ShipmentStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShipmentModel(Base):
    __tablename__ = "shipments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tracking_number = Column(String(20), nullable=False)

    customer_name = Column(String(120), nullable=False)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(40), nullable=True)
    description = Column(Text, nullable=True)
    weight_kg = Column(Float, nullable=True)

    origin_lat = Column(Float, nullable=False)
    origin_lng = Column(Float, nullable=False)
    origin_address = Column(String(255), nullable=False, default="")

    destination_lat = Column(Float, nullable=False)
    destination_lng = Column(Float, nullable=False)
    destination_address = Column(String(255), nullable=False, default="")

    # Unknown until the first location update
    current_lat = Column(Float, nullable=True)
    current_lng = Column(Float, nullable=True)
    current_address = Column(String(255), nullable=True)

    status = Column(
        Enum(ShipmentStatus), default=ShipmentStatus.PENDING, nullable=False
    )
    estimated_delivery = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    items = relationship(
        "ShipmentItemModel",
        back_populates="shipment",
        cascade="all, delete-orphan",
        order_by="ShipmentItemModel.position",
        lazy="selectin",
    )
    checkpoints = relationship(
        "CheckpointModel",
        back_populates="shipment",
        cascade="all, delete-orphan",
        order_by="CheckpointModel.position",
        lazy="selectin",
    )
    events = relationship(
        "ShipmentEventModel",
        back_populates="shipment",
        cascade="all, delete-orphan",
        order_by="ShipmentEventModel.id",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_shipments_tracking", "tracking_number", unique=True),
        Index("idx_shipments_status", "status"),
    )


class ShipmentItemModel(Base):
    __tablename__ = "shipment_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(
        Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False, default=0)

    description = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    weight_kg = Column(Float, nullable=False, default=0.0)
    # Package dimensions in cm
    length_cm = Column(Float, nullable=False, default=0.0)
    width_cm = Column(Float, nullable=False, default=0.0)
    height_cm = Column(Float, nullable=False, default=0.0)

    shipment = relationship("ShipmentModel", back_populates="items")

    __table_args__ = (Index("idx_items_shipment", "shipment_id"),)


class CheckpointModel(Base):
    __tablename__ = "checkpoints"

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(
        Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False
    )
    # Insertion order; the route order is derived from estimated_arrival
    position = Column(Integer, nullable=False, default=0)

    name = Column(String(120), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(String(255), nullable=False, default="")
    reached = Column(Boolean, nullable=False, default=False)
    reached_at = Column(DateTime(timezone=True), nullable=True)
    estimated_arrival = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    shipment = relationship("ShipmentModel", back_populates="checkpoints")

    __table_args__ = (Index("idx_checkpoints_shipment", "shipment_id"),)


class ShipmentEventModel(Base):
    __tablename__ = "shipment_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(
        Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False
    )
    status = Column(Enum(ShipmentStatus), nullable=False)
    description = Column(String(500), nullable=False, default="")
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    address = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    shipment = relationship("ShipmentModel", back_populates="events")

    __table_args__ = (Index("idx_events_shipment", "shipment_id"),)
