"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  ``to_snapshot`` is the single place where an
ORM row becomes the immutable value the progress engine works on.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    CheckpointModel,
    ShipmentEventModel,
    ShipmentItemModel,
    ShipmentModel,
)
from src.domain.entities import Checkpoint, GeoPoint, RouteSnapshot
from src.domain.enums import ShipmentStatus


def new_tracking_number() -> str:
    return "TRK" + uuid.uuid4().hex[:10].upper()


def to_snapshot(shipment: ShipmentModel) -> RouteSnapshot:
    """Map a shipment row (with its checkpoints) to a ``RouteSnapshot``."""
    current = None
    if shipment.current_lat is not None and shipment.current_lng is not None:
        current = GeoPoint(shipment.current_lng, shipment.current_lat)

    return RouteSnapshot(
        origin=GeoPoint(shipment.origin_lng, shipment.origin_lat),
        destination=GeoPoint(shipment.destination_lng, shipment.destination_lat),
        current_location=current,
        checkpoints=tuple(
            Checkpoint(
                name=cp.name,
                location=GeoPoint(cp.longitude, cp.latitude),
                address=cp.address or "",
                reached=bool(cp.reached),
                estimated_arrival=cp.estimated_arrival,
                notes=cp.notes,
            )
            for cp in shipment.checkpoints
        ),
        status=ShipmentStatus(shipment.status),
    )


class ShipmentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_shipment(
        self,
        *,
        customer_name: str,
        origin: tuple[float, float, str],
        destination: tuple[float, float, str],
        current: Optional[tuple[float, float, str]] = None,
        customer_email: str | None = None,
        customer_phone: str | None = None,
        description: str | None = None,
        weight_kg: float | None = None,
        estimated_delivery: datetime | None = None,
        items: list[ShipmentItemModel] | None = None,
        checkpoints: list[CheckpointModel] | None = None,
    ) -> ShipmentModel:
        """
        Create a shipment plus its opening ``pending`` history event.

        Locations are ``(longitude, latitude, address)`` triples.
        """
        items = items or []
        for position, item in enumerate(items):
            item.position = position
        checkpoints = checkpoints or []
        for position, cp in enumerate(checkpoints):
            cp.position = position

        shipment = ShipmentModel(
            tracking_number=new_tracking_number(),
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            description=description,
            weight_kg=weight_kg,
            origin_lng=origin[0],
            origin_lat=origin[1],
            origin_address=origin[2],
            destination_lng=destination[0],
            destination_lat=destination[1],
            destination_address=destination[2],
            current_lng=current[0] if current else None,
            current_lat=current[1] if current else None,
            current_address=current[2] if current else None,
            status=ShipmentStatus.PENDING,
            estimated_delivery=estimated_delivery,
            items=items,
            checkpoints=checkpoints,
            events=[
                ShipmentEventModel(
                    status=ShipmentStatus.PENDING,
                    description="Shipment created",
                    longitude=origin[0],
                    latitude=origin[1],
                    address=origin[2],
                )
            ],
        )
        self.session.add(shipment)
        await self.session.flush()
        return shipment

    async def get_by_tracking_number(
        self, tracking_number: str
    ) -> Optional[ShipmentModel]:
        result = await self.session.execute(
            select(ShipmentModel).where(
                ShipmentModel.tracking_number == tracking_number
            )
        )
        return result.scalar_one_or_none()

    async def list_shipments(
        self,
        status: ShipmentStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ShipmentModel]:
        query = select(ShipmentModel).order_by(ShipmentModel.id.desc())
        if status is not None:
            query = query.where(ShipmentModel.status == status)
        result = await self.session.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def count(self, status: ShipmentStatus | None = None) -> int:
        query = select(func.count()).select_from(ShipmentModel)
        if status is not None:
            query = query.where(ShipmentModel.status == status)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def add_event(
        self,
        shipment: ShipmentModel,
        *,
        description: str,
        location: Optional[tuple[float, float, str]] = None,
    ) -> ShipmentEventModel:
        """Append a history entry carrying the shipment's current status."""
        event = ShipmentEventModel(
            status=shipment.status,
            description=description,
            longitude=location[0] if location else None,
            latitude=location[1] if location else None,
            address=location[2] if location else None,
        )
        shipment.events.append(event)
        await self.session.flush()
        return event


class CheckpointRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_checkpoint(
        self, shipment: ShipmentModel, checkpoint: CheckpointModel
    ) -> CheckpointModel:
        checkpoint.position = (
            max((cp.position for cp in shipment.checkpoints), default=-1) + 1
        )
        shipment.checkpoints.append(checkpoint)
        await self.session.flush()
        return checkpoint

    @staticmethod
    def find(
        shipment: ShipmentModel, checkpoint_id: int
    ) -> Optional[CheckpointModel]:
        for cp in shipment.checkpoints:
            if cp.id == checkpoint_id:
                return cp
        return None

    @staticmethod
    def mark_reached(checkpoint: CheckpointModel, reached: bool = True) -> None:
        checkpoint.reached = reached
        checkpoint.reached_at = datetime.now(timezone.utc) if reached else None

    async def delete_checkpoint(
        self, shipment: ShipmentModel, checkpoint: CheckpointModel
    ) -> None:
        shipment.checkpoints.remove(checkpoint)
        await self.session.flush()
