"""FastAPI dependency injection helpers."""

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database import async_session_factory
from src.infrastructure.models import ShipmentModel
from src.infrastructure.repositories import ShipmentRepository


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_shipment(
    tracking_number: str, db: AsyncSession = Depends(get_db)
) -> ShipmentModel:
    """Resolve the ``{tracking_number}`` path parameter or 404."""
    shipment = await ShipmentRepository(db).get_by_tracking_number(tracking_number)
    if not shipment:
        raise HTTPException(
            status_code=404, detail=f"Shipment {tracking_number} not found"
        )
    return shipment
