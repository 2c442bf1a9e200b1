"""
Shipment endpoints
==================

POST   /api/v1/shipments                                  -- create a shipment
GET    /api/v1/shipments                                  -- list shipments
GET    /api/v1/shipments/{tn}                             -- shipment with progress
PATCH  /api/v1/shipments/{tn}/location                    -- report a new position
PATCH  /api/v1/shipments/{tn}/status                      -- change status
GET    /api/v1/shipments/{tn}/distance                    -- route distance breakdown
GET    /api/v1/shipments/{tn}/eta                         -- arrival estimate
GET    /api/v1/shipments/{tn}/history                     -- status / location history
POST   /api/v1/shipments/{tn}/checkpoints                 -- add a checkpoint
PATCH  /api/v1/shipments/{tn}/checkpoints/{checkpoint_id} -- edit a checkpoint
DELETE /api/v1/shipments/{tn}/checkpoints/{checkpoint_id} -- remove a checkpoint
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, get_shipment
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    CheckpointCreateRequest,
    CheckpointResponse,
    CheckpointUpdateRequest,
    Dimensions,
    DistanceResponse,
    EtaResponse,
    HistoryEventResponse,
    Location,
    LocationUpdateRequest,
    ShipmentCreateRequest,
    ShipmentItem,
    ShipmentListResponse,
    ShipmentResponse,
    StatusUpdateRequest,
)
from src.config import settings
from src.domain.entities import (
    GeoPoint,
    InsufficientRouteData,
    InvalidStateTransition,
    check_transition,
)
from src.domain.enums import ShipmentStatus
from src.domain.progress import (
    compute_distance_breakdown,
    compute_progress,
    estimate_eta,
)
from src.domain.route import checkpoints_within
from src.infrastructure.models import (
    CheckpointModel,
    ShipmentEventModel,
    ShipmentItemModel,
    ShipmentModel,
)
from src.infrastructure.repositories import (
    CheckpointRepository,
    ShipmentRepository,
    to_snapshot,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shipments", tags=["shipments"])


# ── Serialisation helpers ─────────────────────────────────────────────


def _location(
    lng: Optional[float], lat: Optional[float], address: Optional[str]
) -> Optional[Location]:
    if lng is None or lat is None:
        return None
    return Location(longitude=lng, latitude=lat, address=address or "")


def _checkpoint_response(cp: CheckpointModel) -> CheckpointResponse:
    return CheckpointResponse(
        id=cp.id,
        name=cp.name,
        location=_location(cp.longitude, cp.latitude, cp.address),
        reached=cp.reached,
        reached_at=cp.reached_at,
        estimated_arrival=cp.estimated_arrival,
        notes=cp.notes,
    )


def _item_response(item: ShipmentItemModel) -> ShipmentItem:
    return ShipmentItem(
        description=item.description,
        quantity=item.quantity,
        weight_kg=item.weight_kg,
        dimensions=Dimensions(
            length=item.length_cm, width=item.width_cm, height=item.height_cm
        ),
    )


def _shipment_response(shipment: ShipmentModel) -> ShipmentResponse:
    return ShipmentResponse(
        tracking_number=shipment.tracking_number,
        customer_name=shipment.customer_name,
        customer_email=shipment.customer_email,
        customer_phone=shipment.customer_phone,
        description=shipment.description,
        weight_kg=shipment.weight_kg,
        origin=_location(
            shipment.origin_lng, shipment.origin_lat, shipment.origin_address
        ),
        destination=_location(
            shipment.destination_lng,
            shipment.destination_lat,
            shipment.destination_address,
        ),
        current_location=_location(
            shipment.current_lng, shipment.current_lat, shipment.current_address
        ),
        status=shipment.status,
        progress=compute_progress(to_snapshot(shipment)),
        estimated_delivery=shipment.estimated_delivery,
        items=[_item_response(item) for item in shipment.items],
        checkpoints=[_checkpoint_response(cp) for cp in shipment.checkpoints],
        created_at=shipment.created_at,
        updated_at=shipment.updated_at,
    )


def _event_response(event: ShipmentEventModel) -> HistoryEventResponse:
    return HistoryEventResponse(
        status=event.status,
        description=event.description,
        location=_location(event.longitude, event.latitude, event.address),
        timestamp=event.created_at,
    )


def _item_model(body: ShipmentItem) -> ShipmentItemModel:
    return ShipmentItemModel(
        description=body.description,
        quantity=body.quantity,
        weight_kg=body.weight_kg,
        length_cm=body.dimensions.length,
        width_cm=body.dimensions.width,
        height_cm=body.dimensions.height,
    )


def _checkpoint_model(body: CheckpointCreateRequest) -> CheckpointModel:
    checkpoint = CheckpointModel(
        name=body.name,
        longitude=body.location.longitude,
        latitude=body.location.latitude,
        address=body.location.address,
        reached=body.reached,
        estimated_arrival=body.estimated_arrival,
        notes=body.notes,
    )
    if body.reached:
        CheckpointRepository.mark_reached(checkpoint)
    return checkpoint


def _apply_status(shipment: ShipmentModel, new_status: ShipmentStatus) -> None:
    try:
        check_transition(ShipmentStatus(shipment.status), new_status)
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    shipment.status = new_status


# ── Shipments ─────────────────────────────────────────────────────────


@router.post(
    "",
    status_code=201,
    response_model=ShipmentResponse,
    summary="Create a shipment",
)
@limiter.limit(RATE_LIMIT)
async def create_shipment(
    request: Request,
    body: ShipmentCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    shipment = await ShipmentRepository(db).create_shipment(
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        description=body.description,
        weight_kg=body.weight_kg,
        origin=body.origin.as_tuple(),
        destination=body.destination.as_tuple(),
        current=body.current_location.as_tuple() if body.current_location else None,
        estimated_delivery=body.estimated_delivery,
        items=[_item_model(item) for item in body.items],
        checkpoints=[_checkpoint_model(cp) for cp in body.checkpoints],
    )
    logger.info(
        "Created shipment %s with %d items and %d checkpoints",
        shipment.tracking_number,
        len(body.items),
        len(body.checkpoints),
    )
    return _shipment_response(shipment)


@router.get(
    "",
    response_model=ShipmentListResponse,
    summary="List shipments",
)
@limiter.limit(RATE_LIMIT)
async def list_shipments(
    request: Request,
    status: Optional[ShipmentStatus] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    repo = ShipmentRepository(db)
    shipments = await repo.list_shipments(status=status, limit=limit, offset=offset)
    return ShipmentListResponse(
        items=[_shipment_response(s) for s in shipments],
        total=await repo.count(status=status),
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{tracking_number}",
    response_model=ShipmentResponse,
    summary="Get a shipment with its delivery progress",
)
@limiter.limit(RATE_LIMIT)
async def get_shipment_details(
    request: Request,
    shipment: ShipmentModel = Depends(get_shipment),
):
    return _shipment_response(shipment)


@router.patch(
    "/{tracking_number}/location",
    response_model=ShipmentResponse,
    summary="Report a new position",
    description=(
        "Moves the shipment to the given position, optionally changing its "
        "status.  Checkpoints within the arrival radius are marked reached."
    ),
)
@limiter.limit(RATE_LIMIT)
async def update_location(
    request: Request,
    body: LocationUpdateRequest,
    shipment: ShipmentModel = Depends(get_shipment),
    db: AsyncSession = Depends(get_db),
):
    if body.status is not None and body.status != shipment.status:
        _apply_status(shipment, body.status)

    loc = body.location
    shipment.current_lng = loc.longitude
    shipment.current_lat = loc.latitude
    shipment.current_address = loc.address

    arrived = checkpoints_within(
        to_snapshot(shipment).checkpoints,
        GeoPoint(loc.longitude, loc.latitude),
        settings.checkpoint_arrival_radius_km,
    )
    for idx in arrived:
        CheckpointRepository.mark_reached(shipment.checkpoints[idx])

    description = body.description or (
        f"Location updated: {loc.address}" if loc.address else "Location updated"
    )
    if arrived:
        names = ", ".join(shipment.checkpoints[idx].name for idx in arrived)
        description = f"{description} (reached {names})"

    await ShipmentRepository(db).add_event(
        shipment, description=description, location=loc.as_tuple()
    )
    logger.info(
        "Shipment %s moved to (%.5f, %.5f); %d checkpoint(s) reached",
        shipment.tracking_number,
        loc.latitude,
        loc.longitude,
        len(arrived),
    )
    return _shipment_response(shipment)


@router.patch(
    "/{tracking_number}/status",
    response_model=ShipmentResponse,
    summary="Change shipment status",
    responses={409: {"description": "Transition not allowed from current status"}},
)
@limiter.limit(RATE_LIMIT)
async def update_status(
    request: Request,
    body: StatusUpdateRequest,
    shipment: ShipmentModel = Depends(get_shipment),
    db: AsyncSession = Depends(get_db),
):
    previous = ShipmentStatus(shipment.status)
    _apply_status(shipment, body.status)

    current = None
    if shipment.current_lng is not None and shipment.current_lat is not None:
        current = (
            shipment.current_lng,
            shipment.current_lat,
            shipment.current_address or "",
        )
    await ShipmentRepository(db).add_event(
        shipment,
        description=body.description
        or f"Status changed from {previous.value} to {body.status.value}",
        location=current,
    )
    logger.info(
        "Shipment %s status %s -> %s",
        shipment.tracking_number,
        previous.value,
        body.status.value,
    )
    return _shipment_response(shipment)


@router.get(
    "/{tracking_number}/distance",
    response_model=DistanceResponse,
    summary="Route distance breakdown",
    description=(
        "Total, traveled and remaining kilometres along origin -> "
        "checkpoints -> destination.  Fails with 422 when the shipment has "
        "no current location yet."
    ),
    responses={422: {"description": "Shipment lacks a required route point"}},
)
@limiter.limit(RATE_LIMIT)
async def get_route_distance(
    request: Request,
    shipment: ShipmentModel = Depends(get_shipment),
):
    try:
        breakdown = compute_distance_breakdown(to_snapshot(shipment))
    except InsufficientRouteData as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    shown = breakdown.rounded(settings.distance_precision)
    return DistanceResponse(
        tracking_number=shipment.tracking_number,
        total_distance=shown.total_distance_km,
        distance_traveled=shown.distance_traveled_km,
        remaining_distance=shown.remaining_distance_km,
    )


@router.get(
    "/{tracking_number}/eta",
    response_model=EtaResponse,
    summary="Estimated time of arrival",
    responses={422: {"description": "Shipment lacks a required route point"}},
)
@limiter.limit(RATE_LIMIT)
async def get_eta(
    request: Request,
    shipment: ShipmentModel = Depends(get_shipment),
):
    snapshot = to_snapshot(shipment)
    if snapshot.status == ShipmentStatus.DELIVERED:
        # Nothing left to travel, whatever route data is on record.
        return EtaResponse(
            tracking_number=shipment.tracking_number,
            status=snapshot.status,
            remaining_distance=0.0,
            average_speed_kmh=settings.average_speed_kmh,
            estimated_arrival=None,
        )

    try:
        breakdown = compute_distance_breakdown(snapshot)
    except InsufficientRouteData as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return EtaResponse(
        tracking_number=shipment.tracking_number,
        status=snapshot.status,
        remaining_distance=round(
            breakdown.remaining_distance_km, settings.distance_precision
        ),
        average_speed_kmh=settings.average_speed_kmh,
        estimated_arrival=estimate_eta(
            breakdown, snapshot.status, settings.average_speed_kmh
        ),
    )


@router.get(
    "/{tracking_number}/history",
    response_model=list[HistoryEventResponse],
    summary="Status and location history, oldest first",
)
@limiter.limit(RATE_LIMIT)
async def get_history(
    request: Request,
    shipment: ShipmentModel = Depends(get_shipment),
):
    return [_event_response(e) for e in shipment.events]


# ── Checkpoints ───────────────────────────────────────────────────────


@router.post(
    "/{tracking_number}/checkpoints",
    status_code=201,
    response_model=CheckpointResponse,
    summary="Add a checkpoint",
)
@limiter.limit(RATE_LIMIT)
async def add_checkpoint(
    request: Request,
    body: CheckpointCreateRequest,
    shipment: ShipmentModel = Depends(get_shipment),
    db: AsyncSession = Depends(get_db),
):
    checkpoint = await CheckpointRepository(db).add_checkpoint(
        shipment, _checkpoint_model(body)
    )
    return _checkpoint_response(checkpoint)


@router.patch(
    "/{tracking_number}/checkpoints/{checkpoint_id}",
    response_model=CheckpointResponse,
    summary="Edit a checkpoint",
)
@limiter.limit(RATE_LIMIT)
async def update_checkpoint(
    request: Request,
    checkpoint_id: int,
    body: CheckpointUpdateRequest,
    shipment: ShipmentModel = Depends(get_shipment),
    db: AsyncSession = Depends(get_db),
):
    checkpoint = CheckpointRepository.find(shipment, checkpoint_id)
    if not checkpoint:
        raise HTTPException(status_code=404, detail="Checkpoint not found")

    changes = body.model_dump(exclude_unset=True)
    if "name" in changes and body.name is not None:
        checkpoint.name = body.name
    if "notes" in changes:
        checkpoint.notes = body.notes
    if "estimated_arrival" in changes:
        checkpoint.estimated_arrival = body.estimated_arrival
    if body.location is not None:
        checkpoint.longitude = body.location.longitude
        checkpoint.latitude = body.location.latitude
        checkpoint.address = body.location.address
    if body.reached is not None and body.reached != checkpoint.reached:
        CheckpointRepository.mark_reached(checkpoint, body.reached)

    await db.flush()
    return _checkpoint_response(checkpoint)


@router.delete(
    "/{tracking_number}/checkpoints/{checkpoint_id}",
    status_code=204,
    summary="Remove a checkpoint",
)
@limiter.limit(RATE_LIMIT)
async def delete_checkpoint(
    request: Request,
    checkpoint_id: int,
    shipment: ShipmentModel = Depends(get_shipment),
    db: AsyncSession = Depends(get_db),
):
    repo = CheckpointRepository(db)
    checkpoint = repo.find(shipment, checkpoint_id)
    if not checkpoint:
        raise HTTPException(status_code=404, detail="Checkpoint not found")
    await repo.delete_checkpoint(shipment, checkpoint)
    return Response(status_code=204)
