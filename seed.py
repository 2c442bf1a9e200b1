"""
Seed script -- populates the database with sample shipments for reviewers.

Run with:
    python seed.py

Creates 6 shipments between Indian cities covering every status, most of
them routed through intermediate checkpoints with a few already reached.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy import text

from src.domain.enums import ShipmentStatus
from src.infrastructure.database import async_session_factory, engine, init_models
from src.infrastructure.models import CheckpointModel, ShipmentItemModel
from src.infrastructure.repositories import CheckpointRepository, ShipmentRepository

# (longitude, latitude, address)
CITIES = {
    "mumbai": (72.8777, 19.0760, "Mumbai, Maharashtra"),
    "pune": (73.8567, 18.5204, "Pune, Maharashtra"),
    "surat": (72.8311, 21.1702, "Surat, Gujarat"),
    "ahmedabad": (72.5714, 23.0225, "Ahmedabad, Gujarat"),
    "jaipur": (75.7873, 26.9124, "Jaipur, Rajasthan"),
    "delhi": (77.2090, 28.6139, "New Delhi, Delhi"),
    "agra": (78.0081, 27.1767, "Agra, Uttar Pradesh"),
    "nagpur": (79.0882, 21.1458, "Nagpur, Maharashtra"),
    "hyderabad": (78.4867, 17.3850, "Hyderabad, Telangana"),
    "bengaluru": (77.5946, 12.9716, "Bengaluru, Karnataka"),
    "chennai": (80.2707, 13.0827, "Chennai, Tamil Nadu"),
    "kolkata": (88.3639, 22.5726, "Kolkata, West Bengal"),
}

NOW = datetime.now(timezone.utc)

SHIPMENTS = [
    {
        "customer": ("Aarav Sharma", "aarav@example.com", "+91 98200 11111"),
        "description": "Laptop, insured",
        "weight_kg": 3.2,
        "origin": "mumbai",
        "destination": "delhi",
        "stops": ["surat", "ahmedabad", "jaipur"],
        "reached": 2,
        "current": "ahmedabad",
        "path": [ShipmentStatus.IN_TRANSIT],
    },
    {
        "customer": ("Priya Patel", "priya@example.com", None),
        "description": "Books (2 cartons)",
        "weight_kg": 14.0,
        "origin": "bengaluru",
        "destination": "chennai",
        "stops": [],
        "reached": 0,
        "current": None,
        "path": [],
    },
    {
        "customer": ("Rohan Mehta", "rohan@example.com", "+91 99300 22222"),
        "description": "Kitchen appliances",
        "weight_kg": 22.5,
        "origin": "delhi",
        "destination": "kolkata",
        "stops": ["agra", "nagpur"],
        "reached": 1,
        "current": "agra",
        "path": [ShipmentStatus.IN_TRANSIT, ShipmentStatus.EXCEPTION],
    },
    {
        "customer": ("Sneha Gupta", "sneha@example.com", None),
        "description": "Documents",
        "weight_kg": 0.4,
        "origin": "hyderabad",
        "destination": "pune",
        "stops": [],
        "reached": 0,
        "current": "pune",
        "path": [
            ShipmentStatus.IN_TRANSIT,
            ShipmentStatus.OUT_FOR_DELIVERY,
            ShipmentStatus.DELIVERED,
        ],
    },
    {
        "customer": ("Vikram Singh", "vikram@example.com", "+91 90040 33333"),
        "description": "Spare parts",
        "weight_kg": 8.0,
        "origin": "chennai",
        "destination": "mumbai",
        "stops": ["bengaluru", "hyderabad", "pune"],
        "reached": 3,
        "current": "pune",
        "path": [ShipmentStatus.IN_TRANSIT, ShipmentStatus.OUT_FOR_DELIVERY],
    },
    {
        "customer": ("Meera Nair", "meera@example.com", None),
        "description": "Handicrafts",
        "weight_kg": 5.5,
        "origin": "jaipur",
        "destination": "hyderabad",
        "stops": ["nagpur"],
        "reached": 0,
        "current": "jaipur",
        "path": [ShipmentStatus.IN_TRANSIT],
    },
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM shipments"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        repo = ShipmentRepository(session)
        for s in SHIPMENTS:
            name, email, phone = s["customer"]
            checkpoints = [
                CheckpointModel(
                    name=f"Hub {CITIES[stop][2].split(',')[0]}",
                    longitude=CITIES[stop][0],
                    latitude=CITIES[stop][1],
                    address=CITIES[stop][2],
                    estimated_arrival=NOW + timedelta(days=i + 1),
                )
                for i, stop in enumerate(s["stops"])
            ]
            for cp in checkpoints[: s["reached"]]:
                CheckpointRepository.mark_reached(cp)

            shipment = await repo.create_shipment(
                customer_name=name,
                customer_email=email,
                customer_phone=phone,
                description=s["description"],
                weight_kg=s["weight_kg"],
                origin=CITIES[s["origin"]],
                destination=CITIES[s["destination"]],
                current=CITIES[s["current"]] if s["current"] else None,
                estimated_delivery=NOW + timedelta(days=len(s["stops"]) + 2),
                items=[
                    ShipmentItemModel(
                        description=s["description"], weight_kg=s["weight_kg"]
                    )
                ],
                checkpoints=checkpoints,
            )
            for status in s["path"]:
                shipment.status = status
                await repo.add_event(
                    shipment,
                    description=f"Status changed to {status.value}",
                    location=CITIES[s["current"]] if s["current"] else None,
                )
            print(
                f"  {shipment.tracking_number}: "
                f"{s['origin']} -> {s['destination']} ({shipment.status.value})"
            )

        await session.commit()
        print(f"\nSeed complete! Created {len(SHIPMENTS)} shipments.")


async def main():
    print("Seeding database...")
    await init_models()
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
