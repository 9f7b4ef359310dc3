from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select

from exhibitflow.domain.state_machine import StallSize, StallStatus
from exhibitflow.infrastructure.db.models import Base, Stall
from exhibitflow.infrastructure.db.session import engine, get_db_session


STALL_DEFS = [
    {"code": "A-001", "size": StallSize.SMALL, "location": "Hall A, Aisle 1", "price": "350.00"},
    {"code": "A-002", "size": StallSize.MEDIUM, "location": "Hall A, Aisle 1", "price": "500.00"},
    {"code": "A-003", "size": StallSize.MEDIUM, "location": "Hall A, Aisle 2", "price": "500.00"},
    {"code": "B-001", "size": StallSize.LARGE, "location": "Hall B, Entrance", "price": "900.00"},
    {"code": "B-002", "size": StallSize.LARGE, "location": "Hall B, Aisle 3", "price": "750.00"},
    {"code": "C-001", "size": StallSize.SMALL, "location": "Outdoor Court", "price": "200.00"},
]


def seed_stalls(db) -> None:
    now = datetime.now(timezone.utc)
    for item in STALL_DEFS:
        existing = db.execute(
            select(Stall).where(Stall.code == item["code"])
        ).scalar_one_or_none()
        if existing:
            existing.size = item["size"]
            existing.location = item["location"]
            existing.price = Decimal(item["price"])
            existing.status = StallStatus.AVAILABLE
            existing.updated_at = now
            continue

        db.add(
            Stall(
                code=item["code"],
                size=item["size"],
                location=item["location"],
                price=Decimal(item["price"]),
                status=StallStatus.AVAILABLE,
                created_at=now,
                updated_at=now,
            )
        )


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with get_db_session() as db:
        seed_stalls(db)
    print(f"Seed complete: {len(STALL_DEFS)} stalls available.")


if __name__ == "__main__":
    main()
