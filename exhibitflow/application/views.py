from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal

from exhibitflow.domain.state_machine import StallSize, StallStatus


@dataclass(frozen=True)
class StallView:
    """Read-only snapshot of a stall returned by every service operation."""

    id: int
    code: str
    size: StallSize
    location: str
    price: Decimal
    status: StallStatus
    created_at: datetime
    updated_at: datetime
    version: int | None = None

    @classmethod
    def from_stall(cls, stall) -> "StallView":
        return cls(
            id=stall.id,
            code=stall.code,
            size=stall.size,
            location=stall.location,
            price=stall.price,
            status=stall.status,
            created_at=stall.created_at,
            updated_at=stall.updated_at,
            version=stall.version,
        )

    def to_payload(self) -> dict:
        payload = asdict(self)
        payload["size"] = self.size.value
        payload["status"] = self.status.value
        payload["price"] = str(self.price)
        payload["created_at"] = self.created_at.isoformat()
        payload["updated_at"] = self.updated_at.isoformat()
        return payload
