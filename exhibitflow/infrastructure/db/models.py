# exhibitflow/infrastructure/db/models.py

from sqlalchemy import (
    String,
    Integer,
    Numeric,
    DateTime,
    Enum,
    Text,
    UniqueConstraint,
    CheckConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from exhibitflow.infrastructure.db.session import Base
from exhibitflow.domain.state_machine import StallSize, StallStatus


class Stall(Base):
    """
    Stall table reflecting domain state.
    Domain controls transitions.
    `version` guards every UPDATE against lost writes.
    """

    __tablename__ = "stalls"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    code: Mapped[str] = mapped_column(String(32), nullable=False)
    size: Mapped[StallSize] = mapped_column(
        Enum(StallSize, name="stall_size"),
        nullable=False,
    )
    location: Mapped[str] = mapped_column(String(128), nullable=False)
    price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    status: Mapped[StallStatus] = mapped_column(
        Enum(StallStatus, name="stall_status"),
        nullable=False,
        default=StallStatus.AVAILABLE,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint(
            "code",
            name="uq_stall_code",
        ),
        CheckConstraint(
            "price >= 0",
            name="ck_stall_price_nonnegative",
        ),
        CheckConstraint(
            "updated_at >= created_at",
            name="ck_stall_updated_after_created",
        ),
    )

    def __repr__(self) -> str:
        return f"<Stall id={self.id} code={self.code} status={self.status}>"


class OutboxEvent(Base):
    __tablename__ = "outbox_events"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    aggregate_type: Mapped[str] = mapped_column(String(64), nullable=False)
    aggregate_id: Mapped[str] = mapped_column(String(36), nullable=False)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    dedupe_key: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="PENDING")
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("dedupe_key", name="uq_outbox_dedupe_key"),
    )
