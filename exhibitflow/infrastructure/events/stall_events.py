# exhibitflow/infrastructure/events/stall_events.py

import json
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from exhibitflow.application.ports import EventSink
from exhibitflow.application.views import StallView
from exhibitflow.config import STALL_EVENT_SINK
from exhibitflow.infrastructure.db.models import OutboxEvent

logger = logging.getLogger(__name__)

STALL_RELEASED = "stall.released"
STALL_RESERVED = "stall.reserved"


class OutboxEventSink:
    """
    Writes stall events to the outbox table inside the caller's transaction.
    A relay polls `/outbox/events` and marks rows published.
    """

    def __init__(self, db: Session):
        self.db = db

    def publish_released(self, stall: StallView) -> None:
        self._add(STALL_RELEASED, stall)

    def publish_reserved(self, stall: StallView) -> None:
        self._add(STALL_RESERVED, stall)

    def _add(self, event_type: str, stall: StallView) -> None:
        # The persisted version is bumped by every save, so it keys one event per transition.
        dedupe_key = f"stall:{stall.id}:{event_type}:v{stall.version}"
        existing = self.db.execute(
            select(OutboxEvent).where(OutboxEvent.dedupe_key == dedupe_key)
        ).scalar_one_or_none()
        if existing:
            return

        self.db.add(
            OutboxEvent(
                aggregate_type="stall",
                aggregate_id=str(stall.id),
                event_type=event_type,
                payload=json.dumps(stall.to_payload(), sort_keys=True),
                dedupe_key=dedupe_key,
                status="PENDING",
                attempts=0,
            )
        )
        logger.info("Queued %s for stall %s", event_type, stall.id)


class LoggingEventSink:

    def publish_released(self, stall: StallView) -> None:
        logger.info("%s %s", STALL_RELEASED, json.dumps(stall.to_payload(), sort_keys=True))

    def publish_reserved(self, stall: StallView) -> None:
        logger.info("%s %s", STALL_RESERVED, json.dumps(stall.to_payload(), sort_keys=True))


def build_event_sink(db: Session, kind: str = STALL_EVENT_SINK) -> EventSink:
    if kind == "outbox":
        return OutboxEventSink(db)
    if kind == "log":
        return LoggingEventSink()
    raise ValueError(f"Unknown STALL_EVENT_SINK: {kind!r}")
