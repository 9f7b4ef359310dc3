import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from exhibitflow.application.ports import EventSink, StallStore
from exhibitflow.application.views import StallView
from exhibitflow.domain.exceptions import DuplicateStallCodeError, StallNotFoundError
from exhibitflow.domain.pagination import Page, PageRequest
from exhibitflow.domain.state_machine import (
    StallOperation,
    StallSize,
    StallStateMachine,
    StallStatus,
)
from exhibitflow.infrastructure.db.models import Stall

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StallLifecycleService:
    """
    Application service owning stall CRUD and lifecycle transitions.

    Each operation is a single load-decide-persist sequence. Transitions
    load the stall with a row lock and every save carries a version check,
    so a racing writer surfaces as StallConflictError instead of a lost update.
    """

    def __init__(
        self,
        store: StallStore,
        events: EventSink,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.store = store
        self.events = events
        self.clock = clock

    # -----------------------------
    # Queries
    # -----------------------------
    def list_stalls(
        self,
        status: StallStatus | None = None,
        size: StallSize | None = None,
        location: str | None = None,
        page_request: PageRequest | None = None,
    ) -> Page[StallView]:
        page = self.store.find_by_filters(
            status,
            size,
            location,
            page_request or PageRequest(),
        )
        return page.map(StallView.from_stall)

    def get_stall(self, stall_id: int) -> StallView:
        return StallView.from_stall(self._load(stall_id))

    # -----------------------------
    # CRUD
    # -----------------------------
    def create_stall(
        self,
        code: str,
        size: StallSize,
        location: str,
        price: Decimal,
    ) -> StallView:
        if self.store.find_by_code(code) is not None:
            raise DuplicateStallCodeError(code)

        now = self.clock()
        stall = Stall(
            code=code,
            size=size,
            location=location,
            price=price,
            status=StallStatus.AVAILABLE,
            created_at=now,
            updated_at=now,
        )
        saved = self.store.save(stall)
        logger.info("Created stall %s with code %s", saved.id, saved.code)
        return StallView.from_stall(saved)

    def update_stall(
        self,
        stall_id: int,
        location: str | None = None,
        price: Decimal | None = None,
        size: StallSize | None = None,
    ) -> StallView:
        stall = self._load(stall_id)

        if location is not None:
            stall.location = location
        if price is not None:
            stall.price = price
        if size is not None:
            stall.size = size

        self._touch(stall)
        saved = self.store.save(stall)
        logger.info("Updated stall %s", saved.id)
        return StallView.from_stall(saved)

    # -----------------------------
    # Lifecycle transitions
    # -----------------------------
    def hold(self, stall_id: int) -> StallView:
        return self._transition(stall_id, StallOperation.HOLD)

    def release(self, stall_id: int) -> StallView:
        return self._transition(stall_id, StallOperation.RELEASE)

    def reserve(self, stall_id: int) -> StallView:
        return self._transition(stall_id, StallOperation.RESERVE)

    def _transition(self, stall_id: int, operation: StallOperation) -> StallView:
        stall = self._load(stall_id, for_update=True)

        # Repeating a transition from the state it already reached is a pure read.
        if stall.status == StallStateMachine.target_for(operation):
            logger.debug(
                "Stall %s already %s, %s is a no-op",
                stall_id,
                stall.status.value,
                operation.value,
            )
            return StallView.from_stall(stall)

        previous = stall.status
        stall.status = StallStateMachine.validate_transition(stall.status, operation)
        self._touch(stall)
        saved = self.store.save(stall)
        view = StallView.from_stall(saved)

        logger.info(
            "Stall %s %s: %s -> %s",
            stall_id,
            operation.value,
            previous.value,
            view.status.value,
        )
        self._notify(operation, view)
        return view

    def _notify(self, operation: StallOperation, view: StallView) -> None:
        match operation:
            case StallOperation.RELEASE:
                publish = self.events.publish_released
            case StallOperation.RESERVE:
                publish = self.events.publish_reserved
            case _:
                return

        try:
            publish(view)
        except Exception:
            # Sink failures never fail a transition that was already persisted.
            logger.exception(
                "Failed to publish %s event for stall %s",
                operation.value,
                view.id,
            )

    def _load(self, stall_id: int, for_update: bool = False) -> Stall:
        stall = self.store.find_by_id(stall_id, for_update=for_update)
        if stall is None:
            raise StallNotFoundError(stall_id)
        return stall

    def _touch(self, stall: Stall) -> None:
        now = self.clock()
        previous = stall.updated_at
        if previous is not None and _comparable(previous, now) and previous > now:
            now = previous
        stall.updated_at = now


def _comparable(a: datetime, b: datetime) -> bool:
    return (a.tzinfo is None) == (b.tzinfo is None)
