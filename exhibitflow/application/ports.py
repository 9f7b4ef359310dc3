"""Collaborator contracts consumed by the stall lifecycle service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from exhibitflow.application.views import StallView
    from exhibitflow.domain.pagination import Page, PageRequest
    from exhibitflow.domain.state_machine import StallSize, StallStatus
    from exhibitflow.infrastructure.db.models import Stall


class StallStore(Protocol):
    """
    Durable storage for stalls.

    `save` assigns the identifier on first save and returns the persisted
    snapshot. Implementations raise `StallConflictError` when the stall was
    modified after it was loaded.
    """

    def find_by_id(self, stall_id: int, for_update: bool = False) -> Stall | None: ...

    def find_by_code(self, code: str) -> Stall | None: ...

    def save(self, stall: Stall) -> Stall: ...

    def find_by_filters(
        self,
        status: StallStatus | None,
        size: StallSize | None,
        location: str | None,
        page_request: PageRequest,
    ) -> Page[Stall]: ...


class EventSink(Protocol):
    """Best-effort notifications for stall transitions."""

    def publish_released(self, stall: StallView) -> None: ...

    def publish_reserved(self, stall: StallView) -> None: ...
