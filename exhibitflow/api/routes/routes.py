from contextlib import contextmanager
from datetime import datetime, timezone
import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy import select

from exhibitflow.infrastructure.db.session import SessionLocal
from exhibitflow.application.stall_service import StallLifecycleService
from exhibitflow.application.views import StallView
from exhibitflow.api.schemas.schemas import (
    CreateStallRequest,
    OutboxEventResponse,
    StallPageResponse,
    StallResponse,
    UpdateStallRequest,
)
from exhibitflow.config import STALL_PAGE_SIZE_DEFAULT, STALL_PAGE_SIZE_MAX
from exhibitflow.domain.exceptions import (
    DuplicateStallCodeError,
    InvalidStallStatusError,
    StallConflictError,
    StallNotFoundError,
)
from exhibitflow.domain.pagination import SORTABLE_FIELDS, PageRequest
from exhibitflow.domain.state_machine import StallSize, StallStatus
from exhibitflow.infrastructure.db.models import OutboxEvent
from exhibitflow.infrastructure.events.stall_events import build_event_sink
from exhibitflow.infrastructure.repositories.stall_repository import StallRepository


router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

SortField = Literal[SORTABLE_FIELDS]


def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_stall_service(db: Session = Depends(get_db)) -> StallLifecycleService:
    return StallLifecycleService(
        store=StallRepository(db),
        events=build_event_sink(db),
    )


@contextmanager
def _domain_errors():
    try:
        yield
    except StallNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except (DuplicateStallCodeError, InvalidStallStatusError) as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except StallConflictError as exc:
        logger.warning("Concurrent modification on stall %s", exc.stall_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc


def _to_response(view: StallView) -> StallResponse:
    return StallResponse.model_validate(view)


def _outbox_response(item: OutboxEvent) -> OutboxEventResponse:
    return OutboxEventResponse(
        id=item.id,
        aggregate_type=item.aggregate_type,
        aggregate_id=item.aggregate_id,
        event_type=item.event_type,
        payload=item.payload,
        status=item.status,
        attempts=item.attempts,
        created_at=item.created_at.isoformat(),
    )


@router.get("/health")
def health():
    return {"message": "ExhibitFlow stall service is running"}


# -----------------------------
# Stalls
# -----------------------------
@router.get("/stalls", response_model=StallPageResponse)
def list_stalls(
    status_filter: StallStatus | None = Query(default=None, alias="status"),
    size: StallSize | None = None,
    location: str | None = Query(default=None, description="Partial, case-insensitive match"),
    page: int = Query(default=0, ge=0),
    page_size: int = Query(default=STALL_PAGE_SIZE_DEFAULT, ge=1, le=STALL_PAGE_SIZE_MAX),
    sort: SortField = "id",
    direction: Literal["asc", "desc"] = "asc",
    service: StallLifecycleService = Depends(get_stall_service),
):
    result = service.list_stalls(
        status=status_filter,
        size=size,
        location=location,
        page_request=PageRequest(page=page, size=page_size, sort=sort, direction=direction),
    )
    return StallPageResponse(
        content=[_to_response(view) for view in result.items],
        page=result.page,
        size=result.size,
        total_elements=result.total,
        total_pages=result.total_pages,
    )


@router.get("/stalls/{stall_id}", response_model=StallResponse)
def get_stall(
    stall_id: int,
    service: StallLifecycleService = Depends(get_stall_service),
):
    with _domain_errors():
        return _to_response(service.get_stall(stall_id))


@router.post("/stalls", response_model=StallResponse, status_code=status.HTTP_201_CREATED)
def create_stall(
    request: CreateStallRequest,
    service: StallLifecycleService = Depends(get_stall_service),
):
    with _domain_errors():
        view = service.create_stall(
            code=request.code,
            size=request.size,
            location=request.location,
            price=request.price,
        )
    return _to_response(view)


@router.put("/stalls/{stall_id}", response_model=StallResponse)
def update_stall(
    stall_id: int,
    request: UpdateStallRequest,
    service: StallLifecycleService = Depends(get_stall_service),
):
    with _domain_errors():
        view = service.update_stall(
            stall_id,
            location=request.location,
            price=request.price,
            size=request.size,
        )
    return _to_response(view)


@router.post("/stalls/{stall_id}/hold", response_model=StallResponse)
def hold_stall(
    stall_id: int,
    service: StallLifecycleService = Depends(get_stall_service),
):
    with _domain_errors():
        return _to_response(service.hold(stall_id))


@router.post("/stalls/{stall_id}/release", response_model=StallResponse)
def release_stall(
    stall_id: int,
    service: StallLifecycleService = Depends(get_stall_service),
):
    with _domain_errors():
        return _to_response(service.release(stall_id))


@router.post("/stalls/{stall_id}/reserve", response_model=StallResponse)
def reserve_stall(
    stall_id: int,
    service: StallLifecycleService = Depends(get_stall_service),
):
    with _domain_errors():
        return _to_response(service.reserve(stall_id))


# -----------------------------
# Outbox relay
# -----------------------------
@router.get("/outbox/events", response_model=list[OutboxEventResponse])
def list_outbox_events(
    status_filter: str = "PENDING",
    limit: int = 50,
    db: Session = Depends(get_db),
):
    safe_limit = max(1, min(limit, 200))
    stmt = (
        select(OutboxEvent)
        .where(OutboxEvent.status == status_filter)
        .order_by(OutboxEvent.created_at)
        .limit(safe_limit)
    )
    events = list(db.execute(stmt).scalars().all())
    return [_outbox_response(item) for item in events]


@router.post("/outbox/events/{event_id}/mark-published", response_model=OutboxEventResponse)
def mark_outbox_event_published(
    event_id: str,
    db: Session = Depends(get_db),
):
    item = db.execute(select(OutboxEvent).where(OutboxEvent.id == event_id)).scalar_one_or_none()
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Outbox event not found",
        )

    item.status = "PUBLISHED"
    item.published_at = datetime.now(timezone.utc)
    item.attempts += 1
    return _outbox_response(item)
