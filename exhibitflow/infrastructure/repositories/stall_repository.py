# exhibitflow/infrastructure/repositories/stall_repository.py

import logging

from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from exhibitflow.domain.exceptions import DuplicateStallCodeError, StallConflictError
from exhibitflow.domain.pagination import Page, PageRequest
from exhibitflow.domain.state_machine import StallSize, StallStatus
from exhibitflow.infrastructure.db.models import Stall

logger = logging.getLogger(__name__)


class StallRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(
        self,
        stall_id: int,
        for_update: bool = False,
    ) -> Stall | None:
        """
        With for_update, issues SELECT ... FOR UPDATE so concurrent
        transitions on the same stall serialize on the row.
        """
        stmt = select(Stall).where(Stall.id == stall_id)
        if for_update:
            stmt = stmt.with_for_update()

        return self.db.execute(stmt).scalar_one_or_none()

    def find_by_code(self, code: str) -> Stall | None:
        stmt = select(Stall).where(Stall.code == code)
        return self.db.execute(stmt).scalar_one_or_none()

    def save(self, stall: Stall) -> Stall:
        self.db.add(stall)
        try:
            self.db.flush()
        except StaleDataError as exc:
            logger.warning("Stale write rejected for stall %s", stall.id)
            raise StallConflictError(stall.id) from exc
        except IntegrityError as exc:
            if self._is_duplicate_code(exc):
                raise DuplicateStallCodeError(stall.code) from exc
            raise

        return stall

    def find_by_filters(
        self,
        status: StallStatus | None,
        size: StallSize | None,
        location: str | None,
        page_request: PageRequest,
    ) -> Page[Stall]:

        stmt = select(Stall)
        if status is not None:
            stmt = stmt.where(Stall.status == status)
        if size is not None:
            stmt = stmt.where(Stall.size == size)
        if location:
            stmt = stmt.where(Stall.location.icontains(location, autoescape=True))

        total = self.db.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()

        order = asc if page_request.direction == "asc" else desc
        sort_column = getattr(Stall, page_request.sort)
        stmt = stmt.order_by(order(sort_column))
        if page_request.sort != "id":
            stmt = stmt.order_by(asc(Stall.id))
        stmt = stmt.offset(page_request.offset).limit(page_request.size)

        items = list(self.db.execute(stmt).scalars().all())
        return Page(
            items=items,
            page=page_request.page,
            size=page_request.size,
            total=total,
        )

    @staticmethod
    def _is_duplicate_code(exc: IntegrityError) -> bool:
        message = str(exc.orig).lower()
        return "uq_stall_code" in message or "stalls.code" in message
