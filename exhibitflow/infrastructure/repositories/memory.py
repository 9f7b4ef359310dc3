"""In-memory `StallStore` implementation.

Non-durable and process-local. Stores copies, so callers never share
instances with the store, and applies the same uniqueness and version
checks as the SQL repository.
"""

import threading
from itertools import count

from sqlalchemy import inspect

from exhibitflow.domain.exceptions import DuplicateStallCodeError, StallConflictError
from exhibitflow.domain.pagination import Page, PageRequest
from exhibitflow.domain.state_machine import StallSize, StallStatus
from exhibitflow.infrastructure.db.models import Stall


def _copy(stall: Stall) -> Stall:
    values = {attr.key: getattr(stall, attr.key) for attr in inspect(Stall).column_attrs}
    return Stall(**values)


class InMemoryStallStore:

    def __init__(self):
        self._rows: dict[int, Stall] = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    def find_by_id(self, stall_id: int, for_update: bool = False) -> Stall | None:
        with self._lock:
            row = self._rows.get(stall_id)
            return _copy(row) if row is not None else None

    def find_by_code(self, code: str) -> Stall | None:
        with self._lock:
            for row in self._rows.values():
                if row.code == code:
                    return _copy(row)
        return None

    def save(self, stall: Stall) -> Stall:
        with self._lock:
            for row in self._rows.values():
                if row.code == stall.code and row.id != stall.id:
                    raise DuplicateStallCodeError(stall.code)

            if stall.id is None:
                stall.id = next(self._ids)
                stall.version = 1
            else:
                current = self._rows.get(stall.id)
                if current is None or current.version != stall.version:
                    raise StallConflictError(stall.id)
                stall.version = current.version + 1

            self._rows[stall.id] = _copy(stall)
            return _copy(stall)

    def find_by_filters(
        self,
        status: StallStatus | None,
        size: StallSize | None,
        location: str | None,
        page_request: PageRequest,
    ) -> Page[Stall]:
        with self._lock:
            rows = [
                row for row in self._rows.values()
                if (status is None or row.status == status)
                and (size is None or row.size == size)
                and (not location or location.lower() in row.location.lower())
            ]

        rows.sort(key=lambda row: row.id)
        rows.sort(
            key=lambda row: _sort_key(getattr(row, page_request.sort)),
            reverse=page_request.direction == "desc",
        )
        window = rows[page_request.offset:page_request.offset + page_request.size]
        return Page(
            items=[_copy(row) for row in window],
            page=page_request.page,
            size=page_request.size,
            total=len(rows),
        )

    def __len__(self) -> int:
        return len(self._rows)


def _sort_key(value):
    if isinstance(value, (StallSize, StallStatus)):
        return value.value
    return value
