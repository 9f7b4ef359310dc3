from dataclasses import dataclass, field
from math import ceil
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")
U = TypeVar("U")

SORTABLE_FIELDS = (
    "id",
    "code",
    "size",
    "location",
    "price",
    "status",
    "created_at",
    "updated_at",
)


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page selection with a single sort key."""

    page: int = 0
    size: int = 20
    sort: str = "id"
    direction: str = "asc"

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("page must be >= 0")
        if self.size < 1:
            raise ValueError("size must be >= 1")
        if self.sort not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort stalls by {self.sort!r}")
        if self.direction not in ("asc", "desc"):
            raise ValueError("direction must be 'asc' or 'desc'")

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    page: int = 0
    size: int = 20
    total: int = 0

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.size) if self.size else 0

    def map(self, fn: Callable[[T], U]) -> "Page[U]":
        return Page(
            items=[fn(item) for item in self.items],
            page=self.page,
            size=self.size,
            total=self.total,
        )
