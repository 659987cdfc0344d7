"""
Query planning for soil report listings.

Flow:
1) Check pagination and sort input
2) Build a `QueryPlan` (filters + ordering + offset/limit)
3) Hand the plan to the store, which returns the page and the total count
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from core import settings

from .errors import InvalidFilterError, InvalidPaginationError, InvalidSortFieldError
from .validation import LOCATION_FIELDS, MEASUREMENT_FIELDS

if TYPE_CHECKING:
    from .store import SoilReportStore

SORTABLE_FIELDS = ("id",) + LOCATION_FIELDS + MEASUREMENT_FIELDS
SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class NumericRange:
    """
    Closed interval; a missing bound is unbounded on that side.
    """

    min: float | None = None
    max: float | None = None

    @property
    def is_open(self) -> bool:
        return self.min is None and self.max is None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class SoilReportFilters:
    state: str | None = None
    district: str | None = None
    village: str | None = None
    ph: NumericRange = field(default_factory=NumericRange)
    nitrogen: NumericRange = field(default_factory=NumericRange)
    phosphorus: NumericRange = field(default_factory=NumericRange)
    potassium: NumericRange = field(default_factory=NumericRange)

    def exact_matches(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in LOCATION_FIELDS if getattr(self, name) is not None}

    def ranges(self) -> dict[str, NumericRange]:
        return {name: getattr(self, name) for name in MEASUREMENT_FIELDS if not getattr(self, name).is_open}

    def matches(self, record: Mapping[str, Any]) -> bool:
        for name, expected in self.exact_matches().items():
            if record.get(name) != expected:
                return False
        for name, bounds in self.ranges().items():
            if not bounds.contains(float(record[name])):
                return False
        return True


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    limit: int | None = None


@dataclass(frozen=True)
class SortSpec:
    field: str = "id"
    direction: str = "desc"

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


DEFAULT_SORT = SortSpec(field="id", direction="desc")


@dataclass(frozen=True)
class QueryPlan:
    filters: SoilReportFilters
    sort: SortSpec
    offset: int
    limit: int


@dataclass(frozen=True)
class Page:
    items: list[dict[str, Any]]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def parse_sort(sort_field: str | None, direction: str | None) -> SortSpec:
    """
    Build a `SortSpec` from raw request values; `None` field means the
    default ordering.
    """
    if sort_field is None:
        if direction is None:
            return DEFAULT_SORT
        sort_field = DEFAULT_SORT.field

    sort_field = sort_field.strip()
    if sort_field not in SORTABLE_FIELDS:
        raise InvalidSortFieldError(
            "sort",
            f"Cannot sort by '{sort_field}'. Allowed: {', '.join(SORTABLE_FIELDS)}",
        )

    resolved_direction = (direction or "asc").strip().lower()
    if resolved_direction not in SORT_DIRECTIONS:
        raise InvalidSortFieldError("order", f"Sort order must be 'asc' or 'desc', got '{direction}'")

    return SortSpec(field=sort_field, direction=resolved_direction)


def plan_query(
    filters: SoilReportFilters | None = None,
    pagination: Pagination | None = None,
    sort: SortSpec | None = None,
) -> QueryPlan:
    filters = filters or SoilReportFilters()
    pagination = pagination or Pagination()
    sort = sort or DEFAULT_SORT

    limit = settings.default_page_limit() if pagination.limit is None else pagination.limit
    if pagination.page <= 0:
        raise InvalidPaginationError("page", "page must be a positive integer")
    if limit <= 0:
        raise InvalidPaginationError("limit", "limit must be a positive integer")

    for name, bounds in filters.ranges().items():
        for side, value in (("Min", bounds.min), ("Max", bounds.max)):
            if value is not None and not math.isfinite(value):
                raise InvalidFilterError(f"{name}{side}", f"{name}{side} must be a finite number")

    # Re-check so a hand-built SortSpec gets the same treatment as parsed input.
    sort = parse_sort(sort.field, sort.direction)

    return QueryPlan(
        filters=filters,
        sort=sort,
        offset=(pagination.page - 1) * limit,
        limit=limit,
    )


def sort_records(records: list[dict[str, Any]], sort: SortSpec) -> list[dict[str, Any]]:
    """
    Order records by `sort`, breaking ties on `id` ascending.
    """
    # Two stable passes: tie-break key first, then the requested key.
    ordered = sorted(records, key=lambda r: r["id"])
    if sort.field == "id":
        return list(reversed(ordered)) if sort.descending else ordered
    return sorted(ordered, key=lambda r: r[sort.field], reverse=sort.descending)


async def run_query(
    store: SoilReportStore,
    filters: SoilReportFilters | None = None,
    pagination: Pagination | None = None,
    sort: SortSpec | None = None,
) -> Page:
    plan = plan_query(filters, pagination, sort)
    items, total = await store.find(plan)
    return Page(
        items=items,
        total=total,
        page=plan.offset // plan.limit + 1,
        limit=plan.limit,
    )
