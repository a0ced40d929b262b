# Overview: Page/sort filters and single-pass paginated queries.

"""
Filtered-list engine shared by every list endpoint.

The client controls page, page_size and sort. The server controls the
sort safelist; a sort value outside the safelist that gets past
validation is a server defect and raises UnsafeSortError instead of
being quietly ignored.

Each list query returns its rows together with COUNT(*) OVER(), so the
pagination metadata comes from the same snapshot as the page itself.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import func

from .errors import UnsafeSortError
from .validator import Validator


MAX_PAGE = 500
MAX_PAGE_SIZE = 100


@dataclass
class Filters:
    page: int
    page_size: int
    sort: str
    sort_safelist: frozenset[str] = field(default_factory=frozenset)

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def sort_column(self) -> str:
        if self.sort in self.sort_safelist:
            return self.sort.lstrip("-")
        raise UnsafeSortError(f"unsafe sort parameter: {self.sort}")

    def sort_direction(self) -> str:
        return "DESC" if self.sort.startswith("-") else "ASC"


@dataclass(frozen=True)
class PageMetadata:
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0

    def to_dict(self) -> dict:
        # Zero fields are omitted, so an empty result serializes as {}
        return {k: v for k, v in self.__dict__.items() if v}


def sort_safelist(*columns: str) -> frozenset[str]:
    """Build a safelist allowing each column ascending and descending."""
    return frozenset(columns) | frozenset(f"-{c}" for c in columns)


def get_str(args: Mapping, key: str, default: str = "") -> str:
    return args.get(key) or default


def get_int(args: Mapping, key: str, default: int, v: Validator) -> int:
    raw = args.get(key, "")
    if raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        v.add_error(key, "must be an integer value")
        return default


def get_optional_int(args: Mapping, key: str, v: Validator) -> int | None:
    raw = args.get(key, "")
    if raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        v.add_error(key, "must be an integer value")
        return None


def get_optional_bool(args: Mapping, key: str, v: Validator) -> bool | None:
    raw = (args.get(key) or "").strip().lower()
    if raw == "":
        return None
    if raw in ("true", "1", "t"):
        return True
    if raw in ("false", "0", "f"):
        return False
    v.add_error(key, "must be true or false")
    return None


def get_optional_date(args: Mapping, key: str, v: Validator) -> date | None:
    raw = args.get(key, "")
    if raw == "":
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        v.add_error(key, "must be a date in YYYY-MM-DD format")
        return None


def build_filters(
    args: Mapping,
    default_sort: str,
    default_page_size: int,
    safelist: frozenset[str],
    v: Validator,
) -> Filters:
    return Filters(
        page=get_int(args, "page", 1, v),
        page_size=get_int(args, "page_size", default_page_size, v),
        sort=args.get("sort") or default_sort,
        sort_safelist=frozenset(safelist),
    )


def validate_filters(v: Validator, f: Filters) -> None:
    v.check(f.page > 0, "page", "must be greater than zero")
    v.check(f.page <= MAX_PAGE, "page", "must be a maximum of 500")
    v.check(f.page_size > 0, "page_size", "must be greater than zero")
    v.check(f.page_size <= MAX_PAGE_SIZE, "page_size", "must be a maximum of 100")
    v.check(v.permitted(f.sort, f.sort_safelist), "sort", "invalid sort value")


def calculate_metadata(total_records: int, page: int, page_size: int) -> PageMetadata:
    if total_records == 0:
        return PageMetadata()

    return PageMetadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=(total_records + page_size - 1) // page_size,
        total_records=total_records,
    )


def paginate(query, model, filters: Filters):
    """
    Run an ORM query for one page, ordered by the filter's sort column.

    Returns (items, PageMetadata). Ties are broken by id so pages never
    overlap or skip rows.
    """
    column = getattr(model, filters.sort_column())
    ordering = column.desc() if filters.sort_direction() == "DESC" else column.asc()

    rows = (
        query.add_columns(func.count().over().label("total_records"))
        .order_by(ordering, model.id.asc())
        .limit(filters.limit())
        .offset(filters.offset())
        .all()
    )

    total_records = rows[0][1] if rows else 0
    items = [row[0] for row in rows]
    return items, calculate_metadata(total_records, filters.page, filters.page_size)


def read_filters(
    args: Mapping,
    default_sort: str,
    default_page_size: int,
    safelist: frozenset[str],
    v: Validator,
) -> Filters:
    """build_filters followed by validate_filters on the same validator."""
    f = build_filters(args, default_sort, default_page_size, safelist, v)
    validate_filters(v, f)
    return f
