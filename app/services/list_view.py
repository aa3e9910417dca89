"""
In-memory list pipeline shared by every list surface.

filter -> search -> sort -> paginate, over records already fetched from the
backend. `view` never mutates its input and never raises.
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

Record = Mapping[str, Any]
Comparator = Callable[[Record, Record], int]
Stringifier = Callable[[Any], str]

ALL = "all"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortDirection":
        if value and value.lower() in ("desc", "descending"):
            return cls.DESC
        return cls.ASC


@dataclass(frozen=True)
class SortSpec:
    field: str
    direction: SortDirection = SortDirection.ASC

    def flipped(self) -> "SortSpec":
        direction = SortDirection.DESC if self.direction == SortDirection.ASC else SortDirection.ASC
        return SortSpec(self.field, direction)


@dataclass(frozen=True)
class Page:
    page_number: int = 1
    page_size: int = 10
    total_items: int = 0


@dataclass
class ViewResult:
    rows: List[Record] = field(default_factory=list)
    total_pages: int = 1
    total_items: int = 0


# =====================================================
# SORT / PAGE STATE
# =====================================================

def toggle_sort(current: Optional[SortSpec], field_name: str) -> SortSpec:
    """Same field flips direction, a new field starts ascending."""
    if current is not None and current.field == field_name:
        return current.flipped()
    return SortSpec(field_name, SortDirection.ASC)


def total_pages_for(total_items: int, page_size: int) -> int:
    if page_size <= 0:
        return 1
    return max(1, math.ceil(total_items / page_size))


def clamp_page(page_number: int, total_items: int, page_size: int) -> int:
    return min(max(1, page_number), total_pages_for(total_items, page_size))


# =====================================================
# FIELD ACCESS
# =====================================================

def get_field(record: Record, name: str) -> Any:
    """Dotted lookup: `members.firmName` reads record["members"]["firmName"]."""
    value: Any = record
    for part in name.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
        if value is None:
            return None
    return value


def parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def locale_date(value: Any) -> str:
    """Dates are searched the way the table shows them: 3/5/2024."""
    parsed = parse_datetime(value)
    if parsed is None:
        return "" if value is None else str(value)
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def date_key(value: Any) -> Optional[float]:
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return (parsed - datetime(1970, 1, 1)).total_seconds()
    return parsed.timestamp()


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# =====================================================
# COMPARATORS
# =====================================================

def compare_values(a: Any, b: Any) -> int:
    """Missing values sort after present ones."""
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1
    try:
        if a < b:
            return -1
        if a > b:
            return 1
        return 0
    except TypeError:
        return compare_values(str(a), str(b))


def field_comparator(name: str, key: Optional[Callable[[Any], Any]] = None) -> Comparator:
    def _compare(a: Record, b: Record) -> int:
        value_a = get_field(a, name)
        value_b = get_field(b, name)
        if key is not None:
            value_a = key(value_a) if value_a is not None else None
            value_b = key(value_b) if value_b is not None else None
        return compare_values(value_a, value_b)

    return _compare


# =====================================================
# PIPELINE
# =====================================================

def _field_text(record: Record, name: str, stringifiers: Mapping[str, Stringifier]) -> Optional[str]:
    value = get_field(record, name)
    if value is None:
        return None
    convert = stringifiers.get(name, stringify)
    return convert(value)


def apply_filters(
    records: Sequence[Record],
    filters: Optional[Mapping[str, Optional[str]]],
    stringifiers: Mapping[str, Stringifier]
) -> List[Record]:
    active = {
        name: str(value)
        for name, value in (filters or {}).items()
        if value is not None and str(value) != "" and str(value).lower() != ALL
    }
    if not active:
        return list(records)

    return [
        record for record in records
        if all(_field_text(record, name, stringifiers) == value for name, value in active.items())
    ]


def apply_search(
    records: Sequence[Record],
    query: str,
    search_fields: Sequence[str],
    stringifiers: Mapping[str, Stringifier]
) -> List[Record]:
    if not query:
        return list(records)

    needle = query.lower()
    result = []
    for record in records:
        for name in search_fields:
            text = _field_text(record, name, stringifiers)
            if text is not None and needle in text.lower():
                result.append(record)
                break
    return result


def apply_sort(
    records: Sequence[Record],
    sort: Optional[SortSpec],
    sortable_fields: Mapping[str, Comparator]
) -> List[Record]:
    if sort is None:
        return list(records)

    comparator = sortable_fields.get(sort.field)
    if comparator is None:
        return list(records)

    if sort.direction == SortDirection.DESC:
        # negate rather than reverse so equal rows keep fetch order
        return sorted(records, key=cmp_to_key(lambda a, b: -comparator(a, b)))
    return sorted(records, key=cmp_to_key(comparator))


def paginate(records: Sequence[Record], page: Page) -> List[Record]:
    if page.page_size <= 0 or page.page_number < 1:
        return []
    start = (page.page_number - 1) * page.page_size
    return list(records[start:start + page.page_size])


def view(
    records: Sequence[Record],
    query: str,
    sort: Optional[SortSpec],
    page: Page,
    search_fields: Sequence[str],
    sortable_fields: Mapping[str, Comparator],
    stringifiers: Optional[Mapping[str, Stringifier]] = None,
    filters: Optional[Mapping[str, Optional[str]]] = None
) -> ViewResult:
    stringifiers = stringifiers or {}

    filtered = apply_filters(records or [], filters, stringifiers)
    filtered = apply_search(filtered, query or "", search_fields, stringifiers)
    ordered = apply_sort(filtered, sort, sortable_fields)

    total_items = len(ordered)
    return ViewResult(
        rows=paginate(ordered, page),
        total_pages=total_pages_for(total_items, page.page_size),
        total_items=total_items
    )


def describe_sort(sort: Optional[SortSpec]) -> Optional[Dict[str, str]]:
    if sort is None:
        return None
    return {"field": sort.field, "direction": sort.direction.value}
