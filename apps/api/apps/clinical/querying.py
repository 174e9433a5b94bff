"""
Filter-sort-paginate engine for clinical record listings.

Each record type declares its filters, search columns and sort rules in
``apps.clinical.resources``; this module turns raw query parameters into a
doctor-scoped, ordered, paginated result.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.conf import settings
from django.core.paginator import EmptyPage, Paginator
from django.db.models import Q, QuerySet
from django.utils.dateparse import parse_date

TRUTHY_VALUES = {'1', 'true', 'on', 'yes'}


def _present(raw) -> bool:
    return raw is not None and str(raw).strip() != ''


# ============================================================================
# Filters
# ============================================================================

@dataclass(frozen=True)
class ExactFilter:
    """``?param=value`` -> ``field = value``"""
    param: str
    field: str

    def apply(self, queryset: QuerySet, raw: str) -> QuerySet:
        return queryset.filter(**{self.field: raw})


@dataclass(frozen=True)
class UUIDFilter:
    """Exact match on a UUID column. A malformed id matches nothing."""
    param: str
    field: str

    def apply(self, queryset: QuerySet, raw: str) -> QuerySet:
        try:
            value = uuid.UUID(str(raw))
        except ValueError:
            return queryset.none()
        return queryset.filter(**{self.field: value})


@dataclass(frozen=True)
class FlagFilter:
    """
    Applies ``predicate`` when the parameter is switched on.

    With ``literal_true`` only the exact string ``true`` switches it on;
    otherwise any of ``TRUTHY_VALUES`` does. Anything else is a no-op,
    never a negated filter.
    """
    param: str
    predicate: Callable[[QuerySet], QuerySet]
    literal_true: bool = False

    def apply(self, queryset: QuerySet, raw: str) -> QuerySet:
        value = str(raw).strip()
        enabled = value == 'true' if self.literal_true else value.lower() in TRUTHY_VALUES
        return self.predicate(queryset) if enabled else queryset


@dataclass(frozen=True)
class DateBoundFilter:
    """
    Compares the calendar date of a timestamp column against ``?param=YYYY-MM-DD``.

    Unparseable dates are ignored.
    """
    param: str
    field: str
    bound: str  # 'gte' or 'lte'

    def apply(self, queryset: QuerySet, raw: str) -> QuerySet:
        try:
            day = parse_date(str(raw).strip())
        except ValueError:
            day = None
        if day is None:
            return queryset
        return queryset.filter(**{f'{self.field}__date__{self.bound}': day})


def date_range(field_name: str) -> tuple:
    """``date_from``/``date_to`` pair over the date part of ``field_name``."""
    return (
        DateBoundFilter('date_from', field_name, 'gte'),
        DateBoundFilter('date_to', field_name, 'lte'),
    )


# ============================================================================
# Params
# ============================================================================

@dataclass
class ListParams:
    """Normalized listing parameters."""
    search: str = ''
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None
    page: int = 1
    per_page: int = 15
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_query(cls, query_params) -> 'ListParams':
        default_size = settings.CLINICAL_DEFAULT_PAGE_SIZE
        max_size = settings.CLINICAL_MAX_PAGE_SIZE

        per_page = _to_int(query_params.get('per_page'), default_size)
        per_page = min(max(per_page, 1), max_size)
        page = max(_to_int(query_params.get('page'), 1), 1)

        return cls(
            search=(query_params.get('search') or '').strip(),
            sort_by=query_params.get('sort_by') or None,
            sort_direction=(query_params.get('sort_direction') or '').lower() or None,
            page=page,
            per_page=per_page,
            raw={key: query_params.get(key) for key in query_params.keys()},
        )

    def get(self, name):
        return self.raw.get(name)


def _to_int(raw, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


@dataclass
class RecordPage:
    items: List[Any]
    total: int
    page: int
    per_page: int
    last_page: int

    @property
    def meta(self) -> Dict[str, int]:
        return {
            'total': self.total,
            'page': self.page,
            'per_page': self.per_page,
            'last_page': self.last_page,
        }


# ============================================================================
# Engine
# ============================================================================

def apply_filters(queryset: QuerySet, filters, params: ListParams) -> QuerySet:
    for flt in filters:
        raw = params.get(flt.param)
        if _present(raw):
            queryset = flt.apply(queryset, raw)
    return queryset


def search_predicate(term: str, fields) -> Q:
    """OR of case-insensitive substring matches of ``term`` across ``fields``."""
    predicate = Q()
    for name in fields:
        predicate |= Q(**{f'{name}__icontains': term})
    return predicate


def apply_search(queryset: QuerySet, term: str, fields) -> QuerySet:
    if not term:
        return queryset
    return queryset.filter(search_predicate(term, fields))


def resolve_ordering(resource, params: ListParams) -> Tuple[str, str]:
    """Allow-listed sort column and direction, falling back to the record's default."""
    column = params.sort_by if params.sort_by in resource.sortable_fields else resource.default_sort
    direction = params.sort_direction if params.sort_direction in ('asc', 'desc') else resource.default_direction
    return column, direction


def apply_ordering(queryset: QuerySet, resource, params: ListParams) -> QuerySet:
    column, direction = resolve_ordering(resource, params)
    prefix = '-' if direction == 'desc' else ''
    return queryset.order_by(f'{prefix}{column}', f'{prefix}id')


def paginate(queryset: QuerySet, page: int, per_page: int) -> RecordPage:
    paginator = Paginator(queryset, per_page)
    total = paginator.count
    last_page = max(paginator.num_pages, 1)
    try:
        items = list(paginator.page(page).object_list)
    except EmptyPage:
        items = []
    return RecordPage(items=items, total=total, page=page, per_page=per_page, last_page=last_page)


def filtered_queryset(resource, doctor, params: ListParams) -> QuerySet:
    """Doctor-scoped queryset with filters, search and ordering applied."""
    queryset = resource.base_queryset(doctor)
    queryset = apply_filters(queryset, resource.filters, params)
    queryset = apply_search(queryset, params.search, resource.all_search_fields)
    return apply_ordering(queryset, resource, params)


def list_records(resource, doctor, params: ListParams) -> RecordPage:
    return paginate(filtered_queryset(resource, doctor, params), params.page, params.per_page)
