"""Listing query composition shared by the post, category, and user listings.

Raw query-string values are parsed into one explicit ``ListingParams`` object,
validated in full, then composed with a per-collection ``ListingProfile`` into
a ``QuerySpec``: a plain filter/search/sort/pagination descriptor. Composition
performs no I/O. ``apply_query_spec`` and ``paginate_queryset`` translate a
spec into Django ORM calls, and ``pagination_envelope`` builds the pagination
block returned next to listed items.
"""

import math
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from django.db.models import F, Q

from access_control.principal import Principal
from access_control.roles import Role, meets_minimum
from .exceptions import InvalidParameter

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MAX_SEARCH_LENGTH = 100
MAX_OFFSET = 1_000_000
MAX_INTEGER = 2**31 - 1

STATUSES = ("draft", "published", "archived")
SORT_KEYS = ("newest", "oldest", "popular", "title", "none")
ROOT_PARENT = "null"

_TRUE_VALUES = ("true", "1")
_FALSE_VALUES = ("false", "0")


@dataclass(frozen=True)
class ListingParams:
    """Validated listing options. ``None`` means the option was not supplied.

    ``parent`` is either a category id or ``ROOT_PARENT`` for top-level
    categories.
    """

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    search: Optional[str] = None
    status: Optional[str] = None
    category: Optional[int] = None
    author: Optional[str] = None
    active: Optional[bool] = None
    featured: Optional[bool] = None
    role: Optional[str] = None
    parent: Optional[Any] = None
    sort: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.page, int) or self.page < 1:
            raise InvalidParameter("page must be a positive integer.")
        if not isinstance(self.page_size, int) or not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise InvalidParameter(f"pageSize must be between 1 and {MAX_PAGE_SIZE}.")
        if (self.page - 1) * self.page_size > MAX_OFFSET:
            raise InvalidParameter("page is beyond the last reachable page.")
        if self.search is not None and len(self.search) > MAX_SEARCH_LENGTH:
            raise InvalidParameter("search term is too long.")
        if self.status is not None and self.status not in STATUSES:
            raise InvalidParameter(f"status must be one of {', '.join(STATUSES)}.")
        if self.sort is not None and self.sort not in SORT_KEYS:
            raise InvalidParameter(f"sort must be one of {', '.join(SORT_KEYS)}.")

    @classmethod
    def from_query(cls, query: Mapping[str, Any]) -> "ListingParams":
        """Parse raw query-string values (empty strings count as absent)."""

        def raw(*names):
            for name in names:
                value = query.get(name)
                if value is not None and str(value).strip() != "":
                    return str(value).strip()
            return None

        page_size = raw("pageSize", "page_size", "limit")
        role = raw("role")
        parent = raw("parent")
        return cls(
            page=_parse_int("page", raw("page"), default=1),
            page_size=_parse_int("pageSize", page_size, default=DEFAULT_PAGE_SIZE),
            search=raw("search"),
            status=raw("status"),
            category=_parse_int("category", raw("category")),
            author=_parse_uuid("author", raw("author")),
            active=_parse_bool("active", raw("active")),
            featured=_parse_bool("featured", raw("featured")),
            role=Role.parse(role).label if role is not None else None,
            parent=parent if parent == ROOT_PARENT else _parse_int("parent", parent),
            sort=raw("sort"),
        )

    def supplied_filters(self) -> dict[str, Any]:
        """Equality filters the caller explicitly asked for."""
        candidates = {
            "status": self.status,
            "category": self.category,
            "author": self.author,
            "active": self.active,
            "featured": self.featured,
            "role": self.role,
            "parent": self.parent,
        }
        return {name: value for name, value in candidates.items() if value is not None}


@dataclass(frozen=True)
class Filter:
    field: str
    value: Any


@dataclass(frozen=True)
class Search:
    term: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class ListingProfile:
    """Per-collection declaration of what a listing may filter, search, and sort.

    ``filter_fields`` maps listing parameter names to model lookups and
    ``sort_orders`` maps sort keys to orderings; ``"none"`` is the natural order.
    """

    name: str
    search_fields: tuple[str, ...]
    filter_fields: Mapping[str, str]
    sort_orders: Mapping[str, tuple[OrderBy, ...]]
    default_sort: str = "none"
    published_by_default: bool = False
    status_field: str = "status"


@dataclass(frozen=True)
class QuerySpec:
    filters: tuple[Filter, ...] = ()
    search: Optional[Search] = None
    ordering: tuple[OrderBy, ...] = ()
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort: str = "none"

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    def filter_value(self, field_name: str, default: Any = None) -> Any:
        for item in self.filters:
            if item.field == field_name:
                return item.value
        return default


POSTS = ListingProfile(
    name="posts",
    search_fields=("title", "content", "excerpt"),
    filter_fields={
        "status": "status",
        "category": "categories",
        "author": "author_id",
        "featured": "is_featured",
    },
    sort_orders={
        "newest": (OrderBy("published_at", True), OrderBy("created_at", True)),
        "oldest": (OrderBy("published_at"), OrderBy("created_at")),
        "popular": (OrderBy("views", True), OrderBy("likes", True)),
        "title": (OrderBy("title"),),
        "none": (OrderBy("created_at"), OrderBy("id")),
    },
    default_sort="newest",
    published_by_default=True,
)

CATEGORIES = ListingProfile(
    name="categories",
    search_fields=("name", "description"),
    filter_fields={"active": "is_active", "parent": "parent_id"},
    sort_orders={
        "title": (OrderBy("name"),),
        "none": (OrderBy("sort_order"), OrderBy("name")),
    },
)

USERS = ListingProfile(
    name="users",
    search_fields=("username", "email", "full_name"),
    filter_fields={"role": "role", "active": "is_active"},
    sort_orders={
        "newest": (OrderBy("date_joined", True),),
        "oldest": (OrderBy("date_joined"),),
        "title": (OrderBy("username"),),
        "none": (OrderBy("date_joined"),),
    },
    default_sort="newest",
)


def sees_unpublished(principal: Optional[Principal]) -> bool:
    """Anonymous, disabled, and plain ``user`` callers only see published content."""
    return (
        principal is not None
        and principal.active
        and meets_minimum(principal.role, Role.AUTHOR)
    )


def compose(
    profile: ListingProfile,
    params: "ListingParams | Mapping[str, Any]",
    principal: Optional[Principal] = None,
) -> QuerySpec:
    """Compose a QuerySpec for ``profile`` from listing parameters.

    Restricted callers (see ``sees_unpublished``) get ``status=published``
    injected when they pass no status, and an explicit non-published status
    from them is rejected with InvalidParameter.
    """
    if not isinstance(params, ListingParams):
        params = ListingParams.from_query(params)

    filters = []
    for name, value in params.supplied_filters().items():
        lookup = profile.filter_fields.get(name)
        if lookup is None:
            raise InvalidParameter(f"Filter '{name}' is not supported for {profile.name}.")
        filters.append(Filter(lookup, None if value == ROOT_PARENT else value))

    if profile.published_by_default and not sees_unpublished(principal):
        if params.status is None:
            filters.append(Filter(profile.status_field, "published"))
        elif params.status != "published":
            raise InvalidParameter("Only published content can be listed without author access.")

    sort = params.sort or profile.default_sort
    ordering = profile.sort_orders.get(sort)
    if ordering is None:
        raise InvalidParameter(f"Sort '{sort}' is not supported for {profile.name}.")

    search = Search(params.search, profile.search_fields) if params.search else None

    return QuerySpec(
        filters=tuple(filters),
        search=search,
        ordering=ordering,
        page=params.page,
        page_size=params.page_size,
        sort=sort,
    )


def apply_query_spec(queryset, spec: QuerySpec):
    """Apply filters, search, and ordering to a queryset (lazy, no slicing)."""
    if spec.filters:
        queryset = queryset.filter(**{item.field: item.value for item in spec.filters})
    if spec.search is not None:
        condition = Q()
        for field_name in spec.search.fields:
            condition |= Q(**{f"{field_name}__icontains": spec.search.term})
        queryset = queryset.filter(condition)
    if spec.ordering:
        queryset = queryset.order_by(
            *[
                F(order.field).desc(nulls_last=True) if order.descending else F(order.field).asc(nulls_last=True)
                for order in spec.ordering
            ]
        )
    return queryset


def paginate_queryset(queryset, spec: QuerySpec):
    """Return ``(page_items, total)`` for a spec; runs the count query."""
    queryset = apply_query_spec(queryset, spec)
    total = queryset.count()
    return queryset[spec.skip : spec.skip + spec.limit], total


def pagination_envelope(spec: QuerySpec, total: int) -> dict[str, int]:
    return {
        "page": spec.page,
        "pageSize": spec.page_size,
        "total": total,
        "totalPages": math.ceil(total / spec.page_size),
    }


def _parse_int(name: str, value: Optional[str], default: Optional[int] = None) -> Optional[int]:
    if value is None:
        return default
    try:
        number = int(value)
    except ValueError:
        raise InvalidParameter(f"{name} must be an integer.") from None
    if abs(number) > MAX_INTEGER:
        raise InvalidParameter(f"{name} is out of range.")
    return number


def _parse_bool(name: str, value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InvalidParameter(f"{name} must be 'true' or 'false'.")


def _parse_uuid(name: str, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        raise InvalidParameter(f"{name} must be a valid id.") from None


__all__ = [
    "CATEGORIES",
    "POSTS",
    "USERS",
    "Filter",
    "ListingParams",
    "ListingProfile",
    "OrderBy",
    "QuerySpec",
    "Search",
    "apply_query_spec",
    "compose",
    "paginate_queryset",
    "pagination_envelope",
    "sees_unpublished",
]
