"""Search query builder.

Maps a validated :class:`SearchFilter` onto a deterministic set of predicates
plus a pagination window. Predicates are ANDed together; the repository is
the only place that knows how to turn them into SQL.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Mapping, Optional

from app.core.config import settings
from app.core.exceptions import UnsupportedFilterError
from app.schemas.search import SearchFilter
from app.services.validation import validate_payload

# Columns covered by the free-text "contains" predicate. A plain substring
# match, not ranked relevance: no full-text index is assumed.
TEXT_SEARCH_FIELDS = ("title", "description", "address")

# Filters on nested regional attributes. The details JSON is not queryable
# through the repository, so these are refused instead of being ignored.
UNSUPPORTED_FILTERS = ("nepa_status", "has_bq", "gated_community")


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str  # contains | iequals | equals | gte | lte
    value: Any


@dataclass(frozen=True)
class SearchQuery:
    predicates: FrozenSet[Predicate]
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_search_filter(params: Mapping[str, Any]) -> SearchFilter:
    """Build a SearchFilter from request parameters, dropping absent ones."""
    present: Dict[str, Any] = {k: v for k, v in params.items() if v is not None}
    return validate_payload(present, SearchFilter, "Invalid search parameters")


def build_search_query(search: SearchFilter, max_page_size: Optional[int] = None) -> SearchQuery:
    unsupported = [name for name in UNSUPPORTED_FILTERS if getattr(search, name) is not None]
    if unsupported:
        raise UnsupportedFilterError(
            "Unsupported search filters",
            [
                {"field": name, "message": "Filtering on regional attributes is not supported"}
                for name in unsupported
            ],
        )

    predicates = set()

    if search.query:
        text = search.query.strip().lower()
        if text:
            predicates.add(Predicate("text", "contains", text))
    if search.state:
        predicates.add(Predicate("state", "iequals", search.state.strip().lower()))
    if search.city:
        predicates.add(Predicate("city", "iequals", search.city.strip().lower()))
    if search.property_type is not None:
        predicates.add(Predicate("property_type", "equals", search.property_type.value))
    if search.listing_type is not None:
        predicates.add(Predicate("listing_type", "equals", search.listing_type.value))
    if search.min_price is not None:
        predicates.add(Predicate("price", "gte", float(search.min_price)))
    if search.max_price is not None:
        predicates.add(Predicate("price", "lte", float(search.max_price)))
    if search.bedrooms is not None:
        predicates.add(Predicate("bedrooms", "gte", search.bedrooms))
    if search.bathrooms is not None:
        predicates.add(Predicate("bathrooms", "gte", search.bathrooms))

    cap = max_page_size or settings.SEARCH_MAX_PAGE_SIZE
    return SearchQuery(
        predicates=frozenset(predicates),
        page=search.page,
        limit=min(search.limit, cap),
    )
