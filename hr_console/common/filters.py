"""Query-string serialisation for list filters and client-side text search."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, TypeVar, Union

import httpx
from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ListFilters(BaseModel):
    """Base for per-endpoint filter objects.

    Unknown keys are rejected so a typo fails loudly instead of being sent to
    the server and silently ignored there.
    """

    model_config = ConfigDict(extra="forbid", use_enum_values=True)


FilterInput = Union[ListFilters, Mapping[str, Any], None]


# ── Serialisation ───────────────────────────────────────────────────

def filter_params(
    filters: FilterInput,
    model: Optional[type[ListFilters]] = None,
) -> dict[str, Any]:
    """
    Flatten *filters* into query parameters, dropping every ``None`` value.

    * A :class:`ListFilters` instance keeps its field declaration order.
    * A plain mapping keeps insertion order. When *model* is given the mapping
      is validated against it first, so unsupported keys raise.
    """
    if filters is None:
        return {}
    if isinstance(filters, ListFilters):
        return filters.model_dump(mode="json", exclude_none=True)
    if model is not None:
        validated = model.model_validate(dict(filters))
        dumped = validated.model_dump(mode="json", exclude_none=True)
        return {key: dumped[key] for key in filters if key in dumped}
    return {key: value for key, value in filters.items() if value is not None}


def build_query_string(params: Mapping[str, Any]) -> str:
    """URL-encode *params* (booleans become ``true`` / ``false``)."""
    return str(httpx.QueryParams(params))


def with_query(endpoint: str, filters: FilterInput, model: Optional[type[ListFilters]] = None) -> str:
    """Append the serialised *filters* to *endpoint*, or return it untouched."""
    query = build_query_string(filter_params(filters, model))
    return f"{endpoint}?{query}" if query else endpoint


# ── Client-side search ──────────────────────────────────────────────

def matches_search(term: Optional[str], values: Iterable[Any]) -> bool:
    """True if *term* is empty or occurs case-insensitively in any of *values*."""
    if not term:
        return True
    needle = term.lower()
    for value in values:
        if value is None:
            continue
        if needle in str(value).lower():
            return True
    return False


def apply_search(
    items: Optional[Sequence[T]],
    term: Optional[str],
    fields: Callable[[T], Iterable[Any]],
) -> list[T]:
    """Keep the *items* whose ``fields(item)`` match *term*; records are not copied."""
    if not items:
        return []
    return [item for item in items if matches_search(term, fields(item))]
