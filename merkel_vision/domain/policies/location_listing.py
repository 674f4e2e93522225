"""Location list filtering and ordering."""

from __future__ import annotations

from datetime import datetime, timezone

from merkel_vision.domain.entities.location import Location
from merkel_vision.domain.value_objects.enums import SortField

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def filter_and_sort(
    locations: list[Location],
    term: str = "",
    sort_by: SortField = SortField.NAME,
) -> list[Location]:
    """Apply the list search box and sort selector.

    Name sorts ascending (case-insensitive); date fields sort newest first.
    Records without a timestamp sort last.
    """
    term = term.strip()
    matched = [loc for loc in locations if loc.matches(term)] if term else list(locations)

    if sort_by == SortField.NAME:
        return sorted(matched, key=lambda loc: (loc.name or "").casefold())
    if sort_by == SortField.DATE_CREATED:
        return sorted(matched, key=lambda loc: _aware(loc.created_at), reverse=True)
    if sort_by == SortField.DATE_UPDATED:
        return sorted(matched, key=lambda loc: _aware(loc.updated_at), reverse=True)
    return matched


def _aware(value: datetime | None) -> datetime:
    if value is None:
        return _EPOCH
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
