# =============================================================================
# core/admin/table.py - Search, Filter & Sort
# =============================================================================
# The listing logic shared by every admin screen:
# - search: case-insensitive substring over screen-specific fields
# - filters: exact matches ANDed together; "All" (or no value) means no filter
# - sort: one column, ascending/descending, toggled by repeated clicks
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Sequence, TypeVar

SortDirection = Literal["ascending", "descending"]

ALL = "All"

T = TypeVar("T")


@dataclass(frozen=True)
class SortState:
    """
    Current sort column and direction.

    Example:
        state = SortState("join_date", "descending")
        state.toggle("mrr")   # SortState("mrr", "ascending")
        state.toggle("mrr").toggle("mrr")  # SortState("mrr", "descending")
    """
    key: str | None = None
    direction: SortDirection = "ascending"

    def toggle(self, key: str) -> "SortState":
        """Flip direction on the same ascending column, otherwise start ascending."""
        if self.key == key and self.direction == "ascending":
            return SortState(key, "descending")
        return SortState(key, "ascending")


def _sort_key(value: Any) -> tuple:
    # Missing values sort last in ascending order
    if value is None:
        return (1, "")
    return (0, value)


@dataclass
class TableQuery:
    """Search text, categorical filters and sort for one listing."""
    search: str = ""
    filters: dict[str, str | None] = field(default_factory=dict)
    sort: SortState | None = None

    def matches_search(self, record: Any, fields: Sequence[str]) -> bool:
        needle = (self.search or "").strip().lower()
        if not needle:
            return True
        return any(needle in str(getattr(record, name, "") or "").lower() for name in fields)

    def matches_filters(self, record: Any) -> bool:
        for name, wanted in self.filters.items():
            if wanted is None or wanted == ALL:
                continue
            if getattr(record, name, None) != wanted:
                return False
        return True

    def apply(self, records: Iterable[T], search_fields: Sequence[str]) -> list[T]:
        """
        Filter then sort records.

        Args:
            records: The screen's records
            search_fields: Attribute names the search text is matched against

        Returns:
            Matching records, sorted when a sort column is set
        """
        rows = [r for r in records if self.matches_search(r, search_fields) and self.matches_filters(r)]

        if self.sort is not None and self.sort.key:
            key = self.sort.key
            rows.sort(
                key=lambda r: _sort_key(getattr(r, key, None)),
                reverse=self.sort.direction == "descending",
            )
        return rows
