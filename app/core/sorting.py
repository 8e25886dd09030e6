from enum import Enum
from typing import Any, Mapping
from sqlalchemy import ColumnElement

class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

class DateFilter(str, Enum):
    LATEST = "latest"
    OLDEST = "oldest"

def resolve_order(
    columns: Mapping[Any, ColumnElement],
    created_at: ColumnElement,
    *,
    sort_by: Any | None = None,
    sort_order: SortOrder | None = None,
    date_filter: DateFilter | None = None,
) -> ColumnElement:
    """Pick the ORDER BY expression for a listing.

    A date shortcut wins over an explicit sort; an explicit sort on an allowed
    column comes next (ascending unless told otherwise); newest first otherwise.
    """
    if date_filter is not None:
        return created_at.desc() if date_filter == DateFilter.LATEST else created_at.asc()
    if sort_by is not None and sort_by in columns:
        column = columns[sort_by]
        return column.desc() if sort_order == SortOrder.DESC else column.asc()
    return created_at.desc()
