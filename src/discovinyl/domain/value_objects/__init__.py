"""Domain value objects."""

from discovinyl.domain.value_objects.query_filter import (
    MAX_LIMIT,
    QueryFilter,
    SortField,
    SortOrder,
    clamp_limit,
    clamp_page,
)
from discovinyl.domain.value_objects.record_identity import derive_record_id

__all__ = [
    "MAX_LIMIT",
    "QueryFilter",
    "SortField",
    "SortOrder",
    "clamp_limit",
    "clamp_page",
    "derive_record_id",
]
