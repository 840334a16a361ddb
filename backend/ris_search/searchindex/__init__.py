from ris_search.searchindex.base import (
    SearchIndexBase,
    parse_filter,
    record_id,
    source_filename_filter,
)
from ris_search.searchindex.factory import get_search_index

__all__ = [
    "SearchIndexBase",
    "get_search_index",
    "parse_filter",
    "record_id",
    "source_filename_filter",
]
