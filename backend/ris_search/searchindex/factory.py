"""
Search Index Factory

Selects the search-index backend from config. The rest of the package only
imports get_search_index(), never the concrete classes directly.
"""

from __future__ import annotations

from ris_search.core.config import settings
from ris_search.searchindex.base import SearchIndexBase


def get_search_index() -> SearchIndexBase:
    """
    Return a connected search index for the configured backend.
    The caller owns the returned object and must close() it.
    """
    backend = settings.search_index_backend.lower()

    if backend == "weaviate":
        from ris_search.searchindex.weaviate_store import (
            WeaviateSearchIndex,
            create_weaviate_client,
        )
        client = create_weaviate_client()
        return WeaviateSearchIndex(client=client, collection=settings.search_collection)

    raise ValueError(
        f"Unknown search index backend: '{backend}'. "
        f"Valid options: 'weaviate'"
    )
