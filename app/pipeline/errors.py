"""
Search error taxonomy.

Every failure that leaves the pipeline is one of these; the API layer
renders them as ``{"error": code, "message": message}``.
"""

from __future__ import annotations


class SearchError(Exception):
    """Base class for errors surfaced by the search pipeline."""
    code = "search_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidSearchRequestError(SearchError):
    """Missing/empty query, bad limit or malformed filters. Not retried."""
    code = "invalid_request"
    status_code = 400


class SearchStorageError(SearchError):
    """
    A stage query failed. The storage error is logged by the pipeline and
    chained as ``__cause__``; callers only see the generic message.
    """
    code = "search_failed"
    status_code = 500

    def __init__(self, message: str = "Search failed. Please try again."):
        super().__init__(message)
