"""Exceptions raised by the search engine."""


class SearchLabError(Exception):
    """Base class for all search engine errors."""
    pass


class NotFoundError(SearchLabError, KeyError):
    """Raised when an operation references a document id that is not indexed."""

    def __init__(self, doc_id):
        self.doc_id = doc_id
        super().__init__(doc_id)

    def __str__(self):
        return f"Document not found: {self.doc_id!r}"


class InvalidArgumentError(SearchLabError, ValueError):
    """Raised for empty query text or out-of-range parameters (k1, b, rrf_k, ...)."""
    pass
