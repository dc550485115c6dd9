"""
BM25 index builder - builds a fresh inverted index from a batch of documents.

This is the rebuild-from-scratch path ("drop and reload"): callers build a
new index and swap it in, instead of mutating the index readers are using.
"""

import logging
from typing import Iterable, Optional

from ..models import Document
from .index import InvertedIndex
from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)


def build_index(documents: Iterable[Document], tokenizer: Optional[Tokenizer] = None) -> InvertedIndex:
    """
    Build an inverted index from documents.

    Duplicate doc_ids are allowed; the last occurrence wins.

    Args:
        documents: Documents to index (title + body become the full text)
        tokenizer: Analyzer to use (default: ``Tokenizer()``)

    Returns:
        Populated InvertedIndex

    Example:
        >>> docs = [
        ...     Document(1, "Database Connection Pooling Guide"),
        ...     Document(2, "PgBouncer Configuration", "pooling setup"),
        ... ]
        >>> index = build_index(docs)
        >>> index.document_frequency("pooling")
        2
        >>> index.average_document_length()
        4.0
    """
    index = InvertedIndex(tokenizer)

    for document in documents:
        index.add(document)

    logger.debug(
        f"Built BM25 index: {len(index.terms())} unique terms from "
        f"{index.document_count()} documents (avgdl={index.average_document_length():.2f})"
    )

    return index
