"""
In-memory inverted index with BM25 corpus statistics.

Structure:
    postings:  term -> {doc_id: term_frequency}
    forward:   doc_id -> {term: term_frequency}   (needed to undo a document)
    lengths:   doc_id -> number of index terms
    total:     sum of all lengths

Statistics (N, avgdl, df) are maintained incrementally on every mutation,
so ``avgdl == total_length / N`` holds after any add/remove.

Concurrency: not locked internally. Mutate from a single writer; readers
should use a snapshot that is no longer being mutated (see
``QueryEngine`` which mutates a ``copy()`` and swaps it in).
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional

from ..errors import NotFoundError
from ..models import DocId, Document, Posting, doc_id_sort_key
from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)


class InvertedIndex:
    """Term -> posting list map plus per-document lengths and corpus totals."""

    def __init__(self, tokenizer: Optional[Tokenizer] = None):
        self.tokenizer = tokenizer or Tokenizer()
        self._postings: Dict[str, Dict[DocId, int]] = {}
        self._forward: Dict[DocId, Dict[str, int]] = {}
        self._lengths: Dict[DocId, int] = {}
        self._documents: Dict[DocId, Document] = {}
        self._total_length = 0

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_document(self, doc_id: DocId, text: str) -> None:
        """
        Index ``text`` under ``doc_id``, replacing any previous version.

        Term frequencies are computed before any state changes, so a
        replacement either fully happens or leaves the old postings intact.
        """
        term_frequencies = Counter(self.tokenizer.iter_tokens(text))
        length = sum(term_frequencies.values())

        if doc_id in self._lengths:
            logger.debug(f"Replacing document {doc_id!r} in index")
            self._unindex(doc_id)
            self._documents.pop(doc_id, None)

        for term, tf in term_frequencies.items():
            self._postings.setdefault(term, {})[doc_id] = tf

        self._forward[doc_id] = dict(term_frequencies)
        self._lengths[doc_id] = length
        self._total_length += length

    def add(self, document: Document) -> None:
        """Index a ``Document`` (title + body) and keep its record for lookups."""
        self.add_document(document.doc_id, document.full_text)
        self._documents[document.doc_id] = document

    def remove_document(self, doc_id: DocId) -> None:
        """
        Remove a document and its statistics contribution.

        Raises:
            NotFoundError: if ``doc_id`` is not indexed
        """
        if doc_id not in self._lengths:
            raise NotFoundError(doc_id)
        self._unindex(doc_id)
        self._documents.pop(doc_id, None)

    def _unindex(self, doc_id: DocId) -> None:
        for term in self._forward.pop(doc_id):
            postings = self._postings[term]
            del postings[doc_id]
            if not postings:
                # Never keep empty posting lists around
                del self._postings[term]
        self._total_length -= self._lengths.pop(doc_id)

    def clear(self) -> None:
        self._postings.clear()
        self._forward.clear()
        self._lengths.clear()
        self._documents.clear()
        self._total_length = 0

    def copy(self) -> "InvertedIndex":
        """Independent copy for copy-on-write updates."""
        clone = InvertedIndex(self.tokenizer)
        clone._postings = {term: dict(postings) for term, postings in self._postings.items()}
        clone._forward = {doc_id: dict(tfs) for doc_id, tfs in self._forward.items()}
        clone._lengths = dict(self._lengths)
        clone._documents = dict(self._documents)
        clone._total_length = self._total_length
        return clone

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def postings_for(self, term: str) -> List[Posting]:
        """Postings for ``term`` ordered by document id; empty if unknown."""
        postings = self._postings.get(term)
        if not postings:
            return []
        return [
            Posting(doc_id, postings[doc_id])
            for doc_id in sorted(postings, key=doc_id_sort_key)
        ]

    def document_frequency(self, term: str) -> int:
        return len(self._postings.get(term, ()))

    def term_frequency(self, term: str, doc_id: DocId) -> int:
        return self._postings.get(term, {}).get(doc_id, 0)

    def document_length(self, doc_id: DocId) -> int:
        """
        Number of index terms in a document.

        Raises:
            NotFoundError: if ``doc_id`` is not indexed
        """
        try:
            return self._lengths[doc_id]
        except KeyError:
            raise NotFoundError(doc_id) from None

    def document_count(self) -> int:
        return len(self._lengths)

    def total_length(self) -> int:
        return self._total_length

    def average_document_length(self) -> float:
        """avgdl; 0.0 for an empty index."""
        if not self._lengths:
            return 0.0
        return self._total_length / len(self._lengths)

    def get_document(self, doc_id: DocId) -> Optional[Document]:
        """Stored ``Document`` record, or None if indexed via raw text only."""
        if doc_id not in self._lengths:
            raise NotFoundError(doc_id)
        return self._documents.get(doc_id)

    def doc_ids(self) -> List[DocId]:
        return sorted(self._lengths, key=doc_id_sort_key)

    def terms(self) -> List[str]:
        return sorted(self._postings)

    def match_all(self, terms: Iterable[str]) -> List[DocId]:
        """
        Boolean AND retrieval: documents containing every term.

        Mirrors plain full-text matching (``@@`` with ``plainto_tsquery``):
        a single missing term excludes the document. No terms -> no matches.
        """
        unique_terms = list(dict.fromkeys(terms))
        if not unique_terms:
            return []

        # Intersect starting from the rarest term
        unique_terms.sort(key=self.document_frequency)
        candidates = set(self._postings.get(unique_terms[0], ()))
        for term in unique_terms[1:]:
            if not candidates:
                break
            candidates.intersection_update(self._postings.get(term, ()))

        return sorted(candidates, key=doc_id_sort_key)

    def __contains__(self, doc_id) -> bool:
        return doc_id in self._lengths

    def __len__(self) -> int:
        return len(self._lengths)

    def __repr__(self):
        return (
            f"InvertedIndex(documents={self.document_count()}, "
            f"terms={len(self._postings)}, avgdl={self.average_document_length():.2f})"
        )
