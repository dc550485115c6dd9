"""
BM25 scorer over an InvertedIndex.

BM25 (Best Match 25) is a probabilistic ranking function used for information retrieval.
Unlike a plain term-frequency rank, it combines three effects:
- IDF weighting: rare terms matter more
- TF saturation (k1): repeating a term has diminishing returns
- Length normalization (b): long documents don't win just by being long

Formula:
    score(D, Q) = Σ IDF(t) × (tf × (k1 + 1)) / (tf + k1 × (1 - b + b × dl/avgdl))
    IDF(t)      = ln((N - n(t) + 0.5) / (n(t) + 0.5) + 1)

Where:
    tf = term frequency in document
    k1 = term frequency saturation parameter (default: 1.2)
    b = length normalization parameter (default: 0.75)
    dl = document length (number of index terms)
    avgdl = average document length in the index
    N = number of documents, n(t) = documents containing t

The "+1" inside the log keeps IDF positive for every term, including terms
that appear in more than half of the corpus.
"""

import logging
import math
from typing import Dict, Iterable, List

from ..errors import InvalidArgumentError
from ..models import (
    ContributionLevel,
    DocId,
    ScoredDocument,
    TermContribution,
    TermStats,
    doc_id_sort_key,
)
from .index import InvertedIndex

logger = logging.getLogger(__name__)

DEFAULT_K1 = 1.2
DEFAULT_B = 0.75


def _unique(terms: Iterable[str]) -> List[str]:
    # A repeated query term counts once
    return list(dict.fromkeys(terms))


class BM25Scorer:
    """
    BM25 scoring against the statistics of one index snapshot.
    """

    def __init__(
        self,
        index: InvertedIndex,
        k1: float = DEFAULT_K1,
        b: float = DEFAULT_B,
        high_df_ratio: float = 0.3,
        medium_df_ratio: float = 0.7,
    ):
        """
        Initialize BM25 scorer.

        Args:
            index: Inverted index providing tf, df, N and avgdl

            k1: Term frequency saturation parameter
                Higher = more weight to term frequency
                Range: 1.2 - 2.0
                Default: 1.2 (standard)

            b: Length normalization parameter
                Higher = more penalty for long documents
                Range: 0.0 - 1.0
                Default: 0.75 (standard)

            high_df_ratio: Terms in at most this fraction of documents are
                classified as HIGH contribution in diagnostics

            medium_df_ratio: Upper bound (fraction of documents) for MEDIUM;
                anything more common is LOW
        """
        if k1 < 0:
            raise InvalidArgumentError(f"k1 must be >= 0, got {k1}")
        if not 0 <= b <= 1:
            raise InvalidArgumentError(f"b must be between 0 and 1, got {b}")
        if medium_df_ratio < high_df_ratio:
            raise InvalidArgumentError(
                f"medium_df_ratio ({medium_df_ratio}) must be >= high_df_ratio ({high_df_ratio})"
            )
        self.index = index
        self.k1 = k1
        self.b = b
        self.high_df_ratio = high_df_ratio
        self.medium_df_ratio = medium_df_ratio

    def idf(self, term: str) -> float:
        """Inverse document frequency of ``term`` (defined even when df == 0)."""
        n = self.index.document_count()
        df = self.index.document_frequency(term)
        return math.log((n - df + 0.5) / (df + 0.5) + 1)

    def _term_score(self, tf: int, idf: float, doc_length: int, avgdl: float) -> float:
        numerator = tf * (self.k1 + 1)
        denominator = tf + self.k1 * (1 - self.b + self.b * (doc_length / avgdl))
        return idf * numerator / denominator

    def score(self, query_terms: Iterable[str], doc_id: DocId) -> float:
        """
        Compute the BM25 score of one document.

        Args:
            query_terms: Analyzed query terms
            doc_id: Indexed document id

        Returns:
            BM25 score (0.0 when no query term occurs in the document)

        Raises:
            NotFoundError: if ``doc_id`` is not indexed
        """
        doc_length = self.index.document_length(doc_id)
        avgdl = self.index.average_document_length()

        score = 0.0
        for term in _unique(query_terms):
            tf = self.index.term_frequency(term, doc_id)
            if tf == 0:
                continue
            score += self._term_score(tf, self.idf(term), doc_length, avgdl)
        return score

    def score_all(self, query_terms: Iterable[str]) -> List[ScoredDocument]:
        """
        Score every document containing at least one query term.

        Documents matching no term are left out (not scored as zero).
        Ordering: score descending, ties by ascending document id.
        """
        terms = _unique(query_terms)
        if not terms or self.index.document_count() == 0:
            return []

        avgdl = self.index.average_document_length()
        scores: Dict[DocId, float] = {}

        # Term-at-a-time accumulation over posting lists
        for term in terms:
            postings = self.index.postings_for(term)
            if not postings:
                continue
            idf = self.idf(term)
            for doc_id, tf in postings:
                doc_length = self.index.document_length(doc_id)
                scores[doc_id] = scores.get(doc_id, 0.0) + self._term_score(tf, idf, doc_length, avgdl)

        ordered = sorted(scores.items(), key=lambda item: (-item[1], doc_id_sort_key(item[0])))
        results = [
            ScoredDocument(doc_id=doc_id, score=score, rank=rank)
            for rank, (doc_id, score) in enumerate(ordered, start=1)
        ]

        logger.debug(f"BM25 scored {len(results)} documents for terms {terms}")
        return results

    def contribution_level(self, term: str) -> ContributionLevel:
        """Coarse HIGH/MEDIUM/LOW classification from the term's df/N ratio."""
        n = self.index.document_count()
        if n == 0:
            return ContributionLevel.LOW
        ratio = self.index.document_frequency(term) / n
        if ratio <= self.high_df_ratio:
            return ContributionLevel.HIGH
        if ratio <= self.medium_df_ratio:
            return ContributionLevel.MEDIUM
        return ContributionLevel.LOW

    def explain(self, query_terms: Iterable[str], doc_id: DocId) -> List[TermContribution]:
        """
        Per-term breakdown of ``score(query_terms, doc_id)``.

        Only terms occurring in the document are listed; the ``score`` fields
        sum to the document's BM25 score.

        Raises:
            NotFoundError: if ``doc_id`` is not indexed
        """
        doc_length = self.index.document_length(doc_id)
        avgdl = self.index.average_document_length()

        contributions = []
        for term in _unique(query_terms):
            tf = self.index.term_frequency(term, doc_id)
            if tf == 0:
                continue
            idf = self.idf(term)
            contributions.append(TermContribution(
                term=term,
                term_frequency=tf,
                document_frequency=self.index.document_frequency(term),
                idf=idf,
                score=self._term_score(tf, idf, doc_length, avgdl),
                level=self.contribution_level(term),
            ))
        return contributions

    def term_stats(self, query_terms: Iterable[str]) -> Dict[str, TermStats]:
        """Document frequency and IDF for each query term (idf None if unseen)."""
        stats = {}
        for term in _unique(query_terms):
            df = self.index.document_frequency(term)
            stats[term] = TermStats(document_frequency=df, idf=self.idf(term) if df else None)
        return stats

    def __repr__(self):
        return f"BM25Scorer(k1={self.k1}, b={self.b}, index={self.index!r})"
