"""
Query engine - ties tokenizer, inverted index, BM25 scorer and RRF fusion together.

Retrieval strategies (``SearchMode``):
- boolean: every query term except stopwords required, ranked by raw term counts
  (no IDF, no saturation, no length normalization; the baseline BM25 improves on)
- bm25: ranked retrieval with partial matches
- vector: caller-supplied nearest-neighbour ranking, passed through RRF
- hybrid: BM25 ranking fused with the caller's vector ranking via weighted RRF

Embeddings and vector search are not done here: the caller runs its
nearest-neighbour lookup first and passes the resulting doc ids (best first).

Index lifecycle (single writer, many readers):
- Every query reads one index snapshot, taken once at the start of the call
- Writers never mutate the snapshot readers hold: they build or copy a new
  index, mutate that, then swap the reference under a lock
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Sequence

from .bm25.fusion import WeightedRanking, reciprocal_rank_fusion
from .bm25.index import InvertedIndex
from .bm25.index_builder import build_index
from .bm25.scorer import BM25Scorer
from .bm25.tokenizer import STOPWORDS, Tokenizer
from .config import EngineConfig, SearchOptions
from .errors import InvalidArgumentError, NotFoundError
from .models import (
    DocId,
    Document,
    LengthFactor,
    MatchSource,
    SearchMode,
    SearchResponse,
    SearchResult,
    doc_id_sort_key,
)

logger = logging.getLogger(__name__)

KEYWORD_RANKING = "keyword"
VECTOR_RANKING = "vector"


class QueryEngine:
    """
    Stateless query orchestration over a swappable index snapshot.

    Usage:
        engine = QueryEngine(config=EngineConfig())
        engine.rebuild(documents)

        engine.query("database pooling")                          # BM25
        engine.query("secure my postgres", vector_ranking=[10, 9, 4])  # hybrid
    """

    def __init__(
        self,
        index: Optional[InvertedIndex] = None,
        config: Optional[EngineConfig] = None,
        tokenizer: Optional[Tokenizer] = None,
    ):
        self.config = config or EngineConfig()
        if tokenizer is None:
            tokenizer = index.tokenizer if index is not None else Tokenizer(
                min_length=self.config.min_term_length,
                use_stopwords=self.config.use_stopwords,
                stem=self.config.stem,
            )
        self.tokenizer = tokenizer
        self._index = index if index is not None else InvertedIndex(tokenizer)
        self._write_lock = threading.Lock()

    @property
    def index(self) -> InvertedIndex:
        """Current index snapshot. Treat as read-only."""
        return self._index

    # ------------------------------------------------------------------
    # Index lifecycle (serialized writers, copy-on-write)
    # ------------------------------------------------------------------

    def rebuild(self, documents: Iterable[Document]) -> InvertedIndex:
        """Drop and reload: build a fresh index from ``documents`` and swap it in."""
        with self._write_lock:
            new_index = build_index(documents, self.tokenizer)
            self._index = new_index
        logger.info(f"Index rebuilt: {new_index!r}")
        return new_index

    def swap_index(self, index: InvertedIndex) -> InvertedIndex:
        """Replace the current index with one built elsewhere; returns the old one."""
        with self._write_lock:
            previous, self._index = self._index, index
        logger.info(f"Index swapped: {index!r}")
        return previous

    def add_documents(self, documents: Iterable[Document]) -> None:
        """Add or replace documents on a copy of the index, then swap."""
        with self._write_lock:
            new_index = self._index.copy()
            count = 0
            for document in documents:
                new_index.add(document)
                count += 1
            self._index = new_index
        logger.debug(f"Added {count} documents: {new_index!r}")

    def add_document(self, doc_id: DocId, text: str) -> None:
        """Add or replace a raw-text document on a copy of the index, then swap."""
        with self._write_lock:
            new_index = self._index.copy()
            new_index.add_document(doc_id, text)
            self._index = new_index

    def remove_document(self, doc_id: DocId) -> None:
        """
        Remove a document on a copy of the index, then swap.

        Raises:
            NotFoundError: if ``doc_id`` is not indexed
        """
        with self._write_lock:
            if doc_id not in self._index:
                raise NotFoundError(doc_id)
            new_index = self._index.copy()
            new_index.remove_document(doc_id)
            self._index = new_index
        logger.debug(f"Removed document {doc_id!r}: {new_index!r}")

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(
        self,
        raw_text: str,
        vector_ranking: Optional[Sequence[DocId]] = None,
        options: Optional[SearchOptions] = None,
        **overrides,
    ) -> SearchResponse:
        """
        Run a search.

        Args:
            raw_text: Query text (must contain non-whitespace characters)
            vector_ranking: Doc ids from an external nearest-neighbour search,
                best first. Required for vector and hybrid modes.
            options: Per-query options; keyword arguments are accepted as a
                shorthand (``query("q", top_k=5, mode="bm25")``)

        Returns:
            SearchResponse with results sorted by score (descending), each
            carrying its source ranks and per-term diagnostics

        Raises:
            InvalidArgumentError: empty query, bad option values, or a
                vector/hybrid mode without a vector ranking
        """
        if not isinstance(raw_text, str) or not raw_text.strip():
            raise InvalidArgumentError("Query is required")

        options = self._resolve_options(options, overrides)
        config = options.apply_to(self.config)
        mode = options.mode or (SearchMode.HYBRID if vector_ranking is not None else SearchMode.BM25)

        if mode in (SearchMode.VECTOR, SearchMode.HYBRID) and vector_ranking is None:
            raise InvalidArgumentError(f"{mode.value} search requires a vector ranking")

        # One snapshot for the whole call
        index = self._index
        terms = list(dict.fromkeys(index.tokenizer.iter_tokens(raw_text)))
        scorer = BM25Scorer(
            index,
            k1=config.k1,
            b=config.b,
            high_df_ratio=config.high_df_ratio,
            medium_df_ratio=config.medium_df_ratio,
        )

        if mode is SearchMode.BOOLEAN:
            results = self._boolean_results(index, terms)
        elif mode is SearchMode.BM25:
            results = self._bm25_results(scorer, terms)
        else:
            results = self._fused_results(scorer, terms, list(vector_ranking), mode, config)

        if config.score_threshold is not None:
            results = [r for r in results if r.score >= config.score_threshold]
        if options.top_k is not None:
            results = results[:options.top_k]

        for result in results:
            self._annotate(result, index, scorer, terms, config)

        logger.debug(
            f"Query {raw_text!r} ({mode.value}): {len(terms)} terms, {len(results)} results"
        )

        return SearchResponse(
            query=raw_text,
            query_terms=terms,
            mode=mode,
            results=results,
            term_stats=scorer.term_stats(terms),
            options=SearchOptions(
                mode=mode,
                k1=config.k1,
                b=config.b,
                rrf_k=config.rrf_k,
                score_threshold=config.score_threshold,
                keyword_weight=config.keyword_weight,
                vector_weight=config.vector_weight,
                top_k=options.top_k,
            ),
        )

    def search(self, raw_text: str, **kwargs) -> List[SearchResult]:
        """Shorthand for ``query(...).results``."""
        return self.query(raw_text, **kwargs).results

    @staticmethod
    def _resolve_options(options: Optional[SearchOptions], overrides: Dict) -> SearchOptions:
        if options is None:
            return SearchOptions.build(**overrides)
        if overrides:
            return SearchOptions.build(**{**options.model_dump(exclude_none=True), **overrides})
        return options

    @staticmethod
    def _boolean_results(index: InvertedIndex, terms: List[str]) -> List[SearchResult]:
        # Stopwords are never required, as with plainto_tsquery
        required = [term for term in terms if term not in STOPWORDS]
        scores = {
            doc_id: float(sum(index.term_frequency(term, doc_id) for term in required))
            for doc_id in index.match_all(required)
        }
        ordered = sorted(scores, key=lambda doc_id: (-scores[doc_id], doc_id_sort_key(doc_id)))
        return [
            SearchResult(
                doc_id=doc_id,
                score=scores[doc_id],
                rank=rank,
                source=MatchSource.KEYWORD,
                keyword_rank=rank,
                keyword_score=scores[doc_id],
            )
            for rank, doc_id in enumerate(ordered, start=1)
        ]

    @staticmethod
    def _bm25_results(scorer: BM25Scorer, terms: List[str]) -> List[SearchResult]:
        return [
            SearchResult(
                doc_id=scored.doc_id,
                score=scored.score,
                rank=scored.rank,
                source=MatchSource.KEYWORD,
                keyword_rank=scored.rank,
                keyword_score=scored.score,
            )
            for scored in scorer.score_all(terms)
        ]

    @staticmethod
    def _fused_results(
        scorer: BM25Scorer,
        terms: List[str],
        vector_ranking: List[DocId],
        mode: SearchMode,
        config: EngineConfig,
    ) -> List[SearchResult]:
        rankings = [WeightedRanking(config.vector_weight, vector_ranking, VECTOR_RANKING)]
        keyword_scores: Dict[DocId, float] = {}

        if mode is SearchMode.HYBRID:
            keyword = scorer.score_all(terms)
            keyword_scores = {scored.doc_id: scored.score for scored in keyword}
            rankings.insert(0, WeightedRanking(
                config.keyword_weight, [scored.doc_id for scored in keyword], KEYWORD_RANKING
            ))

        results = []
        for fused in reciprocal_rank_fusion(rankings, k=config.rrf_k):
            keyword_rank = fused.ranks.get(KEYWORD_RANKING)
            vector_rank = fused.ranks.get(VECTOR_RANKING)
            if keyword_rank is not None and vector_rank is not None:
                source = MatchSource.BOTH
            elif keyword_rank is not None:
                source = MatchSource.KEYWORD
            else:
                source = MatchSource.VECTOR

            results.append(SearchResult(
                doc_id=fused.doc_id,
                score=fused.score,
                rank=fused.rank,
                source=source,
                keyword_rank=keyword_rank,
                keyword_score=keyword_scores.get(fused.doc_id),
                vector_rank=vector_rank,
            ))
        return results

    @staticmethod
    def _annotate(
        result: SearchResult,
        index: InvertedIndex,
        scorer: BM25Scorer,
        terms: List[str],
        config: EngineConfig,
    ) -> None:
        # Vector rankings may name documents this index has never seen
        if result.doc_id not in index:
            result.missing_terms = list(terms)
            return

        result.matched_terms = [t for t in terms if index.term_frequency(t, result.doc_id)]
        result.missing_terms = [t for t in terms if t not in result.matched_terms]
        result.contributions = scorer.explain(terms, result.doc_id)
        result.length_factor = length_factor(
            index.document_length(result.doc_id),
            index.average_document_length(),
            config.long_document_ratio,
        )
        result.document = index.get_document(result.doc_id)


def length_factor(doc_length: int, avgdl: float, long_document_ratio: float = 1.5) -> LengthFactor:
    """
    Classify how length normalization treats a document.

    Shorter than average -> BOOST, longer than ``long_document_ratio`` x average
    -> PENALTY, otherwise NEUTRAL.
    """
    if avgdl <= 0:
        return LengthFactor.NEUTRAL
    if doc_length < avgdl:
        return LengthFactor.BOOST
    if doc_length > avgdl * long_document_ratio:
        return LengthFactor.PENALTY
    return LengthFactor.NEUTRAL
