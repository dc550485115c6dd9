"""
Search Lab - keyword, vector and hybrid retrieval compared side by side.

Usage:
    from search_lab import QueryEngine, sample_documents

    engine = QueryEngine()
    engine.rebuild(sample_documents())

    # BM25 only
    response = engine.query("database pooling")

    # Hybrid: BM25 fused with an externally computed vector ranking
    response = engine.query("secure my postgres", vector_ranking=[10, 9, 11])
    for result in response.results:
        print(result.doc_id, result.score, result.source)
"""

from .bm25 import (
    BM25Scorer,
    InvertedIndex,
    Tokenizer,
    WeightedRanking,
    build_index,
    reciprocal_rank_fusion,
    tokenize,
)
from .config import EngineConfig, SearchOptions, load_config
from .corpus import sample_documents
from .engine import QueryEngine
from .errors import InvalidArgumentError, NotFoundError, SearchLabError
from .models import (
    ContributionLevel,
    Document,
    FusedResult,
    LengthFactor,
    MatchSource,
    Posting,
    ScoredDocument,
    SearchMode,
    SearchResponse,
    SearchResult,
    TermContribution,
    TermStats,
)

__version__ = "0.1.0"

__all__ = [
    "BM25Scorer",
    "InvertedIndex",
    "Tokenizer",
    "WeightedRanking",
    "build_index",
    "reciprocal_rank_fusion",
    "tokenize",
    "EngineConfig",
    "SearchOptions",
    "load_config",
    "sample_documents",
    "QueryEngine",
    "InvalidArgumentError",
    "NotFoundError",
    "SearchLabError",
    "ContributionLevel",
    "Document",
    "FusedResult",
    "LengthFactor",
    "MatchSource",
    "Posting",
    "ScoredDocument",
    "SearchMode",
    "SearchResponse",
    "SearchResult",
    "TermContribution",
    "TermStats",
]
