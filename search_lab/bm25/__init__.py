"""
BM25 (Best Match 25) ranking engine for keyword and hybrid search.

This package replaces the database-side BM25 extension with an explicit,
in-process implementation.

Components:
- tokenizer: Text analysis (lowercase, split, length/stopword filters)
- stemmer: Optional Snowball stemming stage
- index: Inverted index with corpus statistics (N, avgdl, df)
- index_builder: Batch build of a fresh index from documents
- scorer: Standard BM25 scoring with per-term diagnostics
- fusion: Weighted RRF (Reciprocal Rank Fusion) for combining rankings
"""

from .tokenizer import STOPWORDS, Tokenizer, iter_tokens, tokenize
from .stemmer import stem
from .index import InvertedIndex
from .index_builder import build_index
from .scorer import BM25Scorer
from .fusion import WeightedRanking, reciprocal_rank_fusion

__all__ = [
    "STOPWORDS",
    "Tokenizer",
    "iter_tokens",
    "tokenize",
    "stem",
    "InvertedIndex",
    "build_index",
    "BM25Scorer",
    "WeightedRanking",
    "reciprocal_rank_fusion",
]
