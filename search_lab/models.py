"""
Data model shared by the index, scorer, fusion and query engine.

Plain dataclasses for values produced by the engine; pydantic models for
caller-supplied options live in ``config``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, NamedTuple, Optional, Tuple, Union

if TYPE_CHECKING:
    from .config import SearchOptions

DocId = Union[int, str]


def doc_id_sort_key(doc_id: DocId) -> Tuple[int, Union[int, str]]:
    """
    Sort key for document ids: ints numerically, strs lexically, ints first.

    Used for posting-list order and for every ascending-doc-id tie-break.
    """
    if isinstance(doc_id, int):
        return (0, doc_id)
    return (1, str(doc_id))


@dataclass(frozen=True)
class Document:
    """A source document: title + body are indexed together as ``full_text``."""
    doc_id: DocId
    title: str
    body: str = ""
    category: str = ""

    @property
    def full_text(self) -> str:
        return f"{self.title} {self.body}".strip()

    @property
    def word_count(self) -> int:
        """Whitespace-separated words of ``full_text`` (not index terms)."""
        return len(self.full_text.split())


class Posting(NamedTuple):
    """One (term, document) pair; term_frequency is always >= 1."""
    doc_id: DocId
    term_frequency: int


@dataclass
class ScoredDocument:
    """Single ranked result with score"""
    doc_id: DocId
    score: float
    rank: int           # 1-based position in the ranking


class ContributionLevel(str, Enum):
    """How discriminating a matched term is, from its document frequency."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LengthFactor(str, Enum):
    """Effect of BM25 length normalization on a document."""
    BOOST = "boost"         # shorter than average
    NEUTRAL = "neutral"
    PENALTY = "penalty"     # much longer than average


class MatchSource(str, Enum):
    """Which ranking(s) surfaced a result."""
    BOTH = "both"
    KEYWORD = "keyword"
    VECTOR = "vector"


class SearchMode(str, Enum):
    BOOLEAN = "boolean"
    BM25 = "bm25"
    VECTOR = "vector"
    HYBRID = "hybrid"


@dataclass
class TermStats:
    """Corpus statistics for one query term (idf is None when df == 0)."""
    document_frequency: int
    idf: Optional[float]


@dataclass
class TermContribution:
    """Per-term breakdown of a document's BM25 score."""
    term: str
    term_frequency: int
    document_frequency: int
    idf: float
    score: float
    level: ContributionLevel


@dataclass
class FusedResult:
    """Result of reciprocal rank fusion; ``ranks`` maps ranking name -> 1-based rank."""
    doc_id: DocId
    score: float
    rank: int
    ranks: Dict[str, int] = field(default_factory=dict)


@dataclass
class SearchResult:
    """One entry of a query response, with the diagnostics needed to explain it."""
    doc_id: DocId
    score: float
    rank: int
    source: MatchSource
    keyword_rank: Optional[int] = None
    keyword_score: Optional[float] = None
    vector_rank: Optional[int] = None
    matched_terms: List[str] = field(default_factory=list)
    missing_terms: List[str] = field(default_factory=list)
    contributions: List[TermContribution] = field(default_factory=list)
    length_factor: Optional[LengthFactor] = None
    document: Optional[Document] = None

    @property
    def found_by_both(self) -> bool:
        return self.source is MatchSource.BOTH


@dataclass
class SearchResponse:
    query: str
    query_terms: List[str]
    mode: SearchMode
    results: List[SearchResult]
    term_stats: Dict[str, TermStats] = field(default_factory=dict)
    options: Optional["SearchOptions"] = None

    @property
    def total(self) -> int:
        return len(self.results)

    def doc_ids(self) -> List[DocId]:
        return [result.doc_id for result in self.results]
