"""
Tokenizer for BM25 text processing.

Tokenization pipeline:
1. Lowercase conversion
2. Split on runs of non-alphanumeric characters (Unicode-aware, "_" splits too)
3. Drop tokens shorter than ``min_length`` (default 2 keeps "db", "ai")
4. Optional: filter stopwords (common English words)
5. Optional: apply stemming ("pooling" → "pool")

Steps 4 and 5 are off by default so that an index built with the defaults
matches exact lowercase words.

Future enhancements (optional):
- Synonym expansion
- Multi-language stopword lists
"""

import re
from typing import Callable, Iterable, Iterator, List, Optional

from ..errors import InvalidArgumentError
from .stemmer import stem as snowball_stem

DEFAULT_MIN_LENGTH = 2

# English stopwords (based on Elasticsearch/Lucene standard list)
# These are common words that don't help with ranking
STOPWORDS = frozenset([
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'but', 'by',
    'for', 'if', 'in', 'into', 'is', 'it',
    'no', 'not', 'of', 'on', 'or', 'such',
    'that', 'the', 'their', 'then', 'there', 'these',
    'they', 'this', 'to', 'was', 'will', 'with'
])

# Runs of letters/digits in any script; everything else (including "_") separates
_WORD_PATTERN = re.compile(r'[^\W_]+')


def iter_tokens(
    text: Optional[str],
    min_length: int = DEFAULT_MIN_LENGTH,
    stopwords: Optional[Iterable[str]] = None,
    stemmer: Optional[Callable[[str], str]] = None,
) -> Iterator[str]:
    """
    Lazily yield index terms from text, in order of appearance.

    Never raises for odd input: ``None`` or blank text yields nothing.

    Args:
        text: Raw text to analyze
        min_length: Minimum token length (characters) to keep
        stopwords: Optional set of lowercase words to drop
        stemmer: Optional callable applied to each surviving token

    Yields:
        Lowercase terms

    Examples:
        >>> list(iter_tokens("PgBouncer: DB connection-pooling!"))
        ['pgbouncer', 'db', 'connection', 'pooling']
    """
    if not text:
        return

    stop = frozenset(stopwords) if stopwords is not None else None

    for match in _WORD_PATTERN.finditer(text.lower()):
        token = match.group()
        if len(token) < min_length:
            continue
        if stop is not None and token in stop:
            continue
        if stemmer is not None:
            token = stemmer(token)
        yield token


def tokenize(
    text: Optional[str],
    min_length: int = DEFAULT_MIN_LENGTH,
    stopwords: Optional[Iterable[str]] = None,
    stemmer: Optional[Callable[[str], str]] = None,
) -> List[str]:
    """
    Tokenize text for BM25 scoring.

    Args:
        text: Input text to tokenize
        min_length: Minimum token length to keep (default: 2)
        stopwords: Optional stopword set (e.g. ``STOPWORDS``)
        stemmer: Optional stemming function (e.g. ``stem``)

    Returns:
        List of lowercase tokens

    Examples:
        >>> tokenize("Database Connection Pooling Guide")
        ['database', 'connection', 'pooling', 'guide']

        >>> tokenize("Use EXPLAIN ANALYZE on pg_stat_statements")
        ['use', 'explain', 'analyze', 'on', 'pg', 'stat', 'statements']

        >>> tokenize("a b c")
        []

        >>> tokenize("   ")
        []
    """
    return list(iter_tokens(text, min_length=min_length, stopwords=stopwords, stemmer=stemmer))


class Tokenizer:
    """
    Configured analyzer shared by the index and the query engine.

    Documents and queries must go through the same analyzer, otherwise
    stemmed index terms never match unstemmed query terms.
    """

    def __init__(self, min_length: int = DEFAULT_MIN_LENGTH, use_stopwords: bool = False, stem: bool = False):
        if min_length < 1:
            raise InvalidArgumentError(f"min_length must be >= 1, got {min_length}")
        self.min_length = min_length
        self.use_stopwords = use_stopwords
        self.stem = stem
        self._stopwords = STOPWORDS if use_stopwords else None
        self._stemmer = snowball_stem if stem else None

    def iter_tokens(self, text: Optional[str]) -> Iterator[str]:
        return iter_tokens(text, min_length=self.min_length, stopwords=self._stopwords, stemmer=self._stemmer)

    def tokenize(self, text: Optional[str]) -> List[str]:
        return list(self.iter_tokens(text))

    __call__ = tokenize

    def __repr__(self):
        return (
            f"Tokenizer(min_length={self.min_length}, "
            f"use_stopwords={self.use_stopwords}, stem={self.stem})"
        )
