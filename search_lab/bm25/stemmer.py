"""
Snowball Stemmer for English (via NLTK).

Optional analysis stage for the tokenizer. Disabled by default so that keyword
matches stay literal: "pooling" does not match "pool", and the per-term
diagnostics report the words the user typed. Enable with ``SEARCH_STEM=true``
(or ``Tokenizer(stem=True)``); documents and queries must share the setting.

Snowball is the improved Porter2 algorithm (same one Elasticsearch, Solr and
Lucene ship):
https://snowballstem.org/
"""

from nltk.stem.snowball import SnowballStemmer

# Shared by every Tokenizer(stem=True); stem() keeps no state between calls
_stemmer = SnowballStemmer("english")


def stem(token: str) -> str:
    """Reduce a lowercase index or query token to its Snowball stem ("pooling" -> "pool")."""
    return _stemmer.stem(token)
