"""Unit test fixtures - small in-memory corpora with known statistics"""

import pytest

from search_lab.bm25.index_builder import build_index
from search_lab.corpus import sample_documents
from search_lab.engine import QueryEngine
from search_lab.models import Document


@pytest.fixture
def pooling_documents():
    """
    10 documents, all 4-5 terms long.

    "database" appears in 7 documents (common), "pooling" in 2 (rare).
    Doc 2 repeats "database" four times.
    """
    return [
        Document(1, "database connection pooling guide"),
        Document(2, "database database database database fundamentals"),
        Document(3, "pgbouncer configuration pooling setup"),
        Document(4, "database backup strategy overview"),
        Document(5, "database replication lag monitoring"),
        Document(6, "database index tuning tips"),
        Document(7, "database schema migration tools"),
        Document(8, "database security audit checklist"),
        Document(9, "vector embeddings similarity search"),
        Document(10, "kubernetes deployment rollout strategy"),
    ]


@pytest.fixture
def pooling_index(pooling_documents):
    return build_index(pooling_documents)


@pytest.fixture
def sample_engine():
    """QueryEngine over the 15-document demo corpus"""
    engine = QueryEngine()
    engine.rebuild(sample_documents())
    return engine


@pytest.fixture
def sample_documents_engine_factory():
    """Build a QueryEngine over the demo corpus with a given config"""
    def factory(config):
        engine = QueryEngine(config=config)
        engine.rebuild(sample_documents())
        return engine

    return factory
