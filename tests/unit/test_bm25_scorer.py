"""
Unit tests for BM25Scorer.
"""

import math

import pytest
from search_lab.bm25.index import InvertedIndex
from search_lab.bm25.scorer import BM25Scorer
from search_lab.errors import InvalidArgumentError, NotFoundError
from search_lab.models import ContributionLevel


def reference_bm25(tf, df, n, dl, avgdl, k1=1.2, b=0.75):
    idf = math.log((n - df + 0.5) / (df + 0.5) + 1)
    return idf * (tf * (k1 + 1)) / (tf + k1 * (1 - b + b * dl / avgdl))


class TestBM25Formula:
    """Test scores against the textbook formula"""

    def test_single_term_matches_formula(self, pooling_index):
        scorer = BM25Scorer(pooling_index)

        score = scorer.score(["pooling"], 3)

        assert score == pytest.approx(reference_bm25(tf=1, df=2, n=10, dl=4, avgdl=4.1))

    def test_multi_term_is_sum(self, pooling_index):
        scorer = BM25Scorer(pooling_index)

        expected = (
            reference_bm25(tf=1, df=7, n=10, dl=4, avgdl=4.1)
            + reference_bm25(tf=1, df=2, n=10, dl=4, avgdl=4.1)
        )
        assert scorer.score(["database", "pooling"], 1) == pytest.approx(expected)

    def test_custom_parameters(self, pooling_index):
        scorer = BM25Scorer(pooling_index, k1=2.0, b=0.5)

        expected = reference_bm25(tf=4, df=7, n=10, dl=5, avgdl=4.1, k1=2.0, b=0.5)
        assert scorer.score(["database"], 2) == pytest.approx(expected)

    def test_idf_values(self, pooling_index):
        scorer = BM25Scorer(pooling_index)

        assert scorer.idf("pooling") == pytest.approx(math.log(8.5 / 2.5 + 1))
        assert scorer.idf("database") == pytest.approx(math.log(3.5 / 7.5 + 1))
        # Unseen terms still have a finite, positive IDF
        assert scorer.idf("nonexistent") == pytest.approx(math.log(10.5 / 0.5 + 1))

    def test_idf_positive_for_very_common_terms(self):
        index = InvertedIndex()
        for doc_id in range(5):
            index.add_document(doc_id, "database")

        assert BM25Scorer(index).idf("database") > 0

    def test_duplicate_query_terms_count_once(self, pooling_index):
        scorer = BM25Scorer(pooling_index)
        assert scorer.score(["pooling", "pooling"], 1) == scorer.score(["pooling"], 1)

    def test_zero_score_no_matches(self, pooling_index):
        scorer = BM25Scorer(pooling_index)
        assert scorer.score(["kubernetes"], 1) == 0.0
        assert scorer.score([], 1) == 0.0

    def test_unknown_document(self, pooling_index):
        with pytest.raises(NotFoundError):
            BM25Scorer(pooling_index).score(["pooling"], 999)

    def test_invalid_parameters(self, pooling_index):
        with pytest.raises(InvalidArgumentError):
            BM25Scorer(pooling_index, k1=-0.1)
        with pytest.raises(InvalidArgumentError):
            BM25Scorer(pooling_index, b=-1)
        with pytest.raises(InvalidArgumentError):
            BM25Scorer(pooling_index, b=1.5)
        with pytest.raises(InvalidArgumentError):
            BM25Scorer(pooling_index, high_df_ratio=0.8, medium_df_ratio=0.5)

    def test_b_above_one_rejected_before_scoring(self):
        """b > 1 would make the length term negative for short documents"""
        index = InvertedIndex()
        index.add_document(1, "pool")
        index.add_document(2, "pool alpha beta")

        with pytest.raises(InvalidArgumentError):
            BM25Scorer(index, k1=1.0, b=4.0)

    def test_full_length_normalization_at_b_one(self):
        index = InvertedIndex()
        index.add_document(1, "pool")
        index.add_document(2, "pool alpha beta gamma delta")
        index.add_document(3, "zzz yyy")

        results = BM25Scorer(index, b=1.0).score_all(["pool"])

        assert [r.doc_id for r in results] == [1, 2]
        assert all(r.score > 0 for r in results)


class TestScoreAll:
    """Test ranked retrieval over the whole index"""

    def test_idf_beats_raw_term_frequency(self, pooling_index):
        """Doc 1 ("database ... pooling") outranks doc 2 (four times "database")"""
        results = BM25Scorer(pooling_index).score_all(["database", "pooling"])
        ranked_ids = [r.doc_id for r in results]

        assert ranked_ids.index(1) < ranked_ids.index(2)
        assert ranked_ids[0] == 1

    def test_full_ordering_with_tie_breaks(self, pooling_index):
        """Docs 4-8 score identically and are ordered by ascending id"""
        results = BM25Scorer(pooling_index).score_all(["database", "pooling"])

        assert [r.doc_id for r in results] == [1, 3, 2, 4, 5, 6, 7, 8]
        assert [r.rank for r in results] == list(range(1, 9))
        assert len({r.score for r in results[3:]}) == 1

    def test_excludes_non_matching_documents(self, pooling_index):
        results = BM25Scorer(pooling_index).score_all(["pooling"])

        assert {r.doc_id for r in results} == {1, 3}
        for doc_id in (9, 10):
            assert doc_id not in [r.doc_id for r in results]

    def test_scores_descending(self, pooling_index):
        results = BM25Scorer(pooling_index).score_all(["database", "pooling", "strategy"])
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_consistent_with_single_document_score(self, pooling_index):
        scorer = BM25Scorer(pooling_index)
        for result in scorer.score_all(["database", "pooling"]):
            assert result.score == pytest.approx(scorer.score(["database", "pooling"], result.doc_id))

    def test_deterministic(self, pooling_index):
        scorer = BM25Scorer(pooling_index)
        first = scorer.score_all(["database", "pooling", "tuning"])
        second = scorer.score_all(["database", "pooling", "tuning"])
        assert first == second

    def test_empty_query(self, pooling_index):
        assert BM25Scorer(pooling_index).score_all([]) == []

    def test_unknown_terms(self, pooling_index):
        assert BM25Scorer(pooling_index).score_all(["nonexistent"]) == []

    def test_empty_index(self):
        """Empty index means no matches, never a division error"""
        assert BM25Scorer(InvertedIndex()).score_all(["database"]) == []


class TestBM25Properties:
    """Test IDF, saturation and length-normalization behavior"""

    def test_idf_monotonicity(self, pooling_index):
        scorer = BM25Scorer(pooling_index)
        # df: pooling=2 < database=7
        assert scorer.idf("pooling") > scorer.idf("database")
        # df: pgbouncer=1 < pooling=2
        assert scorer.idf("pgbouncer") > scorer.idf("pooling")

    def test_term_frequency_saturation(self):
        """Doubling tf from f to 2f gains less than going from f/2 to f"""
        index = InvertedIndex()
        index.add_document("half", "pool lorem lorem lorem lorem lorem lorem lorem")
        index.add_document("full", "pool pool lorem lorem lorem lorem lorem lorem")
        index.add_document("double", "pool pool pool pool lorem lorem lorem lorem")
        index.add_document("other", "ipsum ipsum ipsum ipsum ipsum ipsum ipsum ipsum")
        scorer = BM25Scorer(index)

        half = scorer.score(["pool"], "half")
        full = scorer.score(["pool"], "full")
        double = scorer.score(["pool"], "double")

        assert half < full < double
        assert (double - full) < (full - half)

    def test_saturation_bounded_by_k1(self):
        """A keyword-stuffed document can never exceed idf * (k1 + 1)"""
        index = InvertedIndex()
        index.add_document(1, " ".join(["performance"] * 100))
        index.add_document(2, "performance tips")
        index.add_document(3, "unrelated words")
        scorer = BM25Scorer(index)

        assert scorer.score(["performance"], 1) < scorer.idf("performance") * (scorer.k1 + 1)

    def test_length_normalization(self):
        """Same tf: the shorter-than-average document scores higher"""
        index = InvertedIndex()
        index.add_document("short", "pool tips")
        index.add_document("long", "pool lorem lorem lorem lorem lorem lorem lorem lorem lorem")
        scorer = BM25Scorer(index)

        avgdl = index.average_document_length()
        assert index.document_length("short") < avgdl < index.document_length("long")
        assert scorer.score(["pool"], "short") > scorer.score(["pool"], "long")

    def test_no_length_normalization_when_b_zero(self):
        index = InvertedIndex()
        index.add_document("short", "pool tips")
        index.add_document("long", "pool lorem lorem lorem lorem lorem lorem lorem lorem lorem")
        scorer = BM25Scorer(index, b=0.0)

        assert scorer.score(["pool"], "short") == pytest.approx(scorer.score(["pool"], "long"))


class TestDiagnostics:
    """Test per-term explanations and term statistics"""

    def test_explain_sums_to_score(self, pooling_index):
        scorer = BM25Scorer(pooling_index)
        contributions = scorer.explain(["database", "pooling", "missing"], 1)

        assert [c.term for c in contributions] == ["database", "pooling"]
        assert sum(c.score for c in contributions) == pytest.approx(
            scorer.score(["database", "pooling", "missing"], 1)
        )

    def test_explain_fields(self, pooling_index):
        contribution = BM25Scorer(pooling_index).explain(["database"], 2)[0]

        assert contribution.term_frequency == 4
        assert contribution.document_frequency == 7
        assert contribution.idf == pytest.approx(math.log(3.5 / 7.5 + 1))

    def test_contribution_levels(self, pooling_index):
        scorer = BM25Scorer(pooling_index)

        assert scorer.contribution_level("pooling") is ContributionLevel.HIGH      # 2/10
        assert scorer.contribution_level("database") is ContributionLevel.MEDIUM   # 7/10
        assert scorer.contribution_level("nonexistent") is ContributionLevel.HIGH  # 0/10

    def test_contribution_thresholds_configurable(self, pooling_index):
        scorer = BM25Scorer(pooling_index, high_df_ratio=0.1, medium_df_ratio=0.5)

        assert scorer.contribution_level("pooling") is ContributionLevel.MEDIUM
        assert scorer.contribution_level("database") is ContributionLevel.LOW

    def test_explain_unknown_document(self, pooling_index):
        with pytest.raises(NotFoundError):
            BM25Scorer(pooling_index).explain(["pooling"], 999)

    def test_term_stats(self, pooling_index):
        stats = BM25Scorer(pooling_index).term_stats(["database", "nonexistent"])

        assert stats["database"].document_frequency == 7
        assert stats["database"].idf == pytest.approx(math.log(3.5 / 7.5 + 1))
        assert stats["nonexistent"].document_frequency == 0
        assert stats["nonexistent"].idf is None
