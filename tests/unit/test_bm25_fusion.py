"""
Unit tests for RRF (Reciprocal Rank Fusion).
"""

import pytest
from search_lab.bm25.fusion import WeightedRanking, reciprocal_rank_fusion
from search_lab.errors import InvalidArgumentError


class TestReciprocalRankFusion:
    """Test RRF fusion logic"""

    def test_basic_fusion(self):
        """Test basic RRF with two rankings"""
        fused = reciprocal_rank_fusion([
            (1.0, [1, 2, 3]),
            (1.0, [3, 1, 4]),
        ])

        doc_ids = [item.doc_id for item in fused]

        # Docs 1 and 3 appear in both rankings, should be ranked higher
        assert doc_ids[:2] == [1, 3]
        assert len(fused) == 4  # Total unique items
        assert [item.rank for item in fused] == [1, 2, 3, 4]

    def test_rrf_score_calculation(self):
        """Test RRF score calculation formula"""
        fused = reciprocal_rank_fusion([(1.0, [1, 2])], k=60)

        # RRF(doc_1, k=60) = 1/(60+1) ≈ 0.0164
        # RRF(doc_2, k=60) = 1/(60+2) ≈ 0.0161
        assert fused[0].doc_id == 1
        assert fused[1].doc_id == 2
        assert fused[0].score == pytest.approx(1 / 61)
        assert fused[1].score == pytest.approx(1 / 62)

    def test_found_in_both_lists_ranks_first(self):
        """Doc B at rank 1 in both lists beats A (ranks 2, 2) and C (rank 3 only)"""
        fused = reciprocal_rank_fusion([
            (1.0, ["B", "A", "C"]),
            (1.0, ["B", "A"]),
        ])

        assert [item.doc_id for item in fused] == ["B", "A", "C"]
        assert fused[0].score == pytest.approx(1 / 61 + 1 / 61)
        assert fused[1].score == pytest.approx(1 / 62 + 1 / 62)
        assert fused[2].score == pytest.approx(1 / 63)

    def test_symmetric_ranks_tie_broken_by_doc_id(self):
        """A at ranks (1, 2) and B at ranks (2, 1) tie; ascending id wins"""
        fused = reciprocal_rank_fusion([
            (1.0, ["A", "B", "C"]),
            (1.0, ["B", "A"]),
        ])

        assert fused[0].score == pytest.approx(fused[1].score)
        assert [item.doc_id for item in fused[:2]] == ["A", "B"]

    def test_union_keeps_single_list_documents(self):
        """A document in only one list appears with exactly that list's contribution"""
        fused = reciprocal_rank_fusion([
            (0.7, ["X", "Y"]),
            (0.3, ["Y", "Z"]),
        ])
        by_id = {item.doc_id: item for item in fused}

        assert set(by_id) == {"X", "Y", "Z"}
        assert by_id["X"].score == pytest.approx(0.7 / 61)
        assert by_id["Z"].score == pytest.approx(0.3 / 62)
        assert by_id["X"].ranks == {"list_0": 1}

    def test_weight_increase_never_demotes_single_list_document(self):
        """Raising list A's weight can only move an A-only document up"""
        previous_rank = None
        for weight in (0.0, 0.1, 0.5, 1.0, 2.0, 10.0):
            fused = reciprocal_rank_fusion([
                (weight, ["X"]),
                (1.0, ["Y", "Z", "W"]),
            ])
            rank = next(item.rank for item in fused if item.doc_id == "X")
            if previous_rank is not None:
                assert rank <= previous_rank
            previous_rank = rank

        assert previous_rank == 1

    def test_weights_not_clamped(self):
        fused = reciprocal_rank_fusion([(5.0, [1]), (-1.0, [2])])
        assert fused[0].score == pytest.approx(5.0 / 61)
        assert fused[1].score == pytest.approx(-1.0 / 61)

    def test_empty_rankings(self):
        """Test handling of empty rankings"""
        assert reciprocal_rank_fusion([]) == []
        assert reciprocal_rank_fusion([(1.0, [])]) == []

    def test_single_ranking(self):
        """Test RRF with single ranking (passthrough order)"""
        fused = reciprocal_rank_fusion([(1.0, [3, 1, 2])])
        assert [item.doc_id for item in fused] == [3, 1, 2]

    def test_duplicate_ids_keep_first_rank(self):
        fused = reciprocal_rank_fusion([(1.0, [1, 2, 1])])

        assert len(fused) == 2
        assert fused[0].score == pytest.approx(1 / 61)
        assert fused[0].ranks == {"list_0": 1}

    def test_rrf_constant_k(self):
        """Test effect of different k values"""
        fused_k60 = reciprocal_rank_fusion([(1.0, [1, 2])], k=60)
        fused_k10 = reciprocal_rank_fusion([(1.0, [1, 2])], k=10)

        # Lower k = higher scores
        assert fused_k10[0].score > fused_k60[0].score

    def test_invalid_k(self):
        with pytest.raises(InvalidArgumentError):
            reciprocal_rank_fusion([(1.0, [1])], k=0)
        with pytest.raises(InvalidArgumentError):
            reciprocal_rank_fusion([(1.0, [1])], k=-5)

    def test_named_rankings(self):
        """Named rankings report per-source ranks"""
        keyword = WeightedRanking(0.5, [3, 1, 5], "keyword")
        vector = WeightedRanking(0.5, [1, 2, 3], "vector")

        fused = reciprocal_rank_fusion([vector, keyword])

        assert [item.doc_id for item in fused] == [1, 3, 2, 5]
        assert fused[0].ranks == {"vector": 1, "keyword": 2}
        assert fused[3].ranks == {"keyword": 3}

    def test_duplicate_names_rejected(self):
        with pytest.raises(InvalidArgumentError):
            reciprocal_rank_fusion([
                WeightedRanking(1.0, [1], "same"),
                WeightedRanking(1.0, [2], "same"),
            ])

    def test_three_way_fusion(self):
        """Test RRF with three rankings"""
        fused = reciprocal_rank_fusion([
            (1.0, [1, 2]),
            (1.0, [2, 3]),
            (1.0, [1, 2, 4]),
        ])

        # Doc 2 appears in all three rankings
        assert fused[0].doc_id == 2
