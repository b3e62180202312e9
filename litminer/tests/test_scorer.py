import math

import pytest


def _table(counts):
    from litminer.analyzers.base import FrequencyTable

    return FrequencyTable(("document", "term"), counts)


class TestTfIdf:
    def test_term_in_every_document_scores_zero(self):
        from litminer.analyzers.scorer import bind_tf_idf

        records = bind_tf_idf(
            _table({("A", "x"): 5, ("A", "y"): 5, ("B", "x"): 5, ("B", "z"): 15})
        )
        x = {r.document: r for r in records if r.term == "x"}
        assert x["A"].tf == pytest.approx(0.5)
        assert x["B"].tf == pytest.approx(0.25)
        assert x["A"].idf == 0.0
        assert x["A"].tf_idf == 0.0
        assert x["B"].tf_idf == 0.0

    def test_term_in_one_document(self):
        from litminer.analyzers.scorer import bind_tf_idf

        records = bind_tf_idf(_table({("A", "x"): 1, ("B", "y"): 1, ("C", "y"): 1}))
        x = next(r for r in records if r.term == "x")
        assert x.df == 1
        assert x.idf == pytest.approx(math.log(3))
        assert x.tf_idf == pytest.approx(math.log(3))

    def test_explicit_totals(self):
        from litminer.analyzers.scorer import bind_tf_idf

        records = bind_tf_idf(_table({("A", "x"): 5, ("B", "x"): 5}), totals={"A": 10, "B": 20})
        assert [r.tf for r in records] == [0.5, 0.25]
        assert [r.total for r in records] == [10, 20]

    def test_rank_ties_keep_first_encountered_order(self):
        from litminer.analyzers.scorer import bind_tf_idf

        records = bind_tf_idf(_table({("A", "a"): 2, ("A", "b"): 3, ("A", "c"): 2}))
        assert {r.term: r.rank for r in records} == {"b": 1, "a": 2, "c": 3}

    def test_zero_documents_fails(self):
        from litminer.analyzers.scorer import bind_tf_idf
        from litminer.errors import InvalidInput

        with pytest.raises(InvalidInput):
            bind_tf_idf(_table({}))

    def test_zero_total_is_invalid_input(self):
        from litminer.analyzers.scorer import bind_tf_idf
        from litminer.errors import InvalidInput, InvariantViolation

        with pytest.raises(InvalidInput) as exc:
            bind_tf_idf(_table({("A", "x"): 1}), totals={"A": 0})
        assert exc.value.key == "A"
        assert isinstance(exc.value, InvariantViolation)

    def test_negative_count_is_invariant_violation(self):
        from litminer.analyzers.scorer import bind_tf_idf
        from litminer.errors import InvariantViolation

        with pytest.raises(InvariantViolation) as exc:
            bind_tf_idf(_table({("A", "x"): -1}))
        assert exc.value.key == ("A", "x")

    def test_wrong_key_shape(self):
        from litminer.analyzers.base import FrequencyTable
        from litminer.analyzers.scorer import bind_tf_idf
        from litminer.errors import InvalidInput

        with pytest.raises(InvalidInput):
            bind_tf_idf(FrequencyTable(("term",), {("x",): 1}))

    def test_end_to_end_from_tokens(self):
        from litminer.analyzers.aggregator import count
        from litminer.analyzers.scorer import bind_tf_idf, top_terms
        from litminer.analyzers.tokenizer import tokenize

        tokens = list(tokenize(["darcy pride the"], feature="pp")) + list(
            tokenize(["emma the the"], feature="emma")
        )
        records = bind_tf_idf(count(tokens, by=("feature", "token")))
        top = top_terms(records, per_document=1)
        assert top["pp"][0].term in ("darcy", "pride")
        assert top["emma"][0].term == "emma"
        the = [r for r in records if r.term == "the"]
        assert all(r.tf_idf == 0 for r in the)


class TestZipf:
    def _records(self):
        from litminer.analyzers.base import TfIdfRecord

        return [
            TfIdfRecord(
                document="A", term=f"t{rank}", n=0, total=0, tf=0.1 / rank,
                df=1, idf=0.0, tf_idf=0.0, rank=rank,
            )
            for rank in range(1, 6)
        ]

    def test_power_law_slope(self):
        from litminer.analyzers.scorer import fit_power_law

        fit = fit_power_law(self._records())
        assert fit["slope"] == pytest.approx(-1.0)
        assert fit["intercept"] == pytest.approx(-1.0)
        assert fit["points"] == 5

    def test_rank_window(self):
        from litminer.analyzers.scorer import fit_power_law

        assert fit_power_law(self._records(), min_rank=2, max_rank=4)["points"] == 3

    def test_too_few_points(self):
        from litminer.analyzers.scorer import fit_power_law
        from litminer.errors import InvalidInput

        with pytest.raises(InvalidInput):
            fit_power_law(self._records()[:1])

    def test_rank_series(self):
        from litminer.analyzers.scorer import term_frequency_by_rank

        series = term_frequency_by_rank(list(reversed(self._records())))
        assert [rank for _, rank, _ in series] == [1, 2, 3, 4, 5]


class TestCorrelation:
    ROWS = [
        {"token": "a", "section": 0}, {"token": "b", "section": 0},
        {"token": "a", "section": 1}, {"token": "b", "section": 1},
        {"token": "c", "section": 2},
        {"token": "a", "section": 3}, {"token": "c", "section": 3},
    ]

    def test_pairwise_count(self):
        from litminer.analyzers.correlation import pairwise_count

        table = pairwise_count(self.ROWS)
        assert table[("a", "b")] == 2
        assert table[("b", "a")] == 2
        assert table[("a", "c")] == 1
        assert table[("b", "c")] == 0

    def test_pairwise_cor(self):
        from litminer.analyzers.correlation import pairwise_cor

        cor = pairwise_cor(self.ROWS)
        assert cor[("b", "c")] == pytest.approx(-1.0)
        assert cor[("a", "b")] == pytest.approx(cor[("b", "a")])
        assert cor[("a", "b")] > 0

    def test_items_in_every_section_are_skipped(self):
        from litminer.analyzers.correlation import pairwise_cor

        rows = self.ROWS + [{"token": "d", "section": s} for s in range(4)]
        assert not any("d" in pair for pair in pairwise_cor(rows))

    def test_correlated_with(self):
        from litminer.analyzers.correlation import correlated_with, pairwise_cor

        ranked = correlated_with(pairwise_cor(self.ROWS), "b")
        assert ranked[0][0] == "a"
        assert ranked[-1] == ("c", pytest.approx(-1.0))

    def test_document_similarity(self):
        from litminer.analyzers.correlation import DocumentSimilarity
        from litminer.analyzers.scorer import bind_tf_idf

        records = bind_tf_idf(
            _table({("A", "x"): 1, ("A", "y"): 1, ("B", "x"): 1, ("B", "y"): 1, ("C", "z"): 2})
        )
        documents, matrix = DocumentSimilarity().compute(records)
        assert documents == ["A", "B", "C"]
        assert matrix.shape == (3, 3)
        assert matrix[0, 1] == pytest.approx(1.0)
        assert matrix[0, 2] == pytest.approx(0.0)

    def test_document_similarity_empty(self):
        from litminer.analyzers.correlation import DocumentSimilarity

        documents, matrix = DocumentSimilarity().compute([])
        assert documents == []
        assert matrix.shape == (0, 0)
