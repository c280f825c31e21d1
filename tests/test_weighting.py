from __future__ import annotations

import math
import unittest

import numpy as np

from clusterbench.errors import EmptyVocabularyError
from clusterbench.tdm_builder import build_tdm, prune_sparse_terms
from clusterbench.weighting import inverse_document_frequency, tfidf_weight


class WeightingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tdm = build_tdm([
            "shared alpha alpha",
            "shared beta",
            "shared alpha gamma",
            "shared delta",
        ])

    def test_idf_is_log_ratio(self) -> None:
        idf = dict(zip(self.tdm.vocabulary, inverse_document_frequency(self.tdm)))
        self.assertAlmostEqual(idf["alpha"], math.log(4 / 2))
        self.assertAlmostEqual(idf["beta"], math.log(4 / 1))
        self.assertEqual(idf["shared"], 0.0)

    def test_tfidf_cells(self) -> None:
        weighted = tfidf_weight(self.tdm)
        X = weighted.to_dense()
        col = {t: i for i, t in enumerate(weighted.vocabulary)}
        self.assertEqual(weighted.shape, self.tdm.shape)
        self.assertEqual(weighted.weighting, "tfidf")
        self.assertAlmostEqual(X[0, col["alpha"]], 2 * math.log(2))
        self.assertAlmostEqual(X[1, col["beta"]], math.log(4))

    def test_ubiquitous_term_has_zero_weight(self) -> None:
        X = tfidf_weight(self.tdm).to_dense()
        shared = self.tdm.vocabulary.index("shared")
        np.testing.assert_array_equal(X[:, shared], 0.0)

    def test_weights_non_negative(self) -> None:
        X = tfidf_weight(self.tdm).to_dense()
        self.assertTrue((X >= 0).all())
        self.assertTrue((X.sum(axis=1) >= 0).all())

    def test_reprune_drops_zero_weight_columns(self) -> None:
        pruned = prune_sparse_terms(tfidf_weight(self.tdm), 0.05)
        self.assertNotIn("shared", pruned.vocabulary)
        self.assertEqual(pruned.weighting, "tfidf")

    def test_reprune_of_identical_documents_is_empty(self) -> None:
        tdm = build_tdm(["same words here"] * 5)
        with self.assertRaises(EmptyVocabularyError):
            prune_sparse_terms(tfidf_weight(tdm), 0.05)

    def test_rejects_weighted_input(self) -> None:
        with self.assertRaises(ValueError):
            tfidf_weight(tfidf_weight(self.tdm))


if __name__ == "__main__":
    unittest.main()
