from __future__ import annotations

import unittest

import numpy as np

from clusterbench.alignment import label_alignment
from clusterbench.representatives import get_representatives, top_terms_per_cluster
from clusterbench.tdm_builder import build_tdm


class LabelAlignmentTests(unittest.TestCase):
    def test_contingency_and_purity(self) -> None:
        result = label_alignment(np.array([0, 0, 0, 1, 1, 2]), [0, 0, 1, 1, 1, 0])
        self.assertEqual(result.contingency, {0: {0: 2, 1: 1}, 1: {0: 0, 1: 2}, 2: {0: 1, 1: 0}})
        self.assertAlmostEqual(result.purity, 5 / 6)

    def test_perfect_agreement(self) -> None:
        result = label_alignment(np.array([1, 1, 0, 0]), [0, 0, 1, 1])
        self.assertEqual(result.purity, 1.0)
        self.assertAlmostEqual(result.adjusted_rand, 1.0)

    def test_rejects_bad_labels(self) -> None:
        with self.assertRaises(ValueError):
            label_alignment(np.array([0, 1, 1]), [0, 1])
        with self.assertRaises(ValueError):
            label_alignment(np.array([0, 1, 1]), [0, 1, 2])


class RepresentativesTests(unittest.TestCase):
    def test_closest_to_centroid_first(self) -> None:
        X = np.array([[0.0], [1.0], [5.0], [10.0], [11.0], [12.0]])
        labels = np.array([0, 0, 0, 1, 1, 1])
        reps = get_representatives(X, labels, 2)
        # cluster 0 centroid is 2.0
        self.assertEqual(reps[0], [1, 0])
        self.assertEqual(reps[1], [4, 3])

    def test_top_terms_per_cluster(self) -> None:
        tdm = build_tdm([
            "apple apple banana",
            "apple banana",
            "engine piston piston",
            "engine piston",
        ])
        terms = top_terms_per_cluster(tdm, np.array([0, 0, 1, 1]), n=2)
        self.assertEqual(terms[0], ["apple", "banana"])
        self.assertEqual(terms[1], ["piston", "engine"])

    def test_length_mismatch(self) -> None:
        with self.assertRaises(ValueError):
            get_representatives(np.zeros((3, 2)), np.array([0, 1]), 1)


if __name__ == "__main__":
    unittest.main()
