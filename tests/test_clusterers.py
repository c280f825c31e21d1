from __future__ import annotations

import unittest

import numpy as np

from clusterbench.config import PipelineConfig
from clusterbench.errors import DegenerateClusterError
from clusterbench.gmm_clusterer import cluster_gmm
from clusterbench.hierarchical_clusterer import build_dendrogram, cluster_hierarchical, cut_dendrogram
from clusterbench.kmeans_clusterer import cluster_kmeans
from clusterbench.lda_topics import fit_lda, top_terms
from clusterbench.pam_clusterer import cluster_pam
from clusterbench.strategies import (
    GMMStrategy,
    HierarchicalStrategy,
    KMeansStrategy,
    LDAStrategy,
    PAMStrategy,
    get_strategy,
)
from clusterbench.tdm_builder import build_tdm
from clusterbench.validation import distance_matrix


def _blobs(seed: int = 0, per_blob: int = 15) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    a = rng.normal(loc=0.0, scale=0.3, size=(per_blob, 2))
    b = rng.normal(loc=8.0, scale=0.3, size=(per_blob, 2))
    truth = np.array([0] * per_blob + [1] * per_blob)
    return np.vstack([a, b]), truth


def _same_partition(a: np.ndarray, b: np.ndarray) -> bool:
    pairs = set(zip(a.tolist(), b.tolist()))
    return len(pairs) == len(set(a.tolist())) == len(set(b.tolist()))


class KMeansTests(unittest.TestCase):
    def test_recovers_blobs(self) -> None:
        X, truth = _blobs()
        labels, kmeans = cluster_kmeans(X, 2, random_state=7, n_init=5)
        self.assertTrue(_same_partition(labels, truth))
        self.assertEqual(kmeans.cluster_centers_.shape, (2, 2))

    def test_same_seed_same_assignment(self) -> None:
        X = np.random.default_rng(3).normal(size=(40, 5))
        first, _ = cluster_kmeans(X, 4, random_state=11)
        second, _ = cluster_kmeans(X, 4, random_state=11)
        np.testing.assert_array_equal(first, second)


class PAMTests(unittest.TestCase):
    def test_line_example(self) -> None:
        x = np.array([0.0, 1.0, 2.0, 10.0, 11.0, 12.0])
        D = np.abs(x[:, None] - x[None, :])
        labels, medoids, cost = cluster_pam(D, 2)
        self.assertEqual(sorted(medoids.tolist()), [1, 4])
        self.assertAlmostEqual(cost, 4.0)
        self.assertTrue(_same_partition(labels, np.array([0, 0, 0, 1, 1, 1])))

    def test_every_cluster_non_empty_with_duplicates(self) -> None:
        x = np.array([0.0, 0.0, 0.0, 5.0, 5.0])
        D = np.abs(x[:, None] - x[None, :])
        labels, medoids, _ = cluster_pam(D, 3)
        self.assertEqual(np.unique(labels).size, 3)
        np.testing.assert_array_equal(labels[medoids], [0, 1, 2])

    def test_outlier_becomes_own_medoid(self) -> None:
        X, _ = _blobs(per_blob=6)
        X = np.vstack([X, [[100.0, 100.0]]])
        labels, medoids, _ = cluster_pam(distance_matrix(X, "manhattan"), 3)
        self.assertIn(12, medoids.tolist())
        self.assertEqual(int(np.sum(labels == labels[12])), 1)

    def test_rejects_bad_k(self) -> None:
        D = np.zeros((3, 3))
        with self.assertRaises(ValueError):
            cluster_pam(D, 4)


class GMMTests(unittest.TestCase):
    def test_recovers_blobs_and_is_reproducible(self) -> None:
        X, truth = _blobs()
        first, gmm = cluster_gmm(X, 2, random_state=5)
        second, _ = cluster_gmm(X, 2, random_state=5)
        self.assertTrue(_same_partition(first, truth))
        np.testing.assert_array_equal(first, second)
        self.assertEqual(gmm.covariances_.shape, (2, 2, 2))


class HierarchicalTests(unittest.TestCase):
    def test_cuts_are_nested(self) -> None:
        X = np.random.default_rng(1).normal(size=(30, 4))
        Z = build_dendrogram(X)
        cuts = cut_dendrogram(Z, [5, 10])
        coarse, fine = cuts[5], cuts[10]
        self.assertEqual(np.unique(coarse).size, 5)
        self.assertEqual(np.unique(fine).size, 10)
        for c in np.unique(fine):
            self.assertEqual(np.unique(coarse[fine == c]).size, 1)

    def test_precomputed_distances_match(self) -> None:
        X = np.random.default_rng(2).normal(size=(12, 3))
        from_x = build_dendrogram(X)
        from_d = build_dendrogram(distances=distance_matrix(X, "manhattan"))
        np.testing.assert_allclose(from_x, from_d)

    def test_single_cut_matches_dendrogram(self) -> None:
        X, truth = _blobs(per_blob=6)
        labels, Z = cluster_hierarchical(X, 2)
        self.assertEqual(Z.shape, (11, 4))
        self.assertTrue(_same_partition(labels, truth))
        np.testing.assert_array_equal(labels, cut_dendrogram(Z, [2])[2])

    def test_rejects_k_out_of_range(self) -> None:
        Z = build_dendrogram(np.random.default_rng(3).normal(size=(4, 2)))
        with self.assertRaises(ValueError):
            cut_dendrogram(Z, [5])


TOPIC_DOCS = [
    "apple banana cherry grape lemon mango melon peach",
    "banana cherry grape lemon mango melon peach apple",
    "cherry grape lemon mango apple banana peach melon",
    "engine piston valve gasket turbo clutch brake wheel",
    "piston valve gasket turbo clutch engine wheel brake",
    "valve gasket turbo clutch engine piston brake wheel",
]
# repeat each document so the two vocabularies dominate the counts
TOPIC_DOCS = [" ".join([doc] * 3) for doc in TOPIC_DOCS]


class LDATests(unittest.TestCase):
    def test_dominant_topic_and_top_terms(self) -> None:
        counts = build_tdm(TOPIC_DOCS)
        labels, lda, doc_topic = fit_lda(counts.matrix, 2, random_state=0)
        np.testing.assert_array_equal(labels, np.argmax(doc_topic, axis=1))
        self.assertEqual(doc_topic.shape, (6, 2))
        terms = top_terms(lda, counts.vocabulary, n=10)
        self.assertEqual(sorted(terms), [0, 1])
        for words in terms.values():
            self.assertEqual(len(words), 10)
            self.assertTrue(set(words) <= set(counts.vocabulary))

    def test_strategy_returns_topic_terms(self) -> None:
        counts = build_tdm(TOPIC_DOCS)
        strategy = LDAStrategy(PipelineConfig(top_n_terms=3), vocabulary=counts.vocabulary)
        assignment, terms = strategy.fit_topics(counts.matrix, 2, 0)
        self.assertEqual(assignment.method, "lda")
        self.assertEqual(assignment.labels.shape, (6,))
        self.assertTrue(all(len(words) == 3 for words in terms.values()))

    def test_unused_topic_is_degenerate(self) -> None:
        # the corpus has only two distinct bags of words, so at most two topics dominate
        counts = build_tdm(TOPIC_DOCS)
        strategy = LDAStrategy(PipelineConfig(), vocabulary=counts.vocabulary)
        with self.assertRaises(DegenerateClusterError):
            strategy.fit_topics(counts.matrix, 4, 0)


class StrategyContractTests(unittest.TestCase):
    def test_registry(self) -> None:
        for name, cls in [
            ("kmeans", KMeansStrategy),
            ("pam", PAMStrategy),
            ("gmm", GMMStrategy),
            ("hierarchical", HierarchicalStrategy),
            ("lda", LDAStrategy),
        ]:
            self.assertIsInstance(get_strategy(name), cls)
        with self.assertRaises(ValueError):
            get_strategy("dbscan")

    def test_fit_contract(self) -> None:
        X, truth = _blobs(per_blob=8)
        for strategy in (KMeansStrategy(), PAMStrategy(), GMMStrategy(), HierarchicalStrategy()):
            assignment = strategy.fit(X, 2, 42)
            self.assertEqual(assignment.method, strategy.name)
            self.assertEqual(assignment.k, 2)
            self.assertTrue(_same_partition(assignment.labels, truth), strategy.name)
            self.assertFalse(assignment.labels.flags.writeable)

    def test_k_larger_than_corpus(self) -> None:
        X, _ = _blobs(per_blob=2)
        for strategy in (KMeansStrategy(), PAMStrategy(), HierarchicalStrategy()):
            with self.assertRaises(DegenerateClusterError):
                strategy.fit(X, 5, 0)

    def test_k_below_one(self) -> None:
        X, _ = _blobs(per_blob=3)
        with self.assertRaises(DegenerateClusterError):
            KMeansStrategy().fit(X, 0, 0)

    def test_one_dendrogram_serves_every_k(self) -> None:
        X = np.random.default_rng(4).normal(size=(25, 3))
        strategy = HierarchicalStrategy()
        prepared = strategy.prepare(X, 0)
        five = strategy.assign(prepared, 5, 0).labels
        ten = strategy.assign(prepared, 10, 0).labels
        for c in np.unique(ten):
            self.assertEqual(np.unique(five[ten == c]).size, 1)


if __name__ == "__main__":
    unittest.main()
