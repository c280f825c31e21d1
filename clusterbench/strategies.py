"""
Clustering strategies behind one contract: ``fit(matrix, k, seed) -> ClusterAssignment``.

Each strategy names the matrix it consumes (``input_kind``), the distance basis its partitions
are validated under (``metric``) and whether it is memory-heavy. ``prepare`` builds whatever is
shared across cluster counts (a distance matrix, a dendrogram) so that ``fit_prepared`` can be
called once per k without recomputation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import numpy as np
import scipy.sparse as sp

from .config import PipelineConfig
from .errors import DegenerateClusterError
from .gmm_clusterer import cluster_gmm
from .hierarchical_clusterer import build_dendrogram, cut_dendrogram
from .kmeans_clusterer import cluster_kmeans
from .lda_topics import fit_lda, top_terms
from .pam_clusterer import cluster_pam
from .types import ClusterAssignment
from .validation import distance_matrix

LOG = logging.getLogger(__name__)


def _n_rows(matrix) -> int:
    return matrix.shape[0]


def _dense(matrix) -> np.ndarray:
    if sp.issparse(matrix):
        return np.asarray(matrix.toarray(), dtype=np.float64)
    return np.asarray(matrix, dtype=np.float64)


class ClusteringStrategy:
    """Base class. Subclasses implement fit_prepared and may override prepare."""

    name = ""
    input_kind = ""
    metric = "euclidean"
    heavy = False

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config = config or PipelineConfig()

    def prepare(self, matrix, seed: int, distances: np.ndarray | None = None) -> Any:
        """Build what fit_prepared needs. distances, when given, is distance_matrix(matrix, self.metric)."""
        return matrix

    def fit_prepared(self, prepared: Any, k: int, seed: int) -> np.ndarray:
        raise NotImplementedError

    def n_documents(self, prepared: Any) -> int:
        return _n_rows(prepared)

    def _check_k(self, prepared: Any, k: int) -> None:
        n = self.n_documents(prepared)
        if k < 1:
            raise DegenerateClusterError(f"{self.name}: k must be >= 1, got {k}")
        if k > n:
            raise DegenerateClusterError(f"{self.name}: k={k} exceeds the {n} documents")

    def _to_assignment(self, labels: np.ndarray, k: int) -> ClusterAssignment:
        labels = np.asarray(labels, dtype=np.int_)
        found = int(np.unique(labels).size)
        if found < k:
            raise DegenerateClusterError(
                f"{self.name}: produced {found} non-empty clusters, {k} requested"
            )
        return ClusterAssignment(method=self.name, k=k, labels=labels)

    def assign(self, prepared: Any, k: int, seed: int) -> ClusterAssignment:
        """Check k, fit, and check the resulting partition."""
        self._check_k(prepared, k)
        return self._to_assignment(self.fit_prepared(prepared, k, seed), k)

    def fit(self, matrix, k: int, seed: int) -> ClusterAssignment:
        return self.assign(self.prepare(matrix, seed), k, seed)


class KMeansStrategy(ClusteringStrategy):
    """Centroid: Lloyd k-means on the TF-IDF matrix."""

    name = "kmeans"
    input_kind = "tfidf"
    metric = "euclidean"

    def fit_prepared(self, prepared, k: int, seed: int) -> np.ndarray:
        labels, _ = cluster_kmeans(
            prepared,
            k,
            random_state=seed,
            n_init=self.config.kmeans_restarts,
            max_iter=self.config.kmeans_max_iter,
        )
        return labels


class PAMStrategy(ClusteringStrategy):
    """Medoid: PAM over Manhattan distances of the scaled TDM."""

    name = "pam"
    input_kind = "scaled"
    metric = "manhattan"

    def prepare(self, matrix, seed: int, distances: np.ndarray | None = None) -> np.ndarray:
        if distances is not None:
            return distances
        return distance_matrix(matrix, "manhattan")

    def fit_prepared(self, prepared: np.ndarray, k: int, seed: int) -> np.ndarray:
        labels, _, _ = cluster_pam(prepared, k, random_state=seed, max_iter=self.config.pam_max_iter)
        return labels


class GMMStrategy(ClusteringStrategy):
    """Mixture: EM Gaussian mixture on the low-dimensional embedding."""

    name = "gmm"
    input_kind = "embedding"
    metric = "euclidean"
    heavy = True

    def prepare(self, matrix, seed: int, distances: np.ndarray | None = None) -> np.ndarray:
        return _dense(matrix)

    def fit_prepared(self, prepared: np.ndarray, k: int, seed: int) -> np.ndarray:
        labels, _ = cluster_gmm(
            prepared,
            k,
            random_state=seed,
            covariance_type=self.config.gmm_covariance_type,
            max_iter=self.config.gmm_max_iter,
        )
        return labels


class HierarchicalStrategy(ClusteringStrategy):
    """Agglomerative: one Ward dendrogram over Manhattan distances, cut per k."""

    name = "hierarchical"
    input_kind = "scaled"
    metric = "manhattan"
    heavy = True

    def prepare(self, matrix, seed: int, distances: np.ndarray | None = None) -> np.ndarray:
        if distances is not None:
            return build_dendrogram(distances=distances)
        return build_dendrogram(_dense(matrix))

    def n_documents(self, prepared: np.ndarray) -> int:
        return prepared.shape[0] + 1

    def fit_prepared(self, prepared: np.ndarray, k: int, seed: int) -> np.ndarray:
        return cut_dendrogram(prepared, [k])[k]


class LDAStrategy(ClusteringStrategy):
    """Topic: LDA on raw counts; cluster = dominant topic. A topic dominant nowhere leaves its cluster empty."""

    name = "lda"
    input_kind = "counts"
    metric = "manhattan"

    def __init__(self, config: PipelineConfig | None = None, vocabulary=None) -> None:
        super().__init__(config)
        self.vocabulary = vocabulary

    def _fit(self, prepared, k: int, seed: int):
        return fit_lda(prepared, k, random_state=seed, max_iter=self.config.lda_max_iter)

    def fit_prepared(self, prepared, k: int, seed: int) -> np.ndarray:
        labels, _, _ = self._fit(prepared, k, seed)
        return labels

    def fit_topics(self, prepared, k: int, seed: int) -> tuple[ClusterAssignment, Dict[int, list[str]]]:
        """Like assign(), but also return the top terms of each topic (empty without a vocabulary)."""
        self._check_k(prepared, k)
        labels, lda, _ = self._fit(prepared, k, seed)
        assignment = self._to_assignment(labels, k)
        terms: Dict[int, list[str]] = {}
        if self.vocabulary is not None:
            terms = top_terms(lda, self.vocabulary, n=self.config.top_n_terms)
        return assignment, terms


STRATEGIES = {
    cls.name: cls
    for cls in (KMeansStrategy, PAMStrategy, GMMStrategy, HierarchicalStrategy, LDAStrategy)
}


def get_strategy(name: str, config: PipelineConfig | None = None) -> ClusteringStrategy:
    """Instantiate the strategy registered under name."""
    try:
        cls = STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown clustering method {name!r}; choose from {sorted(STRATEGIES)}") from None
    return cls(config)
