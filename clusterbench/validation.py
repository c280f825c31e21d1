"""
Internal validation of a partition: average Silhouette width and Davies-Bouldin index.

Both scores are computed on the distance basis that produced the assignment, which callers
always pass explicitly. Silhouette is in [-1, 1] and higher is better; Davies-Bouldin is >= 0
and lower is better.
"""

from __future__ import annotations

import logging

import numpy as np
import scipy.sparse as sp
from scipy.spatial.distance import cdist
from sklearn.metrics import pairwise_distances, silhouette_samples

from .errors import DegenerateClusterError, InsufficientClustersError

LOG = logging.getLogger(__name__)

METRICS = ("euclidean", "manhattan")
_CDIST_NAMES = {"euclidean": "euclidean", "manhattan": "cityblock"}


def _dense(X) -> np.ndarray:
    if sp.issparse(X):
        return np.asarray(X.toarray(), dtype=np.float64)
    return np.asarray(X, dtype=np.float64)


def _check_metric(metric: str) -> None:
    if metric not in METRICS:
        raise ValueError(f"metric must be one of {METRICS}, got {metric!r}")


def check_partition(labels: np.ndarray, n_samples: int) -> np.ndarray:
    """
    Validate labels against the sample count and return the distinct cluster ids.

    Raises:
        ValueError: If the lengths differ.
        InsufficientClustersError: If fewer than two clusters are present.
        DegenerateClusterError: If every point is its own cluster.
    """
    labels = np.asarray(labels)
    if labels.shape != (n_samples,):
        raise ValueError(f"labels has shape {labels.shape}, expected ({n_samples},)")
    clusters = np.unique(labels)
    if clusters.size < 2:
        raise InsufficientClustersError(
            f"Silhouette and Davies-Bouldin need at least 2 clusters, got {clusters.size}"
        )
    if clusters.size >= n_samples:
        raise DegenerateClusterError(
            f"{clusters.size} clusters for {n_samples} documents: every cluster is a singleton"
        )
    return clusters


def distance_matrix(X, metric: str) -> np.ndarray:
    """Pairwise (n, n) distances under metric, with an exact zero diagonal."""
    _check_metric(metric)
    D = pairwise_distances(_dense(X), metric=metric)
    np.fill_diagonal(D, 0.0)
    return D


def silhouette(D: np.ndarray, labels: np.ndarray) -> float:
    """
    Average Silhouette width over a precomputed distance matrix.

    s(i) = (b(i) - a(i)) / max(a(i), b(i)); a point alone in its cluster contributes 0.
    """
    check_partition(labels, D.shape[0])
    values = silhouette_samples(D, labels, metric="precomputed")
    return float(np.mean(values))


def davies_bouldin(X, labels: np.ndarray, metric: str) -> float:
    """
    Davies-Bouldin index under metric.

    For clusters i and j, R_ij = (s_i + s_j) / d(c_i, c_j), where s is the mean distance of a
    cluster's members to its centroid (the member mean) and d the distance between centroids.
    DB is the mean over clusters of max_{j != i} R_ij. A pair of coincident centroids is
    skipped (its ratio counts as 0).
    """
    _check_metric(metric)
    X = _dense(X)
    clusters = check_partition(labels, X.shape[0])
    labels = np.asarray(labels)
    name = _CDIST_NAMES[metric]

    centroids = np.vstack([X[labels == c].mean(axis=0) for c in clusters])
    scatter = np.array([
        float(np.mean(cdist(X[labels == c], centroids[i:i + 1], metric=name)))
        for i, c in enumerate(clusters)
    ])
    separation = cdist(centroids, centroids, metric=name)

    with np.errstate(divide="ignore", invalid="ignore"):
        ratios = (scatter[:, None] + scatter[None, :]) / separation
    ratios[~np.isfinite(ratios)] = 0.0
    np.fill_diagonal(ratios, 0.0)
    return float(np.mean(ratios.max(axis=1)))


def score_partition(
    X,
    labels: np.ndarray,
    metric: str,
    *,
    distances: np.ndarray | None = None,
) -> tuple[float, float]:
    """
    Return (silhouette, davies_bouldin) for labels over X under metric.

    Args:
        X: The matrix the assignment was produced from.
        labels: Cluster assignment of length n.
        metric: "euclidean" or "manhattan".
        distances: Optional precomputed distance_matrix(X, metric), reused when given.
    """
    _check_metric(metric)
    if distances is None:
        distances = distance_matrix(X, metric)
    sil = silhouette(distances, labels)
    db = davies_bouldin(X, labels, metric)
    LOG.debug("Scored partition (%s): silhouette=%.4f davies_bouldin=%.4f", metric, sil, db)
    return sil, db
