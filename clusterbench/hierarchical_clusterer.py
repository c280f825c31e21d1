"""
Agglomerative clusterer: Ward linkage over pairwise Manhattan distances, cut into flat clusters.

The dendrogram is computed once and can be cut at any number of cluster counts; cuts taken
from the same dendrogram are nested (a cut at fewer clusters coarsens one at more clusters).
"""

from __future__ import annotations

import logging
from typing import Iterable

import numpy as np
from scipy.cluster.hierarchy import cut_tree, linkage
from scipy.spatial.distance import pdist, squareform

LOG = logging.getLogger(__name__)


def build_dendrogram(X: np.ndarray | None = None, *, distances: np.ndarray | None = None) -> np.ndarray:
    """
    Compute the Ward linkage matrix.

    Args:
        X: Observations of shape (n, n_terms); Manhattan distances are computed from it.
        distances: Alternatively, a precomputed square (n, n) distance matrix.

    Returns:
        Linkage matrix of shape (n - 1, 4) as returned by scipy.cluster.hierarchy.linkage.

    Note:
        Ward's update is applied to Manhattan dissimilarities, matching a Ward clustering of a
        precomputed L1 distance object. scipy does not check that the input is Euclidean.
    """
    if distances is not None:
        condensed = squareform(np.asarray(distances, dtype=np.float64), checks=False)
    elif X is not None:
        condensed = pdist(np.asarray(X, dtype=np.float64), metric="cityblock")
    else:
        raise ValueError("build_dendrogram needs X or distances")
    if condensed.size == 0:
        raise ValueError("build_dendrogram needs at least 2 observations")
    LOG.info("Computing Ward linkage over %d pairwise Manhattan distances", condensed.size)
    return linkage(condensed, method="ward")


def cut_dendrogram(Z: np.ndarray, ks: Iterable[int]) -> dict[int, np.ndarray]:
    """
    Cut a linkage matrix into flat clusters for each k in ks.

    Returns:
        {k: labels} where labels is np.ndarray of shape (n,) with values 0..k-1.

    Raises:
        ValueError: If some k is outside 1..n.
    """
    n = Z.shape[0] + 1
    ks = [int(k) for k in ks]
    for k in ks:
        if not 1 <= k <= n:
            raise ValueError(f"k must satisfy 1 <= k <= n={n}, got k={k}")
    if not ks:
        return {}
    cuts = cut_tree(Z, n_clusters=ks)
    return {k: np.asarray(cuts[:, j], dtype=np.int_) for j, k in enumerate(ks)}


def cluster_hierarchical(X: np.ndarray, k: int) -> tuple[np.ndarray, np.ndarray]:
    """Convenience: build the dendrogram and cut it at a single k. Returns (labels, linkage)."""
    Z = build_dendrogram(X)
    return cut_dendrogram(Z, [k])[k], Z
