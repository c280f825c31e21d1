"""
K-means clusterer: Lloyd's algorithm on the TF-IDF matrix with several random restarts.
Returns labels and the fitted KMeans object.
"""

from __future__ import annotations

import numpy as np
from sklearn.cluster import KMeans


def cluster_kmeans(
    X,
    k: int,
    random_state: int | None = None,
    *,
    n_init: int = 25,
    max_iter: int = 300,
) -> tuple[np.ndarray, KMeans]:
    """
    Fit k-means with k clusters on X and return cluster labels and the fitted KMeans object.

    Args:
        X: Matrix of shape (n, n_terms), dense or scipy sparse (e.g. the pruned TF-IDF TDM).
        k: Number of clusters. Must satisfy 1 <= k <= n (n = X.shape[0]).
        random_state: Random state for reproducibility (passed to sklearn KMeans).
        n_init: Number of random restarts; the run with the lowest inertia is kept.
        max_iter: Iteration cap for a single Lloyd run.

    Returns:
        (labels, kmeans) where labels is np.ndarray of shape (n,) dtype int (cluster indices 0..k-1),
        and kmeans is the fitted KMeans instance.

    Note:
        Centroids are seeded by picking k random documents (not k-means++), so each restart is an
        independent Lloyd run from a random initialization. Euclidean distance throughout.
    """
    kmeans = KMeans(
        n_clusters=k,
        init="random",
        n_init=n_init,
        max_iter=max_iter,
        algorithm="lloyd",
        random_state=random_state,
    )
    kmeans.fit(X)
    return np.asarray(kmeans.labels_, dtype=np.int_), kmeans
