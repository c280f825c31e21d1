"""
UMAP reducer: project a weighted or scaled TDM to a low-dimensional embedding.
Neighbor-graph based and non-linear; deterministic for a fixed random_state.
"""

from __future__ import annotations

import logging

import numpy as np
import scipy.sparse as sp

LOG = logging.getLogger(__name__)


def reduce_umap(
    X,
    d: int = 2,
    random_state: int | None = None,
    *,
    n_neighbors: int = 15,
    min_dist: float = 0.1,
    metric: str = "euclidean",
):
    """
    Fit UMAP with d components on X and return the embedding and the fitted reducer.

    Args:
        X: Matrix of shape (n, n_terms), dense or scipy sparse.
        d: Embedding dimension. Must satisfy d >= 1.
        random_state: Seed for reproducibility (passed to umap.UMAP). Setting it makes
            UMAP single-threaded, which is what makes the embedding repeatable.
        n_neighbors: Size of the local neighborhood; clamped to n - 1 for small corpora.
        min_dist: Minimum distance between embedded points.
        metric: Input-space metric used to build the neighbor graph.

    Returns:
        (Z, reducer) where Z is np.ndarray of shape (n, d) and reducer is the fitted UMAP instance.

    Raises:
        ValueError: If d < 1 or there are at most d + 1 rows (too few for the spectral
            initialization).
    """
    from umap import UMAP

    if sp.issparse(X):
        X = X.toarray()
    X = np.asarray(X, dtype=np.float64)
    n = X.shape[0]
    if d < 1:
        raise ValueError(f"d must be >= 1, got d={d}")
    if n <= d + 1:
        raise ValueError(f"UMAP with d={d} needs more than {d + 1} documents, got {n}")

    neighbors = max(2, min(n_neighbors, n - 1))
    reducer = UMAP(
        n_components=d,
        n_neighbors=neighbors,
        min_dist=min_dist,
        metric=metric,
        random_state=random_state,
    )
    LOG.info("Reducing %d x %d matrix to %d dims with UMAP (n_neighbors=%d)", n, X.shape[1], d, neighbors)
    Z = reducer.fit_transform(X)
    return np.asarray(Z, dtype=np.float64), reducer
