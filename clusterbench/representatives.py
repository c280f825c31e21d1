"""
Representatives retrieval: for each cluster, the documents closest to the cluster centroid and
the terms with the highest mean weight (source data for word clouds).
"""

from __future__ import annotations

import numpy as np
import scipy.sparse as sp

from .types import TermDocumentMatrix


def _dense(X) -> np.ndarray:
    if sp.issparse(X):
        return np.asarray(X.toarray(), dtype=np.float64)
    return np.asarray(X, dtype=np.float64)


def get_representatives(X, labels: np.ndarray, n: int) -> dict[int, list[int]]:
    """
    Return, for each cluster label, the row indices of the n documents closest to the
    cluster centroid (Euclidean distance in the space of X).

    Args:
        X: Matrix of shape (N, d) the assignment was computed on.
        labels: Cluster assignment of length N.
        n: Number of representatives per cluster (fewer if the cluster is smaller).

    Returns:
        Dict mapping label_id (int) to at most n document indices, closest first.
    """
    X = _dense(X)
    labels = np.asarray(labels)
    if labels.shape[0] != X.shape[0]:
        raise ValueError(
            f"labels has {labels.shape[0]} entries but X has {X.shape[0]} rows."
        )

    result: dict[int, list[int]] = {}
    for c in np.unique(labels):
        indices = np.where(labels == c)[0]
        X_c = X[indices]
        centroid_c = X_c.mean(axis=0)
        dists = np.linalg.norm(X_c - centroid_c, axis=1)
        top_local = np.argsort(dists, kind="stable")[:n]
        result[int(c)] = [int(i) for i in indices[top_local]]
    return result


def top_terms_per_cluster(tdm: TermDocumentMatrix, labels: np.ndarray, n: int = 10) -> dict[int, list[str]]:
    """Return the n terms with the highest mean weight among each cluster's documents."""
    labels = np.asarray(labels)
    if labels.shape[0] != tdm.n_documents:
        raise ValueError(
            f"labels has {labels.shape[0]} entries but the TDM has {tdm.n_documents} documents."
        )

    result: dict[int, list[str]] = {}
    for c in np.unique(labels):
        rows = tdm.matrix[labels == c]
        mean_weight = np.asarray(rows.mean(axis=0)).ravel()
        order = np.argsort(-mean_weight, kind="stable")[:n]
        result[int(c)] = [tdm.vocabulary[i] for i in order if mean_weight[i] > 0]
    return result
