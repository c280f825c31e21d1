"""
K-medoids via PAM (Partitioning Around Medoids) on a precomputed dissimilarity matrix.

BUILD picks k medoids greedily, each one lowering total dissimilarity the most; SWAP then
repeatedly applies the single medoid/non-medoid exchange that lowers the cost the most,
until no exchange helps.
"""

from __future__ import annotations

import logging

import numpy as np

LOG = logging.getLogger(__name__)


def _nearest_two(D: np.ndarray, medoids: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Per point: index (into medoids) of the nearest medoid, its distance, and the second-nearest distance."""
    dm = D[:, medoids]
    if medoids.size == 1:
        nearest = np.zeros(D.shape[0], dtype=np.int_)
        return nearest, dm[:, 0], np.full(D.shape[0], np.inf)
    order = np.argsort(dm, axis=1, kind="stable")
    rows = np.arange(D.shape[0])
    nearest = order[:, 0]
    return nearest, dm[rows, nearest], dm[rows, order[:, 1]]


def _build(D: np.ndarray, k: int) -> np.ndarray:
    medoids = [int(np.argmin(D.sum(axis=1)))]
    d1 = D[:, medoids[0]].copy()
    for _ in range(1, k):
        # gain of adding candidate o: total reduction of each point's nearest-medoid distance
        gains = np.maximum(d1[:, None] - D, 0.0).sum(axis=0)
        gains[medoids] = -np.inf
        o = int(np.argmax(gains))
        medoids.append(o)
        d1 = np.minimum(d1, D[:, o])
    return np.asarray(medoids, dtype=np.int_)


def cluster_pam(
    D: np.ndarray,
    k: int,
    random_state: int | None = None,
    *,
    max_iter: int = 100,
) -> tuple[np.ndarray, np.ndarray, float]:
    """
    Partition n points into k clusters around k medoids.

    Args:
        D: Symmetric (n, n) dissimilarity matrix with zero diagonal (Manhattan distances over the
            scaled TDM in the pipeline).
        k: Number of clusters. Must satisfy 1 <= k <= n.
        random_state: Accepted for interface parity with the other clusterers. PAM is fully
            deterministic; ties resolve to the lowest index.
        max_iter: Cap on SWAP iterations.

    Returns:
        (labels, medoids, cost) where labels is np.ndarray of shape (n,) with values 0..k-1,
        medoids holds the row index of each cluster's medoid, and cost is the total dissimilarity
        of every point to its medoid.

    Raises:
        ValueError: If D is not square or k is out of range.
    """
    D = np.asarray(D, dtype=np.float64)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise ValueError(f"D must be a square matrix, got shape {D.shape}")
    n = D.shape[0]
    if not 1 <= k <= n:
        raise ValueError(f"k must satisfy 1 <= k <= n={n}, got k={k}")

    medoids = _build(D, k)
    nearest, d1, d2 = _nearest_two(D, medoids)
    cost = float(d1.sum())
    LOG.debug("PAM BUILD: k=%d cost=%.6f", k, cost)

    for it in range(max_iter):
        best_cost, best_swap = cost, None
        is_medoid = np.zeros(n, dtype=bool)
        is_medoid[medoids] = True
        for i in range(k):
            # distance of every point to the remaining medoids once medoid i is removed
            base = np.where(nearest == i, d2, d1)
            swap_costs = np.minimum(D, base[:, None]).sum(axis=0)
            swap_costs[is_medoid] = np.inf
            o = int(np.argmin(swap_costs))
            if swap_costs[o] < best_cost - 1e-12:
                best_cost, best_swap = float(swap_costs[o]), (i, o)
        if best_swap is None:
            LOG.debug("PAM SWAP converged after %d iterations (cost=%.6f)", it, cost)
            break
        i, o = best_swap
        medoids[i] = o
        nearest, d1, d2 = _nearest_two(D, medoids)
        cost = best_cost
    else:
        LOG.warning("PAM SWAP hit max_iter=%d before converging", max_iter)

    labels = nearest.astype(np.int_)
    # duplicates of a medoid may tie with it; each medoid always labels its own cluster
    labels[medoids] = np.arange(k)
    cost = float(D[np.arange(n), medoids[labels]].sum())
    return labels, medoids.copy(), cost
