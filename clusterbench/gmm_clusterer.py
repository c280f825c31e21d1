"""
Gaussian mixture clusterer: EM fit of k components on a low-dimensional embedding,
each document assigned to its arg-max posterior component.
"""

from __future__ import annotations

import logging

import numpy as np
from sklearn.mixture import GaussianMixture

LOG = logging.getLogger(__name__)


def cluster_gmm(
    Z: np.ndarray,
    k: int,
    random_state: int | None = None,
    *,
    covariance_type: str = "full",
    max_iter: int = 200,
    tol: float = 1e-4,
) -> tuple[np.ndarray, GaussianMixture]:
    """
    Fit a k-component Gaussian mixture on Z by expectation-maximization.

    Args:
        Z: Embedding of shape (n, d), e.g. the output of reduce_umap().
        k: Number of mixture components. Must satisfy 1 <= k <= n.
        random_state: Seed for the k-means initialization of the responsibilities.
        covariance_type: Covariance structure; the pipeline default is "full" (one unconstrained
            covariance matrix per component).
        max_iter: EM iteration cap.
        tol: Convergence threshold on the per-sample log-likelihood lower bound.

    Returns:
        (labels, gmm) where labels is np.ndarray of shape (n,) with values 0..k-1 and gmm is the
        fitted GaussianMixture.
    """
    gmm = GaussianMixture(
        n_components=k,
        covariance_type=covariance_type,
        max_iter=max_iter,
        tol=tol,
        random_state=random_state,
    )
    gmm.fit(Z)
    if not gmm.converged_:
        LOG.warning("GMM with k=%d did not converge within max_iter=%d", k, max_iter)
    posterior = gmm.predict_proba(Z)
    labels = np.argmax(posterior, axis=1)
    return np.asarray(labels, dtype=np.int_), gmm
