"""
Topic clusterer: Latent Dirichlet Allocation over the raw count TDM.

A document's cluster is its dominant topic (highest posterior probability, lowest topic id
on ties). Each topic also exposes its highest-probability terms for reporting.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from sklearn.decomposition import LatentDirichletAllocation

LOG = logging.getLogger(__name__)


def fit_lda(
    counts,
    k: int,
    random_state: int | None = None,
    *,
    max_iter: int = 50,
) -> tuple[np.ndarray, LatentDirichletAllocation, np.ndarray]:
    """
    Fit a k-topic LDA model and assign each document to its dominant topic.

    Args:
        counts: Raw count matrix of shape (n, n_terms), dense or scipy sparse. Never TF-IDF.
        k: Number of topics.
        random_state: Seed for the variational inference.
        max_iter: Number of passes over the corpus (batch variational Bayes).

    Returns:
        (labels, lda, doc_topic) where labels is np.ndarray of shape (n,) with values 0..k-1,
        lda is the fitted model and doc_topic is the (n, k) posterior topic distribution.
    """
    lda = LatentDirichletAllocation(
        n_components=k,
        learning_method="batch",
        max_iter=max_iter,
        random_state=random_state,
    )
    doc_topic = lda.fit_transform(counts)
    # np.argmax returns the first maximum, i.e. the lowest topic id on ties
    labels = np.argmax(doc_topic, axis=1)
    LOG.debug("LDA k=%d: %d of %d topics are dominant somewhere", k, np.unique(labels).size, k)
    return np.asarray(labels, dtype=np.int_), lda, doc_topic


def top_terms(
    lda: LatentDirichletAllocation,
    vocabulary: Sequence[str],
    n: int = 10,
) -> dict[int, list[str]]:
    """Return {topic_id: the n terms with the highest probability in that topic}."""
    topic_word = lda.components_ / lda.components_.sum(axis=1, keepdims=True)
    result: dict[int, list[str]] = {}
    for topic_id, weights in enumerate(topic_word):
        order = np.argsort(-weights, kind="stable")[:n]
        result[topic_id] = [vocabulary[i] for i in order]
    return result
