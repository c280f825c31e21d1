"""PipelineConfig dataclass: all options for a comparison run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

ALL_METHODS: Tuple[str, ...] = ("kmeans", "pam", "gmm", "hierarchical", "lda")


@dataclass
class PipelineConfig:
    # --- Evaluation grid ---
    cluster_counts: Tuple[int, ...] = (5, 10)
    methods: Tuple[str, ...] = ALL_METHODS
    seed: int = 42

    # --- Term-document matrix ---
    min_term_length: int = 3
    min_doc_fraction: float = 0.05  # keep terms present in >= 5% of documents

    # --- Centroid / Medoid ---
    kmeans_restarts: int = 25
    kmeans_max_iter: int = 300
    pam_max_iter: int = 100

    # --- Embedding + Mixture ---
    embedding_dim: int = 2
    umap_neighbors: int = 15
    umap_min_dist: float = 0.1
    gmm_covariance_type: str = "full"
    gmm_max_iter: int = 200

    # --- Topic model ---
    lda_max_iter: int = 50
    top_n_terms: int = 10

    # --- Execution ---
    n_jobs: int = 1
    max_heavy_jobs: int = 1  # concurrent Mixture / Hierarchical cells
