"""
clusterbench: TDM → (TF-IDF | scaled | UMAP) → five clustering methods → Silhouette / Davies-Bouldin.
"""

from __future__ import annotations

from typing import Sequence

from .alignment import label_alignment
from .comparison import ComparisonTable
from .config import PipelineConfig
from .config_loader import load_config
from .errors import (
    DegenerateClusterError,
    EmptyVocabularyError,
    InsufficientClustersError,
    PipelineError,
)
from .pipeline import PipelineResult, run_comparison
from .representatives import get_representatives, top_terms_per_cluster
from .strategies import get_strategy
from .tdm_builder import build_tdm, prune_sparse_terms, standardize_columns
from .validation import davies_bouldin, score_partition, silhouette
from .weighting import tfidf_weight

__all__ = [
    "build_tdm",
    "prune_sparse_terms",
    "standardize_columns",
    "tfidf_weight",
    "get_strategy",
    "silhouette",
    "davies_bouldin",
    "score_partition",
    "label_alignment",
    "get_representatives",
    "top_terms_per_cluster",
    "run_comparison",
    "run_pipeline",
    "load_config",
    "ComparisonTable",
    "PipelineConfig",
    "PipelineResult",
    "PipelineError",
    "EmptyVocabularyError",
    "DegenerateClusterError",
    "InsufficientClustersError",
]


def run_pipeline(
    documents: Sequence,
    labels: Sequence[int] | None = None,
    *,
    cluster_counts: Sequence[int] = (5, 10),
    seed: int = 42,
    **options: object,
) -> PipelineResult:
    """
    Run the full comparison with keyword overrides of PipelineConfig.

    Args:
        documents: Cleaned documents (token lists or whitespace-separated strings).
        labels: Optional binary label per document; descriptive only.
        cluster_counts: Values of k to evaluate for every method.
        seed: Random seed shared by K-Means, UMAP, GMM and LDA.
        **options: Any other PipelineConfig field (e.g. methods=("kmeans", "pam"), n_jobs=4).

    Returns:
        PipelineResult; ``result.table`` is the ComparisonTable, ``result.topics[k]`` the LDA
        top terms per topic.
    """
    config = PipelineConfig(cluster_counts=tuple(cluster_counts), seed=seed, **options)
    return run_comparison(documents, labels, config)
