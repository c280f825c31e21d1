"""Errors raised by the clustering pipeline. Each carries a short reason code for the comparison table."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for failures scoped to one weighting scheme or one (method, k) cell."""

    reason = "pipeline_error"


class EmptyVocabularyError(PipelineError):
    """Filtering removed every term from a term-document matrix."""

    reason = "empty_vocabulary"


class DegenerateClusterError(PipelineError):
    """k is incompatible with the corpus, or a fit produced unusable clusters."""

    reason = "degenerate_cluster"


class InsufficientClustersError(PipelineError):
    """Validation was asked to score fewer than two clusters."""

    reason = "insufficient_clusters"
