"""
Comparison pipeline: build every matrix once, then run each (method, k) cell and score it.

Matrices are built per weighting scheme and shared read-only by all cells. A failure building
one scheme disables only the methods that consume it; a failure inside a cell is recorded on
that cell. Cells run on a joblib thread pool; memory-heavy methods share a separate bound.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed

from .alignment import check_binary_labels, label_alignment
from .comparison import ComparisonTable
from .config import PipelineConfig
from .config_loader import validate_config
from .errors import DegenerateClusterError, EmptyVocabularyError, PipelineError
from .strategies import ClusteringStrategy, LDAStrategy, get_strategy
from .tdm_builder import Document, build_tdm, prune_sparse_terms, standardize_columns
from .types import CellResult, ScorePair, TermDocumentMatrix
from .umap_reducer import reduce_umap
from .validation import distance_matrix, score_partition
from .weighting import tfidf_weight

LOG = logging.getLogger(__name__)


@dataclass
class PipelineMatrices:
    """Every representation of the corpus; None where building it failed (see errors)."""

    raw_counts: Optional[TermDocumentMatrix] = None
    counts: Optional[TermDocumentMatrix] = None
    scaled: Optional[TermDocumentMatrix] = None
    tfidf: Optional[TermDocumentMatrix] = None
    embedding: Optional[np.ndarray] = None
    errors: Dict[str, PipelineError] = field(default_factory=dict)

    def get(self, kind: str):
        """Return the matrix consumed by input_kind, raising the error that prevented building it."""
        if kind in self.errors:
            raise self.errors[kind]
        value = getattr(self, kind)
        if value is None:
            raise KeyError(f"Matrix {kind!r} was not built")
        if isinstance(value, TermDocumentMatrix):
            return value.matrix
        return value


@dataclass
class PipelineResult:
    matrices: PipelineMatrices
    cells: Dict[Tuple[str, int], CellResult]
    topics: Dict[int, Dict[int, List[str]]]
    table: ComparisonTable


def _check_inputs(documents: Sequence[Document], labels) -> Optional[np.ndarray]:
    n = len(documents)
    if n < 2:
        raise ValueError(f"Need at least 2 documents, got {n}")
    empty = [i for i, doc in enumerate(documents) if not (doc.split() if isinstance(doc, str) else list(doc))]
    if empty:
        raise ValueError(f"Documents must be non-empty; empty at indices {empty[:10]}")
    if labels is None:
        return None
    return check_binary_labels(labels, n)


def build_matrices(
    documents: Sequence[Document],
    config: PipelineConfig,
    *,
    with_embedding: bool = True,
) -> PipelineMatrices:
    """
    Build raw counts, pruned counts, the scaled matrix, the pruned TF-IDF matrix and the
    embedding. Each failure is stored under the kinds it disables instead of being raised.
    """
    m = PipelineMatrices()
    try:
        m.raw_counts = build_tdm(documents, min_term_length=config.min_term_length)
    except EmptyVocabularyError as e:
        LOG.warning("No usable vocabulary: %s", e)
        for kind in ("raw_counts", "counts", "scaled", "tfidf", "embedding"):
            m.errors[kind] = e
        return m

    try:
        m.counts = prune_sparse_terms(m.raw_counts, config.min_doc_fraction)
        m.scaled = standardize_columns(m.counts)
    except EmptyVocabularyError as e:
        LOG.warning("Count weighting disabled: %s", e)
        m.errors["counts"] = m.errors["scaled"] = e

    try:
        m.tfidf = prune_sparse_terms(tfidf_weight(m.raw_counts), config.min_doc_fraction)
    except EmptyVocabularyError as e:
        LOG.warning("TF-IDF weighting disabled: %s", e)
        m.errors["tfidf"] = m.errors["embedding"] = e
        return m

    if with_embedding:
        try:
            m.embedding, _ = reduce_umap(
                m.tfidf.matrix,
                d=config.embedding_dim,
                random_state=config.seed,
                n_neighbors=config.umap_neighbors,
                min_dist=config.umap_min_dist,
            )
        except (ValueError, TypeError) as e:
            # the spectral layout raises TypeError on corpora too small to embed
            LOG.warning("Embedding disabled: %s", e)
            m.errors["embedding"] = DegenerateClusterError(f"embedding failed: {e}")
    return m


def _failed(strategy: ClusteringStrategy, k: int, error: PipelineError) -> CellResult:
    return CellResult(
        method=strategy.name,
        k=k,
        metric=strategy.metric,
        reason=error.reason,
        message=str(error),
    )


def _gate(strategy: ClusteringStrategy, heavy_gate: threading.BoundedSemaphore):
    return heavy_gate if strategy.heavy else contextlib.nullcontext()


def _prepare(strategy, matrix, distances, seed, heavy_gate):
    """Run strategy.prepare; return (prepared, None) or (None, error)."""
    try:
        with _gate(strategy, heavy_gate):
            return strategy.prepare(matrix, seed, distances=distances), None
    except PipelineError as e:
        return None, e


def run_cell(
    strategy: ClusteringStrategy,
    prepared,
    matrix,
    k: int,
    seed: int,
    *,
    distances: Optional[np.ndarray] = None,
    labels: Optional[np.ndarray] = None,
    heavy_gate: Optional[threading.BoundedSemaphore] = None,
) -> Tuple[CellResult, Optional[Dict[int, List[str]]]]:
    """
    Fit one (method, k) cell, score it on the strategy's own matrix and metric, and align it
    with the labels. Returns (cell, topic_terms); topic_terms is None except for LDA.
    """
    gate = heavy_gate or threading.BoundedSemaphore(1)
    cell = CellResult(method=strategy.name, k=k, metric=strategy.metric)
    terms = None
    try:
        with _gate(strategy, gate):
            if isinstance(strategy, LDAStrategy):
                assignment, terms = strategy.fit_topics(prepared, k, seed)
            else:
                assignment = strategy.assign(prepared, k, seed)
        cell.assignment = assignment
        sil, db = score_partition(matrix, assignment.labels, strategy.metric, distances=distances)
    except PipelineError as e:
        LOG.warning("%s k=%d failed: %s", strategy.name, k, e)
        cell.reason = e.reason
        cell.message = str(e)
        return cell, terms

    cell.scores = ScorePair(
        method=strategy.name, k=k, silhouette=sil, davies_bouldin=db, metric=strategy.metric
    )
    if labels is not None:
        cell.alignment = label_alignment(assignment.labels, labels)
    LOG.info("%s k=%d: silhouette=%.4f davies_bouldin=%.4f", strategy.name, k, sil, db)
    return cell, terms


def run_comparison(
    documents: Sequence[Document],
    labels=None,
    config: PipelineConfig | None = None,
) -> PipelineResult:
    """
    Run every configured method at every configured k and collect the comparison table.

    Args:
        documents: Cleaned documents (token sequences or whitespace-separated strings), none empty.
        labels: Optional binary label per document, used only for descriptive alignment.
        config: Pipeline options; defaults to PipelineConfig().

    Returns:
        PipelineResult with the shared matrices, every cell keyed by (method, k), the LDA top
        terms per k and the ComparisonTable (rows in method order, then k order).

    Raises:
        ValueError: If the inputs or the config are invalid.
    """
    config = config or PipelineConfig()
    validate_config(config)
    y = _check_inputs(documents, labels)
    strategies = [get_strategy(name, config) for name in config.methods]
    seed = config.seed
    ks = list(config.cluster_counts)

    LOG.info("Comparing %s at k=%s over %d documents", list(config.methods), ks, len(documents))
    matrices = build_matrices(
        documents, config, with_embedding=any(s.input_kind == "embedding" for s in strategies)
    )
    if matrices.counts is not None:
        for s in strategies:
            if isinstance(s, LDAStrategy):
                s.vocabulary = matrices.counts.vocabulary

    heavy_gate = threading.BoundedSemaphore(config.max_heavy_jobs)

    # one distance basis per (matrix, metric), shared by preparation and validation
    inputs: Dict[str, object] = {}
    bases: Dict[Tuple[str, str], np.ndarray] = {}
    input_errors: Dict[str, PipelineError] = {}
    for s in strategies:
        try:
            matrix = matrices.get(s.input_kind)
        except PipelineError as e:
            input_errors[s.name] = e
            continue
        inputs[s.name] = matrix
        key = (s.input_kind, s.metric)
        if key not in bases:
            with _gate(s, heavy_gate):
                bases[key] = distance_matrix(matrix, s.metric)

    runnable = [s for s in strategies if s.name in inputs]
    prepared_list = Parallel(n_jobs=config.n_jobs, prefer="threads")(
        delayed(_prepare)(s, inputs[s.name], bases[(s.input_kind, s.metric)], seed, heavy_gate)
        for s in runnable
    )
    prepared: Dict[str, object] = {}
    for s, (p, err) in zip(runnable, prepared_list):
        if err is not None:
            input_errors[s.name] = err
        else:
            prepared[s.name] = p

    jobs = [(s, k) for s in strategies if s.name in prepared for k in ks]
    outcomes = Parallel(n_jobs=config.n_jobs, prefer="threads")(
        delayed(run_cell)(
            s,
            prepared[s.name],
            inputs[s.name],
            k,
            seed,
            distances=bases[(s.input_kind, s.metric)],
            labels=y,
            heavy_gate=heavy_gate,
        )
        for s, k in jobs
    )
    done = {(s.name, k): outcome for (s, k), outcome in zip(jobs, outcomes)}

    cells: Dict[Tuple[str, int], CellResult] = {}
    topics: Dict[int, Dict[int, List[str]]] = {}
    for s in strategies:
        for k in ks:
            if s.name in input_errors:
                cells[(s.name, k)] = _failed(s, k, input_errors[s.name])
                continue
            cell, terms = done[(s.name, k)]
            cells[(s.name, k)] = cell
            if terms:
                topics[k] = terms

    table = ComparisonTable.from_cells(cells.values())
    n_failed = len(table.failed())
    if n_failed:
        LOG.warning("%d of %d cells failed", n_failed, len(table))
    return PipelineResult(matrices=matrices, cells=cells, topics=topics, table=table)
