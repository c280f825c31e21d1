"""
Term-document matrix builder: count tokens per document, drop short terms, prune terms by
document frequency, and optionally standardize columns for distance-based methods.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence, Union

import numpy as np
import scipy.sparse as sp
from sklearn.feature_extraction.text import CountVectorizer
from sklearn.preprocessing import StandardScaler

from .errors import EmptyVocabularyError
from .types import TermDocumentMatrix

LOG = logging.getLogger(__name__)

Document = Union[str, Sequence[str]]


def _as_tokens(doc: Document) -> list[str]:
    if isinstance(doc, str):
        return doc.split()
    return list(doc)


def build_tdm(
    documents: Iterable[Document],
    *,
    min_term_length: int = 3,
    min_doc_fraction: float | None = None,
) -> TermDocumentMatrix:
    """
    Count the tokens of each cleaned document into an (n_docs, n_terms) sparse matrix.

    Args:
        documents: Cleaned documents, each a token sequence or a whitespace-separated string.
        min_term_length: Terms shorter than this many characters are dropped.
        min_doc_fraction: If given, also prune terms present in fewer than this fraction of
            documents (see prune_sparse_terms).

    Returns:
        TermDocumentMatrix with weighting "count" and an alphabetically ordered vocabulary.

    Raises:
        EmptyVocabularyError: If no term survives filtering.
    """
    tokenized = [_as_tokens(doc) for doc in documents]

    def analyzer(tokens: list[str]) -> list[str]:
        return [t for t in tokens if len(t) >= min_term_length]

    vectorizer = CountVectorizer(analyzer=analyzer, lowercase=False, dtype=np.int64)
    try:
        counts = vectorizer.fit_transform(tokenized)
    except ValueError as e:
        # CountVectorizer refuses to build an empty vocabulary
        raise EmptyVocabularyError(
            f"No term of length >= {min_term_length} in {len(tokenized)} documents"
        ) from e

    vocabulary = tuple(vectorizer.get_feature_names_out().tolist())
    tdm = TermDocumentMatrix(matrix=counts.tocsr(), vocabulary=vocabulary, weighting="count")
    LOG.info("Built TDM: %d documents x %d terms", tdm.shape[0], tdm.shape[1])

    if min_doc_fraction is not None:
        tdm = prune_sparse_terms(tdm, min_doc_fraction)
    return tdm


def document_frequencies(tdm: TermDocumentMatrix) -> np.ndarray:
    """Number of documents with a non-zero entry, per column."""
    if sp.issparse(tdm.matrix):
        return np.asarray((tdm.matrix != 0).sum(axis=0)).ravel()
    return np.count_nonzero(tdm.matrix, axis=0)


def prune_sparse_terms(tdm: TermDocumentMatrix, min_doc_fraction: float = 0.05) -> TermDocumentMatrix:
    """
    Keep only columns whose document frequency is at least min_doc_fraction of the corpus.

    Columns that are zero everywhere (e.g. TF-IDF weights of a term present in every document)
    are always dropped. The weighting tag is preserved.

    Raises:
        EmptyVocabularyError: If every column is removed.
    """
    n_docs = tdm.n_documents
    threshold = max(1, math.ceil(min_doc_fraction * n_docs - 1e-9))
    df = document_frequencies(tdm)
    keep = np.flatnonzero(df >= threshold)
    if keep.size == 0:
        raise EmptyVocabularyError(
            f"No {tdm.weighting} term appears in >= {threshold} of {n_docs} documents"
        )

    LOG.debug(
        "Pruned %s TDM: kept %d of %d terms (df >= %d)",
        tdm.weighting, keep.size, df.size, threshold,
    )
    matrix = tdm.matrix[:, keep]
    if sp.issparse(matrix):
        matrix = matrix.tocsr()
    vocabulary = tuple(tdm.vocabulary[i] for i in keep)
    return TermDocumentMatrix(matrix=matrix, vocabulary=vocabulary, weighting=tdm.weighting)


def standardize_columns(tdm: TermDocumentMatrix) -> TermDocumentMatrix:
    """
    Scale every column to zero mean and unit variance (dense result, weighting "scaled").
    Constant columns become all-zero.
    """
    X = tdm.to_dense()
    scaled = StandardScaler(with_mean=True, with_std=True).fit_transform(X)
    return TermDocumentMatrix(matrix=scaled, vocabulary=tdm.vocabulary, weighting="scaled")
