"""
TF-IDF weighting of a raw count term-document matrix.

Unlike sklearn's TfidfTransformer this applies the plain ``idf = ln(N / df)`` with no
smoothing, no +1 offset and no row normalization, so a term present in every document
gets zero weight.
"""

from __future__ import annotations

import numpy as np
import scipy.sparse as sp

from .tdm_builder import document_frequencies
from .types import TermDocumentMatrix


def inverse_document_frequency(tdm: TermDocumentMatrix) -> np.ndarray:
    """Return ln(N / df) per column; columns with df == 0 get 0."""
    df = document_frequencies(tdm).astype(np.float64)
    n_docs = tdm.n_documents
    idf = np.zeros_like(df)
    present = df > 0
    idf[present] = np.log(n_docs / df[present])
    return idf


def tfidf_weight(tdm: TermDocumentMatrix) -> TermDocumentMatrix:
    """
    Weight a count TDM cell-wise by tf(t, d) * idf(t). The shape and vocabulary are unchanged.

    Raises:
        ValueError: If tdm is not a raw count matrix.
    """
    if tdm.weighting != "count":
        raise ValueError(f"tfidf_weight expects a count TDM, got weighting={tdm.weighting!r}")

    idf = inverse_document_frequency(tdm)
    if sp.issparse(tdm.matrix):
        counts = tdm.matrix.astype(np.float64)
        weighted = counts.multiply(idf).tocsr()
        weighted.eliminate_zeros()
    else:
        weighted = np.asarray(tdm.matrix, dtype=np.float64) * idf
    return TermDocumentMatrix(matrix=weighted, vocabulary=tdm.vocabulary, weighting="tfidf")
