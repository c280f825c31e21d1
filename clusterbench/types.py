from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
import scipy.sparse as sp

Matrix = Union[np.ndarray, sp.csr_matrix]


@dataclass(frozen=True)
class TermDocumentMatrix:
    """Rows are documents, columns are ``vocabulary`` terms in a fixed order."""

    matrix: Matrix
    vocabulary: tuple[str, ...]
    weighting: str = "count"

    @property
    def shape(self) -> tuple[int, int]:
        return self.matrix.shape

    @property
    def n_documents(self) -> int:
        return self.matrix.shape[0]

    def to_dense(self) -> np.ndarray:
        if sp.issparse(self.matrix):
            return np.asarray(self.matrix.toarray(), dtype=np.float64)
        return np.asarray(self.matrix, dtype=np.float64)


@dataclass(frozen=True)
class ClusterAssignment:
    method: str
    k: int
    labels: np.ndarray

    def __post_init__(self) -> None:
        labels = np.array(self.labels, dtype=np.int_, copy=True)
        labels.setflags(write=False)
        object.__setattr__(self, "labels", labels)

    @property
    def n_clusters(self) -> int:
        return int(np.unique(self.labels).size)


@dataclass(frozen=True)
class ScorePair:
    method: str
    k: int
    silhouette: float
    davies_bouldin: float
    metric: str


@dataclass(frozen=True)
class LabelAlignment:
    contingency: dict[int, dict[int, int]]
    purity: float
    adjusted_rand: float


@dataclass
class CellResult:
    method: str
    k: int
    metric: str
    assignment: Optional[ClusterAssignment] = None
    scores: Optional[ScorePair] = None
    alignment: Optional[LabelAlignment] = None
    reason: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.reason is None
