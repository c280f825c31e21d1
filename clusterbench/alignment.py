"""Descriptive agreement between a cluster assignment and the known binary labels."""

from __future__ import annotations

from collections import Counter, defaultdict

import numpy as np
from sklearn.metrics import adjusted_rand_score

from .types import LabelAlignment


def check_binary_labels(labels, n: int) -> np.ndarray:
    """Return labels as an int array; raise ValueError unless it has length n and only 0/1 values."""
    arr = np.asarray(labels)
    if arr.shape != (n,):
        raise ValueError(f"labels has shape {arr.shape}, expected ({n},)")
    bad = set(np.unique(arr).tolist()) - {0, 1}
    if bad:
        raise ValueError(f"labels must be binary (0/1), found {sorted(bad)}")
    return arr.astype(np.int_)


def label_alignment(assignment: np.ndarray, labels) -> LabelAlignment:
    assignment = np.asarray(assignment)
    labels = check_binary_labels(labels, assignment.shape[0])

    contingency: dict[int, dict[int, int]] = defaultdict(lambda: {0: 0, 1: 0})
    for (cluster, label), count in Counter(zip(assignment.tolist(), labels.tolist())).items():
        contingency[int(cluster)][int(label)] = count

    majority = sum(max(row.values()) for row in contingency.values())
    purity = majority / assignment.shape[0] if assignment.shape[0] else 0.0
    return LabelAlignment(
        contingency={c: dict(row) for c, row in sorted(contingency.items())},
        purity=float(purity),
        adjusted_rand=float(adjusted_rand_score(labels, assignment)),
    )
