"""
Comparison table: one row per (method, k) with its Silhouette and Davies-Bouldin scores.

Pure aggregation of already computed cells. Scores are copied, never recomputed. The two
scores point in opposite directions: Silhouette is better when HIGHER, Davies-Bouldin is
better when LOWER. Failed cells keep their row with null scores and a reason code.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional

from .types import CellResult

SILHOUETTE_HEADER = "silhouette (higher is better)"
DAVIES_BOULDIN_HEADER = "davies_bouldin (lower is better)"


@dataclass(frozen=True)
class ComparisonRow:
    method: str
    k: int
    metric: str
    silhouette: Optional[float]
    davies_bouldin: Optional[float]
    label_purity: Optional[float]
    status: str
    reason: Optional[str] = None
    message: str = ""


def _row(cell: CellResult) -> ComparisonRow:
    if not cell.ok or cell.scores is None:
        return ComparisonRow(
            method=cell.method,
            k=cell.k,
            metric=cell.metric,
            silhouette=None,
            davies_bouldin=None,
            label_purity=None,
            status="failed",
            reason=cell.reason,
            message=cell.message,
        )
    return ComparisonRow(
        method=cell.method,
        k=cell.k,
        metric=cell.scores.metric,
        silhouette=cell.scores.silhouette,
        davies_bouldin=cell.scores.davies_bouldin,
        label_purity=cell.alignment.purity if cell.alignment is not None else None,
        status="ok",
    )


class ComparisonTable:
    def __init__(self, rows: Iterable[ComparisonRow]) -> None:
        self._rows = tuple(rows)

    @classmethod
    def from_cells(cls, cells: Iterable[CellResult]) -> "ComparisonTable":
        """Build the table in (method, k) order as the cells are given."""
        return cls(_row(cell) for cell in cells)

    @property
    def rows(self) -> tuple[ComparisonRow, ...]:
        return self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def get(self, method: str, k: int) -> ComparisonRow:
        for row in self._rows:
            if row.method == method and row.k == k:
                return row
        raise KeyError((method, k))

    def failed(self) -> List[ComparisonRow]:
        return [r for r in self._rows if r.status != "ok"]

    def best_by_silhouette(self) -> Optional[ComparisonRow]:
        """Row with the highest Silhouette (higher is better), or None if no row succeeded."""
        scored = [r for r in self._rows if r.silhouette is not None]
        return max(scored, key=lambda r: r.silhouette) if scored else None

    def best_by_davies_bouldin(self) -> Optional[ComparisonRow]:
        """Row with the lowest Davies-Bouldin index (lower is better), or None if no row succeeded."""
        scored = [r for r in self._rows if r.davies_bouldin is not None]
        return min(scored, key=lambda r: r.davies_bouldin) if scored else None

    def as_records(self) -> List[dict]:
        return [asdict(r) for r in self._rows]

    def to_json(self, indent: int = 2) -> str:
        payload = {
            "score_direction": {"silhouette": "higher_is_better", "davies_bouldin": "lower_is_better"},
            "rows": self.as_records(),
        }
        return json.dumps(payload, indent=indent)

    def format_text(self) -> str:
        """Fixed-width text rendering; failed rows show their reason instead of scores."""
        header = (
            f"{'method':<14}{'k':>4}  {'metric':<10}"
            f"{SILHOUETTE_HEADER:>32}{DAVIES_BOULDIN_HEADER:>36}{'purity':>9}  status"
        )
        lines = [header, "-" * len(header)]
        for r in self._rows:
            if r.status == "ok":
                purity = f"{r.label_purity:.3f}" if r.label_purity is not None else "-"
                lines.append(
                    f"{r.method:<14}{r.k:>4}  {r.metric:<10}"
                    f"{r.silhouette:>32.4f}{r.davies_bouldin:>36.4f}{purity:>9}  ok"
                )
            else:
                lines.append(
                    f"{r.method:<14}{r.k:>4}  {r.metric:<10}"
                    f"{'-':>32}{'-':>36}{'-':>9}  failed: {r.reason} ({r.message})"
                )
        return "\n".join(lines)
