from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from ..models.trade import OUTPUT_COLUMNS, EnrichedRecord

"""CSV writer for enriched trade rows.

Output columns: date,productName,currency,price. The header is written even
when there are no rows. Values are written verbatim (price text keeps its
original formatting such as trailing zeros).
"""

__all__ = [
    "render_enriched_csv",
    "write_enriched_file",
]


def _frame(records: Iterable[EnrichedRecord]) -> pd.DataFrame:
    rows = [r.to_row() for r in records]
    return pd.DataFrame(rows, columns=OUTPUT_COLUMNS, dtype=str)


def render_enriched_csv(records: Iterable[EnrichedRecord]) -> str:
    """Return enriched rows as CSV text (LF line endings)."""
    return _frame(records).to_csv(index=False, lineterminator="\n")


def write_enriched_file(records: Iterable[EnrichedRecord], path: Path) -> Path:
    """Write enriched rows to path (parent directories are created)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_enriched_csv(records), encoding="utf-8", newline="")
    return path
