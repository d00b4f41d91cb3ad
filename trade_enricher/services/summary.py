from __future__ import annotations

from ..models.processing_result import ProcessingResult
from ..models.summary import EnrichmentSummary

"""Summary rendering for enrichment runs.

- render_batch_summary(): one line per trade file
- render_summary_line(): run-level SUMMARY line
- summary_headers(): EnrichmentSummary -> response metadata headers
"""

__all__ = [
    "format_missing_ids",
    "format_elapsed",
    "render_batch_summary",
    "render_summary_line",
    "summary_headers",
]


def format_missing_ids(ids: frozenset[int] | set[int]) -> str:
    """Render missing product ids sorted and comma separated ("-" when none)."""
    if not ids:
        return "-"
    return ",".join(str(i) for i in sorted(ids))


def format_elapsed(seconds: float) -> str:
    """Format elapsed seconds without trailing .0 and without scientific notation."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip('0').rstrip('.')
    return str(seconds)


def _counters(summary: EnrichmentSummary) -> str:
    return (
        f"total={summary.total} "
        f"enriched={summary.enriched} "
        f"missing={summary.missing} "
        f"discarded={summary.discarded} "
        f"missing_ids={format_missing_ids(summary.missing_product_ids)}"
    )


def render_batch_summary(source: str, summary: EnrichmentSummary) -> str:
    """Render the per-file summary, e.g.

    >>> s = EnrichmentSummary(total=2, enriched=1, missing=1, missing_product_ids=frozenset({2}))
    >>> render_batch_summary("trades.csv", s)
    'file=trades.csv total=2 enriched=1 missing=1 discarded=0 missing_ids=2'
    """
    return f"file={source} {_counters(summary)}"


def render_summary_line(result: ProcessingResult) -> str:
    """Render the run-level SUMMARY line.

    Format:
    SUMMARY files={n} success={s} failed={f} total={t} enriched={e} missing={m}
    discarded={d} missing_ids={ids} elapsed_sec={elapsed}
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"{_counters(result.summary)} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )


def summary_headers(summary: EnrichmentSummary) -> dict[str, str]:
    """Map a summary onto response metadata headers for a transport layer."""
    return {
        "X-Enrichment-Total-Rows": str(summary.total),
        "X-Enrichment-Enriched-Rows": str(summary.enriched),
        "X-Enrichment-Discarded-Rows": str(summary.discarded),
        "X-Enrichment-Missing-Products": str(summary.missing),
        "X-Enrichment-Unique-Missing-Product-Ids": str(len(summary.missing_product_ids)),
    }
