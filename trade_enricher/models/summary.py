from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

"""Enrichment summary model and per-batch accumulator.

EnrichmentSummary is created fresh for each batch and is immutable once
returned. SummaryAccumulator collects the per-row outcomes while a batch runs;
it is owned by a single batch call and is never shared between callers.
"""

__all__ = [
    "EnrichmentSummary",
    "SummaryAccumulator",
    "combine_summaries",
]


@dataclass(frozen=True)
class EnrichmentSummary:
    """Aggregate counters for one enrichment batch.

    Invariant: total == enriched + missing + discarded.
    missing_product_ids is deduplicated within the batch, independent of how
    many rows referenced each id.
    """
    total: int = 0  # 入力行数
    enriched: int = 0  # 製品名を解決できた行
    missing: int = 0  # プレースホルダで出力した行
    discarded: int = 0  # 検証エラーで破棄した行
    missing_product_ids: frozenset[int] = field(default_factory=frozenset)

    @property
    def output_rows(self) -> int:
        """Number of rows written to the output (enriched + placeholder)."""
        return self.enriched + self.missing


class SummaryAccumulator:
    """Collects row outcomes for one batch and freezes them into a summary."""

    def __init__(self) -> None:
        self.total = 0
        self.enriched = 0
        self.missing = 0
        self.discarded = 0
        self.missing_product_ids: set[int] = set()

    def add_enriched(self) -> None:
        self.total += 1
        self.enriched += 1

    def add_missing(self, product_id: int) -> None:
        self.total += 1
        self.missing += 1
        self.missing_product_ids.add(product_id)

    def add_discarded(self) -> None:
        self.total += 1
        self.discarded += 1

    def to_summary(self) -> EnrichmentSummary:
        return EnrichmentSummary(
            total=self.total,
            enriched=self.enriched,
            missing=self.missing,
            discarded=self.discarded,
            missing_product_ids=frozenset(self.missing_product_ids),
        )


def combine_summaries(summaries: Iterable[EnrichmentSummary]) -> EnrichmentSummary:
    """Fold several batch summaries into one (counters summed, id sets unioned).

    Used for the run-level SUMMARY line when several trade files are processed.
    """
    acc = SummaryAccumulator()
    for s in summaries:
        acc.total += s.total
        acc.enriched += s.enriched
        acc.missing += s.missing
        acc.discarded += s.discarded
        acc.missing_product_ids.update(s.missing_product_ids)
    return acc.to_summary()
