from __future__ import annotations

import dataclasses

import pytest

from trade_enricher.models.summary import EnrichmentSummary, SummaryAccumulator, combine_summaries


def test_accumulator_counts_outcomes():
    acc = SummaryAccumulator()
    acc.add_enriched()
    acc.add_missing(4)
    acc.add_missing(4)
    acc.add_discarded()
    summary = acc.to_summary()
    assert summary == EnrichmentSummary(
        total=4, enriched=1, missing=2, discarded=1, missing_product_ids=frozenset({4})
    )
    assert summary.output_rows == 3


def test_summary_is_frozen():
    summary = SummaryAccumulator().to_summary()
    with pytest.raises(dataclasses.FrozenInstanceError):
        summary.total = 3  # type: ignore[misc]


def test_to_summary_snapshot_is_independent_of_accumulator():
    acc = SummaryAccumulator()
    acc.add_missing(1)
    summary = acc.to_summary()
    acc.add_missing(2)
    assert summary.missing_product_ids == frozenset({1})


def test_combine_summaries():
    combined = combine_summaries(
        [
            EnrichmentSummary(total=3, enriched=1, missing=1, discarded=1, missing_product_ids=frozenset({9})),
            EnrichmentSummary(total=2, enriched=0, missing=2, discarded=0, missing_product_ids=frozenset({9, 10})),
        ]
    )
    assert combined == EnrichmentSummary(
        total=5, enriched=1, missing=3, discarded=1, missing_product_ids=frozenset({9, 10})
    )


def test_combine_no_summaries():
    assert combine_summaries([]) == EnrichmentSummary()
