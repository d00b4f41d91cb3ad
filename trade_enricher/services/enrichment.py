from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from ..logging.error_log import ErrorLogBuffer
from ..models.summary import EnrichmentSummary, SummaryAccumulator
from ..models.trade import EnrichedRecord, RawRecord, ValidatedTrade
from ..models.validation import ValidationFailure
from .diagnostics import MissingProductContext, MissingProductReporter, log_validation_failure
from .validation import validate_record

"""Trade enrichment service.

Replaces the product id of each valid trade row with the product name from the
catalog. Rows failing validation are discarded; rows whose product is unknown
are kept with MISSING_PRODUCT_NAME_PLACEHOLDER as the name.

The service holds no per-batch state, so enrich_one / enrich_batch may be
called from several threads at once. The only shared mutable state is the
injected MissingProductReporter (and the optional ErrorLogBuffer).
"""

__all__ = [
    "MISSING_PRODUCT_NAME_PLACEHOLDER",
    "ProductLookup",
    "TradeEnrichmentService",
]

# Downstream consumers match on this exact text; do not change.
MISSING_PRODUCT_NAME_PLACEHOLDER = "Missing Product Name"

logger = logging.getLogger(__name__)


class ProductLookup(Protocol):
    def lookup(self, product_id: int) -> tuple[str | None, bool]: ...


class TradeEnrichmentService:
    """Validate and enrich trade rows against a product catalog.

    Args:
        products: ProductCatalog / ProductRepository (anything with lookup())
        reporter: Missing-product warning deduplicator. A fresh one is created
            when omitted; pass a shared instance to dedupe across services.
        error_log: Optional audit buffer receiving one ErrorRecord per row
            discarded for missing fields or a bad date.
        log: Logger for validation diagnostics (defaults to this module's).
    """

    def __init__(
        self,
        products: ProductLookup,
        reporter: MissingProductReporter | None = None,
        error_log: ErrorLogBuffer | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        if products is None:
            raise ValueError("products lookup is required")
        self._products = products
        self._logger = log or logger
        self._reporter = reporter if reporter is not None else MissingProductReporter(self._logger)
        self._error_log = error_log

    @property
    def reporter(self) -> MissingProductReporter:
        return self._reporter

    @property
    def error_log(self) -> ErrorLogBuffer | None:
        return self._error_log

    def enrich_one(self, record: RawRecord, source: str = "-") -> EnrichedRecord | None:
        """Enrich a single row. Returns None when the row is discarded."""
        enriched, _missing_id = self._process(record, source)
        return enriched

    def enrich_batch(
        self, records: Iterable[RawRecord], source: str = "-"
    ) -> tuple[list[EnrichedRecord], EnrichmentSummary]:
        """Enrich rows in input order and summarize the outcome.

        Discarded rows are omitted from the output; the remaining rows keep
        their relative order.
        """
        output: list[EnrichedRecord] = []
        acc = SummaryAccumulator()
        for record in records:
            enriched, missing_id = self._process(record, source)
            if enriched is None:
                acc.add_discarded()
                continue
            output.append(enriched)
            if missing_id is not None:
                acc.add_missing(missing_id)
            else:
                acc.add_enriched()
        summary = acc.to_summary()
        self._logger.debug(
            f"batch source={source} total={summary.total} enriched={summary.enriched} "
            f"missing={summary.missing} discarded={summary.discarded}"
        )
        return output, summary

    def _process(self, record: RawRecord, source: str) -> tuple[EnrichedRecord | None, int | None]:
        """Run one row through validation and lookup.

        Returns (record, missing_product_id); missing_product_id is set only
        when the placeholder name was used.
        """
        result = validate_record(record)
        if isinstance(result, ValidationFailure):
            log_validation_failure(result, self._logger, self._error_log, source)
            return None, None

        trade = result.trade
        name, found = self._products.lookup(trade.product_id)
        if found and name is not None:
            return self._build(trade, name), None

        self._reporter.report_missing(
            trade.product_id,
            MissingProductContext(date=trade.date_text, currency=trade.currency, price=trade.price_text),
        )
        return self._build(trade, MISSING_PRODUCT_NAME_PLACEHOLDER), trade.product_id

    @staticmethod
    def _build(trade: ValidatedTrade, product_name: str) -> EnrichedRecord:
        return EnrichedRecord(
            date=trade.date_text,
            product_name=product_name,
            currency=trade.currency,
            price=trade.price_text,
        )
