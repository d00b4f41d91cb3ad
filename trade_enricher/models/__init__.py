"""Domain models for the trade enricher.

This package contains the record shapes that flow through the enrichment
pipeline, the validation result types, summaries and configuration models.
"""

from .config_models import EnricherConfig, ProductDataConfig
from .summary import EnrichmentSummary, SummaryAccumulator, combine_summaries
from .trade import OUTPUT_COLUMNS, EnrichedRecord, RawRecord, ValidatedTrade
from .validation import FailureKind, ValidationFailure, ValidationResult, ValidationSuccess

__all__ = [
    # Configuration models
    "EnricherConfig",
    "ProductDataConfig",
    # Record models
    "RawRecord",
    "ValidatedTrade",
    "EnrichedRecord",
    "OUTPUT_COLUMNS",
    # Validation results
    "FailureKind",
    "ValidationFailure",
    "ValidationSuccess",
    "ValidationResult",
    # Summaries
    "EnrichmentSummary",
    "SummaryAccumulator",
    "combine_summaries",
]
