from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.validation import FailureKind, ValidationFailure

"""Diagnostic reporting for the enrichment pipeline.

Two policies live here:

- Missing products: WARN exactly once per distinct product id for the lifetime
  of a MissingProductReporter, no matter how many rows, batches or threads
  report the same id.
- Validation failures: MISSING_FIELDS and date failures are logged at ERROR
  for every row (audit trail, never deduplicated). Product id, currency and
  price failures are not logged individually; they only count as discarded.
"""

__all__ = [
    "MissingProductContext",
    "MissingProductReporter",
    "log_validation_failure",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MissingProductContext:
    """Validated row values included in the missing-product warning."""
    date: str
    currency: str
    price: str


class MissingProductReporter:
    """Deduplicates missing-product warnings across concurrent callers.

    One instance is owned by one enrichment service; separate services (and
    separate tests) do not share state. The already-warned set only grows.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._logger = log or logger
        self._warned: set[int] = set()
        self._lock = threading.Lock()

    def report_missing(self, product_id: int, context: MissingProductContext) -> bool:
        """Record a missing product id; log a warning only the first time.

        Returns:
            True if this call emitted the warning, False if the id had already
            been reported.
        """
        # insert-if-absent と「ログを出すか」の判定を同一ロック内で行う
        with self._lock:
            if product_id in self._warned:
                return False
            self._warned.add(product_id)
        self._logger.warning(
            f"Product ID {product_id} not found in product reference data. "
            f"Trade: Date={context.date}, Currency={context.currency}, Price={context.price}. "
            "Using placeholder."
        )
        return True

    @property
    def warned_ids(self) -> frozenset[int]:
        with self._lock:
            return frozenset(self._warned)


def log_validation_failure(
    failure: ValidationFailure,
    log: logging.Logger | None = None,
    error_log: ErrorLogBuffer | None = None,
    source: str = "-",
) -> None:
    """Log one discarded row according to its failure kind.

    Audited kinds are logged at ERROR with the full raw row and, when an
    ErrorLogBuffer is given, appended to it as an ErrorRecord.
    """
    if not failure.kind.is_audited:
        return

    log = log or logger
    raw = failure.raw
    if failure.kind is FailureKind.MISSING_FIELDS:
        message = (
            "Trade record discarded due to missing required fields: "
            f"[{', '.join(failure.missing_fields)}]. "
            f"Raw input: Date='{raw.date}', ProductId='{raw.product_id}', "
            f"Currency='{raw.currency}', Price='{raw.price}'"
        )
    else:
        message = (
            f"Invalid date format in trade row. Date='{raw.date}', ProductId={raw.product_id}, "
            f"Currency={raw.currency}, Price={raw.price}. Reason: {failure.reason}. Row discarded."
        )
    log.error(message)

    if error_log is not None:
        error_log.append(
            ErrorRecord.create(
                source=source,
                row=raw.row_number,
                error_type=failure.kind.value,
                message=message,
            )
        )
