from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .trade import RawRecord, ValidatedTrade

"""Validation result models.

validate_record() returns exactly one of ValidationSuccess / ValidationFailure.
Failures are ordinary values: a bad product id is an expected, high-volume
condition and is not signalled with an exception.
"""

__all__ = [
    "FailureKind",
    "ValidationFailure",
    "ValidationSuccess",
    "ValidationResult",
]


class FailureKind(Enum):
    """Classification of the first field rule a row violated.

    Rules are checked in declaration order, so the kind also tells which
    earlier rules passed.

    - MISSING_FIELDS: one or more fields null / whitespace only
    - INVALID_DATE_FORMAT: not yyyyMMdd, or an impossible calendar date
    - INVALID_PRODUCT_ID: not a base-10 integer, or <= 0
    - INVALID_CURRENCY: empty after trimming
    - INVALID_PRICE: not an invariant decimal, or negative
    """
    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    INVALID_PRODUCT_ID = "INVALID_PRODUCT_ID"
    INVALID_CURRENCY = "INVALID_CURRENCY"
    INVALID_PRICE = "INVALID_PRICE"

    @property
    def is_audited(self) -> bool:
        """True for kinds that are logged individually (data quality problems)."""
        return self in (FailureKind.MISSING_FIELDS, FailureKind.INVALID_DATE_FORMAT)


@dataclass(frozen=True)
class ValidationFailure:
    kind: FailureKind
    raw: RawRecord
    missing_fields: list[str] = field(default_factory=list)  # MISSING_FIELDS のみ
    reason: str | None = None  # INVALID_DATE_FORMAT のみ
    impossible_date: bool = False  # 形式は正しいが暦として存在しない日付

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class ValidationSuccess:
    trade: ValidatedTrade

    @property
    def ok(self) -> bool:
        return True


ValidationResult = ValidationSuccess | ValidationFailure
