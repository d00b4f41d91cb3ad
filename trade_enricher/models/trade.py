from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

"""Trade record models for the trade enrichment pipeline.

A trade row moves through three shapes:

- RawRecord: the four text fields exactly as decoded from the input file
- ValidatedTrade: typed values, only produced once every field rule passed
- EnrichedRecord: output row with the product id replaced by a product name
"""

__all__ = [
    "RawRecord",
    "ValidatedTrade",
    "EnrichedRecord",
    "OUTPUT_COLUMNS",
]

# 出力CSVの列順 (固定)
OUTPUT_COLUMNS = ["date", "productName", "currency", "price"]


@dataclass(frozen=True)
class RawRecord:
    """One trade row before validation.

    Every field may be None, empty, whitespace or malformed. row_number refers to
    the 1-based data row in the source file; -1 when the origin is unknown.
    """
    date: str | None
    product_id: str | None
    currency: str | None
    price: str | None
    row_number: int = -1  # 不明な場合 -1


@dataclass(frozen=True)
class ValidatedTrade:
    """Trade row whose four fields passed their rules.

    price_text keeps the trimmed input text so that "100.00" is written back
    unchanged instead of a renormalized number.
    """
    trade_date: date
    date_text: str  # yyyyMMdd
    product_id: int  # > 0
    currency: str  # trimmed, non-empty
    price: Decimal  # >= 0
    price_text: str


@dataclass(frozen=True)
class EnrichedRecord:
    date: str  # yyyyMMdd
    product_name: str
    currency: str
    price: str

    def to_row(self) -> dict[str, str]:
        """Return the record keyed by output column name."""
        return {
            "date": self.date,
            "productName": self.product_name,
            "currency": self.currency,
            "price": self.price,
        }
