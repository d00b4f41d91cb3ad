from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from ..models.trade import RawRecord, ValidatedTrade
from ..models.validation import FailureKind, ValidationFailure, ValidationResult, ValidationSuccess

"""Field validation and parsing for raw trade rows.

Rules are evaluated in a fixed order and the first violated rule decides the
failure kind, because downstream logging differs by kind:

1. presence  (date, productId, currency, price: non-null, not whitespace only)
2. date      (trimmed, 8 ASCII digits, year not 1..999, real calendar date)
3. productId (base-10 integer in 32-bit range, > 0)
4. currency  (non-empty after trimming)
5. price     (invariant decimal, >= 0; trimmed text is kept for output)

All functions here are pure and never raise for bad input.
"""

__all__ = [
    "DATE_FORMAT_REASON",
    "DATE_CALENDAR_REASON",
    "FIELD_NAMES",
    "collect_missing_fields",
    "parse_trade_date",
    "parse_product_id",
    "parse_price",
    "validate_record",
]

DATE_FORMAT_REASON = "Date must be in yyyyMMdd format."
DATE_CALENDAR_REASON = "Date string does not represent a valid calendar date."

# RawRecord attribute -> reported field name (report order is fixed)
FIELD_NAMES: dict[str, str] = {
    "date": "date",
    "product_id": "productId",
    "currency": "currency",
    "price": "price",
}

MAX_PRODUCT_ID = 2**31 - 1
# 96-bit decimal upper bound
MAX_PRICE = Decimal("79228162514264337593543950335")

_DATE_TOKEN = re.compile(r"^[0-9]{8}$")
_INT_TOKEN = re.compile(r"^[+-]?[0-9]+$")
_DECIMAL_TOKEN = re.compile(r"^(?P<sign>[+-])?(?P<int>[0-9][0-9,]*)?(?:\.(?P<frac>[0-9]*))?$")


def _is_blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def collect_missing_fields(raw: RawRecord) -> list[str]:
    """Return the names of fields that are null or whitespace only."""
    return [name for attr, name in FIELD_NAMES.items() if _is_blank(getattr(raw, attr))]


def parse_trade_date(text: str) -> tuple[date | None, str | None]:
    """Parse a yyyyMMdd trade date.

    The value is trimmed before the format check, so " 20250605 " is accepted.

    Returns:
        (date, None) on success, otherwise (None, reason) where reason is
        DATE_FORMAT_REASON for length/character/year problems and
        DATE_CALENDAR_REASON for a well-formed token that is not a real date
        (month 13, Feb 30, year 0 such as "00000000").
    """
    token = text.strip()
    if not _DATE_TOKEN.match(token):
        return None, DATE_FORMAT_REASON

    year = int(token[:4])
    # 1..999 は日付としては有効だが DDMMYYYY 等の取り違えとみなす (0 は暦チェックへ)
    if 0 < year < 1000:
        return None, DATE_FORMAT_REASON

    try:
        return date(year, int(token[4:6]), int(token[6:8])), None
    except ValueError:
        return None, DATE_CALENDAR_REASON


def parse_product_id(text: str) -> int | None:
    """Parse a strictly positive base-10 product id; None when invalid."""
    token = text.strip()
    if not _INT_TOKEN.match(token):
        return None
    value = int(token)
    if value <= 0 or value > MAX_PRODUCT_ID:
        return None
    return value


def parse_price(text: str) -> Decimal | None:
    """Parse a non-negative price written with invariant number formatting.

    Accepted: optional sign, ASCII digits with optional ',' group separators
    and an optional '.' fraction ("1,250.50", ".5", "100."). Exponents,
    NaN and Infinity are rejected.
    """
    token = text.strip()
    m = _DECIMAL_TOKEN.match(token)
    if m is None or not (m.group("int") or m.group("frac")):
        return None
    try:
        value = Decimal(token.replace(",", ""))
    except InvalidOperation:
        return None
    if value < 0 or value > MAX_PRICE:
        return None
    return value


def validate_record(raw: RawRecord) -> ValidationResult:
    """Validate one raw trade row.

    Returns ValidationSuccess carrying a ValidatedTrade, or ValidationFailure
    describing the first rule the row violated.
    """
    missing = collect_missing_fields(raw)
    if missing:
        return ValidationFailure(kind=FailureKind.MISSING_FIELDS, raw=raw, missing_fields=missing)

    trade_date, reason = parse_trade_date(raw.date)
    if trade_date is None:
        return ValidationFailure(
            kind=FailureKind.INVALID_DATE_FORMAT,
            raw=raw,
            reason=reason,
            impossible_date=reason == DATE_CALENDAR_REASON,
        )

    product_id = parse_product_id(raw.product_id)
    if product_id is None:
        return ValidationFailure(kind=FailureKind.INVALID_PRODUCT_ID, raw=raw)

    currency = raw.currency.strip()
    if not currency:
        return ValidationFailure(kind=FailureKind.INVALID_CURRENCY, raw=raw)

    price_text = raw.price.strip()
    price = parse_price(price_text)
    if price is None:
        return ValidationFailure(kind=FailureKind.INVALID_PRICE, raw=raw)

    return ValidationSuccess(
        trade=ValidatedTrade(
            trade_date=trade_date,
            date_text=trade_date.strftime("%Y%m%d"),
            product_id=product_id,
            currency=currency,
            price=price,
            price_text=price_text,
        )
    )
