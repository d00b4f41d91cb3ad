from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.trade import RawRecord
from ..services.catalog import ProductCatalog

"""CSV readers for trade files and the product reference file.

Both readers load every cell as text (dtype=str, no NA conversion) so that
validation sees the values exactly as written: "NA", "null" or "" stay
strings and are judged by the field rules, not by pandas.
"""

__all__ = [
    "TradeFileError",
    "MissingColumnsError",
    "EmptyTradeFileError",
    "ProductFileError",
    "read_trades_file",
    "load_product_file",
]

logger = logging.getLogger(__name__)

TRADE_COLUMNS = ("date", "currency", "price")
PRODUCT_ID_COLUMNS = ("product_id", "productId")  # どちらの表記も受け付ける
PRODUCT_FILE_COLUMNS = ("productId", "productName")

_INT_TOKEN = re.compile(r"^[+-]?[0-9]+$")


class TradeFileError(Exception):
    """Base error for trade files that cannot be read."""


class MissingColumnsError(TradeFileError):
    """Raised when required columns are missing in the trade file header."""


class EmptyTradeFileError(TradeFileError):
    """Raised when a trade file has no header row at all."""


class ProductFileError(Exception):
    """Raised when the product reference file cannot be loaded."""


def _cell(value: Any) -> str | None:
    # 列数不足の行は NaN になる -> None (欠損扱い)
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return str(value)


def _read_text_frame(path: Path, skip_blank_lines: bool = True) -> pd.DataFrame:
    df = pd.read_csv(
        path,
        dtype=str,
        keep_default_na=False,
        na_filter=False,
        skip_blank_lines=skip_blank_lines,
        encoding="utf-8-sig",
    )
    df.columns = [str(c).strip() for c in df.columns]
    return df


def read_trades_file(path: Path) -> list[RawRecord]:
    """Read a trade CSV into RawRecords (row_number = 1-based data row).

    Required header columns: date, product_id (or productId), currency, price.
    Blank lines are kept as rows with every field missing, so they are counted
    and discarded like any other incomplete row and row_number stays aligned
    with the data lines of the file.

    Raises:
        EmptyTradeFileError: file is empty (no header)
        MissingColumnsError: one or more required columns are absent
    """
    try:
        df = _read_text_frame(path, skip_blank_lines=False)
    except pd.errors.EmptyDataError as e:
        raise EmptyTradeFileError(f"trade file '{path.name}' is empty") from e
    except pd.errors.ParserError as e:
        raise TradeFileError(f"malformed CSV in trade file '{path.name}': {e}") from e

    columns = set(df.columns)
    missing = [c for c in TRADE_COLUMNS if c not in columns]
    id_column = next((c for c in PRODUCT_ID_COLUMNS if c in columns), None)
    if id_column is None:
        missing.append("product_id")
    if missing:
        raise MissingColumnsError(f"trade file '{path.name}' missing columns: {sorted(missing)}")

    records: list[RawRecord] = []
    for row_number, values in enumerate(df.to_dict(orient="records"), start=1):
        records.append(
            RawRecord(
                date=_cell(values.get("date")),
                product_id=_cell(values.get(id_column)),
                currency=_cell(values.get("currency")),
                price=_cell(values.get("price")),
                row_number=row_number,
            )
        )
    logger.debug(f"read {len(records)} trade rows from {path.name}")
    return records


def load_product_file(path: Path) -> ProductCatalog:
    """Load the product reference CSV (productId,productName) into a catalog.

    Invalid rows are skipped with a warning: empty id, empty name, non-integer
    id, non-positive id. For a duplicated id the first occurrence is kept.

    Raises:
        ProductFileError: file missing, empty, or lacking required columns
    """
    if not path.exists():
        raise ProductFileError(f"Product data file not found at path: {path}")

    logger.info(f"Loading product data from file: {path}")
    try:
        df = _read_text_frame(path)
    except pd.errors.EmptyDataError as e:
        raise ProductFileError(f"product data file is empty: {path}") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ProductFileError(f"failed to parse product data file {path}: {e}") from e

    missing = [c for c in PRODUCT_FILE_COLUMNS if c not in df.columns]
    if missing:
        raise ProductFileError(f"product data file missing columns: {missing}")

    # 警告はここで出し、採否の規則は ProductCatalog.from_rows に任せる
    rows: list[tuple[int, str]] = []
    seen: set[int] = set()
    ids = df["productId"].tolist()
    names = df["productName"].tolist()
    # 行番号はヘッダ行を 1 とした CSV 上の行
    for row_index, (id_raw, name_raw) in enumerate(zip(ids, names, strict=True), start=2):
        id_text = _cell(id_raw)
        name_text = _cell(name_raw)
        if id_text is None or not id_text.strip():
            logger.warning(f"Skipping row {row_index}: Empty productId")
            continue
        if name_text is None or not name_text.strip():
            logger.warning(f"Skipping row {row_index}: Empty productName")
            continue
        if not _INT_TOKEN.match(id_text.strip()):
            logger.warning(f"Skipping row {row_index}: Non-integer productId")
            continue
        product_id = int(id_text.strip())
        if product_id <= 0:
            logger.warning(f"Skipping row {row_index}: ProductId must be positive")
            continue
        if product_id in seen:
            logger.warning(
                f"Duplicate productId {product_id} found at row {row_index}, keeping first occurrence"
            )
        seen.add(product_id)
        rows.append((product_id, name_text))

    catalog = ProductCatalog.from_rows(rows)
    skipped = len(ids) - len(catalog)
    logger.info(f"Successfully loaded {len(catalog)} products (skipped {skipped} invalid rows)")
    return catalog
