# Shared pytest fixtures
from __future__ import annotations
import logging
import tempfile
from pathlib import Path
import pytest

from trade_enricher.services.catalog import ProductCatalog


class ListHandler(logging.Handler):
    """Collects LogRecords emitted below the trade_enricher logger."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self, level: int | None = None) -> list[str]:
        return [r.getMessage() for r in self.records if level is None or r.levelno == level]


@pytest.fixture()
def captured_logs():
    logger = logging.getLogger("trade_enricher")
    handler = ListHandler()
    old_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(old_level)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "trades").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("PRODUCT_DATA_FILE", raising=False)
        yield p


@pytest.fixture()
def widget_catalog() -> ProductCatalog:
    return ProductCatalog({1: "Widget Pro", 3: "Gadget Basic"})


@pytest.fixture()
def sample_config_yaml() -> str:
    return """product_data:
  file_path: ./data/products.csv
source_directory: ./trades
output_directory: ./enriched
error_log_directory: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "enricher.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def product_file(temp_workdir: Path) -> Path:
    f = temp_workdir / "data" / "products.csv"
    f.write_text(
        "productId,productName\n"
        "1,Widget Pro\n"
        "2,Gadget Basic\n"
        "3,Treasury Bills Domestic\n",
        encoding="utf-8",
    )
    return f


@pytest.fixture()
def trade_files(temp_workdir: Path) -> list[Path]:
    first = temp_workdir / "trades" / "a_trades.csv"
    first.write_text(
        "date,product_id,currency,price\n"
        "20250605,1,USD,150.25\n"
        "20250606,9,EUR,200.00\n"
        "2025-06-07,2,GBP,10\n",
        encoding="utf-8",
    )
    second = temp_workdir / "trades" / "b_trades.csv"
    second.write_text(
        "date,productId,currency,price\n"
        "20250608,3,JPY,1000\n"
        "20250609,9,USD,  99.99  \n"
        "20250610,-1,USD,1\n",
        encoding="utf-8",
    )
    return [first, second]
