from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from trade_enricher.config.loader import load_config
from trade_enricher.logging.error_log import ErrorLogBuffer
from trade_enricher.logging.init import reset_logging
from trade_enricher.models.processing_result import FileStatus
from trade_enricher.services.catalog import ProductCatalog, ProductRepository
from trade_enricher.services.enrichment import TradeEnrichmentService
from trade_enricher.services.orchestrator import ProcessingError, process_all, scan_trade_files


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def repository() -> ProductRepository:
    return ProductRepository(ProductCatalog({1: "Widget Pro", 2: "Gadget Basic", 3: "Treasury Bills Domestic"}))


def test_scan_trade_files_success(temp_workdir: Path) -> None:
    trades_dir = temp_workdir / "trades"
    (trades_dir / "b.csv").write_text("x")
    (trades_dir / "a.CSV").write_text("x")
    (trades_dir / "readme.txt").write_text("ignore this")
    (trades_dir / "nested").mkdir()

    files = scan_trade_files(trades_dir)
    assert [f.name for f in files] == ["a.CSV", "b.csv"]


def test_scan_trade_files_directory_not_found() -> None:
    with pytest.raises(ProcessingError, match="Directory not found"):
        scan_trade_files(Path("/non/existent/path"))


def test_scan_trade_files_not_a_directory(temp_workdir: Path) -> None:
    f = temp_workdir / "file.csv"
    f.write_text("x")
    with pytest.raises(ProcessingError, match="not a directory"):
        scan_trade_files(f)


def test_process_all_empty_directory(write_config: Path, repository: ProductRepository) -> None:
    result = process_all(load_config(write_config), repository)
    assert result.success_files == 0
    assert result.failed_files == 0
    assert result.summary.total == 0
    assert result.file_stats == []
    assert result.error_log_path is None


def test_process_all_enriches_each_file(
    temp_workdir: Path, write_config: Path, trade_files: list[Path], repository: ProductRepository
) -> None:
    result = process_all(load_config(write_config), repository)

    assert result.success_files == 2
    assert result.failed_files == 0
    assert [s.file_name for s in result.file_stats] == ["a_trades.csv", "b_trades.csv"]
    summary = result.summary
    assert (summary.total, summary.enriched, summary.missing, summary.discarded) == (6, 2, 2, 2)
    assert summary.missing_product_ids == frozenset({9})

    out_a = (temp_workdir / "enriched" / "a_trades.csv").read_text(encoding="utf-8")
    assert out_a == (
        "date,productName,currency,price\n"
        "20250605,Widget Pro,USD,150.25\n"
        "20250606,Missing Product Name,EUR,200.00\n"
    )
    out_b = (temp_workdir / "enriched" / "b_trades.csv").read_text(encoding="utf-8")
    assert "20250609,Missing Product Name,USD,99.99\n" in out_b


def test_process_all_writes_audit_log_for_date_errors(
    temp_workdir: Path, write_config: Path, trade_files: list[Path], repository: ProductRepository
) -> None:
    result = process_all(load_config(write_config), repository)
    assert result.error_log_path is not None
    lines = Path(result.error_log_path).read_text(encoding="utf-8").strip().splitlines()
    # "2025-06-07" の 1 行のみ (productId=-1 は監査対象外)
    assert len(lines) == 1
    assert '"source": "a_trades.csv"' in lines[0]
    assert '"row": 3' in lines[0]
    assert Path(result.error_log_path).is_absolute()
    assert Path(result.error_log_path).parent == (temp_workdir / "logs").resolve()


def test_process_all_failed_file_does_not_stop_run(
    temp_workdir: Path, write_config: Path, trade_files: list[Path], repository: ProductRepository
) -> None:
    (temp_workdir / "trades" / "c_broken.csv").write_text("date,price\n20250605,1\n", encoding="utf-8")

    result = process_all(load_config(write_config), repository)

    assert result.success_files == 2
    assert result.failed_files == 1
    broken = result.file_stats[-1]
    assert broken.status is FileStatus.FAILED
    assert "missing columns" in broken.error
    assert broken.summary.total == 0
    assert not (temp_workdir / "enriched" / "c_broken.csv").exists()


def test_process_all_write_error_marks_file_failed(
    write_config: Path, trade_files: list[Path], repository: ProductRepository
) -> None:
    with patch(
        "trade_enricher.services.orchestrator.write_enriched_file", side_effect=OSError("disk full")
    ):
        result = process_all(load_config(write_config), repository)
    assert result.success_files == 0
    assert result.failed_files == 2
    assert all(s.error == "disk full" for s in result.file_stats)


def test_process_all_missing_source_directory(write_config: Path, repository: ProductRepository) -> None:
    text = write_config.read_text(encoding="utf-8").replace("./trades", "./missing_dir")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ProcessingError):
        process_all(load_config(write_config), repository)


def test_process_all_attaches_summary_headers(
    write_config: Path, trade_files: list[Path], repository: ProductRepository
) -> None:
    result = process_all(load_config(write_config), repository)
    assert result.file_stats[0].headers == {
        "X-Enrichment-Total-Rows": "3",
        "X-Enrichment-Enriched-Rows": "1",
        "X-Enrichment-Discarded-Rows": "1",
        "X-Enrichment-Missing-Products": "1",
        "X-Enrichment-Unique-Missing-Product-Ids": "1",
    }


def test_process_all_failed_file_has_no_headers(
    temp_workdir: Path, write_config: Path, repository: ProductRepository
) -> None:
    (temp_workdir / "trades" / "empty.csv").write_text("", encoding="utf-8")
    result = process_all(load_config(write_config), repository)
    assert result.file_stats[0].status is FileStatus.FAILED
    assert result.file_stats[0].headers is None


def test_process_all_flushes_injected_service_error_log(
    temp_workdir: Path, write_config: Path, trade_files: list[Path], repository: ProductRepository
) -> None:
    buffer = ErrorLogBuffer(temp_workdir / "audit")
    service = TradeEnrichmentService(repository, error_log=buffer)

    result = process_all(load_config(write_config), repository, service=service)

    assert result.error_log_path is not None
    assert Path(result.error_log_path).parent == temp_workdir / "audit"
    assert len(Path(result.error_log_path).read_text(encoding="utf-8").splitlines()) == 1
    assert not (temp_workdir / "logs").exists()


def test_process_all_injected_service_without_error_log(
    temp_workdir: Path, write_config: Path, trade_files: list[Path], repository: ProductRepository
) -> None:
    service = TradeEnrichmentService(repository)
    result = process_all(load_config(write_config), repository, service=service)
    assert result.success_files == 2
    assert result.error_log_path is None
    assert not (temp_workdir / "logs").exists()


def test_process_all_rejects_output_equal_to_source(
    temp_workdir: Path, write_config: Path, trade_files: list[Path], repository: ProductRepository
) -> None:
    text = write_config.read_text(encoding="utf-8").replace("./enriched", "./trades/")
    write_config.write_text(text, encoding="utf-8")
    original = trade_files[0].read_text(encoding="utf-8")

    with pytest.raises(ProcessingError, match="output_directory must differ"):
        process_all(load_config(write_config), repository)
    # 入力ファイルは上書きされない
    assert trade_files[0].read_text(encoding="utf-8") == original
