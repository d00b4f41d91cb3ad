from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..csvdata.reader import TradeFileError, read_trades_file
from ..csvdata.writer import write_enriched_file
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary
from ..models.config_models import EnricherConfig
from ..models.processing_result import FileStat, FileStatus, ProcessingResult
from ..models.summary import EnrichmentSummary, combine_summaries
from .catalog import ProductRepository
from .enrichment import TradeEnrichmentService
from .progress import ProgressTracker
from .summary import render_batch_summary, summary_headers

logger = logging.getLogger(__name__)

"""Service orchestration for a directory enrichment run.

process_all():
1. scans source_directory for *.csv trade files (non-recursive, sorted)
2. enriches each file with one shared TradeEnrichmentService, so a missing
   product is warned about once per run, not once per file
3. writes <output_directory>/<file name> and logs a per-file summary
4. flushes the validation audit log and returns the aggregated result

A file that cannot be read or written is counted as failed and the run
continues with the next file.
"""


class ProcessingError(Exception):
    """Fatal error that prevents the run from starting."""


def scan_trade_files(directory: Path) -> list[Path]:
    """Scan directory for .csv trade files (non-recursive, sorted by name).

    Raises:
        ProcessingError: directory missing, not a directory or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv")
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def process_all(
    config: EnricherConfig,
    products: ProductRepository,
    service: TradeEnrichmentService | None = None,
) -> ProcessingResult:
    """Enrich every trade file of the configured source directory.

    Args:
        config: Run configuration
        products: Repository holding the loaded product catalog
        service: Enrichment service to use; built from products when omitted.
            An injected service keeps its own audit buffer, which is the one
            flushed at the end of the run (no audit file when it has none).

    Returns:
        ProcessingResult with per-file stats and the combined summary

    Raises:
        ProcessingError: source directory cannot be scanned, or output
            directory is the source directory
    """
    start_time = datetime.now(UTC)
    source_dir = Path(config.source_directory).resolve()
    output_dir = Path(config.output_directory).resolve()
    if source_dir == output_dir:
        # 出力で入力ファイルを上書きしない
        raise ProcessingError(
            f"output_directory must differ from source_directory: {config.output_directory}"
        )

    error_log: ErrorLogBuffer | None
    if service is None:
        error_log = ErrorLogBuffer(Path(config.error_log_directory).resolve())
        service = TradeEnrichmentService(products, error_log=error_log)
    else:
        error_log = service.error_log

    file_paths = scan_trade_files(source_dir)

    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0

    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            stat = _process_single_file(file_path, output_dir, service)
            file_stats.append(stat)
            if stat.status is FileStatus.SUCCESS:
                success_count += 1
                log_summary(render_batch_summary(file_path.name, stat.summary))
                logger.debug(f"file {file_path.name} headers: {stat.headers}")
            else:
                failed_count += 1
            progress.set_postfix(success=success_count, failed=failed_count)
            progress.finish_file(success=stat.status is FileStatus.SUCCESS)

    error_log_path: Path | None = None
    if error_log is not None:
        try:
            error_log_path = error_log.flush()
        except OSError as e:
            # 監査ログ書き込み失敗で全体を失敗にはしない
            logger.warning(f"failed to write error log: {e}")

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        summary=combine_summaries(s.summary for s in file_stats),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
        error_log_path=str(error_log_path) if error_log_path is not None else None,
    )


def _process_single_file(
    file_path: Path,
    output_dir: Path,
    service: TradeEnrichmentService,
) -> FileStat:
    """Read, enrich and write one trade file."""
    start = datetime.now(UTC)
    try:
        records = read_trades_file(file_path)
        enriched, summary = service.enrich_batch(records, source=file_path.name)
        out_path = write_enriched_file(enriched, output_dir / file_path.name)
    except (TradeFileError, OSError, UnicodeDecodeError) as e:
        logger.error(f"file {file_path.name}: {e}")
        return FileStat(
            file_name=file_path.name,
            status=FileStatus.FAILED,
            summary=EnrichmentSummary(),
            elapsed_seconds=(datetime.now(UTC) - start).total_seconds(),
            error=str(e),
        )

    return FileStat(
        file_name=file_path.name,
        status=FileStatus.SUCCESS,
        summary=summary,
        elapsed_seconds=(datetime.now(UTC) - start).total_seconds(),
        output_path=str(out_path),
        headers=summary_headers(summary),
    )
