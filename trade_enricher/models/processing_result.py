from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .summary import EnrichmentSummary

"""Processing result models for a directory enrichment run.

FileStat holds the outcome for one trade file; ProcessingResult aggregates
all files and carries the combined EnrichmentSummary for the SUMMARY line.
"""


class FileStatus(Enum):
    """Outcome of processing one trade file.

    A file fails only when it cannot be read or written; rows discarded by
    validation do not fail the file.
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics (internal helper for ProcessingResult)."""
    file_name: str  # ファイル名
    status: FileStatus
    summary: EnrichmentSummary  # 失敗時は空サマリ
    elapsed_seconds: float  # ファイル処理時間
    output_path: str | None = None  # 成功時の出力先
    error: str | None = None  # 失敗理由
    headers: dict[str, str] | None = None  # X-Enrichment-* (成功時のみ)


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of one run over the source directory."""
    success_files: int
    failed_files: int
    summary: EnrichmentSummary  # 全ファイル合算
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None
    error_log_path: str | None = None  # 監査ログを書き出した場合のみ

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
