from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the trade enricher.

The loader in trade_enricher/config/loader.py builds these after schema
validation and environment overrides have been applied.
"""

DEFAULT_OUTPUT_DIRECTORY = "./enriched"
DEFAULT_ERROR_LOG_DIRECTORY = "./logs"


@dataclass(frozen=True)
class ProductDataConfig:
    """Location of the product reference file loaded at startup.

    The PRODUCT_DATA_FILE environment variable takes precedence over the
    value in the YAML file.
    """
    file_path: str


@dataclass(frozen=True)
class EnricherConfig:
    """Root configuration object for an enrichment run."""
    product_data: ProductDataConfig
    source_directory: str  # 入力 trade CSV ディレクトリ (非再帰)
    output_directory: str = DEFAULT_OUTPUT_DIRECTORY
    error_log_directory: str = DEFAULT_ERROR_LOG_DIRECTORY
