from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from trade_enricher.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from trade_enricher.csvdata.reader import ProductFileError, load_product_file
from trade_enricher.logging.init import log_summary, setup_logging
from trade_enricher.services.catalog import ProductRepository
from trade_enricher.services.orchestrator import ProcessingError, process_all
from trade_enricher.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load .env (override) and the YAML config
- load the product reference file into a ProductRepository
- --check-catalog: report catalog health and exit
- otherwise enrich every trade CSV of source_directory and print SUMMARY
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; values override existing variables."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Enrich trade CSV files with product names")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to YAML config")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--check-catalog",
        action="store_true",
        help="Load the product file, report catalog health and exit",
    )
    return p.parse_args(argv)


def _check_catalog(products: ProductRepository) -> int:
    logger = setup_logging()
    status = "Healthy" if products.is_loaded else "Unhealthy"
    message = (
        f"Health check executed: Status={status}, ProductDataLoaded={products.is_loaded}, "
        f"ProductCount={products.count}"
    )
    if products.is_loaded:
        logger.info(message)
        return EXIT_SUCCESS_ALL
    logger.warning(message)
    return EXIT_FATAL


def main(argv: list[str] | None = None) -> int:
    # NOTE: [] が渡された場合に sys.argv[1:] (pytest の引数) を読まないよう None のときのみ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    products = ProductRepository()
    try:
        products.load(load_product_file(Path(cfg.product_data.file_path)))
    except ProductFileError as e:
        logger.error(f"product data: {e}")
        return EXIT_FATAL

    if args.check_catalog:
        return _check_catalog(products)

    logger.info(f"Processing trade files from: {cfg.source_directory}")
    try:
        result = process_all(cfg, products)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if result.error_log_path:
        logger.info(f"validation errors written to {result.error_log_path}")

    summary_line = render_summary_line(result)
    # log_summary が "SUMMARY " を付与するので先頭ラベルを除去
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
