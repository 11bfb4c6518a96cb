#!/usr/bin/env python3
"""
Barcode lookup tool.

Runs one scan session for a typed barcode and prints the safety
evaluation.

Usage:
    python -m pawscan.scripts.lookup_barcode 1234567890123
    pawscan-lookup 1234567890123 --base-url https://catalog.example.com/api/v1
"""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

import structlog

from pawscan.application.scan.session_service import ScanSession, SessionView
from pawscan.config import ScanSettings, load_settings
from pawscan.domain.scan.state_machine import SessionState
from pawscan.domain.shared.errors import ConfigurationError
from pawscan.infrastructure.catalog.api_client import CatalogClient
from pawscan.infrastructure.reader.static_reader import StaticCodeReader
from pawscan.logging_config import configure_logging

logger = structlog.get_logger(__name__)


def format_view(view: SessionView) -> str:
    """Format a settled session view for the terminal."""
    if view.state == SessionState.FAILED and view.error is not None:
        return f"Scan failed: {view.error.message}"

    if view.product is None or view.rendered_evaluation is None:
        return "No product data."

    product = view.product
    evaluation = view.rendered_evaluation
    paws = "●" * product.paw_rating() + "○" * (5 - product.paw_rating())

    lines = [
        product.name,
        f"Brand: {product.brand or '-'}",
        f"Rating: {paws} ({product.rating:g}/5)",
        f"Overall: {evaluation.overall.label}",
        "",
        evaluation.heading,
    ]
    for row in evaluation.rows:
        lines.append(f"  [{row.status.label:<9}] {row.name}")
    return "\n".join(lines)


async def run(barcode: str, settings: ScanSettings) -> int:
    """Look up one barcode.

    Returns:
        0 if resolved, 1 otherwise
    """
    reader = StaticCodeReader([barcode])

    async with CatalogClient(
        settings.catalog_base_url,
        timeout_seconds=settings.lookup_timeout_seconds,
    ) as catalog:
        session = ScanSession(
            reader=reader,
            catalog=catalog,
            lookup_timeout_seconds=settings.lookup_timeout_seconds,
            debounce_window_seconds=settings.debounce_window_seconds,
        )
        session.start_scan()
        view = await session.wait_settled()

    print(format_view(view))
    return 0 if view.state == SessionState.RESOLVED else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command line entry point."""
    parser = argparse.ArgumentParser(description="Look up a product barcode")
    parser.add_argument("barcode", help="Decoded barcode to look up")
    parser.add_argument("--base-url", help="Catalog base URL (overrides PAWSCAN_CATALOG_URL)")
    parser.add_argument("--timeout", type=float, help="Lookup timeout in seconds")
    parser.add_argument("--env-file", help="Path to a .env file")
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.env_file)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    overrides = {}
    if args.base_url:
        overrides["catalog_base_url"] = args.base_url
    if args.timeout is not None:
        if args.timeout <= 0:
            print("Configuration error: --timeout must be positive", file=sys.stderr)
            return 2
        overrides["lookup_timeout_seconds"] = args.timeout
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings.log_level, json=settings.log_json)
    logger.debug("Settings loaded", catalog_base_url=settings.catalog_base_url)

    return asyncio.run(run(args.barcode, settings))


if __name__ == "__main__":
    sys.exit(main())
