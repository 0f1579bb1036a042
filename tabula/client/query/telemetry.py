"""Structured logging for paginated fetches.

This module provides telemetry hooks for multi-page iteration, emitting
structured logs for observability.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def log_page_fetched(
    *,
    table: str,
    page_index: int,
    records: int,
    more: bool,
    latency_ms: float | None = None,
) -> None:
    """Log a page fetched during iteration.

    Args:
        table: Table being iterated
        page_index: Zero-based index of the page
        records: Number of records in the page
        more: Whether the service reported further pages
        latency_ms: Latency in milliseconds (optional)
    """
    logger.debug(
        "page_fetched",
        extra={
            "table": table,
            "page_index": page_index,
            "records": records,
            "more": more,
            "latency_ms": latency_ms,
        },
    )


def log_iteration_complete(
    *,
    table: str,
    pages: int,
    total_records: int,
) -> None:
    """Log completion of a multi-page iteration."""
    logger.info(
        "iteration_complete",
        extra={
            "table": table,
            "pages": pages,
            "total_records": total_records,
        },
    )


def log_iteration_stalled(*, table: str, page_index: int, cursor: str) -> None:
    """Log a page reporting more rows without returning any."""
    logger.warning(
        "iteration_stalled",
        extra={
            "table": table,
            "page_index": page_index,
            "cursor": cursor,
        },
    )
