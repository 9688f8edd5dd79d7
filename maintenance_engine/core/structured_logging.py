"""Structured logging helpers (tenant-scoped, PII-free)."""

import logging
from typing import Any

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def build_log_context(
    *,
    tenant_id: str | None = None,
    correlation_id: str | None = None,
    user_id: str | None = None,
    work_order_id: str | None = None,
    vendor_id: str | None = None,
    operation: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict suitable for ``logger.info(..., extra=...)``."""
    context: dict[str, Any] = {}
    if tenant_id:
        context["tenant_id"] = tenant_id
    if correlation_id:
        context["correlation_id"] = correlation_id
    if user_id:
        context["user_id"] = user_id
    if work_order_id:
        context["work_order_id"] = work_order_id
    if vendor_id:
        context["vendor_id"] = vendor_id
    if operation:
        context["operation"] = operation
    return context


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for CLI/worker processes."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
