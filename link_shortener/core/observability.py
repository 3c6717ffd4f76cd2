"""Observability setup: structured logging and metrics."""

import logging

import structlog
from prometheus_client import Counter, generate_latest

from link_shortener.core.config import Settings

LINK_OPERATIONS = Counter(
    "link_operations_total",
    "Total link operations",
    ["operation"],  # create, update, delete
)

CLEANUP_SWEEPS = Counter(
    "link_cleanup_sweeps_total",
    "Total maintenance sweeps",
    ["sweep", "outcome"],  # expired_links/orphaned_tags, success/failure
)


def configure_structlog(settings: Settings) -> None:
    """Configure structlog for JSON logging with context variables."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard logging to use structlog
    level = logging.DEBUG if settings.debug else logging.getLevelName(settings.log_level.upper())
    logging.basicConfig(format="%(message)s", level=level)


def get_prometheus_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def record_link_operation(operation: str) -> None:
    """Record a link operation in Prometheus metrics."""
    LINK_OPERATIONS.labels(operation=operation).inc()


def record_cleanup_sweep(sweep: str, success: bool) -> None:
    """Record a maintenance sweep in Prometheus metrics."""
    CLEANUP_SWEEPS.labels(sweep=sweep, outcome="success" if success else "failure").inc()
