"""Tests for logging and metrics helpers."""

import structlog
from prometheus_client import REGISTRY

from link_shortener.core.config import Settings
from link_shortener.core.observability import (
    configure_structlog,
    get_prometheus_metrics,
    record_cleanup_sweep,
    record_link_operation,
)


def test_configure_structlog():
    configure_structlog(Settings(_env_file=None, log_level="debug"))

    structlog.get_logger().info("Configured", component="tests")


def test_link_operation_counter():
    before = REGISTRY.get_sample_value("link_operations_total", {"operation": "create"}) or 0

    record_link_operation("create")

    after = REGISTRY.get_sample_value("link_operations_total", {"operation": "create"})
    assert after == before + 1


def test_cleanup_counter_exported():
    record_cleanup_sweep("orphaned_tags", success=False)

    assert b"link_cleanup_sweeps_total" in get_prometheus_metrics()
