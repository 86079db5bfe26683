"""
Prometheus metrics helpers

Usage:
    from utils.metrics import get_or_create_metric

    COMMITS_TOTAL = get_or_create_metric(
        lambda: Counter("tabledit_commits_total", "Commit attempts", ["status"]),
        "tabledit_commits_total",
    )
"""

import logging
from typing import Callable, TypeVar

from prometheus_client import REGISTRY, CollectorRegistry

from .publisher import MetricsPublisher

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Create a metric, or return the one already registered under that name.

    Modules are re-imported under test, and a second registration of the
    same name raises ValueError in prometheus_client.

    Args:
        metric_factory: Callable that creates the metric
        metric_name: Name used for lookup when already registered
        registry: Prometheus registry to look in (default: global REGISTRY)

    Returns:
        The metric instance (either newly created or existing)
    """
    try:
        return metric_factory()
    except ValueError:
        existing = registry._names_to_collectors.get(metric_name)
        if existing is not None:
            return existing
        raise


__all__ = [
    "MetricsPublisher",
    "get_or_create_metric",
]
