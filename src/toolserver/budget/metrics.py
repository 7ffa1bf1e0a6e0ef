"""Prometheus metrics for budget provisioning.

Metrics Defined:
- budget_provisioning_runs_total: Counter of finished runs by outcome
- budget_provisioning_failures_total: Counter of failed runs by failing stage
- budget_provisioning_duration_seconds: Histogram of run duration

Metrics are exposed at the `/metrics` endpoint in Prometheus format.
"""

import logging
from typing import Optional

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


logger = logging.getLogger(__name__)


# Clone-and-push runs typically take seconds; the tail covers slow remotes
DEFAULT_DURATION_BUCKETS = (
    1.0,
    2.5,
    5.0,
    10.0,
    30.0,
    60.0,
    120.0,
    300.0,
    600.0,
)

RUN_OUTCOMES = ("done", "aborted_already_exists", "failed")


class ProvisioningMetrics:
    """Container for budget provisioning Prometheus metrics.

    Supports custom registries so tests can inspect values in isolation.

    Attributes:
        registry: The Prometheus registry for these metrics.
        runs_total: Counter of finished runs. Labels: outcome
        failures_total: Counter of failed runs. Labels: stage
        duration_seconds: Histogram of run duration. Labels: outcome
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or REGISTRY

        self.runs_total = Counter(
            "budget_provisioning_runs_total",
            "Total number of budget provisioning runs by outcome",
            labelnames=["outcome"],
            registry=self.registry,
        )

        self.failures_total = Counter(
            "budget_provisioning_failures_total",
            "Total number of failed budget provisioning runs by failing stage",
            labelnames=["stage"],
            registry=self.registry,
        )

        self.duration_seconds = Histogram(
            "budget_provisioning_duration_seconds",
            "Wall-clock duration of budget provisioning runs in seconds",
            labelnames=["outcome"],
            buckets=DEFAULT_DURATION_BUCKETS,
            registry=self.registry,
        )

        for outcome in RUN_OUTCOMES:
            self.runs_total.labels(outcome=outcome)

    def record_run(
        self,
        outcome: str,
        duration_seconds: float,
        failed_stage: Optional[str] = None,
    ) -> None:
        """Record a finished run.

        Args:
            outcome: Terminal stage value of the run.
            duration_seconds: Time from start to terminal stage.
            failed_stage: Stage in which the run failed, for failed runs.
        """
        self.runs_total.labels(outcome=outcome).inc()
        self.duration_seconds.labels(outcome=outcome).observe(duration_seconds)
        if failed_stage is not None:
            self.failures_total.labels(stage=failed_stage).inc()


_default_metrics: Optional[ProvisioningMetrics] = None


def get_metrics(registry: Optional[CollectorRegistry] = None) -> ProvisioningMetrics:
    """Get the metrics instance for the default registry, or a new one.

    Args:
        registry: Optional Prometheus registry. If None, returns the
                  process-wide instance bound to the default REGISTRY.
    """
    global _default_metrics

    if registry is not None:
        return ProvisioningMetrics(registry=registry)

    if _default_metrics is None:
        _default_metrics = ProvisioningMetrics()

    return _default_metrics


def generate_metrics_output(registry: Optional[CollectorRegistry] = None) -> bytes:
    """Render the registry in Prometheus text format for the /metrics endpoint."""
    return generate_latest(registry or REGISTRY)
