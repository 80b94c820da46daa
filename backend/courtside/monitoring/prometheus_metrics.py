"""
Prometheus metrics for the scheduling engine.

Service timings come from ``@BaseService.measure_operation``; admission
rejections are counted by error code so conflict pressure per kind
(booking/block/pass) is visible without parsing logs.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Custom registry keeps test runs from colliding with the global default
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "courtside_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "courtside_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "courtside_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

admission_rejections_total = Counter(
    "courtside_admission_rejections_total",
    "Admission calls rejected, by commitment kind and error code",
    ["kind", "code"],
    registry=REGISTRY,
)

admissions_total = Counter(
    "courtside_admissions_total",
    "Commitments admitted, by kind",
    ["kind"],
    registry=REGISTRY,
)

court_lock_total = Counter(
    "courtside_court_lock_total",
    "Per-court advisory lock outcomes",
    ["action", "outcome"],
    registry=REGISTRY,
)

side_effect_failures_total = Counter(
    "courtside_side_effect_failures_total",
    "Post-commit notification or email enqueue failures",
    ["channel"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade over the module-level collectors."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_admission(kind: str, count: int = 1) -> None:
        admissions_total.labels(kind=kind).inc(count)

    @staticmethod
    def record_rejection(kind: str, code: str) -> None:
        admission_rejections_total.labels(kind=kind, code=code).inc()

    @staticmethod
    def record_court_lock(action: str, outcome: str) -> None:
        court_lock_total.labels(action=action, outcome=outcome).inc()

    @staticmethod
    def record_side_effect_failure(channel: str) -> None:
        side_effect_failures_total.labels(channel=channel).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
