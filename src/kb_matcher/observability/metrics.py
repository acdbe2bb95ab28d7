"""Prometheus metrics for the matcher, mirrored to OpenTelemetry instruments."""

from __future__ import annotations

from typing import Any

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.resources import Resource
from prometheus_client import Counter, Histogram, generate_latest


_meter_holder: dict[str, Any] = {"meter": None, "provider": None}


def init_metrics(
    service_name: str = "kb-matcher",
    resource_attributes: dict[str, str] | None = None,
    metric_readers: list[MetricReader] | None = None,
) -> MeterProvider:
    """Initialize OpenTelemetry metrics."""
    provider = _meter_holder.get("provider")
    if isinstance(provider, MeterProvider):
        return provider

    attributes = {"service.name": service_name}
    if resource_attributes:
        attributes.update(resource_attributes)
    resource = Resource.create(attributes)
    provider = MeterProvider(resource=resource, metric_readers=metric_readers or [])
    otel_metrics.set_meter_provider(provider)
    _meter_holder["provider"] = provider
    _meter_holder["meter"] = otel_metrics.get_meter(__name__)
    return provider


def _get_meter():
    meter = _meter_holder.get("meter")
    if meter is None:
        init_metrics()
        meter = _meter_holder.get("meter")
    return meter


class _BoundMetric:
    def __init__(self, wrapper: MetricBridge, labels: dict[str, str]) -> None:
        self._wrapper = wrapper
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._wrapper.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._wrapper.observe(self._labels, value)


class MetricBridge:
    """Bridge Prometheus metrics to optional OTel instruments."""

    def __init__(
        self,
        prom_metric: Counter | Histogram,
        *,
        otel_name: str,
        otel_description: str,
        otel_kind: str,
    ) -> None:
        self._prom_metric = prom_metric
        self._otel_name = otel_name
        self._otel_description = otel_description
        self._otel_kind = otel_kind
        self._otel_instrument = None

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _ensure_otel_instrument(self):
        if self._otel_instrument is not None:
            return self._otel_instrument
        meter = _get_meter()
        if self._otel_kind == "counter":
            self._otel_instrument = meter.create_counter(self._otel_name, description=self._otel_description)
        elif self._otel_kind == "histogram":
            self._otel_instrument = meter.create_histogram(self._otel_name, description=self._otel_description)
        else:
            raise ValueError(f"Unknown metric kind: {self._otel_kind}")
        return self._otel_instrument

    def inc(self, labels: dict[str, str], amount: float) -> None:
        self._prom_metric.labels(**labels).inc(amount)
        otel = self._ensure_otel_instrument()
        otel.add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).observe(value)
        otel = self._ensure_otel_instrument()
        otel.record(value, labels)


_MATCH_LATENCY_PROM = Histogram(
    "kb_match_latency_seconds",
    "Knowledge base match latency in seconds",
    ["outcome"],
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)

_MATCH_COUNT_PROM = Counter(
    "kb_match_total",
    "Knowledge base match calls by outcome",
    ["outcome"],
)

_CHAT_REPLY_COUNT_PROM = Counter(
    "kb_chat_replies_total",
    "Chat replies by match type",
    ["match_type"],
)

_RATE_LIMITED_COUNT_PROM = Counter(
    "kb_rate_limited_total",
    "Chat messages rejected by the rate limiter",
    ["scope"],
)

MATCH_LATENCY = MetricBridge(
    _MATCH_LATENCY_PROM,
    otel_name="kb_match_latency_seconds",
    otel_description="Knowledge base match latency in seconds",
    otel_kind="histogram",
)

MATCH_COUNT = MetricBridge(
    _MATCH_COUNT_PROM,
    otel_name="kb_match_total",
    otel_description="Knowledge base match calls by outcome",
    otel_kind="counter",
)

CHAT_REPLY_COUNT = MetricBridge(
    _CHAT_REPLY_COUNT_PROM,
    otel_name="kb_chat_replies_total",
    otel_description="Chat replies by match type",
    otel_kind="counter",
)

RATE_LIMITED_COUNT = MetricBridge(
    _RATE_LIMITED_COUNT_PROM,
    otel_name="kb_rate_limited_total",
    otel_description="Chat messages rejected by the rate limiter",
    otel_kind="counter",
)


def get_metrics() -> bytes:
    """Render the default registry, kb_* metrics included, as Prometheus text."""
    return generate_latest()
