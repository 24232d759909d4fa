"""OpenTelemetry adapter for metrics.

Exports index cache, retrieval and analysis counters through the
OpenTelemetry SDK. Without the SDK every call is a no-op.
"""

import logging
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from clause_clarity.application.ports import TelemetryPort

logger = logging.getLogger(__name__)


@dataclass
class OtelConfig:
    service_name: str = "clause-clarity"
    otlp_endpoint: str | None = None  # e.g. "http://localhost:4317"
    environment: str = "production"
    enable_console: bool = False


def _make_meter(cfg: OtelConfig) -> Any:
    sdk = import_module("opentelemetry.sdk.metrics")
    export = import_module("opentelemetry.sdk.metrics.export")
    resources = import_module("opentelemetry.sdk.resources")
    api = import_module("opentelemetry.metrics")

    readers = []
    if cfg.otlp_endpoint:
        otlp = import_module("opentelemetry.exporter.otlp.proto.grpc.metric_exporter")
        exporter = otlp.OTLPMetricExporter(endpoint=cfg.otlp_endpoint)
        readers.append(export.PeriodicExportingMetricReader(exporter))
    if cfg.enable_console:
        readers.append(export.PeriodicExportingMetricReader(export.ConsoleMetricExporter()))

    resource = resources.Resource.create(
        {"service.name": cfg.service_name, "deployment.environment": cfg.environment}
    )
    api.set_meter_provider(sdk.MeterProvider(resource=resource, metric_readers=readers))
    return api.get_meter("clause_clarity")


class OpenTelemetryAdapter(TelemetryPort):
    """Counters via incr(), histograms via observe(); instruments created on first use."""

    def __init__(self, cfg: OtelConfig) -> None:
        self._cfg = cfg
        self._instruments: dict[tuple[str, str], Any] = {}
        try:
            self._meter: Any | None = _make_meter(cfg)
        except Exception as ex:  # noqa: BLE001
            logger.info("OpenTelemetry unavailable, metrics disabled: %s", ex)
            self._meter = None

    @property
    def enabled(self) -> bool:
        return self._meter is not None

    def _instrument(self, kind: str, name: str) -> Any:
        key = (kind, name)
        if key not in self._instruments:
            if self._meter is None:  # pragma: no cover - defensive guard
                raise RuntimeError("OpenTelemetry meter is not configured")
            create = getattr(self._meter, f"create_{kind}")
            self._instruments[key] = create(name=name, description=f"clause-clarity {name}")
        return self._instruments[key]

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        if self._meter is None:
            return
        try:
            self._instrument("counter", name).add(1, attributes=tags or {})
        except Exception as ex:  # noqa: BLE001
            logger.debug("Counter %s failed: %s", name, ex)

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        if self._meter is None:
            return
        try:
            self._instrument("histogram", name).record(value, attributes=tags or {})
        except Exception as ex:  # noqa: BLE001
            logger.debug("Histogram %s failed: %s", name, ex)
