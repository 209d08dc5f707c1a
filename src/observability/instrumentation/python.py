from __future__ import annotations

from src.observability.backends import PYTHON
from src.observability.instrumentation.base import (
    InstrumentationTemplate,
    bucket_list,
    comment_text,
    instrument_class,
    label_list,
    string_literal,
)
from src.observability.models import InstrumentKind, MonitoringPlan
from src.observability.naming import constant_identifier
from src.observability.templates import PYTHON_CUSTOM_METRIC, PYTHON_METRICS_HEADER, PYTHON_MIDDLEWARE


class PythonInstrumentation(InstrumentationTemplate):
    """prometheus_client metrics, FastAPI middleware."""

    language = PYTHON
    extension = "py"
    baseline_identifiers = ("HTTP_REQUESTS_TOTAL", "HTTP_REQUEST_DURATION_SECONDS")

    def identifier(self, metric_name: str) -> str:
        return constant_identifier(metric_name)

    def emit_metrics(self, plan: MonitoringPlan) -> str:
        imports = {"Counter", "Histogram"}
        if any(m.kind is InstrumentKind.GAUGE for m in plan.custom_metrics):
            imports.add("Gauge")

        source = PYTHON_METRICS_HEADER.format(
            app_slug=plan.app_slug,
            imports=", ".join(sorted(imports)),
            labels=label_list('"'),
            buckets=bucket_list(),
        )
        for metric, identifier in self.custom_instruments(plan):
            source += PYTHON_CUSTOM_METRIC.format(
                comment=comment_text(metric),
                identifier=identifier,
                cls=instrument_class(metric.kind),
                name=metric.name,
                help=string_literal(metric.help),
            )
        return source

    def emit_middleware(self, plan: MonitoringPlan) -> str:
        return PYTHON_MIDDLEWARE
