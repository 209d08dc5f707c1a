from __future__ import annotations

from src.observability.backends import NODE
from src.observability.instrumentation.base import (
    InstrumentationTemplate,
    bucket_list,
    comment_text,
    instrument_class,
    label_list,
    string_literal,
)
from src.observability.models import InstrumentKind, MonitoringPlan
from src.observability.naming import camel_identifier
from src.observability.templates import NODE_CUSTOM_METRIC, NODE_METRICS_HEADER, NODE_MIDDLEWARE


class NodeInstrumentation(InstrumentationTemplate):
    """TypeScript with prom-client, Express middleware."""

    language = NODE
    extension = "ts"
    baseline_identifiers = ("register", "httpRequestsTotal", "httpRequestDuration")

    def identifier(self, metric_name: str) -> str:
        return camel_identifier(metric_name)

    def emit_metrics(self, plan: MonitoringPlan) -> str:
        imports = {"Counter", "Histogram", "Registry", "collectDefaultMetrics"}
        if any(m.kind is InstrumentKind.GAUGE for m in plan.custom_metrics):
            imports.add("Gauge")

        source = NODE_METRICS_HEADER.format(
            app_slug=plan.app_slug,
            imports=", ".join(sorted(imports, key=str.lower)),
            labels=label_list("'"),
            buckets=bucket_list(),
        )
        for metric, identifier in self.custom_instruments(plan):
            source += NODE_CUSTOM_METRIC.format(
                comment=comment_text(metric),
                identifier=identifier,
                cls=instrument_class(metric.kind),
                name=metric.name,
                help=string_literal(metric.help),
            )
        return source

    def emit_middleware(self, plan: MonitoringPlan) -> str:
        return NODE_MIDDLEWARE
