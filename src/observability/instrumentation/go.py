from __future__ import annotations

from src.observability.backends import GO
from src.observability.instrumentation.base import (
    InstrumentationTemplate,
    bucket_list,
    comment_text,
    instrument_class,
    label_list,
    string_literal,
)
from src.observability.models import MonitoringPlan
from src.observability.naming import pascal_identifier
from src.observability.templates import GO_CUSTOM_METRIC, GO_METRICS_HEADER, GO_MIDDLEWARE


class GoInstrumentation(InstrumentationTemplate):
    """client_golang via promauto, net/http middleware."""

    language = GO
    extension = "go"
    baseline_identifiers = (
        "HTTPRequestsTotal",
        "HTTPRequestDuration",
        "MetricsMiddleware",
        "MetricsHandler",
        "InstrumentRoute",
    )

    def identifier(self, metric_name: str) -> str:
        return pascal_identifier(metric_name)

    def emit_metrics(self, plan: MonitoringPlan) -> str:
        source = GO_METRICS_HEADER.format(
            app_slug=plan.app_slug,
            labels=label_list('"'),
            buckets=bucket_list(),
        )
        for metric, identifier in self.custom_instruments(plan):
            source += GO_CUSTOM_METRIC.format(
                comment=comment_text(metric),
                identifier=identifier,
                cls=instrument_class(metric.kind),
                name=metric.name,
                help=string_literal(metric.help),
            )
        return source

    def emit_middleware(self, plan: MonitoringPlan) -> str:
        return GO_MIDDLEWARE
