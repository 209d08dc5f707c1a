"""Common contract for the per-language instrumentation emitters."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod

from src.observability.catalog import DURATION_BUCKETS, REQUEST_LABELS
from src.observability.models import CustomMetric, InstrumentKind, MonitoringPlan
from src.observability.naming import unique_names


class InstrumentationTemplate(ABC):
    """Emits a metrics module and a request middleware for one backend language.

    Both files declare or use only the two baseline instruments plus one
    instrument per custom metric in the plan; Standard rules are already
    covered by the baseline and never get a declaration of their own.
    """

    language: str = ""
    extension: str = ""
    baseline_identifiers: tuple[str, ...] = ()

    @property
    def metrics_path(self) -> str:
        return f"instrumentation/metrics.{self.extension}"

    @property
    def middleware_path(self) -> str:
        return f"instrumentation/middleware.{self.extension}"

    @abstractmethod
    def identifier(self, metric_name: str) -> str:
        """Source-level identifier for a metric name."""

    @abstractmethod
    def emit_metrics(self, plan: MonitoringPlan) -> str:
        ...

    @abstractmethod
    def emit_middleware(self, plan: MonitoringPlan) -> str:
        ...

    def custom_instruments(self, plan: MonitoringPlan) -> list[tuple[CustomMetric, str]]:
        """Custom metrics paired with collision-free identifiers."""
        names = unique_names(
            [self.identifier(m.name) for m in plan.custom_metrics],
            reserved=set(self.baseline_identifiers),
        )
        return list(zip(plan.custom_metrics, names))

    def render(self, plan: MonitoringPlan) -> dict[str, str]:
        return {
            self.metrics_path: self.emit_metrics(plan),
            self.middleware_path: self.emit_middleware(plan),
        }


def instrument_class(kind: InstrumentKind) -> str:
    return "Counter" if kind is InstrumentKind.COUNTER else "Gauge"


def string_literal(text: str) -> str:
    """Double-quoted literal valid in TypeScript, Python and Go."""
    return json.dumps(text)


def comment_text(metric: CustomMetric) -> str:
    return " ".join("; ".join(metric.sources).split())


def label_list(quote: str) -> str:
    return ", ".join(f"{quote}{label}{quote}" for label in REQUEST_LABELS)


def bucket_list() -> str:
    return ", ".join(str(b) for b in DURATION_BUCKETS)
