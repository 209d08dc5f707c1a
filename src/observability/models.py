"""Data model consumed and produced by the monitoring generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Category(str, Enum):
    STANDARD = "standard"
    CUSTOM = "custom"
    ALERT = "alert"
    LOG = "log"


class InstrumentKind(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


# ── Input (upstream IR subset) ──


@dataclass(frozen=True)
class MonitoringRule:
    """An observability directive: track, alert or log."""

    kind: str
    metric: str = ""
    condition: str = ""
    channel: str = ""
    service: str = ""
    duration: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> MonitoringRule:
        return cls(
            kind=str(data.get("kind", "")).lower(),
            metric=data.get("metric", "") or "",
            condition=data.get("condition", "") or "",
            channel=data.get("channel", "") or "",
            service=data.get("service", "") or "",
            duration=data.get("duration", "") or "",
        )


@dataclass(frozen=True)
class ServiceDef:
    name: str
    port: int = 0


@dataclass(frozen=True)
class Architecture:
    style: str = ""
    services: tuple[ServiceDef, ...] = ()


@dataclass(frozen=True)
class Application:
    """The application description a generation run works from.

    ``backend`` is the free-text backend choice ("Node with Express",
    "Python with FastAPI", ...). ``backend_port`` is the configured backend
    port; 0 means the language default.
    """

    name: str
    backend: str = ""
    backend_port: int = 0
    architecture: Architecture | None = None
    monitoring: tuple[MonitoringRule, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> Application:
        arch = data.get("architecture")
        architecture = None
        if arch:
            architecture = Architecture(
                style=arch.get("style", ""),
                services=tuple(
                    ServiceDef(name=s["name"], port=int(s.get("port", 0) or 0))
                    for s in arch.get("services", [])
                ),
            )
        return cls(
            name=data.get("name", "") or "app",
            backend=data.get("backend", "") or "",
            backend_port=int(data.get("backend_port", 0) or 0),
            architecture=architecture,
            monitoring=tuple(MonitoringRule.from_dict(r) for r in data.get("monitoring", [])),
        )


# ── Derived, per generation run ──


@dataclass(frozen=True)
class StandardMetric:
    """A canonical metric the generator knows how to query."""

    key: str
    name: str
    phrases: tuple[str, ...]
    expression: str
    kind: InstrumentKind
    baseline: bool


@dataclass(frozen=True)
class ClassifiedRule:
    rule: MonitoringRule
    category: Category
    standard: StandardMetric | None = None


@dataclass(frozen=True)
class CustomMetric:
    """A business metric that needs its own instrument."""

    name: str
    kind: InstrumentKind
    expression: str
    title: str
    sources: tuple[str, ...]

    @property
    def help(self) -> str:
        return "Tracks " + "; ".join(self.sources)


@dataclass(frozen=True)
class ConditionResult:
    """Comparison parsed out of a free-text alert condition."""

    comparison: str
    threshold: float | None
    threshold_text: str
    operator: str
    is_ratio: bool
    for_duration: str
    placeholder: bool = False


@dataclass(frozen=True)
class ScrapeTarget:
    name: str
    port: int

    @property
    def address(self) -> str:
        return f"{self.name}:{self.port}"


@dataclass(frozen=True)
class AlertDefinition:
    identifier: str
    expression: str
    for_duration: str
    severity: str
    summary: str
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    binding: str = ""
    threshold: float | None = None


@dataclass(frozen=True)
class LogDirective:
    what: str
    destination: str
    retention: str


@dataclass(frozen=True)
class MonitoringPlan:
    """Classification and synthesis results shared by every emitter."""

    app_name: str
    app_slug: str
    language: str
    targets: tuple[ScrapeTarget, ...]
    classified: tuple[ClassifiedRule, ...]
    baseline: dict[str, str]
    custom_metrics: tuple[CustomMetric, ...]
    alerts: tuple[AlertDefinition, ...]
    logs: tuple[LogDirective, ...]

    @property
    def has_alerts(self) -> bool:
        return any(c.category is Category.ALERT for c in self.classified)

    def standard_sources(self, key: str) -> list[str]:
        """Descriptions of the Standard rules mapped to canonical metric ``key``."""
        return [
            c.rule.metric
            for c in self.classified
            if c.category is Category.STANDARD and c.standard is not None and c.standard.key == key
        ]
