"""Turn classified rules into query expressions, thresholds and alert definitions.

Everything an emitter needs is computed here once and handed over as a
``MonitoringPlan``; emitters never derive an expression on their own.
"""

from __future__ import annotations

import re

from src.observability.backends import backend_port, detect_language, is_recognized_backend
from src.observability.catalog import (
    BASELINE_INSTRUMENTS,
    BASELINE_SERIES,
    COUNTER_PHRASES,
    DEFAULT_ALERT_THRESHOLDS,
    DEFAULT_ALERTS,
    ERROR_RATIO_EXPR,
    ERROR_TOPIC_PHRASES,
    GAUGE_PHRASES,
    LATENCY_P95_EXPR,
    LATENCY_TOPIC_PHRASES,
    RATE_WINDOW,
    REQUEST_RATE_EXPR,
    UP_EXPR,
)
from src.observability.classifier import match_canonical
from src.observability.config import get_settings
from src.observability.models import (
    AlertDefinition,
    Application,
    Category,
    ClassifiedRule,
    ConditionResult,
    CustomMetric,
    InstrumentKind,
    LogDirective,
    MonitoringPlan,
    ScrapeTarget,
    StandardMetric,
)
from src.observability.naming import (
    host_slug,
    sanitize_alert_name,
    snake_slug,
    unique_names,
)

DEFAULT_FOR_DURATION = "5m"
PLACEHOLDER_MARKER = "TODO(threshold)"
LIVENESS_FALLBACK = "liveness-fallback"
# Duplicate alert names become HighErrorRateN2, HighErrorRateN3...
ALERT_SUFFIX_SEPARATOR = "N"
# Hostnames of the monitoring stack itself.
RESERVED_HOSTS = ("prometheus", "grafana", "alertmanager")

# Ordered, first match wins.
_COMPARISONS = (
    (r"is greater than", ">"),
    (r"greater than", ">"),
    (r"more than", ">"),
    (r"exceeds?", ">"),
    (r"above", ">"),
    (r"over", ">"),
    (r"is less than", "<"),
    (r"less than", "<"),
    (r"fewer than", "<"),
    (r"drops below", "<"),
    (r"falls below", "<"),
    (r"below", "<"),
    (r"under", "<"),
)
_COMPARISON_PATTERNS = tuple((re.compile(rf"\b{p}\b", re.I), op) for p, op in _COMPARISONS)

_NUMBER = re.compile(r"(?<![\w.])(\d+(?:\.\d+)?|\.\d+)(?!\d|\.\d|xx)\s*(%|percent\b|per cent\b)?", re.I)
_SUSTAIN = re.compile(
    r"\bfor\s+(?:at\s+least\s+)?(\d+)\s*"
    r"(seconds?|secs?|s|minutes?|mins?|m|hours?|hrs?|h)\b",
    re.I,
)


def app_slug(app_name: str) -> str:
    return host_slug(app_name) or "app"


def label_selector(app_name: str) -> str:
    return f'app="{app_slug(app_name)}"'


def baseline_expressions(app_name: str) -> dict[str, str]:
    """The framework-level expressions every artifact shares."""
    sel = label_selector(app_name)
    return {
        "request_rate": REQUEST_RATE_EXPR.format(sel=sel),
        "error_rate": ERROR_RATIO_EXPR.format(sel=sel),
        "latency": LATENCY_P95_EXPR.format(sel=sel),
        "up": UP_EXPR.format(sel=sel),
    }


# ── Tracking ──


def _namespace(namespace: str | None) -> str:
    return snake_slug(namespace if namespace is not None else get_settings().metric_namespace)


def custom_metric_kind(description: str) -> InstrumentKind:
    """Gauge for point-in-time quantities, Counter for explicit tallies.

    Anything else is a Gauge: business metrics are set from application
    state rather than incremented by the middleware.
    """
    lower = (description or "").lower()
    if any(p in lower for p in GAUGE_PHRASES):
        return InstrumentKind.GAUGE
    if any(p in lower for p in COUNTER_PHRASES):
        return InstrumentKind.COUNTER
    return InstrumentKind.GAUGE


def custom_metric_name(description: str, kind: InstrumentKind, namespace: str | None = None) -> str:
    ns = _namespace(namespace)
    slug = snake_slug(description) or "custom_metric"
    stem = f"{ns}_{slug}" if ns else slug
    if not stem[0].isalpha():
        stem = f"metric_{stem}"
    if kind is InstrumentKind.COUNTER:
        if stem.endswith("_total"):
            stem = stem[: -len("_total")]
        if f"{stem}_total" in BASELINE_INSTRUMENTS:
            stem += "_custom"
        return f"{stem}_total"
    if stem in BASELINE_INSTRUMENTS:
        stem += "_custom"
    return stem


def exposed_series(name: str, kind: InstrumentKind) -> set[str]:
    """Series names an instrument occupies in a client registry.

    A Counter ``x_total`` also claims ``x`` and ``x_created``, so a Gauge
    with either name cannot share its registry.
    """
    if kind is InstrumentKind.COUNTER:
        base = name[: -len("_total")] if name.endswith("_total") else name
        return {base, f"{base}_total", f"{base}_created"}
    return {name}


def _suffixed(name: str, kind: InstrumentKind, index: int) -> str:
    if kind is InstrumentKind.COUNTER and name.endswith("_total"):
        return f"{name[: -len('_total')]}_{index}_total"
    return f"{name}_{index}"


def _custom_expression(name: str, kind: InstrumentKind, sel: str) -> str:
    if kind is InstrumentKind.COUNTER:
        return f"sum(rate({name}{{{sel}}}[{RATE_WINDOW}]))"
    return f"sum({name}{{{sel}}})"


def _known_custom(metric: StandardMetric, namespace: str | None) -> str:
    return metric.name.format(namespace=_namespace(namespace) or "app")


def tracking_metric(description: str, app_name: str, namespace: str | None = None) -> tuple[str, InstrumentKind, str]:
    """(metric name, instrument kind, query expression) for a tracking description."""
    sel = label_selector(app_name)
    canonical = match_canonical(description)
    if canonical is not None and canonical.baseline:
        return canonical.name, canonical.kind, canonical.expression.format(sel=sel)
    if canonical is not None:
        name = _known_custom(canonical, namespace)
        return name, canonical.kind, canonical.expression.format(name=name, sel=sel)
    kind = custom_metric_kind(description)
    name = custom_metric_name(description, kind, namespace)
    return name, kind, _custom_expression(name, kind, sel)


def tracking_expression(description: str, app_name: str, namespace: str | None = None) -> str:
    """Query expression for a tracking description."""
    return tracking_metric(description, app_name, namespace)[2]


# ── Conditions ──


def _format_ratio(literal: str) -> str:
    decimals = len(literal.split(".", 1)[1]) if "." in literal else 0
    places = max(2, decimals + 2)
    return f"{float(literal) / 100:.{places}f}"


def _sustain_duration(text: str) -> tuple[str, str]:
    """Pull a "for N minutes" clause out of ``text``; returns (duration, rest)."""
    match = _SUSTAIN.search(text)
    if not match:
        return DEFAULT_FOR_DURATION, text
    unit = match.group(2).lower()[0]
    rest = (text[: match.start()] + text[match.end():]).strip()
    return f"{int(match.group(1))}{unit}", rest


def condition_expression(condition: str) -> ConditionResult:
    """Parse a comparison and threshold out of a free-text alert condition.

    Percentages become 0-1 ratios (``5%`` -> ``0.05``); other literals are
    kept as written. Without a comparison keyword or a number the result is
    a placeholder that must be completed by hand.
    """
    for_duration, text = _sustain_duration(condition or "")

    operator = None
    for pattern, op in _COMPARISON_PATTERNS:
        if pattern.search(text):
            operator = op
            break

    number = _NUMBER.search(text)
    if operator is None or number is None:
        return ConditionResult(
            comparison="> 0",
            threshold=None,
            threshold_text="",
            operator=operator or ">",
            is_ratio=False,
            for_duration=for_duration,
            placeholder=True,
        )

    literal, unit = number.group(1), number.group(2)
    if literal.startswith("."):
        literal = "0" + literal
    if unit:
        threshold_text = _format_ratio(literal)
        threshold = float(literal) / 100
    else:
        threshold_text = literal
        threshold = float(literal)
    return ConditionResult(
        comparison=f"{operator} {threshold_text}",
        threshold=threshold,
        threshold_text=threshold_text,
        operator=operator,
        is_ratio=bool(unit),
        for_duration=for_duration,
    )


# ── Alerts ──


def bind_alert_metric(condition: str, baseline: dict[str, str], custom_metrics: tuple[CustomMetric, ...]) -> tuple[str, str]:
    """(expression, binding) for the metric an alert condition talks about."""
    lower = (condition or "").lower()
    if any(p in lower for p in ERROR_TOPIC_PHRASES):
        return baseline["error_rate"], "error_rate"
    if any(p in lower for p in LATENCY_TOPIC_PHRASES):
        return baseline["latency"], "latency"
    condition_slug = snake_slug(condition)
    for metric in custom_metrics:
        for source in metric.sources:
            source_slug = snake_slug(source)
            if source_slug and source_slug in condition_slug:
                return metric.expression, metric.name
    return baseline["up"], LIVENESS_FALLBACK


def _severity(condition: str) -> str:
    lower = condition.lower()
    if any(word in lower for word in ("critical", "down", "outage")):
        return "critical"
    return "warning"


def default_alerts(baseline: dict[str, str]) -> list[AlertDefinition]:
    return [
        AlertDefinition(
            identifier=identifier,
            expression=f"{baseline[key]} {comparison}",
            for_duration=for_duration,
            severity=severity,
            summary=summary,
            labels={"severity": severity},
            annotations={"summary": summary},
            binding=key,
            threshold=DEFAULT_ALERT_THRESHOLDS.get(key),
        )
        for identifier, key, comparison, for_duration, severity, summary in DEFAULT_ALERTS
    ]


def build_alerts(
    classified: list[ClassifiedRule],
    baseline: dict[str, str],
    custom_metrics: tuple[CustomMetric, ...],
    warnings: list[str],
) -> tuple[AlertDefinition, ...]:
    """Default alerts followed by one alert per user alert rule."""
    defaults = default_alerts(baseline)
    rules = [c.rule for c in classified if c.category is Category.ALERT]
    identifiers = unique_names(
        [sanitize_alert_name(r.condition) for r in rules],
        reserved={a.identifier for a in defaults},
        sep=ALERT_SUFFIX_SEPARATOR,
    )

    alerts = list(defaults)
    for rule, identifier in zip(rules, identifiers):
        condition = " ".join(rule.condition.split())
        result = condition_expression(condition)
        metric_expr, binding = bind_alert_metric(condition, baseline, custom_metrics)

        labels = {"severity": _severity(condition)}
        annotations = {"summary": condition or "custom alert", "description": f"alert if {condition}"}
        if rule.channel:
            labels["channel"] = rule.channel.strip().lower()
            annotations["notify"] = rule.channel.strip()

        threshold = result.threshold
        if binding == LIVENESS_FALLBACK:
            threshold = None
            expression = f"{metric_expr} == 0"
            annotations["binding"] = LIVENESS_FALLBACK
            if result.threshold_text:
                annotations["threshold"] = result.threshold_text
            warnings.append(
                f'alert "{condition}" does not name a known metric; bound to target liveness ({identifier})'
            )
        else:
            expression = f"{metric_expr} {result.comparison}"

        if result.placeholder:
            expression += f' # {PLACEHOLDER_MARKER}: set a threshold for "{condition}"'
            labels["needs_review"] = "true"
            warnings.append(f'alert "{condition}" has no parseable threshold; emitted placeholder ({identifier})')

        alerts.append(
            AlertDefinition(
                identifier=identifier,
                expression=expression,
                for_duration=result.for_duration,
                severity=labels["severity"],
                summary=annotations["summary"],
                labels=labels,
                annotations=annotations,
                binding=binding,
                threshold=threshold,
            )
        )
    return tuple(alerts)


# ── Plan ──


def build_custom_metrics(
    classified: list[ClassifiedRule],
    app_name: str,
    namespace: str | None,
    warnings: list[str],
) -> tuple[CustomMetric, ...]:
    """One metric per distinct synthesized name, merging rules that coincide."""
    merged: dict[str, dict] = {}
    for c in classified:
        if c.category is not Category.CUSTOM:
            continue
        description = c.rule.metric.strip()
        if not description:
            warnings.append("tracking rule without a description; emitted a generic custom metric")
        name, kind, expression = tracking_metric(description, app_name, namespace)
        entry = merged.setdefault(
            name,
            {"kind": kind, "expression": expression, "title": description or name, "sources": []},
        )
        entry["sources"].append(description or name)

    sel = label_selector(app_name)
    taken = set(BASELINE_SERIES)
    metrics = []
    for name, entry in merged.items():
        kind = entry["kind"]
        final = name
        index = 2
        while exposed_series(final, kind) & taken:
            final = _suffixed(name, kind, index)
            index += 1
        expression = entry["expression"]
        if final != name:
            expression = _custom_expression(final, kind, sel)
            warnings.append(f'metric "{name}" clashes with another instrument; renamed to {final}')
        taken |= exposed_series(final, kind)
        metrics.append(
            CustomMetric(
                name=final,
                kind=kind,
                expression=expression,
                title=entry["title"],
                sources=tuple(entry["sources"]),
            )
        )
    return tuple(metrics)


def scrape_targets(app: Application) -> tuple[ScrapeTarget, ...]:
    """One target per microservice when a topology exists, else the backend."""
    port = backend_port(app)
    if app.architecture is not None and app.architecture.services:
        services = app.architecture.services
        names = unique_names(
            [host_slug(s.name) or f"service-{i + 1}" for i, s in enumerate(services)],
            reserved=set(RESERVED_HOSTS),
            sep="-",
        )
        return tuple(
            ScrapeTarget(name=name, port=s.port or port) for name, s in zip(names, services)
        )
    return (ScrapeTarget(name=f"{app_slug(app.name)}-backend", port=port),)


def build_plan(app: Application, classified: list[ClassifiedRule], warnings: list[str]) -> MonitoringPlan:
    settings = get_settings()
    namespace = settings.metric_namespace

    if app.backend and not is_recognized_backend(app.backend):
        warnings.append(f'unrecognized backend "{app.backend}"; instrumentation defaults to node')

    baseline = baseline_expressions(app.name)
    custom_metrics = build_custom_metrics(classified, app.name, namespace, warnings)
    alerts = build_alerts(classified, baseline, custom_metrics, warnings)
    logs = tuple(
        LogDirective(
            what=c.rule.metric or "application logs",
            destination=c.rule.service or "stdout",
            retention=c.rule.duration,
        )
        for c in classified
        if c.category is Category.LOG
    )

    return MonitoringPlan(
        app_name=app.name,
        app_slug=app_slug(app.name),
        language=detect_language(app.backend),
        targets=scrape_targets(app),
        classified=tuple(classified),
        baseline=baseline,
        custom_metrics=custom_metrics,
        alerts=alerts,
        logs=logs,
    )

