"""Partition monitoring rules into standard, custom, alert and log rules."""

from __future__ import annotations

from collections.abc import Iterable

from src.observability.catalog import CANONICAL_METRICS
from src.observability.models import Category, ClassifiedRule, MonitoringRule, StandardMetric


def match_canonical(text: str) -> StandardMetric | None:
    """First canonical metric whose recognition phrases occur in ``text``."""
    lower = (text or "").lower()
    for metric in CANONICAL_METRICS:
        if any(phrase in lower for phrase in metric.phrases):
            return metric
    return None


def is_standard_metric(text: str) -> bool:
    """True when ``text`` is already covered by the baseline middleware."""
    metric = match_canonical(text)
    return metric is not None and metric.baseline


def classify_rule(rule: MonitoringRule) -> ClassifiedRule:
    kind = (rule.kind or "").lower()
    if kind == "alert":
        return ClassifiedRule(rule=rule, category=Category.ALERT)
    if kind == "log":
        return ClassifiedRule(rule=rule, category=Category.LOG)

    # Unknown kinds are treated as tracking so the rule still shows up somewhere.
    metric = match_canonical(rule.metric)
    if metric is not None and metric.baseline:
        return ClassifiedRule(rule=rule, category=Category.STANDARD, standard=metric)
    return ClassifiedRule(rule=rule, category=Category.CUSTOM, standard=metric)


def classify(rules: Iterable[MonitoringRule]) -> list[ClassifiedRule]:
    """Classify every rule, preserving input order."""
    return [classify_rule(rule) for rule in rules]
