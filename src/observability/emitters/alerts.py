"""Prometheus alerting rules: the defaults plus one rule per user alert."""

from __future__ import annotations

from src.observability.emitters.serialize import dump_yaml
from src.observability.models import AlertDefinition, MonitoringPlan
from src.observability.progress import log_stage
from src.observability.state import GenerationState

ALERT_RULES_PATH = "prometheus/alerts.yml"


def _rule(alert: AlertDefinition) -> dict:
    return {
        "alert": alert.identifier,
        "expr": alert.expression,
        "for": alert.for_duration,
        "labels": dict(alert.labels),
        "annotations": dict(alert.annotations),
    }


def render_alert_rules(plan: MonitoringPlan) -> str:
    document = {
        "groups": [
            {
                "name": f"{plan.app_slug}-alerts",
                "rules": [_rule(alert) for alert in plan.alerts],
            }
        ]
    }
    return dump_yaml(document, header=f"Alerting rules for {plan.app_name}")


def alerts_emitter(state: GenerationState) -> dict:
    """Emit the alerting rules file."""
    plan = state["plan"]
    log_stage("alerts", f"{len(plan.alerts)} rules")
    return {"files": {ALERT_RULES_PATH: render_alert_rules(plan)}}
