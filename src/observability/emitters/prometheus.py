"""Metrics-collector (Prometheus) scrape configuration."""

from __future__ import annotations

from src.observability.config import Settings, get_settings
from src.observability.emitters.serialize import dump_yaml
from src.observability.models import MonitoringPlan
from src.observability.progress import log_stage
from src.observability.state import GenerationState

SCRAPE_CONFIG_PATH = "prometheus/prometheus.yml"
RULE_FILE = "alerts.yml"
METRICS_PATH = "/metrics"
PROMETHEUS_ADDRESS = "prometheus:9090"
ALERTMANAGER_ADDRESS = "alertmanager:9093"


def render_scrape_config(plan: MonitoringPlan, settings: Settings | None = None) -> str:
    settings = settings or get_settings()

    config: dict = {
        "global": {
            "scrape_interval": settings.scrape_interval,
            "evaluation_interval": settings.evaluation_interval,
        },
        "rule_files": [RULE_FILE],
    }

    # Alert routing exists iff at least one alert rule was supplied; the
    # compose emitter gates the alertmanager service on the same predicate.
    if plan.has_alerts:
        config["alerting"] = {
            "alertmanagers": [{"static_configs": [{"targets": [ALERTMANAGER_ADDRESS]}]}],
        }

    jobs = [{"job_name": "prometheus", "static_configs": [{"targets": ["localhost:9090"]}]}]
    for target in plan.targets:
        jobs.append(
            {
                "job_name": target.name,
                "metrics_path": METRICS_PATH,
                "static_configs": [
                    {"targets": [target.address], "labels": {"app": plan.app_slug}},
                ],
            }
        )
    config["scrape_configs"] = jobs

    return dump_yaml(config, header=f"Prometheus configuration for {plan.app_name}")


def prometheus_emitter(state: GenerationState) -> dict:
    """Emit the scrape configuration."""
    plan = state["plan"]
    log_stage("prometheus", f"{len(plan.targets)} scrape targets")
    return {"files": {SCRAPE_CONFIG_PATH: render_scrape_config(plan)}}
