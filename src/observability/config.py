"""Environment-driven settings for the generated monitoring stack.

Every value is overridable via a ``MONITORING_<NAME>`` environment variable
(the CLI loads ``.env`` first). Values are read at call time so tests and
callers can change the environment between runs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

SETTING_DEFAULTS = {
    "metric_namespace": "app",
    "scrape_interval": "15s",
    "evaluation_interval": "15s",
    "retention": "15d",
    "prometheus_image": "prom/prometheus:v2.53.0",
    "grafana_image": "grafana/grafana:11.1.0",
    "alertmanager_image": "prom/alertmanager:v0.27.0",
    "grafana_port": "3002",
    "grafana_admin_user": "admin",
    "grafana_admin_password": "admin",
}


@dataclass(frozen=True)
class Settings:
    metric_namespace: str
    scrape_interval: str
    evaluation_interval: str
    retention: str
    prometheus_image: str
    grafana_image: str
    alertmanager_image: str
    grafana_port: str
    grafana_admin_user: str
    grafana_admin_password: str


def get_settings() -> Settings:
    """Resolve settings: ``MONITORING_<NAME>`` env var, then built-in default."""
    values = {}
    for key, default in SETTING_DEFAULTS.items():
        values[key] = os.environ.get(f"MONITORING_{key.upper()}") or default
    return Settings(**values)
