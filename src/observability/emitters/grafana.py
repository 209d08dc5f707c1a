"""Grafana datasource/dashboard provisioning and the dashboard itself.

Panel queries come straight from the plan: the baseline expressions shared
with the alert rules, and the synthesized expression of each custom metric.
"""

from __future__ import annotations

from src.observability.config import Settings, get_settings
from src.observability.emitters.prometheus import PROMETHEUS_ADDRESS
from src.observability.emitters.serialize import dump_json, dump_yaml
from src.observability.models import InstrumentKind, MonitoringPlan
from src.observability.progress import log_stage
from src.observability.state import GenerationState

DATASOURCE_PATH = "grafana/provisioning/datasources/prometheus.yml"
DASHBOARD_PROVIDER_PATH = "grafana/provisioning/dashboards/dashboards.yml"
DASHBOARD_PATH = "grafana/dashboards/app.json"

DASHBOARDS_MOUNT = "/var/lib/grafana/dashboards"
DATASOURCE_UID = "prometheus"
DATASOURCE = {"type": "prometheus", "uid": DATASOURCE_UID}

PANEL_WIDTH = 12
PANEL_HEIGHT = 8


def render_datasource(settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    document = {
        "apiVersion": 1,
        "datasources": [
            {
                "name": "Prometheus",
                "type": "prometheus",
                "uid": DATASOURCE_UID,
                "access": "proxy",
                "url": f"http://{PROMETHEUS_ADDRESS}",
                "isDefault": True,
                "editable": False,
                "jsonData": {"timeInterval": settings.scrape_interval},
            }
        ],
    }
    return dump_yaml(document)


def render_dashboard_provider(plan: MonitoringPlan) -> str:
    document = {
        "apiVersion": 1,
        "providers": [
            {
                "name": plan.app_slug,
                "orgId": 1,
                "folder": "",
                "type": "file",
                "disableDeletion": False,
                "updateIntervalSeconds": 30,
                "allowUiUpdates": True,
                "options": {"path": DASHBOARDS_MOUNT},
            }
        ],
    }
    return dump_yaml(document)


def _thresholds(plan: MonitoringPlan, binding: str) -> list[float]:
    return sorted(
        {a.threshold for a in plan.alerts if a.binding == binding and a.threshold is not None}
    )


def _panel(
    index: int,
    title: str,
    expr: str,
    legend: str,
    unit: str,
    description: str,
    thresholds: list[float],
) -> dict:
    steps = [{"color": "green", "value": None}]
    steps += [{"color": "red", "value": t} for t in thresholds]
    custom = {"thresholdsStyle": {"mode": "line" if thresholds else "off"}}
    return {
        "id": index + 1,
        "type": "timeseries",
        "title": title,
        "description": description,
        "datasource": DATASOURCE,
        "gridPos": {
            "h": PANEL_HEIGHT,
            "w": PANEL_WIDTH,
            "x": (index % 2) * PANEL_WIDTH,
            "y": (index // 2) * PANEL_HEIGHT,
        },
        "fieldConfig": {
            "defaults": {
                "unit": unit,
                "custom": custom,
                "thresholds": {"mode": "absolute", "steps": steps},
            },
            "overrides": [],
        },
        "targets": [
            {"refId": "A", "datasource": DATASOURCE, "expr": expr, "legendFormat": legend},
        ],
    }


def _describe(base: str, sources: list[str]) -> str:
    if not sources:
        return base
    return f"{base} Tracked: " + "; ".join(sources)


def build_panels(plan: MonitoringPlan) -> list[dict]:
    rows = [
        (
            "Request Rate",
            plan.baseline["request_rate"],
            "{{route}}",
            "reqps",
            "Requests per second by route.",
            [],
        ),
        (
            "Error Rate",
            plan.baseline["error_rate"],
            "5xx ratio",
            "percentunit",
            _describe("Share of requests answered with a 5xx status.", plan.standard_sources("errors")),
            _thresholds(plan, "error_rate"),
        ),
        (
            "Request Latency (p95)",
            plan.baseline["latency"],
            "p95",
            "s",
            _describe("95th percentile request duration.", plan.standard_sources("latency")),
            _thresholds(plan, "latency"),
        ),
    ]
    for metric in plan.custom_metrics:
        legend = "per second" if metric.kind is InstrumentKind.COUNTER else metric.name
        rows.append(
            (
                metric.title,
                metric.expression,
                legend,
                "short",
                f"{metric.kind.value} {metric.name}: " + "; ".join(metric.sources),
                _thresholds(plan, metric.name),
            )
        )
    return [_panel(i, *row) for i, row in enumerate(rows)]


def build_annotations(plan: MonitoringPlan) -> list[dict]:
    annotations = [
        {
            "builtIn": 1,
            "datasource": {"type": "grafana", "uid": "-- Grafana --"},
            "enable": True,
            "hide": True,
            "iconColor": "rgba(0, 211, 255, 1)",
            "name": "Annotations & Alerts",
            "type": "dashboard",
        }
    ]
    for alert in plan.alerts:
        annotations.append(
            {
                "name": alert.identifier,
                "datasource": DATASOURCE,
                "enable": True,
                "iconColor": "red" if alert.severity == "critical" else "orange",
                "expr": f'ALERTS{{alertname="{alert.identifier}",alertstate="firing"}}',
                "titleFormat": alert.identifier,
                "textFormat": alert.summary,
                "step": "60s",
            }
        )
    return annotations


def render_dashboard(plan: MonitoringPlan) -> str:
    dashboard = {
        "uid": plan.app_slug[:40],
        "title": f"{plan.app_name} Monitoring",
        "tags": ["generated", plan.app_slug],
        "timezone": "browser",
        "editable": True,
        "schemaVersion": 39,
        "version": 1,
        "refresh": "10s",
        "time": {"from": "now-1h", "to": "now"},
        "annotations": {"list": build_annotations(plan)},
        "templating": {"list": []},
        "panels": build_panels(plan),
    }
    return dump_json(dashboard)


def grafana_emitter(state: GenerationState) -> dict:
    """Emit datasource and dashboard provisioning plus the dashboard JSON."""
    plan = state["plan"]
    log_stage("grafana", f"{3 + len(plan.custom_metrics)} panels")
    return {
        "files": {
            DATASOURCE_PATH: render_datasource(),
            DASHBOARD_PROVIDER_PATH: render_dashboard_provider(plan),
            DASHBOARD_PATH: render_dashboard(plan),
        }
    }
