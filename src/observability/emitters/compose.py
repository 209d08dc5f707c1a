"""Docker Compose definition of the monitoring stack."""

from __future__ import annotations

from src.observability.config import Settings, get_settings
from src.observability.emitters.grafana import DASHBOARDS_MOUNT
from src.observability.emitters.serialize import dump_yaml
from src.observability.models import MonitoringPlan
from src.observability.progress import log_stage
from src.observability.state import GenerationState

COMPOSE_PATH = "docker-compose.monitoring.yml"
NETWORK = "monitoring"


def _prometheus_service(settings: Settings) -> dict:
    return {
        "image": settings.prometheus_image,
        "command": [
            "--config.file=/etc/prometheus/prometheus.yml",
            f"--storage.tsdb.retention.time={settings.retention}",
            "--web.enable-lifecycle",
        ],
        "volumes": ["./prometheus:/etc/prometheus:ro", "prometheus-data:/prometheus"],
        "ports": ["9090:9090"],
        "networks": [NETWORK],
        "restart": "unless-stopped",
    }


def _grafana_service(settings: Settings) -> dict:
    return {
        "image": settings.grafana_image,
        "environment": {
            "GF_SECURITY_ADMIN_USER": settings.grafana_admin_user,
            "GF_SECURITY_ADMIN_PASSWORD": settings.grafana_admin_password,
            "GF_USERS_ALLOW_SIGN_UP": "false",
        },
        "volumes": [
            "./grafana/provisioning:/etc/grafana/provisioning:ro",
            f"./grafana/dashboards:{DASHBOARDS_MOUNT}:ro",
            "grafana-data:/var/lib/grafana",
        ],
        "ports": [f"{settings.grafana_port}:3000"],
        "depends_on": ["prometheus"],
        "networks": [NETWORK],
        "restart": "unless-stopped",
    }


def _alertmanager_service(settings: Settings) -> dict:
    return {
        "image": settings.alertmanager_image,
        "ports": ["9093:9093"],
        "networks": [NETWORK],
        "restart": "unless-stopped",
    }


def render_compose(plan: MonitoringPlan, settings: Settings | None = None) -> str:
    settings = settings or get_settings()

    services = {
        "prometheus": _prometheus_service(settings),
        "grafana": _grafana_service(settings),
    }
    if plan.has_alerts:
        services["alertmanager"] = _alertmanager_service(settings)
        services["prometheus"]["depends_on"] = ["alertmanager"]

    document: dict = {}
    if plan.logs:
        document["x-log-shipping"] = [
            {"what": log.what, "destination": log.destination, "retention": log.retention or "default"}
            for log in plan.logs
        ]
    document["services"] = services
    # Project-local network so repeated generations never attach to user infrastructure.
    document["networks"] = {NETWORK: {"driver": "bridge"}}
    document["volumes"] = {"prometheus-data": {}, "grafana-data": {}}

    header = f"Monitoring stack for {plan.app_name}\nStart with: docker compose -f {COMPOSE_PATH} up -d"
    return dump_yaml(document, header=header)


def compose_emitter(state: GenerationState) -> dict:
    """Emit the monitoring stack topology."""
    plan = state["plan"]
    log_stage("compose", "with alertmanager" if plan.has_alerts else "prometheus + grafana")
    for log in plan.logs:
        retention = f", retained {log.retention}" if log.retention else ""
        log_stage("log shipping", f"{log.what} -> {log.destination}{retention}")
    return {"files": {COMPOSE_PATH: render_compose(plan)}}
