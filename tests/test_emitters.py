"""Tests for the configuration emitters (Prometheus, alerts, Grafana, compose)."""

import json

import yaml
from conftest import make_app, make_plan

from src.observability.config import get_settings
from src.observability.emitters.alerts import render_alert_rules
from src.observability.emitters.compose import render_compose
from src.observability.emitters.grafana import (
    build_panels,
    render_dashboard,
    render_dashboard_provider,
    render_datasource,
)
from src.observability.emitters.prometheus import render_scrape_config
from src.observability.models import MonitoringRule

TRACK_ONLY = [MonitoringRule(kind="track", metric="page views")]


class TestScrapeConfig:
    def test_contains_scrape_targets(self, test_plan):
        content = render_scrape_config(test_plan)
        assert "scrape_configs:" in content
        assert "testapp-backend:3000" in content
        assert "metrics_path: /metrics" in content

    def test_targets_carry_app_label(self, test_plan):
        config = yaml.safe_load(render_scrape_config(test_plan))
        job = config["scrape_configs"][1]
        assert job["job_name"] == "testapp-backend"
        assert job["static_configs"][0]["labels"] == {"app": "testapp"}

    def test_microservices(self, microservices_app):
        plan, _ = make_plan(microservices_app)
        content = render_scrape_config(plan)
        assert "userservice:3001" in content
        assert "taskservice:3002" in content
        assert "testapp-backend" not in content

    def test_python_port(self):
        plan, _ = make_plan(make_app(backend="Python with FastAPI"))
        assert "testapp-backend:8000" in render_scrape_config(plan)

    def test_configured_port_wins(self):
        plan, _ = make_plan(make_app(backend="Go with Gin", backend_port=9000))
        assert "testapp-backend:9000" in render_scrape_config(plan)

    def test_alertmanager_included_with_alerts(self, test_plan):
        config = yaml.safe_load(render_scrape_config(test_plan))
        assert "alertmanagers:" in render_scrape_config(test_plan)
        assert config["alerting"]["alertmanagers"][0]["static_configs"][0]["targets"] == ["alertmanager:9093"]

    def test_no_alertmanager_without_alerts(self):
        plan, _ = make_plan(make_app(monitoring=TRACK_ONLY))
        assert "alertmanagers:" not in render_scrape_config(plan)

    def test_no_alertmanager_for_empty_rules(self):
        plan, _ = make_plan(make_app(monitoring=[]))
        config = yaml.safe_load(render_scrape_config(plan))
        assert "alerting" not in config
        assert config["rule_files"] == ["alerts.yml"]

    def test_scrape_interval_from_environment(self, monkeypatch, test_plan):
        monkeypatch.setenv("MONITORING_SCRAPE_INTERVAL", "30s")
        config = yaml.safe_load(render_scrape_config(test_plan))
        assert config["global"]["scrape_interval"] == "30s"


class TestAlertRules:
    def test_includes_defaults(self, test_plan):
        content = render_alert_rules(test_plan)
        for name in ("HighErrorRate", "HighLatency", "ServiceDown"):
            assert name in content

    def test_includes_custom_condition(self, test_plan):
        assert "error rate is above 5%" in render_alert_rules(test_plan)

    def test_valid_structure(self, test_plan):
        document = yaml.safe_load(render_alert_rules(test_plan))
        rules = document["groups"][0]["rules"]
        assert document["groups"][0]["name"] == "testapp-alerts"
        assert [r["alert"] for r in rules] == ["HighErrorRate", "HighLatency", "ServiceDown", "ErrorRateIsAbove5"]
        custom = rules[-1]
        assert custom["expr"].endswith("> 0.05")
        assert custom["for"] == "5m"
        assert custom["labels"] == {"severity": "warning", "channel": "slack"}

    def test_default_expressions_match_baseline(self, test_plan):
        rules = yaml.safe_load(render_alert_rules(test_plan))["groups"][0]["rules"]
        assert rules[0]["expr"] == test_plan.baseline["error_rate"] + " > 0.05"
        assert rules[1]["expr"] == test_plan.baseline["latency"] + " > 1"
        assert rules[2]["expr"] == 'up{app="testapp"} == 0'


class TestGrafana:
    def test_datasource(self):
        content = render_datasource()
        assert "type: prometheus" in content
        assert "http://prometheus:9090" in content
        assert yaml.safe_load(content)["datasources"][0]["uid"] == "prometheus"

    def test_dashboard_provider(self, test_plan):
        provider = yaml.safe_load(render_dashboard_provider(test_plan))["providers"][0]
        assert provider["options"]["path"] == "/var/lib/grafana/dashboards"

    def test_dashboard_contains_panels(self, test_plan):
        content = render_dashboard(test_plan)
        for title in ("Request Rate", "Error Rate", "Request Latency", "page views"):
            assert title in content

    def test_dashboard_is_valid_json(self, test_plan):
        dashboard = json.loads(render_dashboard(test_plan))
        assert dashboard["uid"] == "testapp"
        assert len(dashboard["panels"]) == 4
        assert len({p["id"] for p in dashboard["panels"]}) == 4

    def test_custom_panel_uses_synthesized_expression(self, test_plan):
        panel = json.loads(render_dashboard(test_plan))["panels"][3]
        assert panel["title"] == "page views"
        assert panel["targets"][0]["expr"] == 'sum(app_page_views{app="testapp"})'

    def test_panels_share_alert_expressions(self, test_plan):
        panels = build_panels(test_plan)
        assert panels[1]["targets"][0]["expr"] == test_plan.baseline["error_rate"]
        assert panels[2]["targets"][0]["expr"] == test_plan.baseline["latency"]

    def test_error_panel_thresholds_follow_alerts(self):
        app = make_app(monitoring=[MonitoringRule(kind="alert", condition="error rate is above 10%")])
        plan, _ = make_plan(app)
        steps = build_panels(plan)[1]["fieldConfig"]["defaults"]["thresholds"]["steps"]
        assert [s["value"] for s in steps] == [None, 0.05, 0.1]

    def test_standard_rules_use_real_promql(self):
        app = make_app(
            monitoring=[
                MonitoringRule(kind="track", metric="response times for all api endpoints"),
                MonitoringRule(kind="track", metric="error rates per endpoint"),
            ]
        )
        plan, _ = make_plan(app)
        content = render_dashboard(plan)
        assert "response_times_for_all_api_endpoints{" not in content
        assert "http_request_duration_seconds_bucket" in content
        assert "http_requests_total" in content
        dashboard = json.loads(content)
        assert len(dashboard["panels"]) == 3
        assert "response times for all api endpoints" in dashboard["panels"][2]["description"]
        for panel in dashboard["panels"]:
            assert panel["targets"][0]["expr"] not in (
                "response times for all api endpoints",
                "error rates per endpoint",
            )

    def test_alert_annotations(self, test_plan):
        annotations = json.loads(render_dashboard(test_plan))["annotations"]["list"]
        names = [a["name"] for a in annotations[1:]]
        assert names == [a.identifier for a in test_plan.alerts]
        assert 'alertname="ErrorRateIsAbove5"' in annotations[-1]["expr"]


class TestCompose:
    def test_contains_services(self, test_plan):
        content = render_compose(test_plan)
        assert "prometheus:" in content
        assert "grafana:" in content

    def test_alertmanager_with_alerts(self, test_plan):
        assert "alertmanager:" in render_compose(test_plan)

    def test_no_alertmanager_without_alerts(self):
        plan, _ = make_plan(make_app(monitoring=TRACK_ONLY))
        assert "alertmanager:" not in render_compose(plan)

    def test_network_is_not_external(self, test_plan):
        content = render_compose(test_plan)
        assert "external: true" not in content
        assert yaml.safe_load(content)["networks"] == {"monitoring": {"driver": "bridge"}}

    def test_log_rules_are_listed(self, test_plan):
        document = yaml.safe_load(render_compose(test_plan))
        assert document["x-log-shipping"] == [
            {"what": "all API requests", "destination": "CloudWatch", "retention": "90 days"}
        ]

    def test_settings_flow_into_services(self, monkeypatch, test_plan):
        monkeypatch.setenv("MONITORING_GRAFANA_PORT", "4000")
        services = yaml.safe_load(render_compose(test_plan, get_settings()))["services"]
        assert services["grafana"]["ports"] == ["4000:3000"]
        assert "--storage.tsdb.retention.time=15d" in services["prometheus"]["command"]
