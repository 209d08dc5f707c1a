"""Shared fixtures for the monitoring generator tests."""

import os

import pytest

from src.observability.classifier import classify
from src.observability.models import Application, Architecture, MonitoringRule, ServiceDef
from src.observability.synthesizer import build_plan


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch):
    """Keep MONITORING_* overrides from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("MONITORING_"):
            monkeypatch.delenv(key, raising=False)


def make_app(backend="Node with Express", monitoring=None, **kwargs):
    if monitoring is None:
        monitoring = (
            MonitoringRule(kind="track", metric="page views"),
            MonitoringRule(kind="alert", condition="error rate is above 5%", channel="Slack"),
            MonitoringRule(kind="log", metric="all API requests", service="CloudWatch", duration="90 days"),
        )
    return Application(name=kwargs.pop("name", "TestApp"), backend=backend, monitoring=tuple(monitoring), **kwargs)


def make_plan(app):
    warnings = []
    plan = build_plan(app, classify(app.monitoring), warnings)
    return plan, warnings


@pytest.fixture
def test_app():
    return make_app()


@pytest.fixture
def test_plan(test_app):
    plan, _ = make_plan(test_app)
    return plan


@pytest.fixture
def microservices_app():
    return make_app(
        architecture=Architecture(
            style="microservices",
            services=(ServiceDef(name="UserService", port=3001), ServiceDef(name="TaskService", port=3002)),
        )
    )
