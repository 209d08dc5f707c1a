"""Tests for the per-language instrumentation templates."""

import shutil
import subprocess
import sys

import pytest
from conftest import make_app, make_plan

from src.observability.instrumentation import TEMPLATES, template_for
from src.observability.models import MonitoringRule


def render(backend, monitoring=None):
    plan, _ = make_plan(make_app(backend=backend, monitoring=monitoring))
    return template_for(plan.language).render(plan)


class TestNode:
    def test_paths(self):
        files = render("Node with Express")
        assert sorted(files) == ["instrumentation/metrics.ts", "instrumentation/middleware.ts"]

    def test_metrics(self):
        content = render("Node with Express")["instrumentation/metrics.ts"]
        assert "prom-client" in content
        assert "http_requests_total" in content
        assert "http_request_duration_seconds" in content
        assert "page_views" in content
        assert "new Gauge" in content
        assert "export const appPageViews = new Gauge({" in content

    def test_gauge_import_only_when_needed(self):
        content = render(
            "Node with Express",
            [MonitoringRule(kind="track", metric="total signups")],
        )["instrumentation/metrics.ts"]
        assert "Gauge" not in content
        assert "name: 'app_total_signups_total'" in content

    def test_middleware(self):
        content = render("Node with Express")["instrumentation/middleware.ts"]
        assert "metricsMiddleware" in content
        assert "metricsEndpoint" in content


class TestPython:
    def test_paths(self):
        files = render("Python with FastAPI")
        assert sorted(files) == ["instrumentation/metrics.py", "instrumentation/middleware.py"]

    def test_metrics(self):
        content = render("Python with FastAPI")["instrumentation/metrics.py"]
        assert "prometheus_client" in content
        assert "from prometheus_client import Counter, Gauge, Histogram" in content
        assert 'APP_PAGE_VIEWS = Gauge(\n    "app_page_views",' in content

    def test_middleware(self):
        content = render("Python with FastAPI")["instrumentation/middleware.py"]
        assert "async def metrics_endpoint" in content
        assert "async def metrics_middleware" in content


class TestGo:
    def test_paths(self):
        files = render("Go with Gin")
        assert sorted(files) == ["instrumentation/metrics.go", "instrumentation/middleware.go"]

    def test_metrics(self):
        content = render("Go with Gin")["instrumentation/metrics.go"]
        assert "HTTPRequestsTotal" in content
        assert "promauto" in content
        assert "var AppPageViews = promauto.NewGauge(prometheus.GaugeOpts{" in content

    def test_middleware(self):
        content = render("Go with Gin")["instrumentation/middleware.go"]
        assert "MetricsMiddleware" in content
        assert "MetricsHandler" in content


class TestInstruments:
    def test_standard_rules_add_no_instruments(self):
        monitoring = [
            MonitoringRule(kind="track", metric="response times for all api endpoints"),
            MonitoringRule(kind="track", metric="error rates per endpoint"),
        ]
        content = render("Node with Express", monitoring)["instrumentation/metrics.ts"]
        assert content.count("new Counter(") == 1
        assert content.count("new Histogram(") == 1
        assert "new Gauge(" not in content

    def test_one_instrument_per_custom_metric(self):
        monitoring = [
            MonitoringRule(kind="track", metric="active users"),
            MonitoringRule(kind="track", metric="active users right now"),
            MonitoringRule(kind="track", metric="orders total"),
        ]
        content = render("Python with FastAPI", monitoring)["instrumentation/metrics.py"]
        assert content.count('"app_active_users"') == 1
        assert content.count('"app_orders_total"') == 1
        assert "Tracks active users; active users right now" in content

    def test_help_text_is_escaped(self):
        monitoring = [MonitoringRule(kind="track", metric='queue "size" for jobs')]
        content = render("Go with Gin", monitoring)["instrumentation/metrics.go"]
        assert 'Help: "Tracks queue \\"size\\" for jobs",' in content

    def test_template_for_unknown_language_defaults_to_node(self):
        assert template_for("cobol") is TEMPLATES["node"]

    def test_output_is_deterministic(self):
        assert render("Go with Gin") == render("Go with Gin")


CLASHING_RULES = [
    MonitoringRule(kind="track", metric="page views"),
    MonitoringRule(kind="track", metric="signups"),
    MonitoringRule(kind="track", metric="signups total"),
    MonitoringRule(kind="track", metric="accounts created"),
    MonitoringRule(kind="track", metric="accounts total"),
    MonitoringRule(kind="track", metric="active users"),
    MonitoringRule(kind="track", metric="requests"),
]


class TestGeneratedSourcesLoad:
    @pytest.mark.parametrize("monitoring", [None, CLASHING_RULES])
    def test_python_sources_compile(self, monitoring):
        files = render("Python with FastAPI", monitoring)
        for path, source in files.items():
            compile(source, path, "exec")

    @pytest.mark.parametrize("monitoring", [None, CLASHING_RULES])
    def test_python_metrics_module_registers(self, tmp_path, monitoring):
        pytest.importorskip("prometheus_client")
        module = tmp_path / "metrics.py"
        module.write_text(render("Python with FastAPI", monitoring)["instrumentation/metrics.py"])
        # fresh interpreter, so every run starts from an empty default registry
        proc = subprocess.run([sys.executable, str(module)], capture_output=True, text=True)
        assert proc.returncode == 0, proc.stderr

    @pytest.mark.skipif(shutil.which("gofmt") is None, reason="gofmt not installed")
    @pytest.mark.parametrize("monitoring", [None, CLASHING_RULES])
    def test_go_sources_parse(self, tmp_path, monitoring):
        for path, source in render("Go with Gin", monitoring).items():
            target = tmp_path / path.rsplit("/", 1)[-1]
            target.write_text(source)
            proc = subprocess.run(["gofmt", "-e", "-l", str(target)], capture_output=True, text=True)
            assert proc.returncode == 0, proc.stderr

    @pytest.mark.skip(reason="type-checking the TypeScript needs the prom-client and express typings installed")
    def test_typescript_sources_typecheck(self):
        pass


class TestGoRouteLabel:
    def test_route_label_is_never_the_raw_path(self):
        content = render("Go with Gin")["instrumentation/middleware.go"]
        assert "r.URL.Path" not in content
        assert "r.Pattern" in content
        assert "func InstrumentRoute(pattern string, next http.Handler) http.Handler" in content
