"""Tests for rule classification and the canonical metric table."""

from src.observability.classifier import classify, is_standard_metric, match_canonical
from src.observability.models import Category, MonitoringRule


class TestIsStandardMetric:
    def test_response_time_is_standard(self):
        assert is_standard_metric("response times for all api endpoints")

    def test_error_rate_is_standard(self):
        assert is_standard_metric("error rates per endpoint")

    def test_case_insensitive(self):
        assert is_standard_metric("API Latency")

    def test_business_metric_is_not_standard(self):
        assert not is_standard_metric("page views")

    def test_active_users_is_known_but_not_standard(self):
        assert not is_standard_metric("active users daily and monthly")
        assert match_canonical("active users daily and monthly").key == "active_users"


class TestClassify:
    def test_categories(self):
        rules = [
            MonitoringRule(kind="track", metric="response times for all api endpoints"),
            MonitoringRule(kind="track", metric="page views"),
            MonitoringRule(kind="alert", condition="page views drop below 10"),
            MonitoringRule(kind="log", metric="all API requests", service="CloudWatch"),
        ]
        classified = classify(rules)

        assert [c.category for c in classified] == [
            Category.STANDARD,
            Category.CUSTOM,
            Category.ALERT,
            Category.LOG,
        ]
        assert classified[0].standard.key == "latency"
        assert classified[1].standard is None

    def test_alert_regardless_of_text(self):
        classified = classify([MonitoringRule(kind="alert", condition="response time exceeds 2 seconds")])
        assert classified[0].category is Category.ALERT

    def test_first_match_wins(self):
        # "latency" is listed before "error rate" in the canonical table
        assert match_canonical("latency of error rate reports").key == "latency"

    def test_empty_rules(self):
        assert classify([]) == []

    def test_preserves_order(self):
        rules = [MonitoringRule(kind="track", metric=name) for name in ("b", "a", "c")]
        assert [c.rule.metric for c in classify(rules)] == ["b", "a", "c"]

    def test_business_errors_stay_custom(self):
        classified = classify(
            [
                MonitoringRule(kind="track", metric="checkout errors"),
                MonitoringRule(kind="track", metric="login failures"),
                MonitoringRule(kind="track", metric="5xx responses"),
            ]
        )
        assert [c.category for c in classified] == [Category.CUSTOM, Category.CUSTOM, Category.STANDARD]
        assert not is_standard_metric("checkout errors")
        assert not is_standard_metric("login failures")
