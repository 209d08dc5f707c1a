from src.observability.emitters.alerts import alerts_emitter
from src.observability.emitters.compose import compose_emitter
from src.observability.emitters.grafana import grafana_emitter
from src.observability.emitters.instrumentation import instrumentation_emitter
from src.observability.emitters.prometheus import prometheus_emitter

__all__ = [
    "prometheus_emitter",
    "alerts_emitter",
    "grafana_emitter",
    "compose_emitter",
    "instrumentation_emitter",
]
