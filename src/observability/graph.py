"""LangGraph assembly of the generation pipeline.

classify -> synthesize -> (prometheus | alerts | grafana | compose |
instrumentation) -> write. The emitters run as one fan-out step and only
read the plan produced by ``synthesize``.
"""

from __future__ import annotations

from collections import Counter

from langgraph.graph import END, StateGraph

from src.observability.classifier import classify
from src.observability.emitters import (
    alerts_emitter,
    compose_emitter,
    grafana_emitter,
    instrumentation_emitter,
    prometheus_emitter,
)
from src.observability.emitters.alerts import ALERT_RULES_PATH
from src.observability.emitters.compose import COMPOSE_PATH
from src.observability.emitters.grafana import DASHBOARD_PATH, DASHBOARD_PROVIDER_PATH, DATASOURCE_PATH
from src.observability.emitters.prometheus import SCRAPE_CONFIG_PATH
from src.observability.errors import GenerationError
from src.observability.models import Category
from src.observability.progress import log_error, log_file_written, log_stage, log_warning
from src.observability.state import GenerationState
from src.observability.synthesizer import build_plan
from src.observability.tools.file_tools import write_file

EMITTER_NODES = {
    "prometheus": prometheus_emitter,
    "alerts": alerts_emitter,
    "grafana": grafana_emitter,
    "compose": compose_emitter,
    "instrumentation": instrumentation_emitter,
}

FILE_ORDER = (
    SCRAPE_CONFIG_PATH,
    ALERT_RULES_PATH,
    DATASOURCE_PATH,
    DASHBOARD_PROVIDER_PATH,
    DASHBOARD_PATH,
    COMPOSE_PATH,
)


def ordered_paths(files: dict[str, str]) -> list[str]:
    """Fixed configuration files first, then instrumentation (metrics before middleware)."""
    fixed = [p for p in FILE_ORDER if p in files]
    rest = sorted(
        (p for p in files if p not in FILE_ORDER),
        key=lambda p: (0 if "/metrics." in p else 1, p),
    )
    return fixed + rest


def classify_node(state: GenerationState) -> dict:
    classified = classify(state["app"].monitoring)
    counts = Counter(c.category for c in classified)
    log_stage(
        "classify",
        ", ".join(f"{counts[category]} {category.value}" for category in Category),
    )
    return {"classified": classified}


def synthesize_node(state: GenerationState) -> dict:
    warnings: list[str] = []
    plan = build_plan(state["app"], state["classified"], warnings)
    log_stage(
        "synthesize",
        f"{len(plan.custom_metrics)} custom metrics, {len(plan.alerts)} alerts",
    )
    for warning in warnings:
        log_warning(warning)
    return {"plan": plan, "warnings": warnings}


def write_node(state: GenerationState) -> dict:
    """Write every artifact; the first failure aborts the run."""
    output_dir = state["output_dir"]
    files = state["files"]
    written = []
    for path in ordered_paths(files):
        content = files[path]
        try:
            write_file.invoke({"output_dir": output_dir, "filename": path, "content": content})
        except OSError as exc:
            log_error(f"{path}: {exc}")
            raise GenerationError(path, exc) from exc
        log_file_written(path, len(content.encode("utf-8")))
        written.append(path)
    return {"written": written}


def build_graph(*, write: bool = True):
    """Construct and compile the generation graph.

    Args:
        write: When False the graph stops after the emitters and nothing
               touches disk; the rendered files stay in ``state["files"]``.

    Returns:
        A compiled LangGraph that can be invoked.
    """
    graph = StateGraph(GenerationState)

    graph.add_node("classify", classify_node)
    graph.add_node("synthesize", synthesize_node)
    for name, fn in EMITTER_NODES.items():
        graph.add_node(name, fn)

    graph.set_entry_point("classify")
    graph.add_edge("classify", "synthesize")
    for name in EMITTER_NODES:
        graph.add_edge("synthesize", name)

    if write:
        graph.add_node("write", write_node)
        graph.add_edge(list(EMITTER_NODES), "write")
        graph.add_edge("write", END)
    else:
        for name in EMITTER_NODES:
            graph.add_edge(name, END)

    return graph.compile()
