"""Per-language instrumentation code for the application backend."""

from __future__ import annotations

from src.observability.instrumentation import template_for
from src.observability.progress import log_stage
from src.observability.state import GenerationState


def instrumentation_emitter(state: GenerationState) -> dict:
    """Emit the metrics module and request middleware for the backend language."""
    plan = state["plan"]
    template = template_for(plan.language)
    log_stage(
        "instrumentation",
        f"{template.language}, {2 + len(plan.custom_metrics)} instruments",
    )
    return {"files": template.render(plan)}
