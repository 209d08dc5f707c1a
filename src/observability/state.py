from __future__ import annotations

import operator
from typing import Annotated, TypedDict

from src.observability.models import Application, ClassifiedRule, MonitoringPlan


def merge_files(left: dict[str, str], right: dict[str, str]) -> dict[str, str]:
    """Reducer for the emitter fan-out: each emitter owns distinct paths."""
    merged = dict(left or {})
    merged.update(right or {})
    return merged


class GenerationState(TypedDict):
    """Shared state that flows through every node of the generation graph."""

    app: Application
    output_dir: str

    classified: list[ClassifiedRule]
    plan: MonitoringPlan | None

    files: Annotated[dict[str, str], merge_files]
    warnings: Annotated[list[str], operator.add]
    written: list[str]
