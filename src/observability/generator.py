"""Boundary of the monitoring generator: ``Generator().generate(app, output_dir)``."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from src.observability.backends import detect_language
from src.observability.graph import build_graph, ordered_paths
from src.observability.models import Application, MonitoringPlan
from src.observability.progress import log_generation_done, log_generation_start


@dataclass
class GenerationResult:
    files: dict[str, str]
    warnings: list[str]
    plan: MonitoringPlan
    written: list[str] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        return ordered_paths(self.files)


def _initial_state(app: Application, output_dir: str = "") -> dict:
    return {"app": app, "output_dir": output_dir, "files": {}, "warnings": []}


class Generator:
    """Generates the monitoring stack for one application."""

    def build(self, app: Application) -> GenerationResult:
        """Render every artifact in memory without writing anything."""
        final = build_graph(write=False).invoke(_initial_state(app))
        return GenerationResult(files=final["files"], warnings=final["warnings"], plan=final["plan"])

    def generate(self, app: Application, output_dir: str) -> int:
        """Render and write every artifact under ``output_dir``.

        Returns the number of files written. Raises ``GenerationError`` for
        the first directory or file that cannot be written; earlier files
        are left in place.
        """
        t0 = time.time()
        log_generation_start(app.name, detect_language(app.backend))

        final = build_graph(write=True).invoke(_initial_state(app, str(output_dir)))

        written = final.get("written", [])
        log_generation_done(time.time() - t0, file_count=len(written), warning_count=len(final["warnings"]))
        return len(written)
