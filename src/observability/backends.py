"""Backend language detection and default ports."""

from __future__ import annotations

from src.observability.models import Application

NODE = "node"
PYTHON = "python"
GO = "go"

# First entry is the documented default for unrecognized backends.
SUPPORTED_LANGUAGES = (NODE, PYTHON, GO)

DEFAULT_PORTS = {
    NODE: 3000,
    PYTHON: 8000,
    GO: 8080,
}


def detect_language(backend: str) -> str:
    """Map a free-text backend choice to a supported language.

    Evaluated in order, first match wins: python keywords, go keywords,
    then node for everything else.
    """
    lower = (backend or "").strip().lower()
    if any(k in lower for k in ("python", "fastapi", "django", "flask")):
        return PYTHON
    if (
        lower == "go"
        or lower.startswith("go ")
        or any(k in lower for k in ("gin", "fiber", "golang"))
    ):
        return GO
    return NODE


def is_recognized_backend(backend: str) -> bool:
    lower = (backend or "").strip().lower()
    if not lower:
        return False
    if detect_language(lower) != NODE:
        return True
    return any(k in lower for k in ("node", "express", "nest", "typescript", "javascript", "koa"))


def backend_port(app: Application) -> int:
    """Configured backend port, else the default for the backend's language."""
    if app.backend_port > 0:
        return app.backend_port
    return DEFAULT_PORTS[detect_language(app.backend)]
