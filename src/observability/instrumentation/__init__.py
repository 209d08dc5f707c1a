from src.observability.backends import SUPPORTED_LANGUAGES
from src.observability.instrumentation.base import InstrumentationTemplate
from src.observability.instrumentation.go import GoInstrumentation
from src.observability.instrumentation.node import NodeInstrumentation
from src.observability.instrumentation.python import PythonInstrumentation

TEMPLATES: dict[str, InstrumentationTemplate] = {
    t.language: t for t in (NodeInstrumentation(), PythonInstrumentation(), GoInstrumentation())
}


def template_for(language: str) -> InstrumentationTemplate:
    """Template for a detected language; unknown values get the first supported one."""
    return TEMPLATES.get(language, TEMPLATES[SUPPORTED_LANGUAGES[0]])


__all__ = [
    "GoInstrumentation",
    "InstrumentationTemplate",
    "NodeInstrumentation",
    "PythonInstrumentation",
    "TEMPLATES",
    "template_for",
]
