"""Real-time progress logging for a generation run."""

from __future__ import annotations

_GREY = "\033[90m"
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"
_BOLD = "\033[1m"


def log_generation_start(app_name: str, language: str) -> None:
    """Print the run banner."""
    label = f"MONITORING: {app_name}"
    sep = "─" * 60
    print(f"\n┌{sep}┐")
    print(f"│ {_BOLD}{label:^58}{_RESET} │")
    print(f"└{sep}┘")
    print(f"  {_GREY}instrumentation language: {language}{_RESET}")


def log_stage(stage: str, detail: str = "") -> None:
    """Print that a pipeline stage ran."""
    suffix = f" ({detail})" if detail else ""
    print(f"  {_CYAN}◉ {stage}{_RESET}{_GREY}{suffix}{_RESET}")


def log_file_written(path: str, size: int) -> None:
    print(f"  {_GREEN}✎ write{_RESET}  {path} ({size:,} bytes)")


def log_warning(message: str) -> None:
    """Soft fallback: generation continues, output needs review."""
    print(f"  {_YELLOW}⚠ {message}{_RESET}")


def log_error(message: str) -> None:
    print(f"  {_RED}✗ {message}{_RESET}")


def log_generation_done(elapsed: float, file_count: int = 0, warning_count: int = 0) -> None:
    """Print completion summary."""
    parts = [f"{elapsed:.2f}s"]
    if file_count:
        parts.append(f"{file_count} files written")
    if warning_count:
        parts.append(f"{warning_count} warnings")
    summary = ", ".join(parts)
    print(f"  {_GREEN}✓ monitoring complete ({summary}){_RESET}\n")
