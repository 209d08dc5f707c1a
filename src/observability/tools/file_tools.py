"""File I/O tools used by the write stage of the generation graph."""

from __future__ import annotations

from pathlib import Path

from langchain_core.tools import tool


def _resolve_path(output_dir: str, filename: str) -> Path:
    base = Path(output_dir)
    resolved = (base / filename).resolve()
    if not str(resolved).startswith(str(base.resolve())):
        raise ValueError(f"Path traversal detected: {filename}")
    return resolved


@tool
def write_file(output_dir: str, filename: str, content: str) -> str:
    """Write content to a file in the output directory.

    Args:
        output_dir: Root directory of the generated monitoring stack.
        filename: Relative path within the output directory (e.g. "prometheus/alerts.yml").
        content: The full content to write.

    Returns:
        Confirmation message with the written file path.
    """
    path = _resolve_path(output_dir, filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return f"Written {len(content)} bytes to {path}"


@tool
def list_files(output_dir: str, directory: str = ".") -> str:
    """List files in a directory under the output directory.

    Args:
        output_dir: Root directory of the generated monitoring stack.
        directory: Relative directory path (default: root of output).

    Returns:
        Newline-separated list of file paths relative to the output directory.
    """
    base = _resolve_path(output_dir, directory)
    if not base.exists():
        return f"Directory not found: {directory}"
    files = sorted(
        p.relative_to(Path(output_dir).resolve()).as_posix()
        for p in base.rglob("*")
        if p.is_file()
    )
    return "\n".join(files) if files else "(empty)"
