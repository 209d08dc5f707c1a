"""CLI entry point for the monitoring stack generator."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from src.observability.errors import GenerationError
from src.observability.generator import Generator
from src.observability.models import Application
from src.observability.tools.file_tools import list_files

load_dotenv()

USAGE = "Usage: python main.py <application.json> [output-dir]"
BANNER = """
╔══════════════════════════════════════════════════════════════╗
║               Monitoring Stack Generator                     ║
║                                                              ║
║  Prometheus · Alert rules · Grafana · Compose · Middleware   ║
╚══════════════════════════════════════════════════════════════╝
"""


def load_application(path: Path) -> Application:
    """Read an application description (JSON) into the generator's model."""
    data = json.loads(path.read_text(encoding="utf-8"))
    return Application.from_dict(data)


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args or args[0] in ("-h", "--help"):
        print(USAGE)
        return 1 if not args else 0

    source = Path(args[0])
    if not source.is_file():
        print(f"Error: application description not found: {source}")
        return 1

    try:
        app = load_application(source)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        print(f"Error: could not read {source}: {exc}")
        return 1

    output_dir = Path(args[1]) if len(args) > 1 else Path("monitoring")

    print(BANNER)
    try:
        count = Generator().generate(app, str(output_dir))
    except GenerationError as exc:
        print(f"Error: {exc}")
        return 1

    print("=" * 60)
    print(f"Generated {count} files in: {output_dir.resolve()}")
    print(list_files.invoke({"output_dir": str(output_dir)}))
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
