"""YAML/JSON rendering shared by the configuration emitters."""

from __future__ import annotations

import json

import yaml


def dump_yaml(data: dict, header: str = "") -> str:
    """Block-style YAML, keys in insertion order, no line wrapping."""
    body = yaml.safe_dump(
        data,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=4096,
    )
    if not header:
        return body
    comment = "".join(f"# {line}\n" if line else "#\n" for line in header.splitlines())
    return comment + body


def dump_json(data: dict) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
