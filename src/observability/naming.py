"""Identifier helpers shared by the synthesizer and the emitters."""

from __future__ import annotations

import re

FALLBACK_ALERT_NAME = "CustomAlert"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


def sanitize_alert_name(text: str) -> str:
    """Turn free text into a PascalCase alert identifier.

    >>> sanitize_alert_name("error rate is above 5%")
    'ErrorRateIsAbove5'
    """
    tokens = [t for t in _NON_ALNUM.split(text or "") if t]
    if not tokens:
        return FALLBACK_ALERT_NAME
    return "".join(t.capitalize() for t in tokens)


def snake_slug(text: str) -> str:
    """lower_snake_case slug, empty when the text has no alphanumerics."""
    return "_".join(t for t in _NON_ALNUM.split((text or "").lower()) if t)


def host_slug(text: str) -> str:
    """Hostname-safe slug: ``"Task Service"`` -> ``"task-service"``."""
    return "-".join(t for t in _NON_ALNUM.split((text or "").lower()) if t)


def unique_names(names: list[str], reserved: set[str] | None = None, sep: str = "_") -> list[str]:
    """Disambiguate duplicates by index suffix (``_2``, ``_3``...), in order.

    Names in ``reserved`` and every base name in ``names`` are treated as
    taken, so a suffixed name never shadows a later original.
    """
    taken = set(reserved or ()) | set(names)
    seen: set[str] = set(reserved or ())
    result = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
            continue
        index = 2
        while f"{name}{sep}{index}" in taken:
            index += 1
        candidate = f"{name}{sep}{index}"
        taken.add(candidate)
        seen.add(candidate)
        result.append(candidate)
    return result


def _parts(snake: str) -> list[str]:
    return [p for p in snake.split("_") if p]


def pascal_identifier(snake: str) -> str:
    """``app_page_views`` -> ``AppPageViews``; digit parts keep an underscore."""
    out = ""
    for part in _parts(snake):
        if part[0].isdigit() and out:
            out += "_" + part
        else:
            out += part.capitalize()
    return out


def camel_identifier(snake: str) -> str:
    """``app_page_views`` -> ``appPageViews``."""
    pascal = pascal_identifier(snake)
    return pascal[:1].lower() + pascal[1:]


def constant_identifier(snake: str) -> str:
    """``app_page_views`` -> ``APP_PAGE_VIEWS``."""
    return "_".join(_parts(snake)).upper()
