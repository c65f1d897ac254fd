from __future__ import annotations

from typing import Dict, List

from fastapi import Request

_FLASH_KEY = "_flashes"
FLASH_CATEGORIES = ("error", "success")


# PUBLIC_INTERFACE
def flash(request: Request, category: str, message: str) -> None:
    """
    Queue a one-shot message for the next rendered page.

    Messages live in the signed session cookie managed by SessionMiddleware.
    """
    flashes: List[List[str]] = request.session.get(_FLASH_KEY, [])
    flashes.append([category, message])
    request.session[_FLASH_KEY] = flashes


# PUBLIC_INTERFACE
def consume_flashes(request: Request) -> Dict[str, List[str]]:
    """
    Pop all queued messages, grouped by category.

    Returns:
        Dict with one list per category in FLASH_CATEGORIES, e.g. {"error": [...], "success": [...]}.
    """
    grouped: Dict[str, List[str]] = {c: [] for c in FLASH_CATEGORIES}
    for category, message in request.session.pop(_FLASH_KEY, []):
        grouped.setdefault(category, []).append(message)
    return grouped
