"""
One-shot notices kept in the signed session cookie.

A notice set while handling one request is shown by the next page that
reads flashes, then discarded.
"""

from typing import Dict

from starlette.requests import Request

FLASH_SESSION_KEY = "flash"


def set_flash(request: Request, key: str, message: str) -> None:
    """Store ``message`` under ``key`` (e.g. "notice", "alert")."""
    messages = dict(request.session.get(FLASH_SESSION_KEY, {}))
    messages[key] = message
    request.session[FLASH_SESSION_KEY] = messages


def consume_flash(request: Request) -> Dict[str, str]:
    """Return pending notices and clear them."""
    return request.session.pop(FLASH_SESSION_KEY, {})
