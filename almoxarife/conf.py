"""
Almoxarife configuration.

Usage in settings.py:
    ALMOXARIFE = {
        "HOLDER_DIRECTORY": "rh.adapters.holders.RhHolderDirectory",
        "WRITE_RETRIES": 3,
        "STRICT_DELETION": False,
        "VALIDATE_HOLDERS": True,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class AlmoxarifeSettings:
    """Almoxarife configuration settings."""

    # Holder lookup backend (dotted path)
    HOLDER_DIRECTORY: str = "almoxarife.adapters.noop.NoopHolderDirectory"

    # Attempts for a write that hits a storage conflict (deadlock, lock timeout)
    WRITE_RETRIES: int = 3

    # Refuse deletions that would leave a negative balance anywhere in the replay
    STRICT_DELETION: bool = False

    # Resolve holders via HOLDER_DIRECTORY before delivery/return
    VALIDATE_HOLDERS: bool = True


def get_almoxarife_settings() -> AlmoxarifeSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "ALMOXARIFE", {})
    return AlmoxarifeSettings(**{
        k: v for k, v in user_settings.items()
        if k in AlmoxarifeSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_almoxarife_settings(), name)


almoxarife_settings = _LazySettings()
