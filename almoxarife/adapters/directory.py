"""
Almoxarife Holder Directory loader.

This module loads the configured HolderDirectory from settings.

Usage:
    from almoxarife.adapters import get_holder_directory

    directory = get_holder_directory()
    info = directory.get_holder(Holder.employee('42'))

Settings:
    ALMOXARIFE = {
        "HOLDER_DIRECTORY": "rh.adapters.holders.RhHolderDirectory",
    }

If HOLDER_DIRECTORY is empty or cannot be imported, get_holder_directory()
raises ImproperlyConfigured.
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from almoxarife.conf import almoxarife_settings
from almoxarife.protocols.holders import HolderDirectory

logger = logging.getLogger(__name__)


# Cached directory instance
_lock = threading.Lock()
_holder_directory: HolderDirectory | None = None


def get_holder_directory() -> HolderDirectory:
    """
    Return the configured holder directory.

    Returns:
        HolderDirectory instance

    Raises:
        ImproperlyConfigured: If HOLDER_DIRECTORY is not configured or import fails
    """
    global _holder_directory

    if _holder_directory is None:
        with _lock:
            if _holder_directory is None:  # double-checked
                directory_path = almoxarife_settings.HOLDER_DIRECTORY

                if not directory_path:
                    raise ImproperlyConfigured(
                        "ALMOXARIFE['HOLDER_DIRECTORY'] must be configured. "
                        "Example: 'almoxarife.adapters.noop.NoopHolderDirectory'"
                    )

                try:
                    directory_class = import_string(directory_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import holder directory '{directory_path}': {e}"
                    ) from e

                directory = directory_class()
                if not isinstance(directory, HolderDirectory):
                    raise ImproperlyConfigured(
                        f"'{directory_path}' does not implement HolderDirectory"
                    )
                _holder_directory = directory
                logger.debug("Loaded holder directory: %s", directory_path)

    return _holder_directory


def reset_holder_directory() -> None:
    """Reset the cached directory. Useful for testing and settings changes."""
    global _holder_directory
    _holder_directory = None
