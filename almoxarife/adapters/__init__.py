"""
Almoxarife Adapters.

Implementations of protocols for external systems.
"""

from almoxarife.adapters.directory import get_holder_directory, reset_holder_directory
from almoxarife.adapters.noop import NoopHolderDirectory

__all__ = [
    "NoopHolderDirectory",
    "get_holder_directory",
    "reset_holder_directory",
]
