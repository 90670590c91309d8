"""
Almoxarife Protocols.

Defines interfaces for external system integration.
"""

from almoxarife.protocols.holders import HolderDirectory, HolderInfo

__all__ = [
    "HolderDirectory",
    "HolderInfo",
]
