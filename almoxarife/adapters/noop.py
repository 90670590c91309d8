"""
Noop Holder Directory — Stub adapter for development and testing.

This adapter implements the HolderDirectory protocol with trivial defaults:
- Every employee and post exists and is active
- Labels are the ids themselves

Usage in settings.py:
    ALMOXARIFE = {
        "HOLDER_DIRECTORY": "almoxarife.adapters.noop.NoopHolderDirectory",
    }

WARNING: Do NOT use in production. Deliveries to nonexistent or dismissed
employees will be accepted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from almoxarife.protocols.holders import HolderInfo

if TYPE_CHECKING:
    from almoxarife.holders import Holder


class NoopHolderDirectory:
    """
    No-operation holder directory.

    Every holder resolves to an active entry named after its id.
    Suitable for local development and for tests that don't exercise
    HR/Supervision lookups.
    """

    def get_holder(self, holder: Holder) -> HolderInfo | None:
        return HolderInfo(holder=holder, name=holder.id)

    def get_holders(self, holders: list[Holder]) -> dict[Holder, HolderInfo]:
        return {holder: self.get_holder(holder) for holder in holders}
