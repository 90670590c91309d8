"""
Holder Directory Protocol — Interface for employee/post lookup.

Almoxarife defines this protocol; the HR and Supervision apps implement it.
The ledger only needs to know whether a holder exists, whether it is
active, and how to label it on summaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from almoxarife.holders import Holder


@dataclass(frozen=True)
class HolderInfo:
    """Resolved holder as seen by the ledger."""

    holder: Holder
    name: str
    company: str = ""
    is_active: bool = True


@runtime_checkable
class HolderDirectory(Protocol):
    """
    Protocol for holder lookup.

    Implementations should provide methods to:
    - Resolve one holder (existence + active status + label)
    - Resolve many holders at once for summaries
    """

    def get_holder(self, holder: Holder) -> HolderInfo | None:
        """
        Resolve a holder.

        Args:
            holder: Employee or post reference

        Returns:
            HolderInfo, or None if the holder does not exist
        """
        ...

    def get_holders(self, holders: list[Holder]) -> dict[Holder, HolderInfo]:
        """
        Resolve several holders at once.

        Args:
            holders: Employee or post references

        Returns:
            Dict[holder, HolderInfo]; unknown holders are left out
        """
        ...
