"""
Holder — who has delivered stock: one employee or one work post.

A movement either has no holder (purchase, disposal) or exactly one.
The tagged value keeps "employee OR post" a single object instead of two
nullable ids.

Usage:
    from almoxarife.holders import Holder

    Holder.employee('42')
    Holder.post('posto-central')
"""

from __future__ import annotations

from dataclasses import dataclass

from almoxarife.models.enums import HolderKind


@dataclass(frozen=True)
class Holder:
    """Reference to an employee or a post owned by HR / Supervision."""

    kind: HolderKind
    id: str

    def __post_init__(self):
        object.__setattr__(self, 'kind', HolderKind(self.kind))
        object.__setattr__(self, 'id', str(self.id))
        if not self.id:
            raise ValueError("Holder id must not be empty")

    @classmethod
    def employee(cls, pk) -> Holder:
        return cls(HolderKind.EMPLOYEE, pk)

    @classmethod
    def post(cls, pk) -> Holder:
        return cls(HolderKind.POST, pk)

    @property
    def is_employee(self) -> bool:
        return self.kind == HolderKind.EMPLOYEE

    @property
    def is_post(self) -> bool:
        return self.kind == HolderKind.POST

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"
