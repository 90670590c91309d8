"""
Ledger audit — replay movements and find where balances went negative.

The writer guarantees non-negative balances at the moment each movement is
recorded. Deleting a movement skips that check, so a later delivery can end
up "backed" by a purchase that no longer exists. Replaying the log in
business order exposes those points.

Usage:
    from almoxarife.services.audit import replay, negative_balances

    for violation in replay(product=camisa):
        print(violation)
"""

import logging
from collections import defaultdict
from dataclasses import dataclass

from almoxarife.holders import Holder
from almoxarife.models.enums import HolderKind
from almoxarife.models.movement import Movement

logger = logging.getLogger('almoxarife')

WAREHOUSE = 'warehouse'
HOLDER = 'holder'


@dataclass(frozen=True)
class ReplayViolation:
    """A movement after which a running balance was negative."""

    movement_id: int
    product_id: int
    scope: str  # WAREHOUSE or HOLDER
    balance: int
    holder: Holder | None = None

    @property
    def key(self) -> tuple:
        return (self.movement_id, self.scope)

    def __str__(self) -> str:
        where = f"{self.holder}" if self.holder else "almoxarifado"
        return f"#{self.movement_id} produto {self.product_id} [{where}]: {self.balance}"


@dataclass(frozen=True)
class NegativeBalance:
    """A current balance below zero."""

    product_id: int
    balance: int
    holder: Holder | None = None


def replay(product=None, exclude=()) -> list[ReplayViolation]:
    """
    Fold movements in (occurred_on, created_at, id) order.

    Args:
        product: Restrict to one product (None = all)
        exclude: Movement ids to leave out (simulates deletion)

    Returns:
        Every point where the warehouse or a holder balance went negative
    """
    qs = Movement.objects.all()
    if product is not None:
        qs = qs.filter(product=product)
    if exclude:
        qs = qs.exclude(pk__in=list(exclude))

    warehouse = defaultdict(int)
    held = defaultdict(int)
    violations = []

    for move in qs.in_history_order().iterator():
        warehouse[move.product_id] += move.warehouse_delta
        if warehouse[move.product_id] < 0:
            violations.append(ReplayViolation(
                movement_id=move.pk,
                product_id=move.product_id,
                scope=WAREHOUSE,
                balance=warehouse[move.product_id],
            ))

        holder = move.holder
        if holder is not None:
            key = (move.product_id, holder)
            held[key] += move.holder_delta
            if held[key] < 0:
                violations.append(ReplayViolation(
                    movement_id=move.pk,
                    product_id=move.product_id,
                    scope=HOLDER,
                    balance=held[key],
                    holder=holder,
                ))

    return violations


def deletion_violations(movement) -> list[ReplayViolation]:
    """
    Violations that deleting ``movement`` would introduce.

    Points that were already negative before the deletion (e.g. backdated
    entries) are not blamed on it.
    """
    before = {v.key for v in replay(product=movement.product_id)}
    after = replay(product=movement.product_id, exclude=[movement.pk])
    return [v for v in after if v.key not in before]


def negative_balances(product=None) -> list[NegativeBalance]:
    """Current warehouse and holder balances below zero."""
    qs = Movement.objects.all()
    if product is not None:
        qs = qs.filter(product=product)

    found = []
    for row in qs.warehouse_totals():
        balance = row['inbound'] - row['outbound']
        if balance < 0:
            found.append(NegativeBalance(product_id=row['product'], balance=balance))

    for row in qs.holder_totals('product'):
        balance = row['delivered'] - row['returned']
        if balance < 0:
            found.append(NegativeBalance(
                product_id=row['product'],
                balance=balance,
                holder=Holder(HolderKind(row['holder_kind']), row['holder_id']),
            ))

    if found:
        logger.warning("ledger.audit.negative", extra={"count": len(found)})
    return found
