"""
Ledger reports — read models for stock screens.

All methods are read-only and use no locking.
"""

from dataclasses import dataclass, field
from datetime import date

from almoxarife.adapters.directory import get_holder_directory
from almoxarife.holders import Holder
from almoxarife.models.enums import HOLDER_KINDS, HolderKind, MovementKind
from almoxarife.models.movement import Movement
from almoxarife.models.product import Product
from almoxarife.services.balances import LedgerQueries


@dataclass(frozen=True)
class StockRow:
    """One line of the stock table."""

    product: Product
    category: str
    balance: int


@dataclass
class HolderSummary:
    """What one employee or post currently holds."""

    holder: Holder
    name: str
    company: str
    quantity: int
    movements: list[Movement] = field(default_factory=list)


class LedgerReports:
    """Read models consumed by stock screens."""

    @classmethod
    def stock_table(cls, category=None, search: str = '') -> list[StockRow]:
        """
        Every active product with its warehouse balance.

        Args:
            category: Only this category (None = both)
            search: Substring of the product code
        """
        allowed = set(
            Product.objects.active().of_category(category).search(search).values_list('pk', flat=True)
        )
        return [
            StockRow(product=product, category=product.category, balance=balance)
            for product, balance in LedgerQueries.stock_by_product()
            if product.pk in allowed
        ]

    @classmethod
    def post_summary(cls, search: str = '', with_history: bool = False) -> list[HolderSummary]:
        """Posts holding collective stock, ordered by name."""
        return cls._summaries(HolderKind.POST, LedgerQueries.stock_by_post(), search, with_history)

    @classmethod
    def employee_summary(cls, search: str = '', with_history: bool = False) -> list[HolderSummary]:
        """Employees holding individual stock, ordered by name."""
        return cls._summaries(HolderKind.EMPLOYEE, LedgerQueries.stock_by_employee(), search, with_history)

    @classmethod
    def holder_history(cls, holder: Holder):
        """
        Deliveries and returns of one holder, newest first.

        Returns:
            Movement queryset (product preloaded)
        """
        return Movement.objects.for_holder(holder).filter(
            kind__in=HOLDER_KINDS,
        ).select_related('product').newest_first()

    @classmethod
    def purchase_disposal_log(cls, kind=None, search: str = '',
                              date_from: date | None = None, date_to: date | None = None):
        """
        Purchases and disposals, newest first.

        Args:
            kind: MovementKind.PURCHASE or MovementKind.DISPOSAL (None = both)
            search: Substring of the product code
            date_from: Inclusive lower bound on occurred_on
            date_to: Inclusive upper bound on occurred_on
        """
        qs = Movement.objects.purchases_and_disposals().select_related('product')
        if kind:
            kind = MovementKind(kind)
            if kind not in (MovementKind.PURCHASE, MovementKind.DISPOSAL):
                raise ValueError(f"Not a purchase/disposal kind: {kind}")
            qs = qs.filter(kind=kind)
        if search:
            qs = qs.filter(product__code__icontains=search.strip())
        if date_from:
            qs = qs.filter(occurred_on__gte=date_from)
        if date_to:
            qs = qs.filter(occurred_on__lte=date_to)
        return qs.newest_first()

    @classmethod
    def _summaries(cls, kind, totals, search, with_history) -> list[HolderSummary]:
        holders = [Holder(kind, holder_id) for holder_id, _ in totals]
        infos = get_holder_directory().get_holders(holders)

        summaries = []
        for holder, (_, quantity) in zip(holders, totals):
            info = infos.get(holder)
            name = info.name if info else holder.id
            if search and search.strip().lower() not in name.lower():
                continue
            summaries.append(HolderSummary(
                holder=holder,
                name=name,
                company=info.company if info else '',
                quantity=quantity,
            ))

        summaries.sort(key=lambda s: s.name.lower())
        if with_history:
            for summary in summaries:
                summary.movements = list(cls.holder_history(summary.holder))
        return summaries
