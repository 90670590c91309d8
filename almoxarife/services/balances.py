"""
Balance queries — read-only folds over the movement log.

No balance is stored. Every number here is recomputed from Movement rows,
so deleting a movement is reflected on the next read.

All methods are classmethods on Ledger and take no locks; the writer calls
them after locking the product row so the read is part of the write.
"""

from almoxarife.models.enums import Category, HolderKind
from almoxarife.models.movement import Movement
from almoxarife.models.product import Product


def _positive_holder_rows(rows):
    """Collapse delivered/returned rows into (holder_id, total) with total > 0."""
    result = []
    for row in rows:
        total = row['delivered'] - row['returned']
        if total > 0:
            result.append((row['holder_id'], total))
    return result


class LedgerQueries:
    """Read-only balance methods."""

    @classmethod
    def warehouse_balance(cls, product) -> int:
        """
        Quantity of a product held centrally.

        warehouse = Σpurchase + Σreturn − Σdelivery − Σdisposal

        Args:
            product: Product instance or primary key

        Returns:
            int (0 when the product has no movements)
        """
        return Movement.objects.filter(product=product).warehouse_total()

    @classmethod
    def holder_balance(cls, product, holder) -> int:
        """
        Quantity of a product currently with one employee or post.

        holder = Σdelivery to holder − Σreturn from holder

        Args:
            product: Product instance or primary key
            holder: Holder reference

        Returns:
            int (0 when the holder never received the product)
        """
        return Movement.objects.filter(product=product).for_holder(holder).holder_total()

    @classmethod
    def stock_by_product(cls, include_inactive: bool = False) -> list[tuple[Product, int]]:
        """
        Warehouse balance for the whole catalog, ordered by code.

        Returns:
            List of (product, warehouse_balance)
        """
        qs = Product.objects.all() if include_inactive else Product.objects.active()
        balances = {
            row['product']: row['inbound'] - row['outbound']
            for row in Movement.objects.warehouse_totals()
        }
        return [(product, balances.get(product.pk, 0)) for product in qs.order_by('code')]

    @classmethod
    def stock_by_post(cls) -> list[tuple[str, int]]:
        """
        Total collective stock held by each post.

        Posts whose holdings sum to zero are left out.

        Returns:
            List of (post_id, quantity)
        """
        rows = Movement.objects.filter(
            holder_kind=HolderKind.POST,
            product__category=Category.COLLECTIVE,
        ).holder_totals()
        return _positive_holder_rows(rows)

    @classmethod
    def stock_by_employee(cls) -> list[tuple[str, int]]:
        """
        Total individual stock held by each employee.

        Employees whose holdings sum to zero are left out.

        Returns:
            List of (employee_id, quantity)
        """
        rows = Movement.objects.filter(
            holder_kind=HolderKind.EMPLOYEE,
            product__category=Category.INDIVIDUAL,
        ).holder_totals()
        return _positive_holder_rows(rows)

    @classmethod
    def holder_products(cls, holder) -> list[tuple[Product, int]]:
        """
        What one holder currently has, per product.

        Returns:
            List of (product, quantity) with quantity > 0, ordered by code
        """
        rows = Movement.objects.for_holder(holder).holder_totals('product')
        totals = {row['product']: row['delivered'] - row['returned'] for row in rows}
        held = {pk: qty for pk, qty in totals.items() if qty > 0}
        products = Product.objects.filter(pk__in=held).order_by('code')
        return [(product, held[product.pk]) for product in products]
