"""
Catalog — product lookup and maintenance.

The ledger only reads products; these helpers exist so catalog screens
keep the invariants the ledger relies on (unique code, frozen category).
"""

import logging

from django.db import transaction

from almoxarife.codes import generate_code
from almoxarife.exceptions import LedgerError
from almoxarife.models.enums import Category
from almoxarife.models.movement import Movement
from almoxarife.models.product import Product

logger = logging.getLogger('almoxarife')

EDITABLE_FIELDS = ('name', 'color', 'size', 'category', 'is_active')


def _check_category(category) -> Category:
    try:
        return Category(category)
    except ValueError:
        raise LedgerError('INVALID_CATEGORY', category=category) from None


def _check_code_free(code: str, exclude_pk=None) -> None:
    qs = Product.objects.filter(code=code)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise LedgerError(
            'DUPLICATE_CODE',
            f'Produto com código "{code}" já existe.',
            code_value=code,
        )


class LedgerCatalog:
    """Product catalog methods."""

    @classmethod
    def get_product(cls, product) -> Product:
        """
        Resolve a product by instance or primary key.

        Raises:
            LedgerError('PRODUCT_NOT_FOUND'): If no such product exists
        """
        pk = product.pk if isinstance(product, Product) else product
        try:
            return Product.objects.get(pk=pk)
        except (Product.DoesNotExist, ValueError, TypeError):
            raise LedgerError('PRODUCT_NOT_FOUND', product_id=pk) from None

    @classmethod
    def list_products(cls, category=None, search: str = '', include_inactive: bool = False):
        qs = Product.objects.of_category(category).search(search)
        if not include_inactive:
            qs = qs.active()
        return qs.order_by('code')

    @classmethod
    def create_product(cls, name: str, category, color: str = '', size: str = '') -> Product:
        """
        Register a product.

        Raises:
            LedgerError('INVALID_CATEGORY'): Unknown category
            LedgerError('DUPLICATE_CODE'): Derived code already in use
        """
        category = _check_category(category)
        color, size = color or '', size or ''
        code = generate_code(name, color, size)

        with transaction.atomic():
            _check_code_free(code)
            product = Product.objects.create(
                name=name, color=color, size=size, category=category,
            )
        logger.info(
            "catalog.product.created",
            extra={"product_id": product.pk, "code": product.code, "category": category},
        )
        return product

    @classmethod
    def update_product(cls, product, **changes) -> Product:
        """
        Edit product attributes.

        Raises:
            LedgerError('CATEGORY_LOCKED'): Category change after movements
            LedgerError('DUPLICATE_CODE'): New code already in use
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise TypeError(f"Campos não editáveis: {', '.join(sorted(unknown))}")

        with transaction.atomic():
            product = cls.get_product(product)
            locked = Product.objects.select_for_update().get(pk=product.pk)

            if 'category' in changes:
                new_category = _check_category(changes['category'])
                if new_category != locked.category and locked.movements.exists():
                    raise LedgerError(
                        'CATEGORY_LOCKED',
                        product_id=locked.pk,
                        current=locked.category,
                    )
                changes['category'] = new_category

            for field, value in changes.items():
                if field in ('color', 'size'):
                    value = value or ''
                setattr(locked, field, value)

            _check_code_free(
                generate_code(locked.name, locked.color, locked.size),
                exclude_pk=locked.pk,
            )
            locked.save()

        logger.info(
            "catalog.product.updated",
            extra={"product_id": locked.pk, "fields": sorted(changes)},
        )
        return locked

    @classmethod
    def deactivate_product(cls, product) -> Product:
        """Hide a product from stock screens; its history stays."""
        return cls.update_product(product, is_active=False)

    @classmethod
    def delete_product(cls, product) -> None:
        """
        Remove a product that was never moved.

        Raises:
            LedgerError('PRODUCT_HAS_MOVEMENTS'): Product has ledger history
        """
        with transaction.atomic():
            product = cls.get_product(product)
            count = Movement.objects.filter(product=product).count()
            if count:
                raise LedgerError(
                    'PRODUCT_HAS_MOVEMENTS',
                    product_id=product.pk,
                    movements=count,
                )
            pk = product.pk
            product.delete()
        logger.info("catalog.product.deleted", extra={"product_id": pk})
