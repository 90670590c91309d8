"""
Product model — What the warehouse tracks.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from almoxarife.codes import generate_code
from almoxarife.models.enums import HOLDER_FOR_CATEGORY, Category


class ProductQuerySet(models.QuerySet):
    """QuerySet with catalog filters."""

    def active(self):
        return self.filter(is_active=True)

    def of_category(self, category):
        if not category:
            return self
        return self.filter(category=category)

    def search(self, term: str):
        """Substring search on the display code."""
        if not term:
            return self
        return self.filter(code__icontains=term.strip())


class Product(models.Model):
    """
    Supply item tracked by the ledger.

    The category decides the holder kind for all time:
    individual items go to employees, collective items go to posts.
    It cannot change once a movement references the product.

    Examples:
        Product.objects.create(name='Camisa', color='Azul', size='M',
                               category=Category.INDIVIDUAL)
        Product.objects.create(name='Rádio HT', category=Category.COLLECTIVE)
    """

    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        verbose_name=_('Tipo'),
    )
    name = models.CharField(
        max_length=120,
        verbose_name=_('Produto'),
    )
    color = models.CharField(
        max_length=60,
        blank=True,
        default='',
        verbose_name=_('Cor'),
    )
    size = models.CharField(
        max_length=20,
        blank=True,
        default='',
        verbose_name=_('Tamanho'),
    )
    code = models.CharField(
        max_length=220,
        unique=True,
        editable=False,
        verbose_name=_('Código'),
        help_text=_('Gerado a partir de produto, cor e tamanho.'),
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name=_('Ativo'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        verbose_name = _('Produto')
        verbose_name_plural = _('Produtos')
        ordering = ['code']

    @property
    def holder_kind(self):
        """Holder kind allowed for this product's category."""
        return HOLDER_FOR_CATEGORY[Category(self.category)]

    def save(self, *args, **kwargs):
        self.code = generate_code(self.name, self.color, self.size)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and {'name', 'color', 'size'} & set(update_fields):
            kwargs['update_fields'] = {*update_fields, 'code'}
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.code or self.name
