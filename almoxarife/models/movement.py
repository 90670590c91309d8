"""
Movement model — Immutable ledger of stock facts.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from almoxarife.models.enums import (
    HOLDER_KINDS,
    WAREHOUSE_IN,
    WAREHOUSE_OUT,
    HolderKind,
    MovementKind,
)


def _total(kinds):
    return Coalesce(
        Sum('quantity', filter=Q(kind__in=kinds)),
        0,
        output_field=models.IntegerField(),
    )


class MovementQuerySet(models.QuerySet):
    """QuerySet with ledger filters and balance folds."""

    def for_product(self, product):
        return self.filter(product=product)

    def for_holder(self, holder):
        """Movements addressed to a holder (deliveries and returns)."""
        return self.filter(holder_kind=holder.kind, holder_id=holder.id)

    def of_kinds(self, *kinds):
        return self.filter(kind__in=kinds)

    def purchases_and_disposals(self):
        return self.of_kinds(MovementKind.PURCHASE, MovementKind.DISPOSAL)

    def in_history_order(self):
        """Replay order: business date, then insertion."""
        return self.order_by('occurred_on', 'created_at', 'pk')

    def newest_first(self):
        return self.order_by('-occurred_on', '-created_at', '-pk')

    def warehouse_total(self) -> int:
        """Σ in − Σ out over the queryset (purchase/return vs delivery/disposal)."""
        totals = self.aggregate(inbound=_total(WAREHOUSE_IN), outbound=_total(WAREHOUSE_OUT))
        return totals['inbound'] - totals['outbound']

    def holder_total(self) -> int:
        """Σ delivery − Σ return over the queryset."""
        totals = self.aggregate(
            delivered=_total([MovementKind.DELIVERY]),
            returned=_total([MovementKind.RETURN]),
        )
        return totals['delivered'] - totals['returned']

    def warehouse_totals(self):
        """Rows grouped by product with inbound/outbound sums."""
        return self.values('product').annotate(
            inbound=_total(WAREHOUSE_IN),
            outbound=_total(WAREHOUSE_OUT),
        ).order_by()

    def holder_totals(self, *fields):
        """Rows grouped by holder (plus ``fields``) with delivered/returned sums."""
        return self.filter(kind__in=HOLDER_KINDS).values(
            'holder_kind', 'holder_id', *fields,
        ).annotate(
            delivered=_total([MovementKind.DELIVERY]),
            returned=_total([MovementKind.RETURN]),
        ).order_by()


class Movement(models.Model):
    """
    One immutable stock fact.

    Rules:
    - NEVER update(); an edit is delete + new Movement (see ledger.amend)
    - Deletion is allowed and simply drops the fact from every balance
    - Balances are never stored; they are folds over these rows

    Holder columns are both empty for purchase/disposal and both set for
    delivery/return (database check constraint).
    """

    product = models.ForeignKey(
        'almoxarife.Product',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('Produto'),
    )
    kind = models.CharField(
        max_length=20,
        choices=MovementKind.choices,
        verbose_name=_('Tipo'),
    )
    quantity = models.PositiveIntegerField(
        verbose_name=_('Quantidade'),
    )
    occurred_on = models.DateField(
        default=timezone.localdate,
        db_index=True,
        verbose_name=_('Data'),
    )

    # Holder (tagged: kind + id, both blank when there is none)
    holder_kind = models.CharField(
        max_length=20,
        choices=HolderKind.choices,
        blank=True,
        default='',
        verbose_name=_('Tipo de destinatário'),
    )
    holder_id = models.CharField(
        max_length=64,
        blank=True,
        default='',
        verbose_name=_('Destinatário'),
        help_text=_('ID do funcionário ou do posto de trabalho'),
    )

    note = models.TextField(blank=True, default='', verbose_name=_('Observação'))

    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Registrado em'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        verbose_name=_('Usuário'),
    )

    objects = MovementQuerySet.as_manager()

    class Meta:
        verbose_name = _('Movimentação')
        verbose_name_plural = _('Movimentações')
        ordering = ['-occurred_on', '-created_at']
        indexes = [
            models.Index(fields=['product', 'kind'], name='almox_mov_product_kind_idx'),
            models.Index(fields=['holder_kind', 'holder_id'], name='almox_mov_holder_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name='movement_quantity_positive',
            ),
            models.CheckConstraint(
                condition=(
                    Q(kind__in=['delivery', 'return'])
                    & Q(holder_kind__in=['employee', 'post'])
                    & ~Q(holder_id='')
                ) | (
                    Q(kind__in=['purchase', 'disposal'])
                    & Q(holder_kind='')
                    & Q(holder_id='')
                ),
                name='movement_holder_matches_kind',
            ),
        ]

    @property
    def holder(self):
        """Holder or None."""
        if not self.holder_kind:
            return None
        from almoxarife.holders import Holder
        return Holder(self.holder_kind, self.holder_id)

    @holder.setter
    def holder(self, value):
        if value is None:
            self.holder_kind, self.holder_id = '', ''
        else:
            self.holder_kind, self.holder_id = value.kind, value.id

    @property
    def warehouse_delta(self) -> int:
        """Signed effect on the warehouse balance."""
        if self.kind in WAREHOUSE_IN:
            return self.quantity
        return -self.quantity

    @property
    def holder_delta(self) -> int:
        """Signed effect on the holder balance (0 without holder)."""
        if self.kind == MovementKind.DELIVERY:
            return self.quantity
        if self.kind == MovementKind.RETURN:
            return -self.quantity
        return 0

    def save(self, *args, **kwargs):
        # Immutability check
        if not self._state.adding:
            raise ValueError(
                "Movimentações são imutáveis. "
                "Para corrigir, exclua e registre novamente."
            )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        target = f" → {self.holder}" if self.holder_kind else ""
        return f"{self.get_kind_display()} {self.quantity} × {self.product_id}{target}"
