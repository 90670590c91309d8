"""
Almoxarife Admin.

Provides views for back-office debugging:
- Product: list + edit (code is derived, category locked after movements)
- Movement: read-only audit trail; deletion goes through the ledger
"""

import logging

from django.contrib import admin, messages
from django.http import HttpResponseRedirect
from django.urls import reverse
from django.utils.translation import gettext_lazy as _

from almoxarife.exceptions import LedgerError
from almoxarife.models import Movement, Product

logger = logging.getLogger(__name__)


# =========================================================================
# PRODUCT ADMIN
# =========================================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Product admin — editable."""

    list_display = ['code', 'category', 'is_active', 'balance_display']
    list_filter = ['category', 'is_active']
    search_fields = ['code', 'name']
    readonly_fields = ['code', 'created_at', 'updated_at']

    def get_readonly_fields(self, request, obj=None):
        fields = list(super().get_readonly_fields(request, obj))
        if obj is not None and obj.movements.exists():
            fields.append('category')
        return fields

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.movements.exists():
            return False
        return super().has_delete_permission(request, obj)

    @admin.display(description=_('Em estoque'))
    def balance_display(self, obj):
        from almoxarife import ledger
        return ledger.warehouse_balance(obj)


# =========================================================================
# MOVEMENT ADMIN (read-only audit trail)
# =========================================================================

@admin.register(Movement)
class MovementAdmin(admin.ModelAdmin):
    """Movement admin — read-only. Deletes are routed through ledger.delete()."""

    list_display = ['occurred_on', 'kind', 'product', 'quantity', 'holder_kind',
                    'holder_id', 'user']
    list_filter = ['kind', 'holder_kind', 'occurred_on']
    search_fields = ['product__code', 'holder_id', 'note']
    readonly_fields = ['product', 'kind', 'quantity', 'occurred_on', 'holder_kind',
                       'holder_id', 'note', 'created_at', 'user']
    date_hierarchy = 'occurred_on'
    list_select_related = ['product', 'user']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def delete_model(self, request, obj):
        from almoxarife import ledger

        try:
            ledger.delete(obj.pk)
        except LedgerError as exc:
            logger.warning("admin delete refused for movement %s: %s", obj.pk, exc.code)
            request._ledger_delete_refused = True
            self.message_user(request, exc.message, level=messages.ERROR)

    def response_delete(self, request, obj_display, obj_id):
        if getattr(request, '_ledger_delete_refused', False):
            return HttpResponseRedirect(reverse(
                f'{self.admin_site.name}:almoxarife_movement_change',
                args=[obj_id],
                current_app=self.admin_site.name,
            ))
        return super().response_delete(request, obj_display, obj_id)

    def delete_queryset(self, request, queryset):
        from almoxarife import ledger

        deleted = refused = 0
        for pk in queryset.values_list('pk', flat=True):
            try:
                ledger.delete(pk)
                deleted += 1
            except LedgerError as exc:
                refused += 1
                logger.warning("admin delete refused for movement %s: %s", pk, exc.code)
        if refused:
            request._ledger_delete_refused = True
            if deleted:
                self.message_user(
                    request,
                    _('{count} movimentação(ões) excluída(s).').format(count=deleted),
                    level=messages.SUCCESS,
                )
            self.message_user(
                request,
                _('{count} movimentação(ões) não excluída(s).').format(count=refused),
                level=messages.WARNING,
            )
            request._ledger_delete_reported = True

    def message_user(self, request, message, level=messages.INFO, *args, **kwargs):
        # The bulk delete action reports the whole selection as deleted
        if level == messages.SUCCESS and getattr(request, '_ledger_delete_reported', False):
            return
        super().message_user(request, message, level, *args, **kwargs)
