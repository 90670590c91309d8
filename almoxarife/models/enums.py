"""
Enums for Almoxarife models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Category(models.TextChoices):
    """
    Product category — decides who may hold the product.

    INDIVIDUAL: Assigned to one employee (uniform, boots, badge).
    COLLECTIVE: Kept at a work post and shared by whoever is on duty
                (radio, flashlight, umbrella).
    """
    INDIVIDUAL = 'individual', _('Individual')
    COLLECTIVE = 'collective', _('Coletivo')


class MovementKind(models.TextChoices):
    """
    Movement kind — which balance the movement touches.

    PURCHASE: Warehouse in.
    DELIVERY: Warehouse out, holder in.
    RETURN:   Holder out, warehouse in.
    DISPOSAL: Warehouse out (damaged, lost, discarded).
    """
    PURCHASE = 'purchase', _('Compra')
    DELIVERY = 'delivery', _('Entrega')
    RETURN = 'return', _('Devolução')
    DISPOSAL = 'disposal', _('Descarte')


class HolderKind(models.TextChoices):
    """Who holds delivered stock."""
    EMPLOYEE = 'employee', _('Funcionário')
    POST = 'post', _('Posto')


# Kinds that add to / subtract from the warehouse balance
WAREHOUSE_IN = (MovementKind.PURCHASE, MovementKind.RETURN)
WAREHOUSE_OUT = (MovementKind.DELIVERY, MovementKind.DISPOSAL)

# Kinds that carry a holder
HOLDER_KINDS = (MovementKind.DELIVERY, MovementKind.RETURN)

# Category -> holder kind allowed to hold it
HOLDER_FOR_CATEGORY = {
    Category.INDIVIDUAL: HolderKind.EMPLOYEE,
    Category.COLLECTIVE: HolderKind.POST,
}
