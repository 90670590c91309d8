"""
Tests for the Ledger service API: balances, scenarios and ledger properties.
"""

import pytest

from almoxarife import ledger, LedgerError
from almoxarife.models import Movement, MovementKind


pytestmark = pytest.mark.django_db


class TestWarehouseBalance:
    """Tests for ledger.warehouse_balance()."""

    def test_empty_is_zero(self, uniform):
        """No movements → 0."""
        assert ledger.warehouse_balance(uniform) == 0

    def test_purchase_adds(self, uniform):
        ledger.purchase(uniform, 10)

        assert ledger.warehouse_balance(uniform) == 10

    def test_all_kinds(self, uniform, employee):
        """purchase + return − delivery − disposal."""
        ledger.purchase(uniform, 10)
        ledger.deliver(uniform, 6, employee)
        ledger.receive_back(uniform, 2, employee)
        ledger.dispose(uniform, 1)

        assert ledger.warehouse_balance(uniform) == 10 + 2 - 6 - 1

    def test_accepts_primary_key(self, stocked_uniform):
        assert ledger.warehouse_balance(stocked_uniform.pk) == 10

    def test_other_products_do_not_leak(self, stocked_uniform, boots):
        ledger.purchase(boots, 3)

        assert ledger.warehouse_balance(stocked_uniform) == 10
        assert ledger.warehouse_balance(boots) == 3


class TestHolderBalance:
    """Tests for ledger.holder_balance()."""

    def test_empty_is_zero(self, uniform, employee):
        assert ledger.holder_balance(uniform, employee) == 0

    def test_delivery_minus_return(self, stocked_uniform, employee):
        ledger.deliver(stocked_uniform, 4, employee)
        ledger.receive_back(stocked_uniform, 1, employee)

        assert ledger.holder_balance(stocked_uniform, employee) == 3

    def test_per_holder(self, stocked_uniform, employee, other_employee):
        ledger.deliver(stocked_uniform, 4, employee)
        ledger.deliver(stocked_uniform, 2, other_employee)

        assert ledger.holder_balance(stocked_uniform, employee) == 4
        assert ledger.holder_balance(stocked_uniform, other_employee) == 2

    def test_same_id_different_kind(self, stocked_uniform, stocked_radio):
        """Employee 'x' and post 'x' are different holders."""
        from almoxarife.holders import Holder

        ledger.deliver(stocked_uniform, 1, Holder.employee('x'))
        ledger.deliver(stocked_radio, 2, Holder.post('x'))

        assert ledger.holder_balance(stocked_uniform, Holder.post('x')) == 0
        assert ledger.holder_balance(stocked_radio, Holder.post('x')) == 2


class TestScenarios:
    """The reference scenarios, run in sequence."""

    def test_individual_product_lifecycle(self, uniform, employee):
        # 1. Empty, then purchase
        assert ledger.warehouse_balance(uniform) == 0
        purchase = ledger.purchase(uniform, 10)
        assert ledger.warehouse_balance(uniform) == 10

        # 2. Delivery
        ledger.deliver(uniform, 4, employee)
        assert ledger.warehouse_balance(uniform) == 6
        assert ledger.holder_balance(uniform, employee) == 4

        # 3. Return
        ledger.receive_back(uniform, 4, employee)
        assert ledger.warehouse_balance(uniform) == 10
        assert ledger.holder_balance(uniform, employee) == 0

        # 4. Over-delivery rejected
        with pytest.raises(LedgerError) as exc:
            ledger.deliver(uniform, 11, employee)
        assert exc.value.code == 'INSUFFICIENT_WAREHOUSE_STOCK'
        assert ledger.warehouse_balance(uniform) == 10
        assert ledger.holder_balance(uniform, employee) == 0

        # 6. Deleting the purchase recomputes to zero
        ledger.delete(purchase.pk)
        assert ledger.warehouse_balance(uniform) == 0

    def test_collective_product(self, radio, post, employee):
        # 5. Collective goes to posts, never employees
        ledger.purchase(radio, 5)
        ledger.deliver(radio, 5, post)
        assert ledger.holder_balance(radio, post) == 5

        with pytest.raises(LedgerError) as exc:
            ledger.deliver(radio, 1, employee)
        assert exc.value.code == 'HOLDER_TYPE_MISMATCH'


class TestLedgerProperties:
    """Invariant, conservation, rejection, type safety, idempotent reads."""

    def test_conservation(self, stocked_uniform, employee):
        """Delivery q then return q restores both balances."""
        ledger.deliver(stocked_uniform, 3, employee)
        before = (ledger.warehouse_balance(stocked_uniform),
                  ledger.holder_balance(stocked_uniform, employee))

        ledger.deliver(stocked_uniform, 5, employee)
        ledger.receive_back(stocked_uniform, 5, employee)

        after = (ledger.warehouse_balance(stocked_uniform),
                 ledger.holder_balance(stocked_uniform, employee))
        assert after == before

    @pytest.mark.parametrize('kind', [MovementKind.DELIVERY, MovementKind.DISPOSAL])
    def test_rejection_leaves_balances(self, stocked_uniform, employee, kind):
        holder = employee if kind == MovementKind.DELIVERY else None
        count = Movement.objects.count()

        with pytest.raises(LedgerError) as exc:
            ledger.record(kind, stocked_uniform, 11, holder=holder)

        assert exc.value.code == 'INSUFFICIENT_WAREHOUSE_STOCK'
        assert exc.value.available == 10
        assert exc.value.requested == 11
        assert Movement.objects.count() == count
        assert ledger.warehouse_balance(stocked_uniform) == 10
        assert ledger.holder_balance(stocked_uniform, employee) == 0

    def test_type_safety_ignores_quantity(self, uniform, post):
        """Mismatch is reported even with plenty of stock."""
        ledger.purchase(uniform, 1000)

        with pytest.raises(LedgerError) as exc:
            ledger.deliver(uniform, 1, post)

        assert exc.value.code == 'HOLDER_TYPE_MISMATCH'

    def test_reads_are_idempotent(self, stocked_uniform, employee):
        ledger.deliver(stocked_uniform, 2, employee)

        assert ledger.warehouse_balance(stocked_uniform) == ledger.warehouse_balance(stocked_uniform)
        assert (ledger.holder_balance(stocked_uniform, employee)
                == ledger.holder_balance(stocked_uniform, employee))

    def test_balances_never_negative(self, stocked_uniform, employee, other_employee):
        """Random-ish sequence of accepted and rejected writes."""
        attempts = [
            (MovementKind.DELIVERY, 4, employee),
            (MovementKind.DELIVERY, 7, other_employee),
            (MovementKind.RETURN, 5, employee),
            (MovementKind.DISPOSAL, 6, None),
            (MovementKind.DELIVERY, 6, other_employee),
            (MovementKind.RETURN, 2, other_employee),
            (MovementKind.RETURN, 7, other_employee),
            (MovementKind.DISPOSAL, 3, None),
        ]
        for kind, qty, holder in attempts:
            try:
                ledger.record(kind, stocked_uniform, qty, holder=holder)
            except LedgerError:
                pass
            assert ledger.warehouse_balance(stocked_uniform) >= 0
            assert ledger.holder_balance(stocked_uniform, employee) >= 0
            assert ledger.holder_balance(stocked_uniform, other_employee) >= 0


class TestStockByProduct:
    """Tests for ledger.stock_by_product()."""

    def test_whole_catalog(self, stocked_uniform, boots, stocked_radio):
        rows = ledger.stock_by_product()

        assert [(p.code, qty) for p, qty in rows] == [
            ('BOTA 42', 0),
            ('CAMISA AZUL M', 10),
            ('RÁDIO HT', 5),
        ]

    def test_inactive_hidden_by_default(self, stocked_uniform, boots):
        ledger.deactivate_product(boots)

        assert [p for p, _ in ledger.stock_by_product()] == [stocked_uniform]
        assert len(ledger.stock_by_product(include_inactive=True)) == 2


class TestStockByHolder:
    """Tests for ledger.stock_by_post() / stock_by_employee() / holder_products()."""

    def test_by_post_sums_collective_products(self, stocked_radio, flashlight, post, other_post):
        ledger.purchase(flashlight, 4)
        ledger.deliver(stocked_radio, 2, post)
        ledger.deliver(flashlight, 3, post)
        ledger.deliver(stocked_radio, 1, other_post)
        ledger.receive_back(stocked_radio, 1, other_post)

        assert ledger.stock_by_post() == [('posto-central', 5)]

    def test_by_employee(self, stocked_uniform, employee, other_employee):
        ledger.deliver(stocked_uniform, 3, employee)
        ledger.deliver(stocked_uniform, 1, other_employee)

        assert sorted(ledger.stock_by_employee()) == [('func-1', 3), ('func-2', 1)]

    def test_holder_products(self, stocked_uniform, boots, employee):
        ledger.purchase(boots, 2)
        ledger.deliver(stocked_uniform, 2, employee)
        ledger.deliver(boots, 1, employee)
        ledger.receive_back(boots, 1, employee)

        assert ledger.holder_products(employee) == [(stocked_uniform, 2)]
