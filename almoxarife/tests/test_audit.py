"""
Tests for replay audit, negative balance detection and the audit_ledger command.
"""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from almoxarife import ledger
from almoxarife.services.audit import HOLDER, WAREHOUSE, deletion_violations


pytestmark = pytest.mark.django_db


class TestReplay:
    """Tests for ledger.replay()."""

    def test_clean_history(self, stocked_uniform, employee):
        ledger.deliver(stocked_uniform, 4, employee)
        ledger.receive_back(stocked_uniform, 4, employee)

        assert ledger.replay() == []

    def test_deleted_purchase_exposes_delivery(self, uniform, employee):
        purchase = ledger.purchase(uniform, 10)
        delivery = ledger.deliver(uniform, 4, employee)
        ledger.delete(purchase.pk)

        violations = ledger.replay(product=uniform)

        assert [(v.movement_id, v.scope, v.balance) for v in violations] == [
            (delivery.pk, WAREHOUSE, -4),
        ]

    def test_deleted_delivery_exposes_return(self, stocked_uniform, employee):
        delivery = ledger.deliver(stocked_uniform, 3, employee)
        back = ledger.receive_back(stocked_uniform, 3, employee)
        ledger.delete(delivery.pk)

        violations = ledger.replay()

        assert len(violations) == 1
        assert violations[0].movement_id == back.pk
        assert violations[0].scope == HOLDER
        assert violations[0].holder == employee
        assert violations[0].balance == -3

    def test_business_date_order(self, uniform, employee, today):
        """A backdated delivery before any purchase shows up in replay."""
        ledger.purchase(uniform, 5, occurred_on=today)
        late_entry = ledger.deliver(uniform, 2, employee, occurred_on=today - timedelta(days=3))

        violations = ledger.replay()

        assert [v.movement_id for v in violations] == [late_entry.pk]

    def test_exclude_simulates_deletion(self, uniform, employee):
        purchase = ledger.purchase(uniform, 10)
        ledger.dispose(uniform, 10)

        assert ledger.replay() == []
        assert len(ledger.replay(exclude=[purchase.pk])) == 1
        assert len(deletion_violations(purchase)) == 1


class TestNegativeBalances:
    """Tests for ledger.negative_balances()."""

    def test_none(self, stocked_uniform):
        assert ledger.negative_balances() == []

    def test_warehouse_negative(self, uniform, employee):
        purchase = ledger.purchase(uniform, 5)
        ledger.deliver(uniform, 3, employee)
        ledger.delete(purchase.pk)

        found = ledger.negative_balances()

        assert [(n.product_id, n.holder, n.balance) for n in found] == [(uniform.pk, None, -3)]

    def test_holder_negative(self, stocked_uniform, employee):
        delivery = ledger.deliver(stocked_uniform, 2, employee)
        ledger.receive_back(stocked_uniform, 2, employee)
        ledger.delete(delivery.pk)

        found = ledger.negative_balances(product=stocked_uniform)

        assert [(n.holder, n.balance) for n in found] == [(employee, -2)]


class TestAuditCommand:
    """Tests for the audit_ledger management command."""

    def test_clean(self, stocked_uniform):
        out = StringIO()

        call_command('audit_ledger', stdout=out)

        assert 'Nenhuma inconsistência' in out.getvalue()

    def test_reports_problems(self, uniform, employee):
        purchase = ledger.purchase(uniform, 4)
        ledger.deliver(uniform, 4, employee)
        ledger.delete(purchase.pk)
        out = StringIO()

        with pytest.raises(CommandError) as exc:
            call_command('audit_ledger', stdout=out)

        assert 'Histórico negativo' in out.getvalue()
        assert 'Saldo atual negativo' in out.getvalue()
        assert '1 ponto(s)' in str(exc.value)

    def test_single_product(self, uniform, boots, employee):
        purchase = ledger.purchase(uniform, 4)
        ledger.deliver(uniform, 4, employee)
        ledger.delete(purchase.pk)
        out = StringIO()

        call_command('audit_ledger', product=boots.pk, stdout=out)

        assert 'Nenhuma inconsistência' in out.getvalue()

    def test_unknown_product(self):
        with pytest.raises(CommandError):
            call_command('audit_ledger', product=987654, stdout=StringIO())
