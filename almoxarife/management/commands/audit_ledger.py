"""
Management command to audit the ledger by replaying movements.

Usage:
    python manage.py audit_ledger
    python manage.py audit_ledger --product 12
"""

from django.core.management.base import BaseCommand, CommandError

from almoxarife import ledger
from almoxarife.exceptions import LedgerError


class Command(BaseCommand):
    """Replay movements and report negative balances."""

    help = 'Reprocessa as movimentações e aponta saldos negativos'

    def add_arguments(self, parser):
        parser.add_argument(
            '--product',
            type=int,
            help='Audita apenas este produto (ID)'
        )

    def handle(self, *args, **options):
        product = options.get('product')
        if product is not None:
            try:
                product = ledger.get_product(product).pk
            except LedgerError as exc:
                raise CommandError(f'{exc.message} (ID {product})') from exc

        violations = ledger.replay(product=product)
        current = ledger.negative_balances(product=product)

        for violation in violations:
            self.stdout.write(f'Histórico negativo: {violation}')
        for entry in current:
            where = entry.holder or 'almoxarifado'
            self.stdout.write(
                f'Saldo atual negativo: produto {entry.product_id} [{where}]: {entry.balance}'
            )

        if violations or current:
            raise CommandError(
                f'{len(violations)} ponto(s) negativo(s) no histórico, '
                f'{len(current)} saldo(s) atual(is) negativo(s)'
            )

        self.stdout.write(self.style.SUCCESS('Nenhuma inconsistência encontrada'))
