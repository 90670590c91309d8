"""
Ledger movements — state-changing operations (record, delete, amend).

Every write locks the product row with select_for_update() before reading
balances, so the sufficiency check and the insert happen as one unit.
Concurrent writers on the same product queue behind that lock.
"""

import logging

from django.db import OperationalError, transaction
from django.utils import timezone

from almoxarife.adapters.directory import get_holder_directory
from almoxarife.conf import almoxarife_settings
from almoxarife.exceptions import LedgerError
from almoxarife.holders import Holder
from almoxarife.models.enums import HOLDER_KINDS, WAREHOUSE_OUT, MovementKind
from almoxarife.models.movement import Movement
from almoxarife.models.product import Product
from almoxarife.services.audit import deletion_violations, replay
from almoxarife.services.balances import LedgerQueries
from almoxarife.services.catalog import LedgerCatalog

logger = logging.getLogger('almoxarife')

AMENDABLE_FIELDS = (
    'kind', 'product', 'quantity', 'occurred_on', 'holder', 'note', 'user', 'holder_active',
)

# PositiveIntegerField is 32-bit on PostgreSQL and MySQL
MAX_QUANTITY = 2147483647


def _coerce_kind(kind) -> MovementKind:
    try:
        return MovementKind(kind)
    except ValueError:
        raise LedgerError('INVALID_KIND', kind=kind) from None


def _check_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise LedgerError('INVALID_QUANTITY', requested=quantity)
    if not 0 < quantity <= MAX_QUANTITY:
        raise LedgerError('INVALID_QUANTITY', requested=quantity)


def _check_holder_presence(kind: MovementKind, holder) -> None:
    needs_holder = kind in HOLDER_KINDS
    if needs_holder and holder is None:
        raise LedgerError(
            'HOLDER_REQUIREMENT_VIOLATION',
            'Informe o funcionário ou o posto de destino.',
            kind=kind,
        )
    if not needs_holder and holder is not None:
        raise LedgerError(
            'HOLDER_REQUIREMENT_VIOLATION',
            'Compra e descarte não têm destinatário.',
            kind=kind,
            holder=str(holder),
        )
    if holder is not None and not isinstance(holder, Holder):
        raise TypeError(f"holder must be a Holder, got {type(holder).__name__}")


def _check_holder_type(product: Product, holder: Holder) -> None:
    if holder.kind != product.holder_kind:
        raise LedgerError(
            'HOLDER_TYPE_MISMATCH',
            category=product.category,
            holder=str(holder),
        )


def _check_holder_status(kind: MovementKind, holder: Holder, holder_active) -> None:
    """Resolve the holder; an inactive one may still return but not receive."""
    if holder_active is None:
        if not almoxarife_settings.VALIDATE_HOLDERS:
            return
        info = get_holder_directory().get_holder(holder)
        if info is None:
            raise LedgerError('HOLDER_NOT_FOUND', holder=str(holder))
        holder_active = info.is_active

    if kind == MovementKind.DELIVERY and not holder_active:
        raise LedgerError('INACTIVE_HOLDER', holder=str(holder))


def _check_sufficiency(kind: MovementKind, product: Product, quantity: int, holder) -> None:
    if kind in WAREHOUSE_OUT:
        available = LedgerQueries.warehouse_balance(product)
        if available < quantity:
            raise LedgerError(
                'INSUFFICIENT_WAREHOUSE_STOCK',
                f'Estoque insuficiente. Saldo atual: {available}',
                available=available,
                requested=quantity,
                product_id=product.pk,
            )
    elif kind == MovementKind.RETURN:
        available = LedgerQueries.holder_balance(product, holder)
        if available < quantity:
            who = 'Funcionário' if holder.is_employee else 'Posto'
            raise LedgerError(
                'INSUFFICIENT_HOLDER_BALANCE',
                f'{who} possui apenas {available} unidade(s) deste item.',
                available=available,
                requested=quantity,
                product_id=product.pk,
                holder=str(holder),
            )


def _source_balances(movement) -> tuple:
    """Warehouse and holder balances on the side an existing movement touches."""
    warehouse = LedgerQueries.warehouse_balance(movement.product_id)
    held = None
    if movement.holder is not None:
        held = LedgerQueries.holder_balance(movement.product_id, movement.holder)
    return warehouse, held


def _check_not_overdrawn(movement, before: tuple) -> None:
    """
    Refuse when replacing ``movement`` left a balance on its side below zero.

    Balances that were already negative only block when they got worse.
    """
    warehouse_before, held_before = before
    warehouse, held = _source_balances(movement)
    if warehouse < 0 and warehouse < warehouse_before:
        raise LedgerError(
            'INSUFFICIENT_WAREHOUSE_STOCK',
            f'Estoque insuficiente. Saldo após a alteração: {warehouse}',
            available=warehouse_before,
            balance=warehouse,
            product_id=movement.product_id,
        )
    if held is not None and held < 0 and held < held_before:
        who = 'Funcionário' if movement.holder.is_employee else 'Posto'
        raise LedgerError(
            'INSUFFICIENT_HOLDER_BALANCE',
            f'{who} ficaria com saldo {held} deste item.',
            available=held_before,
            balance=held,
            product_id=movement.product_id,
            holder=str(movement.holder),
        )


def _history_keys(product_pks) -> set:
    return {v.key for pk in product_pks for v in replay(product=pk)}


def _lock_products(*pks) -> dict:
    """Lock product rows in pk order."""
    locked = {
        product.pk: product
        for product in Product.objects.select_for_update().filter(pk__in=set(pks)).order_by('pk')
    }
    for pk in pks:
        if pk not in locked:
            raise LedgerError('PRODUCT_NOT_FOUND', product_id=pk)
    return locked


def _atomic_with_retry(operation, event: str):
    """
    Run operation() in a transaction, retrying storage conflicts.

    LedgerError (validation) is never retried. OperationalError
    (deadlock, lock timeout, serialization failure) is retried up to
    WRITE_RETRIES times, then surfaces as WRITE_CONFLICT.
    """
    attempts = max(1, int(almoxarife_settings.WRITE_RETRIES))
    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            with transaction.atomic():
                return operation()
        except OperationalError as exc:
            last_error = exc
            logger.warning(
                "ledger.write.conflict",
                extra={"event": event, "attempt": attempt, "error": str(exc)},
            )
    raise LedgerError('WRITE_CONFLICT', attempts=attempts, event=event) from last_error


class LedgerMovements:
    """State-changing ledger methods."""

    @classmethod
    def _prepare(cls, kind, product, quantity, holder, holder_active):
        """Checks that need no lock. Returns (kind, product)."""
        kind = _coerce_kind(kind)
        _check_quantity(quantity)
        product = LedgerCatalog.get_product(product)
        _check_holder_presence(kind, holder)
        if holder is not None:
            _check_holder_type(product, holder)
            _check_holder_status(kind, holder, holder_active)
        return kind, product

    @classmethod
    def _append(cls, kind, product, quantity, occurred_on, holder, note, user) -> Movement:
        """Sufficiency check + insert. Caller holds the product lock."""
        _check_sufficiency(kind, product, quantity, holder)
        movement = Movement(
            product=product,
            kind=kind,
            quantity=quantity,
            occurred_on=occurred_on or timezone.localdate(),
            note=note or '',
            user=user,
        )
        movement.holder = holder
        movement.save()
        return movement

    @classmethod
    def record(cls, kind, product, quantity, occurred_on=None, holder=None,
               note='', user=None, holder_active=None) -> Movement:
        """
        Validate and append one movement.

        Args:
            kind: MovementKind (or its value)
            product: Product instance or primary key
            quantity: Positive int
            occurred_on: Business date (None = today)
            holder: Holder for delivery/return, None otherwise
            note: Free text
            user: Who recorded it
            holder_active: Caller-resolved active flag for the holder;
                None asks the configured HolderDirectory

        Returns:
            The created Movement

        Raises:
            LedgerError: INVALID_KIND, INVALID_QUANTITY, PRODUCT_NOT_FOUND,
                HOLDER_REQUIREMENT_VIOLATION, HOLDER_TYPE_MISMATCH,
                HOLDER_NOT_FOUND, INACTIVE_HOLDER,
                INSUFFICIENT_WAREHOUSE_STOCK, INSUFFICIENT_HOLDER_BALANCE,
                WRITE_CONFLICT

        Concurrency:
            - Runs under transaction.atomic()
            - Uses select_for_update() on the Product row
            - Reads balances after the lock
        """
        kind, product = cls._prepare(kind, product, quantity, holder, holder_active)

        def operation():
            locked = _lock_products(product.pk)[product.pk]
            return cls._append(kind, locked, quantity, occurred_on, holder, note, user)

        movement = _atomic_with_retry(operation, 'record')
        logger.info(
            "ledger.record",
            extra={
                "movement_id": movement.pk,
                "kind": kind,
                "product": str(product),
                "qty": quantity,
                "holder": str(holder) if holder else None,
            },
        )
        return movement

    @classmethod
    def purchase(cls, product, quantity, occurred_on=None, note='', user=None) -> Movement:
        """Warehouse in."""
        return cls.record(MovementKind.PURCHASE, product, quantity, occurred_on, note=note, user=user)

    @classmethod
    def deliver(cls, product, quantity, holder, occurred_on=None, note='', user=None,
                holder_active=None) -> Movement:
        """Warehouse → employee/post."""
        return cls.record(
            MovementKind.DELIVERY, product, quantity, occurred_on, holder=holder,
            note=note, user=user, holder_active=holder_active,
        )

    @classmethod
    def receive_back(cls, product, quantity, holder, occurred_on=None, note='', user=None,
                     holder_active=None) -> Movement:
        """Employee/post → warehouse."""
        return cls.record(
            MovementKind.RETURN, product, quantity, occurred_on, holder=holder,
            note=note, user=user, holder_active=holder_active,
        )

    return_ = receive_back

    @classmethod
    def dispose(cls, product, quantity, occurred_on=None, note='', user=None) -> Movement:
        """Warehouse out without a holder (damage, loss)."""
        return cls.record(MovementKind.DISPOSAL, product, quantity, occurred_on, note=note, user=user)

    @classmethod
    def get_movement(cls, movement_id) -> Movement:
        try:
            return Movement.objects.select_related('product').get(pk=movement_id)
        except (Movement.DoesNotExist, ValueError, TypeError):
            raise LedgerError('MOVEMENT_NOT_FOUND', movement_id=movement_id) from None

    @classmethod
    def _lock_movement(cls, movement_id, *product_pks):
        """
        Lock the movement's product (plus any others), then read it again.

        A concurrent delete that committed while we waited for the lock
        surfaces as MOVEMENT_NOT_FOUND.
        """
        movement = cls.get_movement(movement_id)
        locked = _lock_products(movement.product_id, *product_pks)
        return cls.get_movement(movement_id), locked

    @classmethod
    def delete(cls, movement_id, strict: bool | None = None) -> None:
        """
        Remove a movement.

        Non-strict (default): unconditional. Balances are recomputed on the
        next read and may go negative if later movements relied on it.
        Strict: refuse when the replay without it goes negative somewhere
        it did not before.

        Raises:
            LedgerError('MOVEMENT_NOT_FOUND'): Unknown id
            LedgerError('DELETION_BREAKS_HISTORY'): Strict mode refusal
        """
        if strict is None:
            strict = almoxarife_settings.STRICT_DELETION

        def operation():
            movement, _ = cls._lock_movement(movement_id)
            if strict:
                violations = deletion_violations(movement)
                if violations:
                    raise LedgerError(
                        'DELETION_BREAKS_HISTORY',
                        movement_id=movement.pk,
                        violations=len(violations),
                        first=str(violations[0]),
                    )
            deleted, _ = movement.delete()
            if not deleted:
                raise LedgerError('MOVEMENT_NOT_FOUND', movement_id=movement_id)
            return movement

        movement = _atomic_with_retry(operation, 'delete')
        logger.info(
            "ledger.delete",
            extra={
                "movement_id": movement_id,
                "kind": movement.kind,
                "product_id": movement.product_id,
                "qty": movement.quantity,
                "strict": strict,
            },
        )

    @classmethod
    def amend(cls, movement_id, strict: bool | None = None, **changes) -> Movement:
        """
        Replace a movement with a corrected one.

        Movements are immutable: the old row is deleted and a new one is
        validated and recorded in the same transaction. If anything is
        rejected, the old one stays.

        Besides the usual checks for the new movement, the balances the old
        one fed (warehouse, and its holder if any) must not end up negative.
        In strict mode the replay of the affected products must not go
        negative anywhere it did not before.

        Returns:
            The new Movement (new id)

        Raises:
            LedgerError: MOVEMENT_NOT_FOUND, any record() error,
                DELETION_BREAKS_HISTORY (strict)
        """
        unknown = set(changes) - set(AMENDABLE_FIELDS)
        if unknown:
            raise TypeError(f"Campos não editáveis: {', '.join(sorted(unknown))}")
        if strict is None:
            strict = almoxarife_settings.STRICT_DELETION

        old = cls.get_movement(movement_id)
        params = {
            'kind': old.kind,
            'product': old.product,
            'quantity': old.quantity,
            'occurred_on': old.occurred_on,
            'holder': old.holder,
            'note': old.note,
            'user': old.user,
            'holder_active': None,
        }
        params.update(changes)
        kind, product = cls._prepare(
            params['kind'], params['product'], params['quantity'],
            params['holder'], params['holder_active'],
        )

        def operation():
            current, locked = cls._lock_movement(movement_id, product.pk)
            affected = {current.product_id, product.pk}
            history_before = _history_keys(affected) if strict else set()
            before = _source_balances(current)

            deleted, _ = current.delete()
            if not deleted:
                raise LedgerError('MOVEMENT_NOT_FOUND', movement_id=movement_id)
            movement = cls._append(
                kind, locked[product.pk], params['quantity'], params['occurred_on'],
                params['holder'], params['note'], params['user'],
            )
            _check_not_overdrawn(current, before)

            if strict:
                introduced = [
                    v for pk in sorted(affected) for v in replay(product=pk)
                    if v.key not in history_before
                ]
                if introduced:
                    raise LedgerError(
                        'DELETION_BREAKS_HISTORY',
                        movement_id=movement_id,
                        violations=len(introduced),
                        first=str(introduced[0]),
                    )
            return movement

        movement = _atomic_with_retry(operation, 'amend')
        logger.info(
            "ledger.amend",
            extra={
                "old_movement_id": movement_id,
                "movement_id": movement.pk,
                "fields": sorted(changes),
                "strict": strict,
            },
        )
        return movement
