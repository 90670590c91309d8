"""
Almoxarife — Livro-razão de estoque de uniformes e equipamentos.

Controla compras, entregas, devoluções e descartes de itens individuais
(entregues a funcionários) e coletivos (mantidos em postos de trabalho),
sem nunca entregar ou receber de volta mais do que existe.

Uso:
    from almoxarife import ledger, LedgerError, Holder

    ledger.purchase(camisa, 10)
    ledger.deliver(camisa, 4, Holder.employee('42'))
    ledger.warehouse_balance(camisa)  # 6
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'ledger':
        from almoxarife.service import Ledger
        return Ledger
    elif name == 'LedgerError':
        from almoxarife.exceptions import LedgerError
        return LedgerError
    elif name == 'Holder':
        from almoxarife.holders import Holder
        return Holder
    elif name == 'Product':
        from almoxarife.models.product import Product
        return Product
    elif name == 'Movement':
        from almoxarife.models.movement import Movement
        return Movement
    elif name == 'Category':
        from almoxarife.models.enums import Category
        return Category
    elif name == 'MovementKind':
        from almoxarife.models.enums import MovementKind
        return MovementKind
    elif name == 'HolderKind':
        from almoxarife.models.enums import HolderKind
        return HolderKind
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'ledger',
    'LedgerError',
    'Holder',
    'Product',
    'Movement',
    'Category',
    'MovementKind',
    'HolderKind',
]

__version__ = '0.1.0'
