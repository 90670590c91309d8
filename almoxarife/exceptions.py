"""
Exceptions for Almoxarife.

All errors are LedgerError with a structured code for programmatic handling.
"""

from typing import Any


class BaseError(Exception):
    """
    Error with a machine-readable code, a human message and context data.

    Subclasses declare ``_default_messages`` keyed by code; the message
    falls back to the code itself when no default exists.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.data!r})"


class LedgerError(BaseError):
    """
    Structured exception for ledger operations.

    Usage:
        try:
            ledger.deliver(product, 10, Holder.employee('42'))
        except LedgerError as e:
            if e.code == 'INSUFFICIENT_WAREHOUSE_STOCK':
                print(f"Só tem {e.available} em estoque")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'INVALID_QUANTITY': 'Quantidade inválida (deve ser um inteiro positivo)',
        'INVALID_KIND': 'Tipo de movimentação inválido',
        'INVALID_CATEGORY': 'Tipo de produto inválido',
        'PRODUCT_NOT_FOUND': 'Produto não encontrado',
        'HOLDER_REQUIREMENT_VIOLATION': 'Destinatário incompatível com o tipo de movimentação',
        'HOLDER_TYPE_MISMATCH': 'Destinatário incompatível com o tipo de produto',
        'HOLDER_NOT_FOUND': 'Funcionário ou posto não encontrado',
        'INACTIVE_HOLDER': 'Funcionário ou posto inativo',
        'INSUFFICIENT_WAREHOUSE_STOCK': 'Estoque insuficiente',
        'INSUFFICIENT_HOLDER_BALANCE': 'Saldo insuficiente para devolução',
        'MOVEMENT_NOT_FOUND': 'Movimentação não encontrada',
        'DELETION_BREAKS_HISTORY': 'Exclusão deixaria o histórico com saldo negativo',
        'DUPLICATE_CODE': 'Já existe um produto com este código',
        'CATEGORY_LOCKED': 'Tipo do produto não pode mudar após movimentações',
        'PRODUCT_HAS_MOVEMENTS': 'Não é possível excluir produto com movimentações registradas',
        'WRITE_CONFLICT': 'Modificação concorrente detectada',
    }

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs and feedback toasts)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: v if isinstance(v, (int, str, bool, type(None))) else str(v)
                for k, v in self.data.items()
            }
        }
