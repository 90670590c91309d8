"""
Ledger Service — The single public interface for all supply ledger operations.

Usage:
    from almoxarife import ledger, LedgerError
    from almoxarife.holders import Holder

    ledger.purchase(camisa, 10)
    ledger.deliver(camisa, 4, Holder.employee('42'))
    ledger.warehouse_balance(camisa)  # 6
"""

from almoxarife.services.audit import negative_balances, replay
from almoxarife.services.balances import LedgerQueries
from almoxarife.services.catalog import LedgerCatalog
from almoxarife.services.movements import LedgerMovements
from almoxarife.services.reports import LedgerReports


class Ledger(LedgerQueries, LedgerMovements, LedgerReports, LedgerCatalog):
    """
    Single interface for all ledger operations.

    Parameter convention: (product, quantity, holder, ...)
    Follows natural language: "Deliver 4 shirts to employee 42"

    IMPORTANT: All state-changing methods run in atomic transactions
    holding a row lock on the product. See LedgerMovements.
    """

    replay = staticmethod(replay)
    negative_balances = staticmethod(negative_balances)
