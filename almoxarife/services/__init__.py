"""
Ledger services — modular organization of ledger operations.

Re-exports the public classes:
    from almoxarife.services import LedgerQueries, LedgerMovements, LedgerReports, LedgerCatalog
"""

from almoxarife.services.balances import LedgerQueries
from almoxarife.services.catalog import LedgerCatalog
from almoxarife.services.movements import LedgerMovements
from almoxarife.services.reports import LedgerReports

__all__ = [
    'LedgerQueries',
    'LedgerMovements',
    'LedgerReports',
    'LedgerCatalog',
]
