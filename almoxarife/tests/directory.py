"""
In-memory HolderDirectory used by tests that exercise HR/Supervision lookups.
"""

from almoxarife.protocols.holders import HolderInfo


class FakeHolderDirectory:
    """Resolves only the holders registered in ``entries``."""

    entries: dict = {}

    @classmethod
    def register(cls, holder, name, company='', is_active=True):
        cls.entries[holder] = HolderInfo(holder=holder, name=name, company=company, is_active=is_active)

    @classmethod
    def clear(cls):
        cls.entries.clear()

    def get_holder(self, holder):
        return self.entries.get(holder)

    def get_holders(self, holders):
        return {h: self.entries[h] for h in holders if h in self.entries}
