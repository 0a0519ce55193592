"""Account ledger: account id to balances, zero by default."""
from __future__ import annotations

from .models import AccountEntry

_ZERO = AccountEntry()


class Ledger:
    """In-memory store of account entries.

    Unseen accounts read as a zero entry; writing a zero entry drops the key
    so the store only holds accounts with a balance. Only the engine writes
    to a ledger.
    """

    def __init__(self) -> None:
        self._entries: dict[str, AccountEntry] = {}

    def get(self, account: str) -> AccountEntry:
        return self._entries.get(account, _ZERO)

    def put(self, account: str, entry: AccountEntry) -> AccountEntry:
        """Store ``entry`` and return the entry it replaced."""
        previous = self.get(account)
        if entry.is_zero:
            self._entries.pop(account, None)
        else:
            self._entries[account] = entry
        return previous

    def reset(self, account: str) -> AccountEntry:
        return self.put(account, _ZERO)

    def snapshot(self) -> dict[str, AccountEntry]:
        return dict(self._entries)

    def __contains__(self, account: object) -> bool:
        return account in self._entries

    def __len__(self) -> int:
        return len(self._entries)
