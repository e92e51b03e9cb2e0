import threading
from datetime import datetime, timezone
from typing import Optional


class SequenceGenerator:
    """Thread-safe monotonic counter used for ledger entry ids."""

    def __init__(self, start: int = 1):
        self._next = start
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value


class AccountStore:
    """In-memory account table and append-only ledger.

    Each account has its own re-entrant lock. Callers that mutate an account
    hold ``lock_for(account_id)`` across the whole read-validate-mutate-append
    sequence; the registry lock only guards creation of records and locks.
    """

    def __init__(self, id_generator: Optional[SequenceGenerator] = None):
        self.accounts: dict[str, dict] = {}
        self.ledger_batches: dict[str, list[tuple[dict, ...]]] = {}
        self.ids = id_generator or SequenceGenerator()
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def lock_for(self, account_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[account_id] = lock
            return lock

    def get(self, account_id: str) -> Optional[dict]:
        return self.accounts.get(account_id)

    def get_or_create(self, account_id: str) -> dict:
        with self._registry_lock:
            account = self.accounts.get(account_id)
            if account is None:
                account = {
                    "id": account_id,
                    "points": 0,
                    "money": 0,
                    "created_at": datetime.now(timezone.utc),
                }
                self.accounts[account_id] = account
                self.ledger_batches[account_id] = []
            return account

    def append(self, account_id: str, entries: list[dict]) -> None:
        # one batch per operation so its entries keep their relative order on read
        self.ledger_batches.setdefault(account_id, []).append(tuple(entries))

    def entries_for(self, account_id: str) -> list[dict]:
        batches = list(self.ledger_batches.get(account_id, ()))
        return [entry for batch in reversed(batches) for entry in batch]

    def account_ids(self) -> list[str]:
        with self._registry_lock:
            return list(self.accounts)
