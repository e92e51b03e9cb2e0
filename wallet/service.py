import logging
from datetime import datetime, timezone
from typing import Optional, Union

from .models import (
    Currency,
    EntryType,
    ConvertDirection,
    Account,
    LedgerEntry,
    OperationResult,
    LedgerHistoryResponse,
    AccountReconciliation,
    ReconciliationReport,
)
from .store import AccountStore

logger = logging.getLogger(__name__)

# Fixed exchange rate, applied in both directions.
POINTS_PER_MONEY = 100

_BALANCE_FIELDS = {Currency.POINTS: "points", Currency.MONEY: "money"}


class WalletServiceError(Exception):
    code = "WalletError"


class InvalidInputError(WalletServiceError):
    code = "InvalidInput"


class InsufficientPointsError(WalletServiceError):
    code = "InsufficientPoints"


class InsufficientFundsError(WalletServiceError):
    code = "InsufficientFunds"


class InvalidDirectionError(WalletServiceError):
    code = "InvalidDirection"


class WalletService:
    """Sole writer of account balances.

    Every mutating operation validates its arguments, then takes the account's
    lock for the read-validate-mutate-append sequence. A raised
    ``WalletServiceError`` always means nothing was changed.
    """

    def __init__(self, store: Optional[AccountStore] = None):
        self.store = store or AccountStore()

    def get_balance(self, account_id: str) -> Account:
        with self.store.lock_for(account_id):
            return Account(**self.store.get_or_create(account_id))

    def get_ledger(self, account_id: str) -> list[LedgerEntry]:
        if self.store.get(account_id) is None:
            return []
        with self.store.lock_for(account_id):
            return [LedgerEntry(**e) for e in self.store.entries_for(account_id)]

    def get_ledger_history(self, account_id: str, limit: int = 50, offset: int = 0) -> LedgerHistoryResponse:
        if self.store.get(account_id) is None:
            return LedgerHistoryResponse(account_id=account_id, entries=[], total_count=0, points=0, money=0)

        with self.store.lock_for(account_id):
            account = Account(**self.store.get(account_id))
            all_entries = [LedgerEntry(**e) for e in self.store.entries_for(account_id)]

        return LedgerHistoryResponse(
            account_id=account_id,
            entries=all_entries[offset:offset + limit],
            total_count=len(all_entries),
            points=account.points,
            money=account.money,
        )

    def award(self, account_id: str, currency: Union[Currency, str], amount: int, reason: str = "") -> OperationResult:
        self._validate("award", account_id, amount)
        try:
            currency = Currency(currency)
        except ValueError:
            raise self._rejected("award", account_id, InvalidInputError(f"Unknown currency {currency!r}")) from None

        with self.store.lock_for(account_id):
            account = self.store.get_or_create(account_id)
            entry = self._new_entry(account_id, EntryType.AWARD, currency, amount, reason)
            account[_BALANCE_FIELDS[currency]] += amount
            return self._commit("award", account, [entry])

    def redeem(self, account_id: str, points: int, reason: str = "") -> OperationResult:
        self._validate("redeem", account_id, points)

        with self.store.lock_for(account_id):
            account = self.store.get_or_create(account_id)
            if account["points"] < points:
                raise self._rejected("redeem", account_id, InsufficientPointsError(
                    f"Account {account_id} has {account['points']} points, {points} requested"
                ))
            entry = self._new_entry(account_id, EntryType.REDEEM, Currency.POINTS, -points, reason)
            account["points"] -= points
            return self._commit("redeem", account, [entry])

    def withdraw(self, account_id: str, amount: int, reason: str = "") -> OperationResult:
        self._validate("withdraw", account_id, amount)

        with self.store.lock_for(account_id):
            account = self.store.get_or_create(account_id)
            if account["money"] < amount:
                raise self._rejected("withdraw", account_id, InsufficientFundsError(
                    f"Account {account_id} has {account['money']} money, {amount} requested"
                ))
            entry = self._new_entry(account_id, EntryType.WITHDRAW, Currency.MONEY, -amount, reason)
            account["money"] -= amount
            return self._commit("withdraw", account, [entry])

    def convert(
        self,
        account_id: str,
        direction: Union[ConvertDirection, str],
        amount: int,
        reason: str = "",
    ) -> OperationResult:
        """Exchange points and money at ``POINTS_PER_MONEY`` points per unit of money.

        ``amount`` is always in money: the money received for POINTS_TO_MONEY,
        the money given up for MONEY_TO_POINTS. Both legs are written to the
        ledger, credit leg first, so per-currency entry sums keep matching the
        balances.
        """
        self._validate("convert", account_id, amount)
        try:
            direction = ConvertDirection(direction)
        except ValueError:
            raise self._rejected("convert", account_id, InvalidDirectionError(f"Unknown direction {direction!r}")) from None

        points_delta = amount * POINTS_PER_MONEY

        with self.store.lock_for(account_id):
            account = self.store.get_or_create(account_id)

            if direction == ConvertDirection.POINTS_TO_MONEY:
                if account["points"] < points_delta:
                    raise self._rejected("convert", account_id, InsufficientPointsError(
                        f"Account {account_id} has {account['points']} points, {points_delta} required"
                    ))
                entries = [
                    self._new_entry(account_id, EntryType.CONVERT, Currency.MONEY, amount, reason),
                    self._new_entry(account_id, EntryType.CONVERT, Currency.POINTS, -points_delta, reason),
                ]
                account["points"] -= points_delta
                account["money"] += amount
            else:
                if account["money"] < amount:
                    raise self._rejected("convert", account_id, InsufficientFundsError(
                        f"Account {account_id} has {account['money']} money, {amount} required"
                    ))
                entries = [
                    self._new_entry(account_id, EntryType.CONVERT, Currency.POINTS, points_delta, reason),
                    self._new_entry(account_id, EntryType.CONVERT, Currency.MONEY, -amount, reason),
                ]
                account["money"] -= amount
                account["points"] += points_delta

            return self._commit("convert", account, entries)

    def reconcile(self, account_id: Optional[str] = None) -> ReconciliationReport:
        """Compare stored balances against ledger sums. Reports, never corrects."""
        if account_id is None:
            account_ids = self.store.account_ids()
        else:
            account_ids = [account_id] if self.store.get(account_id) is not None else []

        results = []
        for acc_id in account_ids:
            with self.store.lock_for(acc_id):
                account = dict(self.store.get(acc_id))
                entries = self.store.entries_for(acc_id)

            ledger_points = sum(e["amount"] for e in entries if e["currency"] == Currency.POINTS)
            ledger_money = sum(e["amount"] for e in entries if e["currency"] == Currency.MONEY)

            issues = []
            if ledger_points != account["points"] or ledger_money != account["money"]:
                issues.append("ledger_mismatch")
            if account["points"] < 0 or account["money"] < 0:
                issues.append("negative_balance")
            if issues:
                logger.warning(
                    "Reconciliation anomaly account=%s issues=%s points=%d/%d money=%d/%d",
                    acc_id, ",".join(issues),
                    account["points"], ledger_points, account["money"], ledger_money,
                )

            results.append(AccountReconciliation(
                account_id=acc_id,
                points=account["points"],
                money=account["money"],
                ledger_points=ledger_points,
                ledger_money=ledger_money,
                issues=issues,
            ))

        return ReconciliationReport(
            checked=len(results),
            anomalies=sum(1 for r in results if r.issues),
            accounts=results,
            account_id=account_id,
        )

    def _validate(self, operation: str, account_id: str, amount: int) -> None:
        if not isinstance(account_id, str) or not account_id:
            raise self._rejected(operation, account_id, InvalidInputError("account_id is required"))
        # bool is an int subclass; floats would break exact ledger sums
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise self._rejected(operation, account_id, InvalidInputError(
                f"amount must be a positive integer, got {amount!r}"
            ))

    def _rejected(self, operation: str, account_id: str, error: WalletServiceError) -> WalletServiceError:
        logger.info("%s rejected account=%r code=%s: %s", operation, account_id, error.code, error)
        return error

    def _new_entry(self, account_id: str, entry_type: EntryType, currency: Currency, amount: int, reason: str) -> dict:
        return {
            "id": self.store.ids.next_id(),
            "account_id": account_id,
            "entry_type": entry_type,
            "currency": currency,
            "amount": amount,
            "reason": reason or "",
            "created_at": datetime.now(timezone.utc),
        }

    def _commit(self, operation: str, account: dict, entries: list[dict]) -> OperationResult:
        self.store.append(account["id"], entries)
        logger.info(
            "%s account=%s points=%d money=%d entries=%s",
            operation, account["id"], account["points"], account["money"],
            [e["id"] for e in entries],
        )
        return OperationResult(
            account=Account(**account),
            entries=[LedgerEntry(**e) for e in entries],
        )
