from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, StrictInt


class Currency(str, Enum):
    POINTS = "POINTS"
    MONEY = "MONEY"


class EntryType(str, Enum):
    AWARD = "AWARD"
    REDEEM = "REDEEM"
    WITHDRAW = "WITHDRAW"
    CONVERT = "CONVERT"


class ConvertDirection(str, Enum):
    POINTS_TO_MONEY = "POINTS_TO_MONEY"
    MONEY_TO_POINTS = "MONEY_TO_POINTS"


class AwardRequest(BaseModel):
    currency: str = Field(..., description="POINTS or MONEY")
    amount: StrictInt
    reason: str = ""

    model_config = ConfigDict(json_schema_extra={
        "example": {"currency": "POINTS", "amount": 150, "reason": "bonus"}
    })


class RedeemRequest(BaseModel):
    points: StrictInt
    reason: str = ""


class WithdrawRequest(BaseModel):
    amount: StrictInt
    reason: str = ""


class ConvertRequest(BaseModel):
    direction: str = Field(..., description="POINTS_TO_MONEY or MONEY_TO_POINTS")
    amount: StrictInt
    reason: str = ""

    model_config = ConfigDict(json_schema_extra={
        "example": {"direction": "POINTS_TO_MONEY", "amount": 3}
    })


class Account(BaseModel):
    id: str
    points: int = 0
    money: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LedgerEntry(BaseModel):
    id: int
    account_id: str
    entry_type: EntryType
    currency: Currency
    amount: int
    reason: str = ""
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, frozen=True)


class OperationResult(BaseModel):
    account: Account
    entries: list[LedgerEntry]

    @property
    def entry(self) -> LedgerEntry:
        """The entry describing the requested change (the credit leg for conversions)."""
        return self.entries[0]


class LedgerHistoryResponse(BaseModel):
    account_id: str
    entries: list[LedgerEntry]
    total_count: int
    points: int
    money: int


class AccountReconciliation(BaseModel):
    account_id: str
    points: int
    money: int
    ledger_points: int
    ledger_money: int
    issues: list[str] = Field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.issues


class ReconciliationReport(BaseModel):
    checked: int
    anomalies: int
    accounts: list[AccountReconciliation]
    account_id: Optional[str] = None
