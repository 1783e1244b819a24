from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union
from uuid import UUID


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class Account:
    id: UUID
    account_number: int
    name: str
    balance: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Deposit:
    """Money entering the ledger; there is never a source account."""

    type: ClassVar[TransactionType] = TransactionType.DEPOSIT

    id: UUID
    to_account_id: UUID
    amount: Decimal
    created_at: datetime
    sequence: int = 0

    @property
    def from_account_id(self) -> None:
        return None


@dataclass(frozen=True)
class Withdrawal:
    """Money leaving the ledger; there is never a destination account."""

    type: ClassVar[TransactionType] = TransactionType.WITHDRAW

    id: UUID
    from_account_id: UUID
    amount: Decimal
    created_at: datetime
    sequence: int = 0

    @property
    def to_account_id(self) -> None:
        return None


@dataclass(frozen=True)
class Transfer:
    type: ClassVar[TransactionType] = TransactionType.TRANSFER

    id: UUID
    from_account_id: UUID
    to_account_id: UUID
    amount: Decimal
    created_at: datetime
    sequence: int = 0

    def __post_init__(self) -> None:
        if self.from_account_id == self.to_account_id:
            raise ValueError("Transfer must reference two different accounts")


Transaction = Union[Deposit, Withdrawal, Transfer]


@dataclass(frozen=True)
class BalanceChange:
    account: Account
    new_balance: Decimal


@dataclass(frozen=True)
class Counterparty:
    account_number: int
    name: str


@dataclass(frozen=True)
class TransactionDetails:
    """A transaction plus the counterparties that could be resolved at read time."""

    transaction: Transaction
    from_account: Optional[Counterparty] = None
    to_account: Optional[Counterparty] = None


@dataclass(frozen=True)
class DashboardStats:
    total_accounts: int
    total_deposits: Decimal
    total_withdrawals: Decimal
    active_transfers: int
