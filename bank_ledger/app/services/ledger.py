from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple
from uuid import UUID, uuid4

from ..core.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    InsufficientFundsError,
    InvalidInputError,
    SameAccountTransferError,
)
from ..models import (
    Account,
    BalanceChange,
    Counterparty,
    DashboardStats,
    Deposit,
    TransactionDetails,
    Transfer,
    Withdrawal,
)
from .repository import InMemoryLedgerRepository, LedgerRepository


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# Largest amount or balance held exactly: 15 digits, stored as integer cents below 2**53.
MAX_MONEY = Decimal("9999999999999.99")
DEFAULT_RECENT_LIMIT = 10
DEFAULT_MAX_NAME_LENGTH = 50


class LedgerService:
    """Single point of mutation for account balances.

    Every public call holds one re-entrant lock and runs inside one
    repository unit of work, so a transfer's debit, credit and audit record
    are never observed or persisted separately. All validation happens
    before the first write.
    """

    def __init__(
        self,
        repository: Optional[LedgerRepository] = None,
        *,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
    ) -> None:
        self.repository = repository or InMemoryLedgerRepository()
        self.recent_limit = recent_limit
        self.max_name_length = max_name_length
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def _account_number(self, value: Any, field: str = "account_number") -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInputError(f"{field} must be an integer")
        if value <= 0:
            raise InvalidInputError(f"{field} must be positive")
        return value

    def _money(self, value: Any, field: str = "amount", allow_zero: bool = False) -> Decimal:
        if isinstance(value, bool) or not isinstance(value, (Decimal, int, float, str)):
            raise InvalidInputError(f"{field} must be a number")
        try:
            amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
        except InvalidOperation as exc:
            raise InvalidInputError(f"{field} must be a number") from exc

        if not amount.is_finite():
            raise InvalidInputError(f"{field} must be a finite number")
        if amount > MAX_MONEY:
            raise InvalidInputError(f"{field} must not exceed {MAX_MONEY}")
        if amount < 0 or (amount == 0 and not allow_zero):
            raise InvalidInputError(
                f"{field} must not be negative" if allow_zero else f"{field} must be positive"
            )
        try:
            quantized = amount.quantize(CENT)
        except InvalidOperation as exc:
            raise InvalidInputError(f"{field} is out of range") from exc
        if amount != quantized:
            raise InvalidInputError(f"{field} must have at most two decimal places")
        return quantized

    def _fits(self, balance: Decimal, account_number: int) -> Decimal:
        if balance > MAX_MONEY:
            raise InvalidInputError(
                f"Balance of account {account_number} would exceed {MAX_MONEY}"
            )
        return balance

    def _name(self, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise InvalidInputError("name must be a non-empty string")
        name = value.strip()
        if len(name) > self.max_name_length:
            raise InvalidInputError(
                f"name must be at most {self.max_name_length} characters"
            )
        return name

    # ------------------------------------------------------------------
    # Helper utilities
    # ------------------------------------------------------------------
    def _require_account(self, account_number: int) -> Account:
        account = self.repository.get_account_by_number(account_number)
        if account is None:
            raise AccountNotFoundError(f"Account {account_number} not found")
        return account

    def _counterparty(self, account_id: Optional[UUID]) -> Optional[Counterparty]:
        if account_id is None:
            return None
        account = self.repository.get_account(account_id)
        if account is None:
            return None
        return Counterparty(account_number=account.account_number, name=account.name)

    def _now(self) -> datetime:
        return datetime.now(UTC)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def create_account(
        self,
        account_number: int,
        name: str,
        initial_balance: Decimal | int | float | str = 0,
    ) -> Account:
        account_number = self._account_number(account_number)
        name = self._name(name)
        balance = self._money(initial_balance, field="balance", allow_zero=True)

        with self._lock, self.repository.atomic():
            if self.repository.get_account_by_number(account_number) is not None:
                logger.info(
                    "account.create.rejected",
                    extra={"account_number": account_number, "reason": "duplicate"},
                )
                raise DuplicateAccountError(f"Account {account_number} already exists")

            now = self._now()
            account = Account(
                id=uuid4(),
                account_number=account_number,
                name=name,
                balance=balance,
                created_at=now,
            )
            self.repository.add_account(account)
            if balance > 0:
                self.repository.add_transaction(
                    Deposit(
                        id=uuid4(),
                        to_account_id=account.id,
                        amount=balance,
                        created_at=now,
                        sequence=self.repository.next_sequence(),
                    )
                )

        logger.info(
            "account.created",
            extra={
                "account_id": str(account.id),
                "account_number": account_number,
                "balance": str(balance),
            },
        )
        return account

    def get_account(self, account_number: int) -> Optional[Account]:
        if isinstance(account_number, bool) or not isinstance(account_number, int):
            raise InvalidInputError("account_number must be an integer")
        if account_number <= 0:
            return None
        with self._lock, self.repository.atomic():
            return self.repository.get_account_by_number(account_number)

    def list_accounts(self) -> list[Account]:
        with self._lock, self.repository.atomic():
            return self.repository.list_accounts()

    def deposit(self, account_number: int, amount: Decimal | int | float | str) -> BalanceChange:
        account_number = self._account_number(account_number)
        amount = self._money(amount)

        with self._lock, self.repository.atomic():
            account = self._require_account(account_number)
            new_balance = self._fits(account.balance + amount, account_number)
            updated = replace(account, balance=new_balance)
            self.repository.save_account(updated)
            self.repository.add_transaction(
                Deposit(
                    id=uuid4(),
                    to_account_id=account.id,
                    amount=amount,
                    created_at=self._now(),
                    sequence=self.repository.next_sequence(),
                )
            )

        logger.info(
            "account.deposit",
            extra={
                "account_number": account_number,
                "amount": str(amount),
                "balance": str(updated.balance),
            },
        )
        return BalanceChange(account=updated, new_balance=updated.balance)

    def withdraw(self, account_number: int, amount: Decimal | int | float | str) -> BalanceChange:
        account_number = self._account_number(account_number)
        amount = self._money(amount)

        with self._lock, self.repository.atomic():
            account = self._require_account(account_number)
            if account.balance < amount:
                logger.info(
                    "account.withdraw.rejected",
                    extra={"account_number": account_number, "reason": "insufficient_funds"},
                )
                raise InsufficientFundsError("Insufficient funds")

            updated = replace(account, balance=account.balance - amount)
            self.repository.save_account(updated)
            self.repository.add_transaction(
                Withdrawal(
                    id=uuid4(),
                    from_account_id=account.id,
                    amount=amount,
                    created_at=self._now(),
                    sequence=self.repository.next_sequence(),
                )
            )

        logger.info(
            "account.withdraw",
            extra={
                "account_number": account_number,
                "amount": str(amount),
                "balance": str(updated.balance),
            },
        )
        return BalanceChange(account=updated, new_balance=updated.balance)

    def transfer(
        self,
        from_account_number: int,
        to_account_number: int,
        amount: Decimal | int | float | str,
    ) -> Tuple[Account, Account]:
        from_account_number = self._account_number(from_account_number, "from_account_number")
        to_account_number = self._account_number(to_account_number, "to_account_number")
        amount = self._money(amount)

        if from_account_number == to_account_number:
            raise SameAccountTransferError("Cannot transfer to the same account")

        with self._lock, self.repository.atomic():
            source = self._require_account(from_account_number)
            dest = self._require_account(to_account_number)

            if source.balance < amount:
                logger.info(
                    "account.transfer.rejected",
                    extra={
                        "from_account_number": from_account_number,
                        "to_account_number": to_account_number,
                        "reason": "insufficient_funds",
                    },
                )
                raise InsufficientFundsError("Insufficient funds in source account")

            debited = replace(source, balance=source.balance - amount)
            credited_balance = self._fits(dest.balance + amount, to_account_number)
            credited = replace(dest, balance=credited_balance)
            self.repository.save_account(debited)
            self.repository.save_account(credited)
            self.repository.add_transaction(
                Transfer(
                    id=uuid4(),
                    from_account_id=source.id,
                    to_account_id=dest.id,
                    amount=amount,
                    created_at=self._now(),
                    sequence=self.repository.next_sequence(),
                )
            )

        logger.info(
            "account.transfer",
            extra={
                "from_account_number": from_account_number,
                "to_account_number": to_account_number,
                "amount": str(amount),
            },
        )
        return debited, credited

    def recent_transactions(self, limit: Optional[int] = None) -> list[TransactionDetails]:
        if limit is None:
            limit = self.recent_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise InvalidInputError("limit must be a non-negative integer")

        with self._lock, self.repository.atomic():
            return [
                TransactionDetails(
                    transaction=transaction,
                    from_account=self._counterparty(transaction.from_account_id),
                    to_account=self._counterparty(transaction.to_account_id),
                )
                for transaction in self.repository.recent_transactions(limit)
            ]

    def dashboard_stats(self) -> DashboardStats:
        with self._lock, self.repository.atomic():
            total_accounts = self.repository.count_accounts()
            transactions = self.repository.list_transactions()

        total_deposits = sum(
            (t.amount for t in transactions if isinstance(t, Deposit)), Decimal("0.00")
        )
        total_withdrawals = sum(
            (t.amount for t in transactions if isinstance(t, Withdrawal)), Decimal("0.00")
        )
        active_transfers = sum(1 for t in transactions if isinstance(t, Transfer))

        return DashboardStats(
            total_accounts=total_accounts,
            total_deposits=total_deposits,
            total_withdrawals=total_withdrawals,
            active_transfers=active_transfers,
        )
