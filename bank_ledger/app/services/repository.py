from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import UTC, datetime
from decimal import Decimal
from typing import Optional, Protocol
from uuid import UUID

from sqlalchemy.engine import Engine
from sqlmodel import Session, func, select

from ..models import (
    Account,
    AccountModel,
    Deposit,
    LedgerTransactionModel,
    Transaction,
    TransactionType,
    Transfer,
    Withdrawal,
)


class LedgerRepository(Protocol):
    """Storage contract the ledger service writes through.

    Every call must happen inside ``atomic()``; the block either lands in
    full or leaves the store untouched.
    """

    durable: bool

    def atomic(self) -> AbstractContextManager[None]: ...

    def get_account(self, account_id: UUID) -> Optional[Account]: ...

    def get_account_by_number(self, account_number: int) -> Optional[Account]: ...

    def add_account(self, account: Account) -> None: ...

    def save_account(self, account: Account) -> None: ...

    def list_accounts(self) -> list[Account]: ...

    def count_accounts(self) -> int: ...

    def next_sequence(self) -> int: ...

    def add_transaction(self, transaction: Transaction) -> None: ...

    def list_transactions(self) -> list[Transaction]: ...

    def recent_transactions(self, limit: int) -> list[Transaction]: ...


class InMemoryLedgerRepository:
    """Process-local store. Everything is lost when the process exits."""

    durable = False

    def __init__(self) -> None:
        self._accounts: dict[UUID, Account] = {}
        self._numbers: dict[int, UUID] = {}
        self._transactions: list[Transaction] = []
        self._undo: Optional[list[Callable[[], None]]] = None

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if self._undo is not None:
            # Nested block joins the outer one.
            yield
            return

        self._undo = []
        try:
            yield
        except BaseException:
            for revert in reversed(self._undo):
                revert()
            raise
        finally:
            self._undo = None

    def _remember(self, revert: Callable[[], None]) -> None:
        if self._undo is None:
            raise RuntimeError("Repository writes must run inside atomic()")
        self._undo.append(revert)

    # Account operations -------------------------------------------------
    def get_account(self, account_id: UUID) -> Optional[Account]:
        return self._accounts.get(account_id)

    def get_account_by_number(self, account_number: int) -> Optional[Account]:
        account_id = self._numbers.get(account_number)
        if account_id is None:
            return None
        return self._accounts[account_id]

    def add_account(self, account: Account) -> None:
        self._remember(lambda: self._drop_account(account))
        self._accounts[account.id] = account
        self._numbers[account.account_number] = account.id

    def _drop_account(self, account: Account) -> None:
        self._accounts.pop(account.id, None)
        self._numbers.pop(account.account_number, None)

    def save_account(self, account: Account) -> None:
        previous = self._accounts[account.id]
        self._remember(lambda: self._accounts.__setitem__(previous.id, previous))
        self._accounts[account.id] = account

    def list_accounts(self) -> list[Account]:
        return sorted(self._accounts.values(), key=lambda a: a.account_number)

    def count_accounts(self) -> int:
        return len(self._accounts)

    # Transactions -------------------------------------------------------
    def next_sequence(self) -> int:
        return len(self._transactions) + 1

    def add_transaction(self, transaction: Transaction) -> None:
        self._remember(self._transactions.pop)
        self._transactions.append(transaction)

    def list_transactions(self) -> list[Transaction]:
        return list(self._transactions)

    def recent_transactions(self, limit: int) -> list[Transaction]:
        ordered = sorted(self._transactions, key=lambda t: t.sequence, reverse=True)
        return ordered[:limit]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_cents(value: Decimal) -> int:
    return int(value.scaleb(2).to_integral_exact())


def _from_cents(value: int) -> Decimal:
    return Decimal(value).scaleb(-2)


class SqlLedgerRepository:
    """Thin data access layer around a SQLModel session per unit of work."""

    durable = True

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session: Optional[Session] = None

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if self._session is not None:
            yield
            return

        with Session(self.engine, expire_on_commit=False) as session:
            self._session = session
            try:
                yield
                session.commit()
            except BaseException:
                session.rollback()
                raise
            finally:
                self._session = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Repository calls must run inside atomic()")
        return self._session

    # Row conversion -----------------------------------------------------
    def _to_account(self, row: AccountModel) -> Account:
        return Account(
            id=row.id,
            account_number=row.account_number,
            name=row.name,
            balance=_from_cents(row.balance),
            created_at=_as_utc(row.created_at),
        )

    def _to_transaction(self, row: LedgerTransactionModel) -> Transaction:
        common = {
            "id": row.id,
            "amount": _from_cents(row.amount),
            "created_at": _as_utc(row.created_at),
            "sequence": row.sequence,
        }
        kind = TransactionType(row.type)
        if kind is TransactionType.DEPOSIT:
            return Deposit(to_account_id=row.to_account_id, **common)
        if kind is TransactionType.WITHDRAW:
            return Withdrawal(from_account_id=row.from_account_id, **common)
        return Transfer(
            from_account_id=row.from_account_id,
            to_account_id=row.to_account_id,
            **common,
        )

    # Account operations -------------------------------------------------
    def get_account(self, account_id: UUID) -> Optional[Account]:
        row = self.session.get(AccountModel, account_id)
        return self._to_account(row) if row is not None else None

    def get_account_by_number(self, account_number: int) -> Optional[Account]:
        stmt = select(AccountModel).where(AccountModel.account_number == account_number)
        row = self.session.exec(stmt).first()
        return self._to_account(row) if row is not None else None

    def add_account(self, account: Account) -> None:
        self.session.add(
            AccountModel(
                id=account.id,
                account_number=account.account_number,
                name=account.name,
                balance=_to_cents(account.balance),
                created_at=account.created_at,
            )
        )
        self.session.flush()

    def save_account(self, account: Account) -> None:
        row = self.session.get(AccountModel, account.id)
        if row is None:
            raise KeyError(account.id)
        row.balance = _to_cents(account.balance)
        self.session.add(row)
        self.session.flush()

    def list_accounts(self) -> list[Account]:
        stmt = select(AccountModel).order_by(AccountModel.account_number)
        return [self._to_account(row) for row in self.session.exec(stmt)]

    def count_accounts(self) -> int:
        return self.session.exec(select(func.count()).select_from(AccountModel)).one()

    # Transactions -------------------------------------------------------
    def next_sequence(self) -> int:
        current = self.session.exec(select(func.max(LedgerTransactionModel.sequence))).one()
        return (current or 0) + 1

    def add_transaction(self, transaction: Transaction) -> None:
        self.session.add(
            LedgerTransactionModel(
                id=transaction.id,
                sequence=transaction.sequence,
                type=transaction.type.value,
                from_account_id=transaction.from_account_id,
                to_account_id=transaction.to_account_id,
                amount=_to_cents(transaction.amount),
                created_at=transaction.created_at,
            )
        )
        self.session.flush()

    def list_transactions(self) -> list[Transaction]:
        stmt = select(LedgerTransactionModel).order_by(LedgerTransactionModel.sequence)
        return [self._to_transaction(row) for row in self.session.exec(stmt)]

    def recent_transactions(self, limit: int) -> list[Transaction]:
        stmt = (
            select(LedgerTransactionModel)
            .order_by(LedgerTransactionModel.sequence.desc())
            .limit(limit)
        )
        return [self._to_transaction(row) for row in self.session.exec(stmt)]
