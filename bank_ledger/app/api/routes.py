from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..core.dependencies import get_ledger_service
from ..models import (
    Account,
    AccountCreate,
    AccountResponse,
    BalanceChangeResponse,
    CounterpartyResponse,
    DashboardStatsResponse,
    MoneyMovementRequest,
    TransactionDetails,
    TransactionResponse,
    TransferRequest,
    TransferResponse,
)
from ..services import LedgerService


def _dollars(value: Decimal) -> str:
    return f"${value:.2f}"


def _account_response(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        account_number=account.account_number,
        name=account.name,
        balance=account.balance,
        created_at=account.created_at,
    )


def _transaction_response(details: TransactionDetails) -> TransactionResponse:
    transaction = details.transaction
    return TransactionResponse(
        id=transaction.id,
        type=transaction.type.value,
        from_account_id=transaction.from_account_id,
        to_account_id=transaction.to_account_id,
        amount=transaction.amount,
        created_at=transaction.created_at,
        from_account=(
            CounterpartyResponse(
                account_number=details.from_account.account_number,
                name=details.from_account.name,
            )
            if details.from_account
            else None
        ),
        to_account=(
            CounterpartyResponse(
                account_number=details.to_account.account_number,
                name=details.to_account.name,
            )
            if details.to_account
            else None
        ),
    )


router = APIRouter(prefix="/api/accounts", tags=["accounts"])

@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    payload: AccountCreate,
    service: LedgerService = Depends(get_ledger_service),
) -> AccountResponse:
    account = service.create_account(payload.account_number, payload.name, payload.balance)
    return _account_response(account)

@router.get("", response_model=list[AccountResponse])
def list_accounts(
    service: LedgerService = Depends(get_ledger_service),
) -> list[AccountResponse]:
    return [_account_response(account) for account in service.list_accounts()]

@router.post("/transfer", response_model=TransferResponse)
def create_transfer(
    payload: TransferRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> TransferResponse:
    source, dest = service.transfer(
        payload.from_account_number,
        payload.to_account_number,
        payload.amount,
    )
    return TransferResponse(
        from_account=_account_response(source),
        to_account=_account_response(dest),
        message=(
            f"Transfer successful! Sender Balance: {_dollars(source.balance)}"
            f" | Receiver Balance: {_dollars(dest.balance)}"
        ),
    )

@router.get("/{account_number}", response_model=AccountResponse)
def get_account(
    account_number: int,
    service: LedgerService = Depends(get_ledger_service),
) -> AccountResponse:
    account = service.get_account(account_number)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Account {account_number} not found",
        )
    return _account_response(account)

@router.post("/{account_number}/deposit", response_model=BalanceChangeResponse)
def deposit(
    account_number: int,
    payload: MoneyMovementRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> BalanceChangeResponse:
    result = service.deposit(account_number, payload.amount)
    return BalanceChangeResponse(
        account=_account_response(result.account),
        new_balance=result.new_balance,
        message=f"Deposit successful! New Balance: {_dollars(result.new_balance)}",
    )

@router.post("/{account_number}/withdraw", response_model=BalanceChangeResponse)
def withdraw(
    account_number: int,
    payload: MoneyMovementRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> BalanceChangeResponse:
    result = service.withdraw(account_number, payload.amount)
    return BalanceChangeResponse(
        account=_account_response(result.account),
        new_balance=result.new_balance,
        message=f"Withdrawal successful! New Balance: {_dollars(result.new_balance)}",
    )

transactions_router = APIRouter(prefix="/api/transactions", tags=["transactions"])

@transactions_router.get("/recent", response_model=list[TransactionResponse])
def recent_transactions(
    limit: Optional[int] = None,
    service: LedgerService = Depends(get_ledger_service),
) -> list[TransactionResponse]:
    return [_transaction_response(details) for details in service.recent_transactions(limit)]

dashboard_router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

@dashboard_router.get("/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
    service: LedgerService = Depends(get_ledger_service),
) -> DashboardStatsResponse:
    stats = service.dashboard_stats()
    return DashboardStatsResponse(
        total_accounts=stats.total_accounts,
        total_deposits=stats.total_deposits,
        total_withdrawals=stats.total_withdrawals,
        active_transfers=stats.active_transfers,
        total_deposits_display=f"${stats.total_deposits:,.2f}",
        total_withdrawals_display=f"${stats.total_withdrawals:,.2f}",
    )

__all__ = ["router", "transactions_router", "dashboard_router"]
