from fastapi import Request

from ..services import LedgerService


def get_ledger_service(request: Request) -> LedgerService:
    return request.app.state.ledger
