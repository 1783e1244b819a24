import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api.exceptions import register_exception_handlers
from .api.routes import dashboard_router, router as accounts_router, transactions_router
from .core.config import Settings, get_settings
from .core.db import create_engine_for_url, init_db
from .models import HealthResponse
from .services import InMemoryLedgerRepository, LedgerService, SqlLedgerRepository


def build_ledger_service(settings: Settings) -> LedgerService:
    if settings.database_url:
        engine = create_engine_for_url(settings.database_url)
        init_db(engine)
        repository = SqlLedgerRepository(engine)
    else:
        repository = InMemoryLedgerRepository()
    return LedgerService(
        repository,
        recent_limit=settings.recent_transactions_limit,
        max_name_length=settings.max_name_length,
    )


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[LedgerService] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ledger = service or build_ledger_service(settings)
        app.state.ledger = ledger
        logging.getLogger(__name__).info(
            "ledger.started",
            extra={"durable": ledger.repository.durable},
        )
        yield
        engine = getattr(ledger.repository, "engine", None)
        if engine is not None:
            engine.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.include_router(accounts_router)
    app.include_router(transactions_router)
    app.include_router(dashboard_router)
    register_exception_handlers(app)

    @app.get("/health", response_model=HealthResponse)
    def read_health() -> HealthResponse:
        # In-memory state does not survive a restart; callers can check here.
        durable = app.state.ledger.repository.durable
        return HealthResponse(
            status="ok",
            storage="sql" if durable else "memory",
            durable=durable,
        )

    return app


app = create_app()
