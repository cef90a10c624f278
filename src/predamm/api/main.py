"""FastAPI app exposing the AMM, events, users and positions."""

from __future__ import annotations

from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, Callable

import structlog
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from predamm import services
from predamm.amm.market import Amm
from predamm.amm.params import AmmParams
from predamm.api.schemas import (
    BalanceResponse,
    BuyRequest,
    DepositRequest,
    ErrorResponse,
    EventCreateRequest,
    HealthResponse,
    QuoteBuyRequest,
    QuoteSellRequest,
    SellRequest,
    UserCreateRequest,
)
from predamm.config import Settings, configure_logging, get_settings
from predamm.errors import AmmError
from predamm.models import (
    Event,
    OutcomePrice,
    QuoteResult,
    TokenAllocation,
    Trade,
    TradeResult,
    User,
)
from predamm.retry import run_with_retry
from predamm.storage.db import Store

log = structlog.get_logger(__name__)

# Set by run_api() so the app loads the same profile.
_config_profile: str | None = None

_ERRORS = {
    400: {"description": "Rejected request", "model": ErrorResponse},
    404: {"description": "Not found", "model": ErrorResponse},
    409: {"description": "Concurrent update, retry", "model": ErrorResponse},
}

router = APIRouter()


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_amm(request: Request) -> Amm:
    return Amm(request.app.state.store, request.app.state.amm_params)


def _retrying(request: Request, fn: Callable[[], Any]) -> Any:
    """Retry transaction conflicts/timeouts per [trading] settings."""
    settings: Settings = request.app.state.settings
    return run_with_retry(fn, retries=settings.retry_attempts, base_delay=settings.retry_base_delay_sec)


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")


# --- Events ---
@router.post("/events", response_model=Event, status_code=201, responses=_ERRORS)
def events_create(body: EventCreateRequest, request: Request, store: Store = Depends(get_store)) -> Event:
    return services.create_event(
        store,
        body.question,
        body.outcomes,
        wallet_address=body.wallet_address,
        unique_id=body.unique_id,
        description=body.description,
        resolution_criteria=body.resolution_criteria,
        image=body.image,
        expiry_date=body.expiry_date,
        community=body.community,
        params=request.app.state.amm_params,
    )


@router.get("/events", response_model=list[Event])
def events_list(
    status: str | None = Query(None, description="ACTIVE or RESOLVED"),
    community: str | None = Query(None),
    user_id: int | None = Query(None),
    sort_by: str | None = Query(None, description="column:asc|desc, e.g. volume:desc"),
    limit: int = Query(10, ge=1, le=100),
    page: int = Query(1, ge=1),
    store: Store = Depends(get_store),
) -> list[Event]:
    """Events with outcomes, trade count, distinct traders and volume."""
    return services.list_events(
        store, status=status, community=community, user_id=user_id, sort_by=sort_by, limit=limit, page=page
    )


@router.get("/events/{event_id}", response_model=Event, responses=_ERRORS)
def events_get(event_id: int, store: Store = Depends(get_store)) -> Event:
    return services.get_event(store, event_id)


@router.get("/events/{event_id}/trades", response_model=list[Trade])
def events_trades(
    event_id: int,
    limit: int = Query(50, ge=1, le=500),
    store: Store = Depends(get_store),
) -> list[Trade]:
    return services.list_trades(store, event_id=event_id, limit=limit)


# --- Market ---
@router.post("/events/{event_id}/initialize", response_model=list[OutcomePrice], responses=_ERRORS)
def market_initialize(event_id: int, amm: Amm = Depends(get_amm)) -> list[OutcomePrice]:
    """Reset every outcome pool to the seed supply/liquidity. Destructive."""
    return amm.initialize_market(event_id)


@router.get("/events/{event_id}/prices", response_model=list[OutcomePrice], responses=_ERRORS)
def market_prices(
    event_id: int,
    oracle_price: Decimal | None = Query(None, description="External reference price, echoed back"),
    amm: Amm = Depends(get_amm),
) -> list[OutcomePrice]:
    return amm.get_prices(event_id, oracle_price=oracle_price)


@router.get("/events/{event_id}/market", response_model=list[OutcomePrice], responses=_ERRORS)
def market_overview(event_id: int, amm: Amm = Depends(get_amm)) -> list[OutcomePrice]:
    return amm.get_market_prices(event_id)


@router.get("/events/{event_id}/outcomes/{outcome_id}/price", response_model=OutcomePrice, responses=_ERRORS)
def market_outcome_price(event_id: int, outcome_id: int, amm: Amm = Depends(get_amm)) -> OutcomePrice:
    return amm.get_outcome_price(event_id, outcome_id)


@router.post("/events/{event_id}/quote/buy", response_model=QuoteResult, responses=_ERRORS)
def market_quote_buy(event_id: int, body: QuoteBuyRequest, amm: Amm = Depends(get_amm)) -> QuoteResult:
    return amm.quote_buy(event_id, body.outcome_id, body.amount)


@router.post("/events/{event_id}/quote/sell", response_model=QuoteResult, responses=_ERRORS)
def market_quote_sell(event_id: int, body: QuoteSellRequest, amm: Amm = Depends(get_amm)) -> QuoteResult:
    return amm.quote_sell(event_id, body.outcome_id, body.shares)


@router.post("/events/{event_id}/buy", response_model=TradeResult, responses=_ERRORS)
def market_buy(event_id: int, body: BuyRequest, request: Request, amm: Amm = Depends(get_amm)) -> TradeResult:
    return _retrying(request, lambda: amm.buy(event_id, body.outcome_id, body.amount, body.user_id))


@router.post("/events/{event_id}/sell", response_model=TradeResult, responses=_ERRORS)
def market_sell(event_id: int, body: SellRequest, request: Request, amm: Amm = Depends(get_amm)) -> TradeResult:
    return _retrying(request, lambda: amm.sell(event_id, body.outcome_id, body.shares, body.user_id))


# --- Users ---
@router.post("/users", response_model=User, status_code=201, responses=_ERRORS)
def users_create(body: UserCreateRequest, store: Store = Depends(get_store)) -> User:
    return services.create_user(store, body.username, body.wallet_address, body.playmoney)


@router.get("/users/{user_id}", response_model=User, responses=_ERRORS)
def users_get(user_id: int, store: Store = Depends(get_store)) -> User:
    return services.get_user(store, user_id)


@router.post("/users/{user_id}/deposit", response_model=User, responses=_ERRORS)
def users_deposit(user_id: int, body: DepositRequest, request: Request, store: Store = Depends(get_store)) -> User:
    return _retrying(request, lambda: services.deposit(store, user_id, body.amount))


@router.get("/wallets/{wallet_address}/balance", response_model=BalanceResponse, responses=_ERRORS)
def wallet_balance(wallet_address: str, store: Store = Depends(get_store)) -> BalanceResponse:
    return BalanceResponse(playmoney=services.get_balance_by_wallet(store, wallet_address))


# --- Positions ---
@router.get("/allocations", response_model=list[TokenAllocation])
def allocations_list(
    user_id: int | None = Query(None),
    outcome_id: int | None = Query(None),
    limit: int = Query(10, ge=1, le=100),
    page: int = Query(1, ge=1),
    store: Store = Depends(get_store),
) -> list[TokenAllocation]:
    return services.list_allocations(store, user_id=user_id, outcome_id=outcome_id, limit=limit, page=page)


@router.get("/allocations/{allocation_id}", response_model=TokenAllocation, responses=_ERRORS)
def allocations_get(allocation_id: int, store: Store = Depends(get_store)) -> TokenAllocation:
    return services.get_allocation(store, allocation_id)


def create_app(store: Store | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Build the app. With no store, the lifespan opens one from settings and
    closes it on shutdown; a store passed in (tests) is used as is.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if app.state.store is None:
            owned = Store.from_settings(app.state.settings)
            app.state.store = owned
            log.info("store_opened", db_path=str(owned.db_path))
        yield
        if owned is not None:
            owned.close()
            app.state.store = None

    settings = settings or get_settings(_config_profile)
    app = FastAPI(title="predamm API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.state.settings = settings
    app.state.store = store
    app.state.amm_params = AmmParams.from_settings(settings)

    @app.exception_handler(AmmError)
    async def amm_error(request: Request, exc: AmmError) -> JSONResponse:
        if exc.retryable:
            log.warning("request_failed", path=request.url.path, code=exc.code, error=exc.message)
        return _error_json(exc.code, exc.message, exc.status_code)

    app.include_router(router)
    return app


app = create_app()


def run_api(
    host: str | None = None,
    port: int | None = None,
    profile: str | None = None,
    db_path: str | None = None,
) -> None:
    global _config_profile
    _config_profile = profile
    settings = get_settings(profile)
    if db_path:
        settings.storage["db_path"] = db_path
    configure_logging(settings)
    import uvicorn

    uvicorn.run(
        create_app(settings=settings),
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=False,
    )
