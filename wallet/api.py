import logging
import os
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import Settings, get_settings
from .models import (
    AwardRequest, RedeemRequest, WithdrawRequest, ConvertRequest,
    Account, OperationResult, LedgerHistoryResponse, ReconciliationReport,
)
from .service import WalletService, WalletServiceError

logger = logging.getLogger(__name__)


def _bad_request(error: WalletServiceError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": error.code, "message": str(error)},
    )


def create_app(
    service: Optional[WalletService] = None,
    settings: Optional[Settings] = None,
    root_path: str = "",
) -> FastAPI:
    settings = settings or get_settings()
    wallet_service = service or WalletService()

    app = FastAPI(
        title="Points Wallet API",
        description="Points and money balances with an append-only ledger",
        version="1.0.0",
        root_path=root_path,
    )
    app.state.wallet_service = wallet_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "ok", "service": "points-wallet"}

    @app.get("/accounts/{account_id}/balance", response_model=Account, tags=["Accounts"])
    def get_balance(account_id: str) -> Account:
        return wallet_service.get_balance(account_id)

    @app.get("/accounts/{account_id}/ledger", response_model=LedgerHistoryResponse, tags=["Accounts"])
    def get_ledger(
        account_id: str,
        limit: int = Query(50, ge=1, le=500),
        offset: int = Query(0, ge=0),
    ) -> LedgerHistoryResponse:
        return wallet_service.get_ledger_history(account_id, limit, offset)

    @app.post("/accounts/{account_id}/award", response_model=OperationResult, tags=["Operations"])
    def award(account_id: str, request: AwardRequest) -> OperationResult:
        try:
            return wallet_service.award(account_id, request.currency, request.amount, request.reason)
        except WalletServiceError as e:
            raise _bad_request(e)

    @app.post("/accounts/{account_id}/redeem", response_model=OperationResult, tags=["Operations"])
    def redeem(account_id: str, request: RedeemRequest) -> OperationResult:
        try:
            return wallet_service.redeem(account_id, request.points, request.reason)
        except WalletServiceError as e:
            raise _bad_request(e)

    @app.post("/accounts/{account_id}/withdraw", response_model=OperationResult, tags=["Operations"])
    def withdraw(account_id: str, request: WithdrawRequest) -> OperationResult:
        try:
            return wallet_service.withdraw(account_id, request.amount, request.reason)
        except WalletServiceError as e:
            raise _bad_request(e)

    @app.post("/accounts/{account_id}/convert", response_model=OperationResult, tags=["Operations"])
    def convert(account_id: str, request: ConvertRequest) -> OperationResult:
        try:
            return wallet_service.convert(account_id, request.direction, request.amount, request.reason)
        except WalletServiceError as e:
            raise _bad_request(e)

    @app.get("/reconciliation", response_model=ReconciliationReport, tags=["System"])
    def reconcile(account_id: Optional[str] = None) -> ReconciliationReport:
        return wallet_service.reconcile(account_id)

    # mounted last so it never shadows the API routes
    if settings.static_dir and os.path.isdir(settings.static_dir):
        logger.info("Serving static files from %s", settings.static_dir)
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app
