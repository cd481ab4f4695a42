# tawsila_admin/api/v1/endpoints/finance.py
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from tawsila_admin.api.dependencies import get_api_client, get_filters, get_locale
from tawsila_admin.core.config import settings
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.models.finance import (
    CreateAdjustmentRequest, CreateSettlementRequest, TransactionFilters
)
from tawsila_admin.models.pagination import Page
from tawsila_admin.services import finance_service

router = APIRouter(tags=["finance"])


def _includes(include: Optional[str]) -> List[str]:
    return [part.strip() for part in (include or "").split(",") if part.strip()]


def _described(result: Page, describe, locale: str) -> dict:
    page = result.to_dict()
    page["data"] = [describe(record, locale) for record in result.data]
    return page


# ============================================
# Own wallet
# ============================================

@router.get("/finance/my/wallet")
async def my_wallet(client: ApiClient = Depends(get_api_client)):
    return {"data": await finance_service.fetch_my_wallet(client)}


@router.get("/finance/my/summary")
async def my_summary(client: ApiClient = Depends(get_api_client)):
    return {"data": await finance_service.fetch_my_summary(client)}


@router.get("/finance/my/transactions")
async def my_transactions(
        filters: TransactionFilters = Depends(),
        client: ApiClient = Depends(get_api_client)
):
    result = await finance_service.fetch_my_transactions(client, filters)
    return result.to_dict()


# ============================================
# Wallets
# ============================================

@router.get("/wallets")
async def list_wallets(
        page: int = Query(1, ge=1),
        per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        include: Optional[str] = None,
        filters: Dict[str, str] = Depends(get_filters),
        locale: str = Depends(get_locale),
        client: ApiClient = Depends(get_api_client)
):
    result = await finance_service.fetch_wallets(client, page, per_page, filters, _includes(include))
    return _described(result, finance_service.describe_wallet, locale)


@router.get("/wallets/{wallet_id}")
async def get_wallet(wallet_id: int, include: Optional[str] = None, locale: str = Depends(get_locale),
                     client: ApiClient = Depends(get_api_client)):
    wallet = await finance_service.fetch_wallet(client, wallet_id, _includes(include))
    return {"data": finance_service.describe_wallet(wallet, locale)}


@router.get("/wallets/{wallet_id}/transactions")
async def wallet_transactions(
        wallet_id: int,
        filters: TransactionFilters = Depends(),
        client: ApiClient = Depends(get_api_client)
):
    result = await finance_service.fetch_wallet_transactions(client, wallet_id, filters)
    return result.to_dict()


@router.post("/wallets/{wallet_id}/adjustments", status_code=status.HTTP_201_CREATED)
async def create_adjustment(
        wallet_id: int,
        adjustment: CreateAdjustmentRequest,
        client: ApiClient = Depends(get_api_client)
):
    return {"data": await finance_service.create_adjustment(client, wallet_id, adjustment)}


@router.post("/wallets/{wallet_id}/settlements", status_code=status.HTTP_201_CREATED)
async def create_settlement(
        wallet_id: int,
        settlement: CreateSettlementRequest,
        client: ApiClient = Depends(get_api_client)
):
    return {"data": await finance_service.create_settlement(client, wallet_id, settlement)}


# ============================================
# Transactions
# ============================================

@router.get("/transactions")
async def list_transactions(
        filters: TransactionFilters = Depends(),
        client: ApiClient = Depends(get_api_client)
):
    result = await finance_service.fetch_transactions(client, filters)
    return result.to_dict()


@router.get("/transactions/{transaction_id}")
async def get_transaction(transaction_id: int, client: ApiClient = Depends(get_api_client)):
    return {"data": await finance_service.fetch_transaction(client, transaction_id)}


# ============================================
# Settlements
# ============================================

@router.get("/settlements")
async def list_settlements(
        page: int = Query(1, ge=1),
        per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        include: Optional[str] = None,
        filters: Dict[str, str] = Depends(get_filters),
        locale: str = Depends(get_locale),
        client: ApiClient = Depends(get_api_client)
):
    result = await finance_service.fetch_settlements(client, page, per_page, filters, _includes(include))
    return _described(result, finance_service.describe_settlement, locale)


@router.get("/settlements/{settlement_id}")
async def get_settlement(settlement_id: int, include: Optional[str] = None, locale: str = Depends(get_locale),
                         client: ApiClient = Depends(get_api_client)):
    settlement = await finance_service.fetch_settlement(client, settlement_id, _includes(include))
    return {"data": finance_service.describe_settlement(settlement, locale)}


@router.post("/settlements/{settlement_id}/confirm")
async def confirm_settlement(settlement_id: int, client: ApiClient = Depends(get_api_client)):
    return {"data": await finance_service.confirm_settlement(client, settlement_id)}


@router.post("/settlements/{settlement_id}/cancel")
async def cancel_settlement(settlement_id: int, client: ApiClient = Depends(get_api_client)):
    return {"data": await finance_service.cancel_settlement(client, settlement_id)}
