# tawsila_admin/services/finance_service.py
"""
Wallets, transactions, adjustments and settlements.

Settlements and wallets are filtered through the generic filter builder;
transaction lists take plain query parameters.
"""
import logging
from typing import Any, Dict, Iterable, Mapping, Optional
from urllib.parse import urlencode

from tawsila_admin.core.config import settings
from tawsila_admin.core.errors import MessageError
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.models.finance import (
    CreateAdjustmentRequest, CreateSettlementRequest, TransactionFilters
)
from tawsila_admin.models.pagination import Page, page_from_payload
from tawsila_admin.services import filter_query

logger = logging.getLogger(__name__)

WALLET_INCLUDES = ("walletable", "settlements")
SETTLEMENT_INCLUDES = ("settleble", "items", "items.transaction", "items.order", "confirmedBy", "createdBy")


def _require_data(response: Dict[str, Any], message: str) -> Dict[str, Any]:
    data = response.get("data")
    if not data:
        raise MessageError(response.get("message") or message)
    return data


def _valid_includes(includes: Optional[Iterable[str]], allowed: Iterable[str]) -> str:
    allowed = set(allowed)
    requested = list(includes or [])
    selected = [include for include in requested if include in allowed]
    if len(selected) != len(requested):
        logger.warning(f"Ignoring unknown includes: {sorted(set(requested) - allowed)}")
    return ",".join(selected)


def _list_endpoint(path: str, page: int, per_page: int, filter_part: str = "", include: str = "") -> str:
    endpoint = f"{path}?page={page}&per_page={per_page}{filter_part}"
    if include:
        endpoint += f"&include={include}"
    return endpoint


def _with_query(path: str, params: Dict[str, Any]) -> str:
    query = urlencode({key: value for key, value in params.items() if value not in (None, "")})
    return f"{path}?{query}" if query else path


# ============================================
# User's own wallet
# ============================================

async def fetch_my_wallet(client: ApiClient) -> Dict[str, Any]:
    response = await client.get("/finance/my/wallet")
    return _require_data(response, "No wallet data returned")


async def fetch_my_summary(client: ApiClient) -> Dict[str, Any]:
    response = await client.get("/finance/my/summary")
    return _require_data(response, "No summary data returned")


async def fetch_my_transactions(client: ApiClient, filters: Optional[TransactionFilters] = None) -> Page:
    filters = filters or TransactionFilters()
    params = filters.model_dump(exclude={"wallet_id"})
    response = await client.get(_with_query("/finance/my/transactions", params))
    return page_from_payload(response, filters.per_page)


# ============================================
# Admin wallets
# ============================================

async def fetch_wallets(
        client: ApiClient,
        page: int = 1,
        per_page: Optional[int] = None,
        filters: Optional[Mapping[str, Any]] = None,
        includes: Optional[Iterable[str]] = None
) -> Page:
    """Requires the list-wallets permission"""
    per_page = per_page or settings.DEFAULT_PAGE_SIZE
    filter_part = filter_query.build_filter_query(filters, filter_query.WALLETS)
    include = _valid_includes(includes, WALLET_INCLUDES)

    response = await client.get(_list_endpoint("/wallets", page, per_page, filter_part, include))
    return page_from_payload(response, per_page)


async def fetch_wallet(client: ApiClient, wallet_id: int, includes: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    include = _valid_includes(includes, WALLET_INCLUDES)
    response = await client.get(_with_query(f"/wallets/{wallet_id}", {"include": include}))
    return _require_data(response, "No wallet data returned")


async def fetch_wallet_transactions(
        client: ApiClient,
        wallet_id: int,
        filters: Optional[TransactionFilters] = None
) -> Page:
    filters = filters or TransactionFilters()
    params = filters.model_dump(exclude={"wallet_id"})
    response = await client.get(_with_query(f"/wallets/{wallet_id}/transactions", params))
    return page_from_payload(response, filters.per_page)


async def create_adjustment(client: ApiClient, wallet_id: int, adjustment: CreateAdjustmentRequest) -> Dict[str, Any]:
    """Credit or debit a wallet; the platform refuses adjustments on one's own wallet"""
    response = await client.post(f"/wallets/{wallet_id}/adjustments", json=adjustment.model_dump())
    transaction = _require_data(response, "Failed to create adjustment")
    logger.info(f"Created {adjustment.type} adjustment of {adjustment.amount} on wallet {wallet_id}")
    return transaction


# ============================================
# Admin transactions
# ============================================

async def fetch_transactions(client: ApiClient, filters: Optional[TransactionFilters] = None) -> Page:
    filters = filters or TransactionFilters()
    response = await client.get(_with_query("/transactions", filters.model_dump()))
    return page_from_payload(response, filters.per_page)


async def fetch_transaction(client: ApiClient, transaction_id: int) -> Dict[str, Any]:
    response = await client.get(f"/transactions/{transaction_id}")
    return _require_data(response, "No transaction data returned")


# ============================================
# Settlements
# ============================================

async def create_settlement(client: ApiClient, wallet_id: int, settlement: CreateSettlementRequest) -> Dict[str, Any]:
    response = await client.post(
        f"/wallets/{wallet_id}/settlements",
        json=settlement.model_dump(exclude_none=True),
    )
    created = _require_data(response, "Failed to create settlement")
    logger.info(f"Created settlement {created.get('settlement_number')} for wallet {wallet_id}")
    return created


async def fetch_settlements(
        client: ApiClient,
        page: int = 1,
        per_page: Optional[int] = None,
        filters: Optional[Mapping[str, Any]] = None,
        includes: Optional[Iterable[str]] = None
) -> Page:
    """Requires the list-settlements permission"""
    per_page = per_page or settings.DEFAULT_PAGE_SIZE
    filter_part = filter_query.build_filter_query(filters, filter_query.SETTLEMENTS)
    include = _valid_includes(includes, SETTLEMENT_INCLUDES)

    response = await client.get(_list_endpoint("/settlements", page, per_page, filter_part, include))
    return page_from_payload(response, per_page)


async def fetch_settlement(client: ApiClient, settlement_id: int,
                           includes: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    include = _valid_includes(includes, SETTLEMENT_INCLUDES)
    response = await client.get(_with_query(f"/settlements/{settlement_id}", {"include": include}))
    return _require_data(response, "No settlement data returned")


async def confirm_settlement(client: ApiClient, settlement_id: int) -> Dict[str, Any]:
    response = await client.post(f"/settlements/{settlement_id}/confirm")
    return _require_data(response, "Failed to confirm settlement")


async def cancel_settlement(client: ApiClient, settlement_id: int) -> Dict[str, Any]:
    response = await client.post(f"/settlements/{settlement_id}/cancel")
    return _require_data(response, "Failed to cancel settlement")


# ============================================
# Display helpers
# ============================================

def owner_type(polymorphic_type: Optional[str]) -> str:
    """'user', 'vendor' or 'unknown' for a walletable/settleble type such as App\\Models\\Vendor"""
    polymorphic_type = polymorphic_type or ""
    if "User" in polymorphic_type:
        return "user"
    if "Vendor" in polymorphic_type:
        return "vendor"
    return "unknown"


def display_name(owner: Optional[Dict[str, Any]], owner_id: Any, locale: str) -> str:
    if not owner:
        return f"#{owner_id}"
    if locale == "ar" and owner.get("name_ar"):
        return owner["name_ar"]
    if owner.get("name_en"):
        return owner["name_en"]
    if owner.get("name"):
        return owner["name"]
    return owner.get("email") or f"#{owner_id}"


def wallet_owner_name(wallet: Dict[str, Any], locale: str) -> str:
    return display_name(wallet.get("walletable"), wallet.get("walletable_id"), locale)


def settlement_party_name(settlement: Dict[str, Any], locale: str) -> str:
    return display_name(settlement.get("settleble"), settlement.get("settleble_id"), locale)


def settlement_party_role(settlement: Dict[str, Any], locale: str) -> Optional[str]:
    """Role slug of the first role of a user settleble"""
    roles = (settlement.get("settleble") or {}).get("roles") or []
    if not roles:
        return None
    role = roles[0]
    return role.get("slug_ar") if locale == "ar" else role.get("slug_en")


def describe_wallet(wallet: Dict[str, Any], locale: str) -> Dict[str, Any]:
    """Wallet with the owner kind and a display name for the list and detail views"""
    return {
        **wallet,
        "owner_type": owner_type(wallet.get("walletable_type")),
        "owner_name": wallet_owner_name(wallet, locale),
    }


def describe_settlement(settlement: Dict[str, Any], locale: str) -> Dict[str, Any]:
    return {
        **settlement,
        "party_type": owner_type(settlement.get("settleble_type")),
        "party_name": settlement_party_name(settlement, locale),
        "party_role": settlement_party_role(settlement, locale),
    }
