# tawsila_admin/models/pagination.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tawsila_admin.core.config import settings


class PaginationLinks(BaseModel):
    first: Optional[str] = None
    last: Optional[str] = None
    prev: Optional[str] = None
    next: Optional[str] = None


class PaginationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = 1
    from_: Optional[int] = Field(default=None, alias="from")
    last_page: int = 1
    per_page: int = settings.DEFAULT_PAGE_SIZE
    to: Optional[int] = None
    total: int = 0


class Page(BaseModel):
    """One page of records as returned by a platform list endpoint"""
    data: List[Dict[str, Any]] = Field(default_factory=list)
    meta: PaginationMeta = Field(default_factory=PaginationMeta)
    links: Optional[PaginationLinks] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=False)


def _int_or(value: Any, default: Optional[int]) -> Optional[int]:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def extract_pagination_meta(meta: Optional[Dict[str, Any]], per_page: Optional[int] = None) -> PaginationMeta:
    """Pagination meta with defaults for every field the platform left out"""
    fallback_per_page = per_page or settings.DEFAULT_PAGE_SIZE
    meta = meta or {}

    return PaginationMeta(
        current_page=_int_or(meta.get("current_page"), 1),
        from_=_int_or(meta.get("from"), None),
        last_page=_int_or(meta.get("last_page"), 1),
        per_page=_int_or(meta.get("per_page"), fallback_per_page),
        to=_int_or(meta.get("to"), None),
        total=_int_or(meta.get("total"), 0),
    )


def page_from_payload(payload: Dict[str, Any], per_page: Optional[int] = None) -> Page:
    """Build a Page from a raw list response (data, meta and links at root level)"""
    links = payload.get("links")
    data = payload.get("data") or []

    return Page(
        data=data if isinstance(data, list) else [],
        meta=extract_pagination_meta(payload.get("meta"), per_page),
        links=PaginationLinks(**links) if isinstance(links, dict) else None,
    )
