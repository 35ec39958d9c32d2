# catalog_search/api/v1/routers/search.py

from fastapi import APIRouter, Depends, Query
from typing import Annotated, Literal, Optional
import logging
import time

from catalog_search.api.deps import search_service
from catalog_search.core.versioning import resolve_version
from catalog_search.domain.models.search import SearchResponse, SuggestionsResponse
from catalog_search.domain.services.search_svc import SearchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])

VersionDep = Annotated[str, Depends(resolve_version)]


@router.get("/search", response_model=SearchResponse, summary="Ranked catalog search (regex fallback on engine errors)")
async def search_products(
    version: VersionDep,
    q: str = Query("", description="Free-text query"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    category: Optional[str] = Query(None),
    minPrice: Optional[float] = Query(None, ge=0),
    maxPrice: Optional[float] = Query(None, ge=0),
    sortBy: str = Query("relevance", description="relevance | price | newest | sales"),
    sortOrder: Literal["asc", "desc"] = Query("desc"),
    suggest: bool = Query(False, description="Lightweight mode: capped page, no snippets"),
    svc: SearchService = Depends(search_service),
):
    t0 = time.perf_counter()
    outcome = await svc.search(
        q, page=page, limit=limit, category=category, minPrice=minPrice, maxPrice=maxPrice,
        sortBy=sortBy, sortOrder=sortOrder, suggest=suggest, version=version,
    )
    logger.info(
        "Response: search q=%r engine=%s degraded=%s total=%s returned=%s in %.4fs",
        outcome.response.query, outcome.engine, outcome.degraded,
        outcome.response.total, len(outcome.response.products), time.perf_counter() - t0,
    )
    return outcome.response


@router.get("/search/suggestions", response_model=SuggestionsResponse, summary="Autocomplete suggestions")
async def search_suggestions(
    version: VersionDep,
    q: str = Query(""),
    limit: int = Query(12, ge=1, le=50),
    svc: SearchService = Depends(search_service),
):
    outcome = await svc.suggestions(q, limit=limit, version=version)
    if outcome.degraded:
        logger.warning("Response: suggestions degraded q=%r err=%s", q, outcome.error)
    return outcome.response
