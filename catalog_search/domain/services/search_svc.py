from typing import Optional, Type, TypeVar
import logging
import time

from pydantic import BaseModel, ValidationError

from catalog_search.core.config import Settings, get_settings
from catalog_search.domain.models.search import (
    RankingWeights,
    SearchOptions,
    SearchOutcome,
    SearchPage,
    SearchResponse,
    SuggestionOutcome,
    SuggestionsResponse,
    SuggestionWeights,
)
from catalog_search.domain.repositories.catalog_repo import CatalogRepo
from catalog_search.domain.repositories.search_cache_repo import SearchCacheRepo
from catalog_search.domain.services.constants import (
    ENGINE_NONE,
    ENGINE_RANKING,
    ENGINE_REGEX_FALLBACK,
    MSG_EMPTY_QUERY,
    MSG_FAILED,
    MSG_FALLBACK,
    MSG_RANKED,
)
from catalog_search.domain.services.fallback_svc import regex_search
from catalog_search.domain.services.image_normalizer_svc import ImageNormalizer
from catalog_search.domain.services.ranking_svc import ranked_search
from catalog_search.domain.services.suggestion_svc import suggest

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class SearchService:
    """
    Single entry point for catalog search and autocomplete.

    - search(): ranking engine, regex fallback on any engine error
    - suggestions(): suggestion scorer, empty list on any error
    Neither raises for store or media failures; the outcome carries
    the engine used and a degraded flag.
    """

    def __init__(
        self,
        repo: CatalogRepo,
        normalizer: ImageNormalizer,
        *,
        redis=None,
        settings: Optional[Settings] = None,
        ranking_weights: RankingWeights = RankingWeights(),
        suggestion_weights: SuggestionWeights = SuggestionWeights(),
    ):
        self.repo = repo
        self.normalizer = normalizer
        self.settings = settings or get_settings()
        self.ranking_weights = ranking_weights
        self.suggestion_weights = suggestion_weights
        self.search_cache = SearchCacheRepo(redis, key_prefix="search")
        self.suggest_cache = SearchCacheRepo(redis, key_prefix="suggest")

    async def search(
        self,
        q: Optional[str],
        page: int = 1,
        limit: Optional[int] = None,
        category: Optional[str] = None,
        minPrice: Optional[float] = None,
        maxPrice: Optional[float] = None,
        sortBy: Optional[str] = None,
        sortOrder: Optional[str] = None,
        suggest: bool = False,
        version: str = "v1",
    ) -> SearchOutcome:
        s = self.settings
        limit = max(limit or s.search_default_limit, 1)
        q = (q or "").strip()
        if not q:
            return SearchOutcome(
                response=SearchResponse(message=MSG_EMPTY_QUERY, query="", page=1, limit=limit),
                engine=ENGINE_NONE,
            )

        opts = SearchOptions(
            q=q,
            page=max(page or 1, 1),
            limit=limit,
            category=category or None,
            minPrice=minPrice,
            maxPrice=maxPrice,
            sortBy=sortBy or "relevance",
            sortOrder="asc" if sortOrder == "asc" else "desc",
            suggest=suggest,
        )

        cache_key = self.search_cache.key(version, opts.model_dump())
        if cached := await self._cached(self.search_cache, cache_key, SearchResponse):
            logger.info("search cache_hit q=%r key=%s", q, cache_key)
            return SearchOutcome(response=cached, engine=ENGINE_RANKING)

        t0 = time.perf_counter()
        try:
            result: SearchPage = await ranked_search(
                self.repo, self.normalizer, opts,
                weights=self.ranking_weights, suggest_cap=s.suggest_mode_cap,
            )
        except Exception as e:
            logger.warning("search ranking failed q=%r err=%s, using regex fallback", q, e)
            return await self._fallback(opts, engine_error=e)

        response = self._response(result, q, MSG_RANKED)
        await self.search_cache.set(cache_key, response.model_dump(mode="json", by_alias=True), s.search_cache_ttl)
        logger.info("search done q=%r engine=%s total=%s time=%.3fs", q, ENGINE_RANKING, result.total, time.perf_counter() - t0)
        return SearchOutcome(response=response, engine=ENGINE_RANKING)

    async def _fallback(self, opts: SearchOptions, *, engine_error: Exception) -> SearchOutcome:
        s = self.settings
        try:
            result = await regex_search(
                self.repo, self.normalizer, opts,
                honor_filters=s.fallback_honors_filters, suggest_cap=s.suggest_mode_cap,
            )
        except Exception as e:
            logger.error("search fallback failed q=%r err=%s", opts.q, e)
            return SearchOutcome(
                response=SearchResponse(message=MSG_FAILED, query=opts.q, page=opts.page, limit=opts.limit),
                engine=ENGINE_REGEX_FALLBACK,
                degraded=True,
                error=str(e),
            )
        # degraded results are never cached
        return SearchOutcome(
            response=self._response(result, opts.q, MSG_FALLBACK),
            engine=ENGINE_REGEX_FALLBACK,
            degraded=True,
            error=str(engine_error),
        )

    @staticmethod
    async def _cached(cache: SearchCacheRepo, key: str, model: Type[ResponseT]) -> Optional[ResponseT]:
        """Cached response, or None on a miss or a payload that no longer fits the model."""
        payload = await cache.get(key)
        if not payload:
            return None
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.warning("%s stale cache entry key=%s err=%s", cache.prefix, key, e.error_count())
            return None

    @staticmethod
    def _response(result: SearchPage, q: str, message: str) -> SearchResponse:
        return SearchResponse(
            products=result.products,
            total=result.total,
            message=message,
            query=q,
            page=result.page,
            limit=result.limit,
        )

    async def suggestions(self, q: Optional[str], limit: Optional[int] = None, version: str = "v1") -> SuggestionOutcome:
        s = self.settings
        q = (q or "").strip()
        if not q:
            return SuggestionOutcome()
        limit = max(limit or s.suggestion_default_limit, 1)

        cache_key = self.suggest_cache.key(version, {"q": q, "limit": limit})
        if cached := await self._cached(self.suggest_cache, cache_key, SuggestionsResponse):
            return SuggestionOutcome(response=cached)

        try:
            items = await suggest(
                self.repo, self.normalizer, q, limit,
                weights=self.suggestion_weights, candidate_window=s.suggestion_candidate_window,
            )
        except Exception as e:
            # autocomplete must never break page rendering
            logger.error("suggestions failed q=%r err=%s", q, e)
            return SuggestionOutcome(degraded=True, error=str(e))

        response = SuggestionsResponse(suggestions=items)
        await self.suggest_cache.set(cache_key, response.model_dump(mode="json", by_alias=True), s.suggestion_cache_ttl)
        return SuggestionOutcome(response=response)
