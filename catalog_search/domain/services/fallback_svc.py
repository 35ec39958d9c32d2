from typing import Any, Dict
import logging
import time

from catalog_search.domain.models.search import SearchOptions, SearchPage
from catalog_search.domain.repositories.catalog_repo import CatalogRepo
from catalog_search.domain.services.constants import FALLBACK_PROJECTION
from catalog_search.domain.services.image_normalizer_svc import ImageNormalizer
from catalog_search.domain.services.ranking_svc import price_range, to_hit
from catalog_search.domain.services.text import escape_regex

logger = logging.getLogger(__name__)

# No relevance signal here: most sold, then most viewed, then newest
FALLBACK_SORT = [("sales", -1), ("views", -1), ("createdAt", -1), ("_id", 1)]


def build_predicate(opts: SearchOptions, *, honor_filters: bool = False) -> Dict[str, Any]:
    """
    Case-insensitive substring match on name.
    Category/price filters are dropped unless honor_filters is set.
    """
    predicate: Dict[str, Any] = {"name": {"$regex": escape_regex(opts.q), "$options": "i"}}
    if honor_filters:
        if opts.category:
            predicate["category"] = opts.category
        price = price_range(opts)
        if price:
            predicate["price"] = price
    return predicate


async def regex_search(
    repo: CatalogRepo,
    normalizer: ImageNormalizer,
    opts: SearchOptions,
    *,
    honor_filters: bool = False,
    suggest_cap: int = 8,
) -> SearchPage:
    """Degraded-mode search used when the ranking aggregation fails."""
    t0 = time.perf_counter()
    predicate = build_predicate(opts, honor_filters=honor_filters)
    if not honor_filters and (opts.category or opts.minPrice is not None or opts.maxPrice is not None):
        logger.info("regex_search ignoring filters category=%s minPrice=%s maxPrice=%s",
                    opts.category, opts.minPrice, opts.maxPrice)

    docs = await repo.find(
        predicate,
        FALLBACK_PROJECTION,
        sort=FALLBACK_SORT,
        skip=opts.skip,
        limit=suggest_cap if opts.suggest else opts.limit,
    )
    total = await repo.count(predicate)

    outcomes = await normalizer.normalize_many(docs)
    # no score: the fallback has no relevance model
    products = [to_hit({**o.item, "score": None}, opts.q, suggest=opts.suggest) for o in outcomes]

    logger.info("regex_search q=%r total=%s returned=%s time=%.3fs",
                opts.q, total, len(products), time.perf_counter() - t0)
    return SearchPage(total=total, page=opts.page, limit=opts.limit, products=products)
