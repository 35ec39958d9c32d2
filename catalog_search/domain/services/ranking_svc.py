from typing import Any, Dict, List, Optional
import logging
import time

from catalog_search.domain.models.product import ProductHit
from catalog_search.domain.models.search import RankingWeights, SearchOptions, SearchPage
from catalog_search.domain.repositories.catalog_repo import CatalogRepo
from catalog_search.domain.services.constants import (
    DEFAULT_CATEGORY,
    DEFAULT_PRODUCT_NAME,
    SORT_FIELDS,
)
from catalog_search.domain.services.image_normalizer_svc import ImageNormalizer
from catalog_search.domain.services.text import escape_regex, make_snippet

logger = logging.getLogger(__name__)

# Fields kept for projection to ProductHit
PAGE_PROJECTION = {
    "_id": 1,
    "name": 1,
    "slug": 1,
    "price": 1,
    "category": 1,
    "images": 1,
    "stock": 1,
    "description": 1,
    "score": 1,
    "sales": 1,
    "views": 1,
    "createdAt": 1,
}


def build_match(opts: SearchOptions) -> Dict[str, Any]:
    """Filter stage: native text search + optional category and price range."""
    match: Dict[str, Any] = {"$text": {"$search": opts.q}}
    if opts.category:
        match["category"] = opts.category
    price = price_range(opts)
    if price:
        match["price"] = price
    return match


def price_range(opts: SearchOptions) -> Optional[Dict[str, float]]:
    rng: Dict[str, float] = {}
    if opts.minPrice is not None:
        rng["$gte"] = opts.minPrice
    if opts.maxPrice is not None:
        rng["$lte"] = opts.maxPrice
    return rng or None


def build_score_stages(q: str, weights: RankingWeights) -> List[Dict[str, Any]]:
    """
    Two $addFields stages: the per-signal fields first, then the composite
    score reading them (a stage cannot read fields it is adding).
    Prefix, word-prefix and substring bonuses stack.
    """
    q_lower = q.lower()
    escaped = escape_regex(q)
    name = {"$ifNull": ["$name", ""]}

    def _flag(cond: Dict[str, Any]) -> Dict[str, Any]:
        return {"$cond": [cond, 1, 0]}

    signals = {
        "$addFields": {
            "textScore": {"$ifNull": [{"$meta": "textScore"}, 0]},
            "isPrefix": _flag({"$eq": [{"$substrCP": [{"$toLower": name}, 0, len(q_lower)]}, q_lower]}),
            "isWordPrefix": _flag({"$regexMatch": {"input": name, "regex": r"\b" + escaped, "options": "i"}}),
            "isSubstring": _flag({"$regexMatch": {"input": name, "regex": escaped, "options": "i"}}),
            "popularity": {
                "$add": [
                    {"$multiply": [{"$ifNull": ["$sales", 0]}, weights.sales]},
                    {"$multiply": [{"$ifNull": ["$views", 0]}, weights.views]},
                ]
            },
        }
    }
    composite = {
        "$addFields": {
            "score": {
                "$add": [
                    {"$multiply": ["$textScore", weights.text_score]},
                    {"$multiply": ["$isPrefix", weights.prefix]},
                    {"$multiply": ["$isWordPrefix", weights.word_prefix]},
                    {"$multiply": ["$isSubstring", weights.substring]},
                    "$popularity",
                ]
            }
        }
    }
    return [signals, composite]


def build_sort(sort_by: str, sort_order: str) -> Dict[str, int]:
    """
    Sort stage. Unknown modes: score desc, newest first.
    _id closes every sort so equal keys paginate deterministically.
    """
    direction = 1 if sort_order == "asc" else -1
    field = SORT_FIELDS.get(sort_by)
    sort = {field: direction} if field else {"score": -1, "createdAt": -1}
    sort["_id"] = 1
    return sort


def build_pipeline(opts: SearchOptions, weights: RankingWeights, take: int) -> List[Dict[str, Any]]:
    return [
        {"$match": build_match(opts)},
        *build_score_stages(opts.q, weights),
        {"$sort": build_sort(opts.sortBy, opts.sortOrder)},
        {
            # one execution for both the total and the page
            "$facet": {
                "metadata": [{"$count": "total"}],
                "data": [
                    {"$skip": opts.skip},
                    {"$limit": take},
                    {"$project": PAGE_PROJECTION},
                ],
            }
        },
    ]


def to_hit(doc: Dict[str, Any], q: str, *, suggest: bool) -> ProductHit:
    """Shared projection for ranked and fallback results."""
    stock = doc.get("stock")
    return ProductHit(
        _id=doc.get("_id"),
        name=doc.get("name") or DEFAULT_PRODUCT_NAME,
        slug=doc.get("slug"),
        price=doc.get("price") or 0,
        category=doc.get("category") or DEFAULT_CATEGORY,
        images=doc.get("images") or [],
        stock=int(stock) if isinstance(stock, (int, float)) else 0,
        snippet=None if suggest else make_snippet(doc.get("description"), q),
        score=doc.get("score"),
    )


async def ranked_search(
    repo: CatalogRepo,
    normalizer: ImageNormalizer,
    opts: SearchOptions,
    *,
    weights: RankingWeights = RankingWeights(),
    suggest_cap: int = 8,
) -> SearchPage:
    """
    Relevance + popularity ranking over a single aggregation.
    Store errors propagate; the facade owns the fallback.
    """
    t0 = time.perf_counter()
    take = min(opts.limit, suggest_cap) if opts.suggest else opts.limit
    pipeline = build_pipeline(opts, weights, take)
    logger.debug("ranked_search pipeline q=%r sortBy=%s take=%s", opts.q, opts.sortBy, take)

    rows = await repo.aggregate(pipeline)
    facet = rows[0] if rows else {}
    meta = facet.get("metadata") or []
    total = meta[0].get("total", 0) if meta else 0
    docs = facet.get("data") or []

    outcomes = await normalizer.normalize_many(docs)
    products = [to_hit(o.item, opts.q, suggest=opts.suggest) for o in outcomes]

    logger.info(
        "ranked_search q=%r total=%s returned=%s sortBy=%s time=%.3fs",
        opts.q, total, len(products), opts.sortBy, time.perf_counter() - t0,
    )
    return SearchPage(total=total, page=opts.page, limit=opts.limit, products=products)
