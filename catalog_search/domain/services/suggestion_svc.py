from typing import Any, Dict, List
import logging
import re
import time

from catalog_search.domain.models.product import SearchCandidate, Suggestion
from catalog_search.domain.models.search import SuggestionWeights
from catalog_search.domain.repositories.catalog_repo import CatalogRepo
from catalog_search.domain.services.constants import SUGGESTION_MATCH_FIELDS, SUGGESTION_PROJECTION
from catalog_search.domain.services.image_normalizer_svc import ImageNormalizer
from catalog_search.domain.services.text import escape_regex, suggestion_snippet

logger = logging.getLogger(__name__)


def build_predicate(escaped: str) -> Dict[str, Any]:
    """Case-insensitive substring match on any of name/description/category/tags."""
    return {"$or": [{f: {"$regex": escaped, "$options": "i"}} for f in SUGGESTION_MATCH_FIELDS]}


def score_candidate(
    c: SearchCandidate,
    q_lower: str,
    word_boundary: re.Pattern,
    weights: SuggestionWeights = SuggestionWeights(),
) -> float:
    """Autocomplete heuristic. Name bonuses stack; every matching tag counts."""
    score = 0.0
    name_lower = c.name.lower()

    if name_lower.startswith(q_lower):
        score += weights.prefix
    if word_boundary.search(c.name):
        score += weights.word_prefix
    if q_lower in name_lower:
        score += weights.substring

    if q_lower in c.category.lower():
        score += weights.category
    for tag in c.tags:
        if q_lower in tag.lower():
            score += weights.tag

    score += c.sales * weights.sales + c.views * weights.views
    return score


def rank_candidates(
    docs: List[Dict[str, Any]],
    q: str,
    weights: SuggestionWeights = SuggestionWeights(),
) -> List[tuple]:
    """
    Score, drop non-positive, sort by score desc then name asc.
    Returns (doc, score) pairs.
    """
    q_lower = q.lower()
    word_boundary = re.compile(r"\b" + escape_regex(q), re.IGNORECASE)

    scored = []
    for doc in docs:
        cand = SearchCandidate.from_document(doc)
        score = score_candidate(cand, q_lower, word_boundary, weights)
        if score > 0:
            scored.append((doc, cand.name, score))

    scored.sort(key=lambda x: (-x[2], x[1]))
    return [(doc, score) for doc, _, score in scored]


async def suggest(
    repo: CatalogRepo,
    normalizer: ImageNormalizer,
    q: str,
    limit: int = 12,
    *,
    weights: SuggestionWeights = SuggestionWeights(),
    candidate_window: int = 200,
) -> List[Suggestion]:
    """
    Autocomplete suggestions for an already-trimmed query.
    Scoring cost is capped by candidate_window; images are normalized
    only for the returned slice.
    """
    if not q:
        return []

    t0 = time.perf_counter()
    docs = await repo.find(build_predicate(escape_regex(q)), SUGGESTION_PROJECTION, limit=candidate_window)
    if not docs:
        logger.info("suggest q=%r no candidates", q)
        return []

    top = rank_candidates(docs, q, weights)[:limit]
    outcomes = await normalizer.normalize_many([doc for doc, _ in top])

    suggestions = [
        Suggestion(
            _id=o.item.get("_id"),
            name=o.item.get("name") or "",
            category=o.item.get("category"),
            images=o.item.get("images") or [],
            snippet=suggestion_snippet(o.item.get("description")),
            score=score,
        )
        for o, (_, score) in zip(outcomes, top)
    ]
    logger.info("suggest q=%r candidates=%s returned=%s time=%.3fs",
                q, len(docs), len(suggestions), time.perf_counter() - t0)
    return suggestions
