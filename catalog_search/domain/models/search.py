from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from catalog_search.domain.models.product import ProductHit, Suggestion

SortOrder = Literal["asc", "desc"]


class RankingWeights(BaseModel):
    """Point values of the ranking engine's composite score."""
    text_score: float = 10
    prefix: float = 100
    word_prefix: float = 50
    substring: float = 10
    sales: float = 2
    views: float = 0.2

    model_config = {"frozen": True}


class SuggestionWeights(BaseModel):
    """Point values of the autocomplete heuristic."""
    prefix: float = 200
    word_prefix: float = 120
    substring: float = 60
    category: float = 40
    tag: float = 30            # per matching tag, uncapped
    sales: float = 3
    views: float = 0.2

    model_config = {"frozen": True}


class SearchOptions(BaseModel):
    q: str
    page: int = 1
    limit: int = 12
    category: Optional[str] = None
    minPrice: Optional[float] = None
    maxPrice: Optional[float] = None
    sortBy: str = "relevance"
    sortOrder: SortOrder = "desc"
    suggest: bool = False

    model_config = {"frozen": True}

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class SearchPage(BaseModel):
    """Raw engine result, before the facade adds message/query."""
    total: int
    page: int
    limit: int
    products: List[ProductHit]


class SearchResponse(BaseModel):
    products: List[ProductHit] = []
    total: int = 0
    message: str
    query: str = ""
    page: int = 1
    limit: int = 0


class SuggestionsResponse(BaseModel):
    suggestions: List[Suggestion] = []


# ---------- Outcomes (degradation is visible, never raised) ----------

NormalizationStatus = Literal[
    "empty", "canonical", "fallback", "derived", "imported", "unchanged", "failed", "timeout"
]


class NormalizationOutcome(BaseModel):
    item: Dict[str, Any]
    status: NormalizationStatus
    error: Optional[str] = None

    @property
    def repaired(self) -> bool:
        return self.status in ("fallback", "derived", "imported")

    @property
    def degraded(self) -> bool:
        return self.status in ("failed", "timeout")


class SearchOutcome(BaseModel):
    response: SearchResponse
    engine: Literal["none", "ranking", "regex_fallback"]
    degraded: bool = False
    error: Optional[str] = None


class SuggestionOutcome(BaseModel):
    response: SuggestionsResponse = Field(default_factory=SuggestionsResponse)
    degraded: bool = False
    error: Optional[str] = None
