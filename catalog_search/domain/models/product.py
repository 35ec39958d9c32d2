from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer
from typing import Any, Dict, List, Optional


def _id_str(v: Any) -> Optional[str]:
    # ObjectId (or any store id) -> str for JSON responses
    return None if v is None else str(v)


class SearchCandidate(BaseModel):
    """Read-only scoring view of a catalog document (not persisted)."""
    name: str = ""
    category: str = ""
    description: str = ""
    tags: List[str] = []
    sales: float = 0
    views: float = 0

    model_config = {"frozen": True}

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "SearchCandidate":
        tags = doc.get("tags")
        return cls(
            name=str(doc.get("name") or ""),
            category=str(doc.get("category") or ""),
            description=str(doc.get("description") or ""),
            tags=[t for t in tags if isinstance(t, str)] if isinstance(tags, list) else [],
            # non-numeric popularity counters count as 0
            sales=doc["sales"] if isinstance(doc.get("sales"), (int, float)) else 0,
            views=doc["views"] if isinstance(doc.get("views"), (int, float)) else 0,
        )


class ProductHit(BaseModel):
    id: Optional[str] = Field(default=None, alias="_id")
    name: str
    slug: Optional[str] = None
    price: float = 0
    category: str
    images: Any = []  # stored shape; non-list legacy values pass through
    stock: int = 0
    snippet: Optional[str] = None
    score: Optional[float] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _id_str(v)

    @model_serializer(mode="wrap")
    def omit_missing_snippet(self, handler):
        # suggest-mode hits carry no snippet key at all
        data = handler(self)
        if self.snippet is None:
            data.pop("snippet", None)
        return data


class Suggestion(BaseModel):
    id: Optional[str] = Field(default=None, alias="_id")
    name: str
    category: Optional[str] = None
    images: Any = []  # stored shape; non-list legacy values pass through
    snippet: str = ""
    score: float = Field(ge=0)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _id_str(v)
