# catalog_search/domain/repositories/catalog_repo.py

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING, TEXT
from pymongo.errors import OperationFailure

logger = logging.getLogger(__name__)

TEXT_INDEX = "catalog_text_index"


class CatalogRepo:
    """
    Catalog query interface backed by the 'products' collection.
    Read paths only, plus the idempotent images[0] repair write.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col: AsyncIOMotorCollection = db[collection_name]

    async def find(
        self,
        predicate: Dict[str, Any],
        projection: Optional[Dict[str, Any]] = None,
        *,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Dict[str, Any]]:
        cursor = self.col.find(predicate, projection)
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=None)

    async def count(self, predicate: Dict[str, Any]) -> int:
        return await self.col.count_documents(predicate)

    async def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        cursor = self.col.aggregate(pipeline)
        return await cursor.to_list(length=None)

    async def set_first_image(self, item_id: Any, image: Dict[str, Any]) -> None:
        """
        Persist a repaired canonical record at images.0.
        Concurrent repairs of the same item converge (last write wins).
        """
        await self.col.update_one({"_id": item_id}, {"$set": {"images.0": image}}, upsert=False)

    async def ensure_indexes(self) -> None:
        """Sort keys used by the engines + text index for $text search."""
        await self.col.create_index([("sales", DESCENDING), ("views", DESCENDING), ("createdAt", DESCENDING)])
        await self.col.create_index([("category", ASCENDING), ("price", ASCENDING)])

        # one text index per collection; an existing one keeps serving $text
        try:
            await self.col.create_index(
                [("name", TEXT), ("description", TEXT), ("category", TEXT), ("tags", TEXT)],
                name=TEXT_INDEX,
                weights={"name": 10, "tags": 5, "category": 3, "description": 1},
                default_language="english",
            )
        except OperationFailure as e:
            logger.warning("text index not created collection=%s (existing text index kept): %s", self.col.name, e)
        logger.info("catalog indexes ensured collection=%s", self.col.name)
