"""
Shared pytest fixtures.

The catalog lives in an in-memory FakeCollection and the media host's
remote import is an AsyncMock, so no test touches the network.
"""
from __future__ import annotations

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

# Settings need a Mongo URI at import time (main.py builds the app eagerly)
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")

from fake_mongo import FakeCollection, FakeDatabase  # noqa: E402

from catalog_search.core.config import Settings  # noqa: E402
from catalog_search.domain.repositories.catalog_repo import CatalogRepo  # noqa: E402
from catalog_search.domain.repositories.media_repo import MediaRepo  # noqa: E402
from catalog_search.domain.services.image_normalizer_svc import ImageNormalizer  # noqa: E402
from catalog_search.domain.services.search_svc import SearchService  # noqa: E402

HOSTED_URL = "https://res.cloudinary.com/acct/image/upload/v123/products/abc123.jpg"
FOREIGN_URL = "https://images.example.com/milk-bar.png"


def ts(day: int) -> datetime:
    return datetime(2024, 1, day, tzinfo=timezone.utc)


def canonical_image(public_id: str = "products/cookies") -> dict:
    base = "https://res.cloudinary.com/acct/image/upload"
    return {
        "publicId": public_id,
        "variants": {k: f"{base}/{k}/{public_id}" for k in ("micro", "thumb", "small", "medium", "large", "original")},
        "formats": {k: f"{base}/{k}/{public_id}" for k in ("avif", "webp", "jpg")},
        "metadata": {"width": 640, "height": 480, "aspectRatio": 640 / 480},
    }


CATALOG = [
    {
        "_id": "p1",
        "name": "Premium Dark Chocolate",
        "description": "Rich bittersweet bar made from single-origin cocoa beans, 70 percent cocoa content.",
        "category": "Snacks",
        "tags": ["dark", "bar"],
        "price": 250,
        "stock": 12,
        "sales": 10,
        "views": 100,
        "createdAt": ts(1),
        "images": [{"full": HOSTED_URL, "thumb": HOSTED_URL}],
    },
    {
        "_id": "p2",
        "name": "Milk Chocolate Bar",
        "description": "Creamy milk bar for kids.",
        "category": "Snacks",
        "tags": ["milk"],
        "price": 80,
        "stock": 40,
        "sales": 30,
        "views": 50,
        "createdAt": ts(2),
        "images": [FOREIGN_URL],
    },
    {
        "_id": "p3",
        "name": "Chocolate Chip Cookies",
        "description": "Crunchy cookies baked daily.",
        "category": "Bakery",
        "tags": ["cookies"],
        "price": 120,
        "stock": 5,
        "sales": 5,
        "views": 10,
        "createdAt": ts(3),
        "images": [canonical_image()],
    },
    {
        "_id": "p4",
        "name": "Green Tea",
        "description": "Loose leaf green tea from Darjeeling.",
        "category": "Beverages",
        "tags": ["tea"],
        "price": 300,
        "stock": 8,
        "sales": 0,
        "views": 400,
        "createdAt": ts(4),
        "images": [{"_id": "x"}],
    },
    {
        "_id": "p5",
        "name": "Black Tea",
        "description": "Strong Assam black tea.",
        "category": "Beverages",
        "tags": ["tea"],
        "price": 280,
        "stock": 9,
        "sales": 0,
        "views": 400,
        "createdAt": ts(5),
        "images": [],
    },
    {
        "_id": "p6",
        "name": "Ceramic Kettle",
        "description": "Brews tea and coffee.",
        "category": "Kitchen",
        "tags": [],
        "price": 900,
        "stock": 0,
        "sales": 0,
        "views": 0,
        "createdAt": ts(6),
        "images": [],
    },
]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        MONGO_URI="mongodb://localhost:27017",
        CLOUDINARY_CLOUD_NAME="acct",
        CLOUDINARY_API_KEY="key",
        CLOUDINARY_API_SECRET="secret",
        REDIS_URL="",
    )


@pytest.fixture
def collection() -> FakeCollection:
    return FakeCollection(CATALOG)


@pytest.fixture
def repo(collection) -> CatalogRepo:
    return CatalogRepo(FakeDatabase({"products": collection}))


@pytest.fixture
def media(settings) -> MediaRepo:
    m = MediaRepo(settings)
    m.upload_remote = AsyncMock(return_value={"publicId": "products/imported", "width": 1000, "height": 500})
    return m


@pytest.fixture
def normalizer(media) -> ImageNormalizer:
    return ImageNormalizer(media, timeout_s=1.0)


@pytest.fixture
def service(repo, normalizer, settings) -> SearchService:
    return SearchService(repo, normalizer, settings=settings)
