# catalog_search/api/deps.py
from fastapi import Depends
from catalog_search.core.config import get_settings
from catalog_search.db.mongo import get_db
from catalog_search.db.redis import get_redis
from catalog_search.domain.repositories.catalog_repo import CatalogRepo
from catalog_search.domain.repositories.media_repo import MediaRepo
from catalog_search.domain.services.image_normalizer_svc import ImageNormalizer
from catalog_search.domain.services.search_svc import SearchService

# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    return db

# Dependency for injecting the Redis client (None when disabled)
def redis_dep():
    return get_redis()

def catalog_repo(db = Depends(mongo_db)) -> CatalogRepo:
    return CatalogRepo(db, get_settings().CATALOG_COLLECTION)

def search_service(
    repo: CatalogRepo = Depends(catalog_repo),
    redis = Depends(redis_dep),
) -> SearchService:
    settings = get_settings()
    normalizer = ImageNormalizer(
        MediaRepo(settings),
        timeout_s=settings.normalize_timeout_s,
        catalog=repo,
        persist_repairs=settings.persist_image_repairs,
    )
    return SearchService(repo, normalizer, redis=redis, settings=settings)
