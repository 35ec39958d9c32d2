# catalog_search/core/lifespan.py
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from catalog_search.db import mongo, redis as r
from catalog_search.core.config import get_settings
from catalog_search.domain.repositories.catalog_repo import CatalogRepo

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # Mongo is mandatory
    try:
        await mongo.connect()
    except Exception as e:
        logger.error("Mongo connection failed: %s", e)
        raise

    # Text index is required by $text; a failure leaves the regex fallback serving
    try:
        await CatalogRepo(mongo.get_db(), settings.CATALOG_COLLECTION).ensure_indexes()
    except Exception as e:
        logger.warning("ensure_indexes failed (search will fall back): %s", e)

    # Redis optional
    if settings.REDIS_URL:
        await r.connect()
    else:
        logger.warning("No REDIS_URL provided, response cache disabled")

    if not settings.media_configured:
        logger.warning("Media host not configured, remote image imports will be skipped")

    # Application runs
    yield

    # --- Shutdown ---
    try:
        await r.disconnect()
    except Exception as e:
        logger.warning("Redis disconnect error: %s", e)
    await mongo.disconnect()
    logger.info("Mongo disconnected")
