from typing import Optional
from fastapi import FastAPI
from catalog_search.core.config import Settings, get_settings
from catalog_search.core.lifespan import lifespan
from catalog_search.api.v1.routers.health import router as health_router
from catalog_search.api.v1.routers.search import router as search_router
from catalog_search.core.logging import configure_logging

from fastapi.middleware.cors import CORSMiddleware
import logging, os

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)


def build_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    # ------- CORS -------
    # ALLOWED_ORIGINS from env (CSV), e.g. "https://shop.example.com,https://www.shop.example.com"
    allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
    allowed_origins = [o.strip() for o in allowed_origins_env.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )

    # ------- Routes -------
    app.include_router(health_router)
    app.include_router(search_router, prefix=settings.api_prefix)   # {prefix}/search, {prefix}/search/suggestions
    return app


app = build_app(settings)
