from functools import lru_cache
from typing import Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "CatalogSearch"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Mongo
    MONGO_URI: str # ✅ declared
    MONGO_DB: str = "catalog"
    CATALOG_COLLECTION: str = "products"

    # Redis (optional, empty disables response caching)
    REDIS_URL: str = ""

    # Media host (Cloudinary)
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    media_host: str = "res.cloudinary.com"
    media_upload_folder: str = "products"
    media_timeout_s: int = 15                  # seconds, single remote import

    # Image normalization
    normalize_timeout_s: float = 5.0           # per item; unrepaired image on timeout
    persist_image_repairs: bool = False        # write repaired images[0] back to Mongo

    # Search
    search_default_limit: int = 12
    suggestion_default_limit: int = 12
    suggestion_candidate_window: int = 200     # max docs scored per suggestion query
    suggest_mode_cap: int = 8
    fallback_honors_filters: bool = False

    # Cache config
    search_cache_ttl: int = 60                 # 1 minute
    suggestion_cache_ttl: int = 30             # 30 seconds

    # API
    api_prefix: str = ""  # mount point of the search routes, e.g. "/api/products"

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

    @property
    def media_configured(self) -> bool:
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
