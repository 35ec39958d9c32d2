from fastapi import Header
from typing import Literal

# header value -> API version
SUPPORTED_VERSIONS = {"1": "v1", "v1": "v1"}
CURRENT_VERSION = "v1"

async def resolve_version(
    x_api_version: str | None = Header(default=None),
) -> Literal["v1"]:
    """
    Resolve the API version from the 'X-API-Version' header.
    The version namespaces response-cache keys so response shapes never collide.
    Unknown or missing values resolve to the current version.
    """
    return SUPPORTED_VERSIONS.get((x_api_version or "").strip().lower(), CURRENT_VERSION)
