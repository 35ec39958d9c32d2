# catalog_search/domain/repositories/media_repo.py
from __future__ import annotations
from typing import Any, Dict, Optional
import hashlib
import logging
import time

import aiohttp

from catalog_search.core.config import Settings
from catalog_search.core.errors import MediaImportError, MediaNotConfiguredError

logger = logging.getLogger(__name__)

UPLOAD_API = "https://api.cloudinary.com/v1_1/{cloud}/image/upload"


def _sign(params: Dict[str, Any], api_secret: str) -> str:
    """Cloudinary request signature: sha1 of sorted k=v pairs + secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class MediaRepo:
    """
    Adapter for the media host (Cloudinary).
    - build_url: pure, deterministic delivery URL
    - upload_remote: server-side import of a foreign image URL (network call)
    """

    def __init__(self, settings: Settings):
        self.cloud = settings.CLOUDINARY_CLOUD_NAME
        self.api_key = settings.CLOUDINARY_API_KEY
        self.api_secret = settings.CLOUDINARY_API_SECRET
        self.host = settings.media_host
        self.folder = settings.media_upload_folder
        self.timeout_s = settings.media_timeout_s

    @property
    def configured(self) -> bool:
        return bool(self.cloud and self.api_key and self.api_secret)

    def build_url(self, public_id: str, transform: str) -> str:
        return f"https://{self.host}/{self.cloud}/image/upload/{transform}/{public_id}"

    async def upload_remote(self, url: str, folder: Optional[str] = None) -> Dict[str, Any]:
        """
        Import a remote image into the media host.
        Returns {publicId, width, height}; raises MediaImportError on any failure.
        """
        if not self.configured:
            raise MediaNotConfiguredError("media host credentials are not configured")

        params = {"folder": folder or self.folder, "timestamp": int(time.time())}
        form = {
            **{k: str(v) for k, v in params.items()},
            "file": url,
            "api_key": self.api_key,
            "signature": _sign(params, self.api_secret),
        }

        t0 = time.perf_counter()
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    UPLOAD_API.format(cloud=self.cloud),
                    data=form,
                    timeout=aiohttp.ClientTimeout(total=self.timeout_s),
                ) as resp:
                    if resp.status != 200:
                        text = await resp.text()
                        raise MediaImportError(f"upload failed status={resp.status}: {text[:200]}")
                    data = await resp.json()
        except aiohttp.ClientError as e:
            raise MediaImportError(f"upload request failed: {e}") from e

        public_id = data.get("public_id")
        if not public_id:
            raise MediaImportError("upload response has no public_id")

        logger.info("media import ok public_id=%s time=%.3fs", public_id, time.perf_counter() - t0)
        return {"publicId": public_id, "width": data.get("width"), "height": data.get("height")}
