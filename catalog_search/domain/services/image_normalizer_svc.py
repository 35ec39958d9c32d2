from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
import asyncio
import copy
import logging
import re
import time

from catalog_search.domain.models.image import (
    ImageFormats,
    ImageKind,
    ImageMetadata,
    ImageRecord,
    ImageRef,
    ImageVariants,
    decode_first_image,
)
from catalog_search.domain.models.search import NormalizationOutcome
from catalog_search.domain.repositories.catalog_repo import CatalogRepo
from catalog_search.domain.repositories.media_repo import MediaRepo

logger = logging.getLogger(__name__)

# Size tiers -> media-host transformation
VARIANT_TRANSFORMS = {
    "micro": "c_fill,w_16,h_16,q_auto,f_auto",
    "thumb": "c_fill,w_150,h_150,q_auto,f_auto",
    "small": "c_fill,w_300,h_300,q_auto,f_auto",
    "medium": "c_fill,w_600,h_600,q_auto,f_auto",
    "large": "c_fill,w_1200,h_1200,q_auto,f_auto",
    "original": "q_auto,f_auto",
}

FORMAT_TRANSFORMS = {
    "avif": "f_avif,q_auto",
    "webp": "f_webp,q_auto",
    "jpg": "f_jpg,q_auto",
}

FALLBACK_PUBLIC_ID = "sample"
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600

# Demo/placeholder images are never imported
PLACEHOLDER_MARKER = "cloudinary.com/demo/"

# .../upload/[v<version>/]<publicId>.<ext>
HOST_UPLOAD_RE = re.compile(r"/upload/(?:v\d+/)?(.+)\.(?:jpg|jpeg|png|webp|gif|avif)$")


class ImageNormalizer:
    """
    Rewrites a catalog item's first image into the canonical ImageRecord.

    Never raises: every failure or timeout yields the item with its
    original images, and the outcome status says what happened.
    """

    def __init__(
        self,
        media: MediaRepo,
        *,
        timeout_s: float = 5.0,
        catalog: Optional[CatalogRepo] = None,
        persist_repairs: bool = False,
    ):
        self.media = media
        self.timeout_s = timeout_s
        self.catalog = catalog
        self.persist_repairs = persist_repairs and catalog is not None

    # ---------- Pure derivation ----------
    def variants_for(self, public_id: str) -> ImageVariants:
        return ImageVariants(**{k: self.media.build_url(public_id, t) for k, t in VARIANT_TRANSFORMS.items()})

    def formats_for(self, public_id: str) -> ImageFormats:
        return ImageFormats(**{k: self.media.build_url(public_id, t) for k, t in FORMAT_TRANSFORMS.items()})

    def record_for(
        self,
        public_id: str,
        width: Optional[int] = DEFAULT_WIDTH,
        height: Optional[int] = DEFAULT_HEIGHT,
    ) -> ImageRecord:
        return ImageRecord(
            publicId=public_id,
            variants=self.variants_for(public_id),
            formats=self.formats_for(public_id),
            metadata=ImageMetadata.from_dimensions(width, height),
        )

    def public_id_from_url(self, url: str) -> Optional[str]:
        """publicId of a URL already hosted on the media platform, else None."""
        if self.media.host not in url:
            return None
        m = HOST_UPLOAD_RE.search(url)
        return m.group(1) if m else None

    # ---------- Repair ----------
    async def _import(self, url: str) -> ImageRecord:
        res = await self.media.upload_remote(url)
        return self.record_for(res["publicId"], res.get("width"), res.get("height"))

    async def _repair(self, ref: ImageRef) -> Tuple[str, ImageRecord]:
        if ref.kind == ImageKind.CORRUPTED:
            return "fallback", self.record_for(FALLBACK_PUBLIC_ID)

        if ref.kind == ImageKind.LEGACY:
            if PLACEHOLDER_MARKER in ref.url:
                return "fallback", self.record_for(FALLBACK_PUBLIC_ID)
            public_id = self.public_id_from_url(ref.url)
            if public_id:
                return "derived", self.record_for(public_id)
            return "imported", await self._import(ref.url)

        # ImageKind.REMOTE_URL
        return "imported", await self._import(ref.url)

    async def normalize(self, item: Dict[str, Any]) -> NormalizationOutcome:
        ref = decode_first_image(item.get("images"))
        if ref.kind == ImageKind.EMPTY:
            return NormalizationOutcome(item=item, status="empty")
        if ref.kind == ImageKind.CANONICAL:
            return NormalizationOutcome(item=item, status="canonical")
        if ref.kind == ImageKind.UNKNOWN:
            return NormalizationOutcome(item=item, status="unchanged")

        item_id = item.get("_id")
        t0 = time.perf_counter()
        try:
            status, record = await asyncio.wait_for(self._repair(ref), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning("normalize timeout item=%s kind=%s after %.1fs", item_id, ref.kind.value, self.timeout_s)
            return NormalizationOutcome(item=item, status="timeout", error=f"timed out after {self.timeout_s}s")
        except Exception as e:
            logger.warning("normalize failed item=%s kind=%s err=%s", item_id, ref.kind.value, e)
            return NormalizationOutcome(item=item, status="failed", error=str(e))

        image = record.to_document()
        out = copy.deepcopy(item)
        out["images"][0] = image
        logger.debug("normalize %s item=%s public_id=%s time=%.3fs", status, item_id, record.publicId, time.perf_counter() - t0)

        if self.persist_repairs and item_id is not None:
            await self._persist(item_id, image)
        return NormalizationOutcome(item=out, status=status)

    async def _persist(self, item_id: Any, image: Dict[str, Any]) -> None:
        try:
            await self.catalog.set_first_image(item_id, image)
        except Exception as e:
            logger.warning("persist repaired image failed item=%s err=%s", item_id, e)

    # ---------- Convenience ----------
    async def normalize_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return (await self.normalize(item)).item

    async def normalize_many(self, items: List[Dict[str, Any]]) -> List[NormalizationOutcome]:
        """Concurrent per-item normalization; latency bounded by the slowest item."""
        return list(await asyncio.gather(*(self.normalize(it) for it in items)))
