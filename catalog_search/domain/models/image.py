from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel


class ImageVariants(BaseModel):
    micro: str
    thumb: str
    small: str
    medium: str
    large: str
    original: str


class ImageFormats(BaseModel):
    avif: str
    webp: str
    jpg: str


class ImageMetadata(BaseModel):
    width: Optional[int] = None
    height: Optional[int] = None
    aspectRatio: Optional[float] = None

    @classmethod
    def from_dimensions(cls, width: Optional[int], height: Optional[int]) -> "ImageMetadata":
        ratio = width / height if width and height else None
        return cls(width=width, height=height, aspectRatio=ratio)


class ImageRecord(BaseModel):
    """Canonical image: size variants + modern formats for one media-host public id."""
    publicId: str
    variants: ImageVariants
    formats: ImageFormats
    metadata: ImageMetadata

    def to_document(self) -> Dict[str, Any]:
        # Unknown dimensions are left out rather than stored as null
        return self.model_dump(exclude_none=True)


class ImageKind(str, Enum):
    EMPTY = "empty"
    CANONICAL = "canonical"
    CORRUPTED = "corrupted"        # only an identifier survived
    LEGACY = "legacy"              # { full, thumb }
    REMOTE_URL = "remote_url"      # plain string
    UNKNOWN = "unknown"


class ImageRef(BaseModel):
    """Decoded view of a catalog item's first image."""
    kind: ImageKind
    raw: Any = None
    url: Optional[str] = None

    model_config = {"frozen": True}


def decode_first_image(images: Any) -> ImageRef:
    """
    Classify images[0] once, at the store boundary.
    Later indices are never inspected. A non-list images field (a bare
    legacy object, a lone string) is left to the caller untouched.
    """
    if not images:
        return ImageRef(kind=ImageKind.EMPTY)
    if not isinstance(images, list):
        return ImageRef(kind=ImageKind.UNKNOWN, raw=images)

    first = images[0]
    if isinstance(first, str):
        return ImageRef(kind=ImageKind.REMOTE_URL, raw=first, url=first)

    if isinstance(first, dict):
        variants = first.get("variants")
        if isinstance(variants, dict) and variants.get("thumb"):
            return ImageRef(kind=ImageKind.CANONICAL, raw=first)
        if len(first) == 1 and first.get("_id"):
            return ImageRef(kind=ImageKind.CORRUPTED, raw=first)
        if first.get("full"):
            return ImageRef(kind=ImageKind.LEGACY, raw=first, url=str(first["full"]))

    return ImageRef(kind=ImageKind.UNKNOWN, raw=first)
