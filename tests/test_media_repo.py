import hashlib

import pytest

from catalog_search.core.config import Settings
from catalog_search.core.errors import MediaImportError, MediaNotConfiguredError
from catalog_search.domain.repositories.media_repo import MediaRepo, _sign


def test_build_url_is_pure_templating(settings):
    media = MediaRepo(settings)
    assert media.build_url("products/abc", "f_avif,q_auto") == (
        "https://res.cloudinary.com/acct/image/upload/f_avif,q_auto/products/abc"
    )


def test_signature_sorts_params_and_appends_secret():
    expected = hashlib.sha1(b"folder=products&timestamp=1700000000secret").hexdigest()
    assert _sign({"timestamp": 1700000000, "folder": "products"}, "secret") == expected


def test_configured_flag(settings):
    assert MediaRepo(settings).configured
    assert settings.media_configured
    bare = Settings(MONGO_URI="mongodb://localhost:27017", CLOUDINARY_CLOUD_NAME="", CLOUDINARY_API_KEY="", CLOUDINARY_API_SECRET="")
    assert not MediaRepo(bare).configured


@pytest.mark.asyncio
async def test_upload_without_credentials_raises_import_error():
    bare = Settings(MONGO_URI="mongodb://localhost:27017", CLOUDINARY_CLOUD_NAME="", CLOUDINARY_API_KEY="", CLOUDINARY_API_SECRET="")
    with pytest.raises(MediaNotConfiguredError):
        await MediaRepo(bare).upload_remote("https://img.example.com/a.png")
    assert issubclass(MediaNotConfiguredError, MediaImportError)
