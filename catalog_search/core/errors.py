# catalog_search/core/errors.py


class CatalogSearchError(Exception):
    """Base class for errors raised inside the search core."""


class MediaImportError(CatalogSearchError):
    """The media host refused or failed a remote image import."""


class MediaNotConfiguredError(MediaImportError):
    """No media-host credentials; remote imports are impossible."""
