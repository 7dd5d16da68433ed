# vidshelf/errors.py


class VidshelfError(Exception):
    """Base class for errors raised by vidshelf."""


class CatalogError(VidshelfError):
    """The catalog document could not be turned into a catalog."""


class CatalogReadError(CatalogError):
    """The catalog document could not be opened or read."""


class CatalogParseError(CatalogError):
    """The catalog document is not a JSON array of video objects."""


class SubscriptionError(VidshelfError):
    """A filesystem change subscription could not be established."""


class ConfigError(VidshelfError):
    """A configuration value is invalid."""
