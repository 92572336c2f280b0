"""Exception types raised while deriving and provisioning a static site.

Filesystem failures during a content scan surface as the builtin ``OSError``
(``IOError``) and are not wrapped.
"""


class StaticSiteError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(StaticSiteError, ValueError):
    """A required configuration value is missing or invalid."""


class NotFoundError(StaticSiteError, LookupError):
    """A resource that must already exist in the provider could not be found."""


class ProviderError(StaticSiteError):
    """An opaque failure returned by AWS.

    The original exception is kept as ``__cause__`` and its message is reused
    verbatim so that the provisioning run reports the raw provider error.
    """

    def __init__(self, operation: str, error: Exception):
        self.operation = operation
        self.error = error
        super().__init__(f"{operation} failed: {error}")
