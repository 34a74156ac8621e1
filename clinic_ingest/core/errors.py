"""Exception types shared across the ingestion pipeline."""


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


class ProviderFetchError(RuntimeError):
    """Raised when a third-party directory API call fails for any reason."""

    def __init__(self, provider: str, message: str = "") -> None:
        self.provider = provider
        super().__init__(message or f"Failed to fetch data from {provider}")


class DuplicateClinicError(RuntimeError):
    """The store already holds a clinic with the same provider and external id."""


class SlugConflictError(RuntimeError):
    """The store rejected a slug because another clinic claimed it first."""
