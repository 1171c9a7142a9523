"""Domain-level exceptions for the tutor API."""


class BadRequestError(ValueError):
    """Raised for client-side invalid requests at the domain layer."""


class ConfigurationError(RuntimeError):
    """Raised when the selected provider has no API key configured."""


class UpstreamError(RuntimeError):
    """Raised when the provider answers with a non-success status."""

    def __init__(self, status_code: int, details: str | None = None) -> None:
        super().__init__(f"Upstream provider returned HTTP {status_code}")
        self.status_code = status_code
        self.details = details


class UpstreamContractError(RuntimeError):
    """Raised when a successful provider response carries no reply text."""
