"""
Exception Classes - Strongly typed exception hierarchy.

Signature verification itself never raises; these are raised at the HTTP
seam so handlers can map them to responses.
"""


class CallbackError(Exception):
    """Base exception for all callback errors."""

    pass


class InvalidSignatureError(CallbackError):
    """Raised when a callback request does not carry a valid signature."""

    def __init__(self, provider: str | None) -> None:
        self.provider = provider
        super().__init__(f"Invalid callback signature for provider: {provider or 'unknown'}")


class InvalidProviderError(CallbackError):
    """Raised when a provider identifier cannot be placed in a callback URL."""

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(f"Invalid provider {provider!r}: {reason}")


class RouteNotFoundError(CallbackError):
    """Raised when a URL is requested for a route that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Route not defined: {name}")
