"""
Callback URL Generator - URLs handed to store platforms for server notifications.

The provider parameter is appended after signing, so it is not covered by
the signature.
"""

from datetime import timedelta

from structlog import get_logger

from signed_callbacks.models.domain import PROVIDER_PARAM, CallbackUrl
from signed_callbacks.services.route_urls import SERVER_NOTIFICATIONS_ROUTE, RouteUrlGenerator

logger = get_logger(__name__)


class CallbackUrlGenerator:
    """Builds signed and unsigned server-notification URLs for a provider."""

    def __init__(
        self,
        route_urls: RouteUrlGenerator,
        route_name: str = SERVER_NOTIFICATIONS_ROUTE,
        ttl: timedelta | None = None,
    ) -> None:
        """
        Initialize callback URL generator.

        Args:
            route_urls: Route URL layer that resolves and signs the callback route
            route_name: Name of the server-notification route
            ttl: Lifetime of signed URLs (None = never expire)
        """
        self.route_urls = route_urls
        self.route_name = route_name
        self.ttl = ttl

    def signed_url(self, provider: str) -> str:
        """
        Build a signed callback URL for provider.

        Returns:
            `<route>?<signing params>&signature=<hex64>&provider=<provider>`

        Any provider string is accepted; it is percent-encoded as is.
        """
        if self.ttl is not None:
            base = self.route_urls.temporary_signed_route(self.route_name, self.ttl)
        else:
            base = self.route_urls.signed_route(self.route_name)

        url = CallbackUrl.parse(base).with_param(PROVIDER_PARAM, provider)

        logger.info(
            "callback_url_generated",
            provider=provider,
            signed=True,
            expires=self.ttl is not None,
        )
        return str(url)

    def unsigned_url(self, provider: str) -> str:
        """Build a callback URL without a signature, for display and debugging."""
        url = CallbackUrl(base=self.route_urls.route(self.route_name)).with_param(
            PROVIDER_PARAM, provider
        )

        logger.info("callback_url_generated", provider=provider, signed=False)
        return str(url)

    def generate(self, provider: str) -> str:
        """Preferred entry point: a signed callback URL."""
        return self.signed_url(provider)
