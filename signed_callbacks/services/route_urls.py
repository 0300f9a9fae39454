"""
Route URL Generator - Named routes to absolute, optionally signed, URLs.

Signed routes carry `signature=<hex HMAC-SHA256>` computed over the route URL
with its other parameters sorted by name. `has_valid_signature` is the
verification capability other components may delegate to.
"""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime, timedelta
from urllib.parse import urlsplit

from structlog import get_logger

from signed_callbacks.exceptions import RouteNotFoundError
from signed_callbacks.models.domain import (
    EXPIRES_PARAM,
    SIGNATURE_PARAM,
    CallbackUrl,
    SigningKeys,
    normalize_request_url,
)
from signed_callbacks.services.signing import canonicalize, has_not_expired, matches_any_key, sign

logger = get_logger(__name__)

SERVER_NOTIFICATIONS_ROUTE = "server_notifications"

_RESERVED_PARAMS = (SIGNATURE_PARAM, EXPIRES_PARAM)


class RouteUrlGenerator:
    """
    Resolves named routes against the application's public URL.

    Signing always uses the current key; verification accepts any key in
    the rotation set.
    """

    def __init__(self, app_url: str, keys: SigningKeys, routes: Mapping[str, str]) -> None:
        """
        Initialize route URL generator.

        Args:
            app_url: Public scheme and host, e.g. "https://billing.example.com"
            keys: Keys for signing and verifying route URLs
            routes: Route name to path, e.g. {"server_notifications": "/notify"}
        """
        self.app_url = app_url.rstrip("/")
        self.keys = keys
        self.routes = dict(routes)

    def route(
        self,
        name: str,
        parameters: Mapping[str, str] | None = None,
        absolute: bool = True,
    ) -> str:
        """Build the URL for a named route with parameters as its query string."""
        if name not in self.routes:
            raise RouteNotFoundError(name)

        path = self.routes[name]
        if absolute:
            base = normalize_request_url(f"{self.app_url}{path}")
        else:
            base = path.rstrip("/") or "/"

        url = CallbackUrl(base=base)
        for key, value in (parameters or {}).items():
            url = url.with_param(key, value)
        return str(url)

    def signed_route(
        self,
        name: str,
        parameters: Mapping[str, str] | None = None,
        expires_at: datetime | None = None,
        absolute: bool = True,
    ) -> str:
        """
        Build a signed URL for a named route.

        Raises:
            ValueError: If parameters use a reserved name
            RouteNotFoundError: If the route is not registered
        """
        params = dict(parameters or {})
        reserved = [key for key in _RESERVED_PARAMS if key in params]
        if reserved:
            raise ValueError(
                f"'{reserved[0]}' is a reserved parameter when generating a signed route"
            )

        if expires_at is not None:
            params[EXPIRES_PARAM] = str(int(expires_at.timestamp()))

        unsigned = self.route(name, dict(sorted(params.items())), absolute)
        signature = sign(unsigned, self.keys.current)

        logger.debug(
            "signed_route_generated",
            route=name,
            absolute=absolute,
            expires=params.get(EXPIRES_PARAM),
        )

        return str(CallbackUrl.parse(unsigned).with_param(SIGNATURE_PARAM, signature))

    def temporary_signed_route(
        self,
        name: str,
        expires_in: timedelta,
        parameters: Mapping[str, str] | None = None,
        absolute: bool = True,
    ) -> str:
        """Build a signed URL that stops verifying after expires_in."""
        expires_at = datetime.now(UTC) + expires_in
        return self.signed_route(name, parameters, expires_at, absolute)

    def has_valid_signature(
        self,
        request_url: str,
        query_string: str,
        signature: str,
        ignore_query: Iterable[str] = (),
        absolute: bool = True,
    ) -> bool:
        """
        Check a request against signatures produced by `signed_route`.

        `signature` is always ignored when rebuilding the signed string, along
        with any names in ignore_query. Expired URLs are rejected.
        """
        url = request_url if absolute else (urlsplit(request_url).path or "/")
        ignored = (SIGNATURE_PARAM, *ignore_query)
        canonical = canonicalize(url, query_string, ignored)
        fresh = has_not_expired(query_string)
        return matches_any_key(canonical, signature, self.keys.verification_keys) and fresh
