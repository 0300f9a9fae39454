"""
FastAPI Dependencies - Callback URL services and signature enforcement.

NO DICTIONARIES - All dependencies return typed objects.
"""

import hmac
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, Request, status
from structlog import get_logger

from signed_callbacks.config import Settings, get_settings
from signed_callbacks.exceptions import InvalidSignatureError
from signed_callbacks.models.domain import (
    SIGNATURE_PARAM,
    CallbackRequest,
    SigningKeys,
    normalize_request_url,
    query_value,
)
from signed_callbacks.observability.metrics import metrics
from signed_callbacks.observability.tracing import trace_operation
from signed_callbacks.services.callback_urls import CallbackUrlGenerator
from signed_callbacks.services.route_urls import SERVER_NOTIFICATIONS_ROUTE, RouteUrlGenerator
from signed_callbacks.services.signature_verifier import (
    SignatureVerifier,
    build_signature_verifier,
)

logger = get_logger(__name__)


@lru_cache
def _route_url_generator(
    app_url: str, notification_path: str, app_key: str, previous_keys: tuple[str, ...]
) -> RouteUrlGenerator:
    keys = SigningKeys.from_strings(app_key, list(previous_keys))
    return RouteUrlGenerator(
        app_url=app_url,
        keys=keys,
        routes={SERVER_NOTIFICATIONS_ROUTE: notification_path},
    )


def get_route_url_generator(
    settings: Settings = Depends(get_settings),
) -> RouteUrlGenerator:
    """Route URL layer built once per configuration."""
    return _route_url_generator(
        settings.app_url,
        settings.notification_path,
        settings.app_key,
        tuple(settings.previous_key_list),
    )


def get_callback_url_generator(
    route_urls: RouteUrlGenerator = Depends(get_route_url_generator),
    settings: Settings = Depends(get_settings),
) -> CallbackUrlGenerator:
    """Callback URL generator for the server-notification route."""
    ttl = None
    if settings.callback_url_ttl_seconds:
        ttl = timedelta(seconds=settings.callback_url_ttl_seconds)
    return CallbackUrlGenerator(route_urls, ttl=ttl)


def get_signature_verifier(
    route_urls: RouteUrlGenerator = Depends(get_route_url_generator),
    settings: Settings = Depends(get_settings),
) -> SignatureVerifier:
    """Verifier selected by DELEGATE_SIGNATURE_VALIDATION."""
    return build_signature_verifier(route_urls, delegate=settings.delegate_signature_validation)


# ============================================================================
# Admin API Key Authentication
# ============================================================================


async def require_admin_api_key(
    x_api_key: str | None = Header(None, description="Admin API key"),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    FastAPI dependency guarding endpoints that hand out callback URLs.

    A signed callback URL is a credential for the callback route, so only
    holders of ADMIN_API_KEY may request one. With no key configured every
    request is rejected.

    Raises:
        HTTPException 401 if the X-API-Key header is missing or wrong
    """
    expected = settings.admin_api_key
    if (
        expected
        and x_api_key
        and hmac.compare_digest(x_api_key.encode("utf-8"), expected.encode("utf-8"))
    ):
        return

    logger.warning(
        "admin_api_key_rejected",
        has_api_key=bool(x_api_key),
        key_configured=bool(expected),
    )
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing API key",
        headers={"WWW-Authenticate": "ApiKey"},
    )


def callback_request_from(request: Request) -> CallbackRequest:
    """Extract what verification needs from an incoming request."""
    url = request.url
    query_string = url.query
    return CallbackRequest(
        request_url=normalize_request_url(f"{url.scheme}://{url.netloc}{url.path}"),
        query_string=query_string,
        signature=query_value(query_string, SIGNATURE_PARAM),
    )


async def require_valid_signature(
    request: Request,
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> CallbackRequest:
    """
    Reject callbacks whose URL signature is not authentic.

    Raises:
        InvalidSignatureError: Mapped to HTTP 403 by the application
    """
    callback = callback_request_from(request)
    with trace_operation(
        "callback.verify_signature",
        strategy=verifier.strategy,
        provider=callback.provider,
    ) as span:
        valid = verifier.verify_request(callback)
        span.set_attribute("callback.valid", valid)
    metrics.record_verification(verifier.strategy, valid)

    if not valid:
        logger.warning(
            "callback_signature_rejected",
            path=request.url.path,
            provider=callback.provider,
            strategy=verifier.strategy,
            has_signature=bool(callback.signature),
        )
        raise InvalidSignatureError(callback.provider)

    logger.info(
        "callback_signature_verified",
        provider=callback.provider,
        strategy=verifier.strategy,
    )
    return callback
