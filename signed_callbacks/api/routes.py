"""
API Routes - Server-notification callback and callback URL endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from structlog import get_logger

from signed_callbacks.api.dependencies import (
    get_callback_url_generator,
    require_admin_api_key,
    require_valid_signature,
)
from signed_callbacks.config import settings
from signed_callbacks.exceptions import InvalidProviderError
from signed_callbacks.models.api import CallbackUrlResponse, ErrorResponse, NotificationAck
from signed_callbacks.models.domain import CallbackRequest, ProviderId
from signed_callbacks.observability.metrics import metrics
from signed_callbacks.observability.tracing import trace_operation
from signed_callbacks.services.callback_urls import CallbackUrlGenerator

logger = get_logger(__name__)

router = APIRouter()


@router.api_route(
    settings.notification_path,
    methods=["GET", "POST"],
    response_model=NotificationAck,
    responses={status.HTTP_403_FORBIDDEN: {"model": ErrorResponse}},
)
async def server_notifications(
    callback: CallbackRequest = Depends(require_valid_signature),
) -> NotificationAck:
    """
    Receive a server-to-server notification from a store platform.

    Only the URL signature is checked here; the payload is handed on as is.
    """
    logger.info("server_notification_received", provider=callback.provider)
    return NotificationAck(provider=callback.provider)


@router.get(
    "/v1/notifications/url",
    response_model=CallbackUrlResponse,
    dependencies=[Depends(require_admin_api_key)],
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}},
)
async def callback_url(
    provider: str = Query(..., description="Provider identifier"),
    signed: bool = Query(True, description="Sign the URL"),
    generator: CallbackUrlGenerator = Depends(get_callback_url_generator),
) -> CallbackUrlResponse:
    """
    Generate the callback URL to register with a provider.

    Requires X-API-Key: a signed URL is accepted by the callback route.
    """
    try:
        provider_id = ProviderId(provider)
    except InvalidProviderError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.reason,
        ) from exc

    with trace_operation("callback.generate_url", provider=provider_id.value, signed=signed):
        if signed:
            url = generator.signed_url(provider_id.value)
        else:
            url = generator.unsigned_url(provider_id.value)

    metrics.record_url_generated(signed)
    return CallbackUrlResponse(provider=provider_id.value, url=url, signed=signed)
