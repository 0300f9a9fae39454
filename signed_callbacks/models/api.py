"""
API Models - Request/response schemas for the HTTP surface.
"""

from pydantic import BaseModel, Field


class CallbackUrlResponse(BaseModel):
    """Callback URL generated for a provider."""

    provider: str = Field(..., description="Provider identifier, e.g. google_play")
    url: str = Field(..., description="URL to register with the provider")
    signed: bool = Field(..., description="Whether the URL carries a signature")


class NotificationAck(BaseModel):
    """Acknowledgement returned to a provider after an authentic callback."""

    status: str = Field(default="received")
    provider: str | None = Field(default=None, description="Provider named in the callback URL")


class ErrorResponse(BaseModel):
    """Error body for rejected callbacks."""

    detail: str
