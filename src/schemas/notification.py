"""Notification-related Pydantic schemas."""

from pydantic import BaseModel


class VapidPublicKeyResponse(BaseModel):
    """Schema for VAPID public key response."""

    public_key: str | None


class DeliveryResult(BaseModel):
    """Outcome of one reminder push."""

    user_id: int
    success: bool


class DispatchResponse(BaseModel):
    """Schema for the reminder dispatch response.

    ``results`` is omitted when the run exited early (no subscriptions, or nobody
    in the reminder hour).
    """

    message: str
    results: list[DeliveryResult] | None = None
