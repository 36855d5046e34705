"""Notification API endpoints used by the client when subscribing."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.config import Settings, get_settings
from src.schemas.notification import VapidPublicKeyResponse

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("/vapid-public-key", response_model=VapidPublicKeyResponse)
async def get_vapid_public_key(
    settings: Annotated[Settings, Depends(get_settings)],
) -> VapidPublicKeyResponse:
    """Get the VAPID public key for push notification subscription."""
    return VapidPublicKeyResponse(public_key=settings.vapid_public_key)
