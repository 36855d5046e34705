"""FastAPI dependencies for the reminder trigger."""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.config import ConfigurationError, DispatcherConfig, Settings, get_settings
from src.database import get_db
from src.services.reminder_service import ReminderDispatcher

security = HTTPBearer()

__all__ = ["get_db", "get_reminder_dispatcher", "verify_dispatch_token"]


def verify_dispatch_token(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Only the scheduler holding DISPATCH_TOKEN may trigger a run."""
    if not settings.dispatch_token:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dispatch token not configured",
        )

    if not secrets.compare_digest(credentials.credentials, settings.dispatch_token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid dispatch token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_reminder_dispatcher(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReminderDispatcher:
    """Build a dispatcher from settings, or 503 if VAPID keys are missing."""
    try:
        return ReminderDispatcher(DispatcherConfig.from_settings(settings))
    except ConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e
