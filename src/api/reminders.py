"""HTTP trigger for the reminder run, for schedulers that call a URL."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from src.api.dependencies import get_db, get_reminder_dispatcher, verify_dispatch_token
from src.schemas.notification import DispatchResponse
from src.services.reminder_service import ReminderDispatcher
from src.services.reminder_store import DataAccessError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/reminders", tags=["reminders"])


@router.post(
    "/dispatch",
    response_model=DispatchResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(verify_dispatch_token)],
)
async def dispatch_reminders(
    db: Annotated[Session, Depends(get_db)],
    dispatcher: Annotated[ReminderDispatcher, Depends(get_reminder_dispatcher)],
):
    """Run one reminder pass and report what was sent."""
    try:
        report = await dispatcher.run(db)
    except DataAccessError as e:
        logger.error(f"Reminder dispatch failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e)},
        )

    return report.to_response()
