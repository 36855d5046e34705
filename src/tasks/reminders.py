"""Celery task that triggers the hourly check-in reminder run."""

import asyncio
import logging

from sqlalchemy.orm import Session

from src.celery_app import app as celery_app
from src.config import ConfigurationError, DispatcherConfig
from src.database import SessionLocal
from src.services.reminder_service import ReminderDispatcher
from src.services.reminder_store import DataAccessError

logger = logging.getLogger(__name__)


@celery_app.task
def send_daily_reminders() -> dict:
    """Send the daily check-in reminder to users for whom it is now 7 PM.

    Runs at the top of every hour via celery-beat. Nothing is persisted between runs;
    eligibility is recomputed from the database each time.

    Returns:
        dict with the run's response payload, or an "error" key if the run failed
    """
    try:
        config = DispatcherConfig.from_settings()
        dispatcher = ReminderDispatcher(config)
    except ConfigurationError as e:
        logger.error(f"Reminder dispatcher is not configured: {e}")
        return {"error": str(e)}

    db: Session = SessionLocal()
    try:
        report = asyncio.run(dispatcher.run(db))
        response = report.to_response()
        logger.info(f"Reminder run complete: {response['message']}")
        return response

    except DataAccessError as e:
        logger.error(f"Error loading reminder data: {e}", exc_info=True)
        return {"error": str(e)}

    finally:
        db.close()
