"""FastAPI application entry point."""

from fastapi import FastAPI

from src.api import notifications, reminders
from src.config import get_settings

settings = get_settings()

app = FastAPI(
    title="Check-in Reminders API",
    description="Web Push reminders for the daily check-in log",
    version="0.1.0",
)

# Register routers
app.include_router(notifications.router)
app.include_router(reminders.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
