"""Pydantic schemas for API requests and responses."""

from src.schemas.notification import DeliveryResult, DispatchResponse, VapidPublicKeyResponse

__all__ = [
    "VapidPublicKeyResponse",
    "DeliveryResult",
    "DispatchResponse",
]
