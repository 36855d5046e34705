"""Delivers encrypted Web Push reminders to subscribers' push services."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

import httpx

from src.config import ConfigurationError, DispatcherConfig
from src.services.base64url import b64url_encode
from src.services.eligibility import EligibleRecipient
from src.services.push_encryption import (
    CONTENT_ENCODING,
    EncryptedPayload,
    EncryptionError,
    encrypt,
)
from src.services.vapid import VapidError, VapidHeaders, VapidSigner, audience_for

logger = logging.getLogger(__name__)

# Push services answer 404/410 once the browser has dropped the subscription
EXPIRED_STATUS_CODES = (404, 410)


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of one push attempt."""

    user_id: int
    success: bool
    status_code: int | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {"user_id": self.user_id, "success": self.success}


@dataclass(frozen=True)
class DeliverySummary:
    """Aggregate of all push attempts in one run."""

    outcomes: tuple[DeliveryOutcome, ...] = ()

    @property
    def sent(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def message(self) -> str:
        return f"Sent {self.sent}/{self.attempted} reminders"


def build_push_headers(
    payload: EncryptedPayload,
    vapid: VapidHeaders,
    ttl_seconds: int,
    urgency: str | None = None,
) -> dict[str, str]:
    """Request headers for an aesgcm-encoded push message."""
    headers = {
        "Authorization": vapid.authorization,
        "TTL": str(ttl_seconds),
        "Content-Type": "application/octet-stream",
        "Content-Encoding": CONTENT_ENCODING,
        "Crypto-Key": f"dh={b64url_encode(payload.server_public_key)};p256ecdsa={vapid.public_key}",
        "Encryption": f"salt={b64url_encode(payload.salt)}",
    }
    if urgency:
        headers["Urgency"] = urgency
    return headers


class NotificationService:
    """Signs, encrypts and posts reminders, one independent attempt per recipient."""

    def __init__(
        self,
        config: DispatcherConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        try:
            self.signer = VapidSigner(
                config.vapid_public_key,
                config.vapid_private_key,
                config.vapid_subject,
            )
        except VapidError as e:
            raise ConfigurationError(f"Invalid VAPID key pair: {e}") from e
        self.payload = config.reminder_message.encode("utf-8")

    async def send_reminders(
        self,
        recipients: Sequence[EligibleRecipient],
        now: datetime | None = None,
    ) -> DeliverySummary:
        """Deliver the reminder to every recipient concurrently.

        At most ``max_concurrent_deliveries`` requests are in flight. A failure for one
        recipient never affects the others.
        """
        if not recipients:
            return DeliverySummary()

        now = now or datetime.now(UTC)
        semaphore = asyncio.Semaphore(self.config.max_concurrent_deliveries)

        async with httpx.AsyncClient(
            timeout=self.config.request_timeout,
            transport=self._transport,
        ) as client:

            async def bounded(recipient: EligibleRecipient) -> DeliveryOutcome:
                async with semaphore:
                    try:
                        return await self.deliver(client, recipient, now)
                    except Exception as e:
                        logger.error(
                            f"Unexpected push failure for user {recipient.user_id}: {e}",
                            exc_info=True,
                        )
                        return DeliveryOutcome(recipient.user_id, False, error=str(e))

            outcomes = await asyncio.gather(*(bounded(r) for r in recipients))

        summary = DeliverySummary(tuple(outcomes))
        logger.info(summary.message)
        return summary

    async def deliver(
        self,
        client: httpx.AsyncClient,
        recipient: EligibleRecipient,
        now: datetime,
    ) -> DeliveryOutcome:
        """Sign, encrypt and POST the reminder for one recipient."""
        try:
            vapid = self.signer.sign(audience_for(recipient.endpoint), now)
            payload = encrypt(
                recipient.client_public_key,
                recipient.client_auth_secret,
                self.payload,
            )
        except (VapidError, EncryptionError) as e:
            logger.error(f"Could not prepare push for user {recipient.user_id}: {e}")
            return DeliveryOutcome(recipient.user_id, False, error=str(e))

        headers = build_push_headers(payload, vapid, self.config.ttl_seconds, self.config.urgency)

        try:
            response = await client.post(
                recipient.endpoint,
                content=payload.ciphertext,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Push request failed for user {recipient.user_id}: {e!r}")
            return DeliveryOutcome(recipient.user_id, False, error=str(e) or type(e).__name__)

        if response.is_success:
            return DeliveryOutcome(recipient.user_id, True, status_code=response.status_code)

        if response.status_code in EXPIRED_STATUS_CODES:
            logger.info(
                f"Push subscription for user {recipient.user_id} has expired "
                f"({response.status_code} {response.text}); the client must resubscribe"
            )
        else:
            logger.error(
                f"Push failed for user {recipient.user_id}: {response.status_code} {response.text}"
            )
        return DeliveryOutcome(
            recipient.user_id,
            False,
            status_code=response.status_code,
            error=response.text or None,
        )
