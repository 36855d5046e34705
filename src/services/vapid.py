"""VAPID sender authentication for Web Push (RFC 8292)."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from urllib.parse import urlsplit

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from jose import jwt
from jose.exceptions import JOSEError

from src.services.base64url import b64url_decode, b64url_encode

logger = logging.getLogger(__name__)

# Push services reject tokens valid for more than 24 hours
TOKEN_LIFETIME = timedelta(hours=12)

UNCOMPRESSED_POINT_LENGTH = 65
PRIVATE_SCALAR_LENGTH = 32


class VapidError(Exception):
    """Raised when the VAPID key cannot be imported or a token cannot be signed."""


@dataclass(frozen=True)
class VapidHeaders:
    """Header values produced for one push request."""

    authorization: str
    public_key: str


def audience_for(endpoint: str) -> str:
    """Return the origin (scheme://host[:port]) of a push endpoint."""
    try:
        parts = urlsplit(endpoint)
        port = parts.port
    except ValueError as e:
        raise VapidError(f"Endpoint is not a valid URL: {endpoint!r}") from e
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise VapidError(f"Endpoint is not an absolute http(s) URL: {endpoint!r}")
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    if port is not None:
        host = f"{host}:{port}"
    return f"{parts.scheme}://{host}"


def load_private_key(public_key: str, private_key: str) -> ec.EllipticCurvePrivateKey:
    """Import a P-256 key pair given as raw base64url point and scalar."""
    try:
        point = b64url_decode(public_key)
        scalar = b64url_decode(private_key)
    except ValueError as e:
        raise VapidError(f"VAPID key is not valid base64url: {e}") from e

    if len(point) != UNCOMPRESSED_POINT_LENGTH or point[0] != 0x04:
        raise VapidError("VAPID public key must be a 65-byte uncompressed P-256 point")
    if len(scalar) != PRIVATE_SCALAR_LENGTH:
        raise VapidError("VAPID private key must be a 32-byte P-256 scalar")

    x = int.from_bytes(point[1:33], "big")
    y = int.from_bytes(point[33:], "big")
    numbers = ec.EllipticCurvePrivateNumbers(
        int.from_bytes(scalar, "big"),
        ec.EllipticCurvePublicNumbers(x, y, ec.SECP256R1()),
    )
    try:
        # Fails when the point is off-curve or does not belong to the scalar
        return numbers.private_key()
    except ValueError as e:
        raise VapidError(f"Invalid VAPID key pair: {e}") from e


class VapidSigner:
    """Signs short-lived ES256 tokens identifying this application server."""

    def __init__(self, public_key: str, private_key: str, subject: str) -> None:
        self._key = load_private_key(public_key, private_key)
        self._pem = self._key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode("ascii")
        # Re-encode so the k= parameter is always canonical unpadded base64url
        self.public_key = b64url_encode(
            self._key.public_key().public_bytes(
                encoding=serialization.Encoding.X962,
                format=serialization.PublicFormat.UncompressedPoint,
            )
        )
        self.subject = subject

    def token(self, audience: str, now: datetime | None = None) -> str:
        """Build the compact JWS for ``audience``."""
        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        claims = {
            "aud": audience,
            "sub": self.subject,
            "exp": int((now + TOKEN_LIFETIME).timestamp()),
        }
        try:
            return jwt.encode(claims, self._pem, algorithm="ES256")
        except (JOSEError, ValueError, TypeError) as e:
            raise VapidError(f"Failed to sign VAPID token for {audience}: {e}") from e

    def sign(self, audience: str, now: datetime | None = None) -> VapidHeaders:
        """Return the Authorization value and public key for a push request."""
        token = self.token(audience, now)
        return VapidHeaders(
            authorization=f"vapid t={token}, k={self.public_key}",
            public_key=self.public_key,
        )
