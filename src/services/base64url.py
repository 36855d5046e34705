"""Unpadded base64url, the encoding used by every Web Push key and header."""

import base64
import binascii


def b64url_encode(data: bytes) -> str:
    """Encode bytes as base64url without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    """Decode base64url, tolerating missing padding and standard-alphabet input.

    Raises ValueError on malformed input.
    """
    value = value.strip().replace("+", "-").replace("/", "_")
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64url value: {e}") from e
