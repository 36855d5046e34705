#!/usr/bin/env python3
"""Generate a VAPID key pair for web push.

Prints the keys in the raw base64url form the dispatcher and the browser's
``applicationServerKey`` expect (65-byte public point, 32-byte private scalar).

Usage:
    python scripts/generate_vapid_keys.py >> .env
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from src.services.base64url import b64url_encode


def generate_vapid_keys() -> tuple[str, str]:
    """Return (public_key, private_key) as unpadded base64url strings."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    public_point = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )
    scalar = private_key.private_numbers().private_value.to_bytes(32, "big")
    return b64url_encode(public_point), b64url_encode(scalar)


def main() -> None:
    public_key, private_key = generate_vapid_keys()
    print(f"VAPID_PUBLIC_KEY={public_key}")
    print(f"VAPID_PRIVATE_KEY={private_key}")


if __name__ == "__main__":
    main()
