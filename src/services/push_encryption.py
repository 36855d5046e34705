"""Web Push message encryption using the legacy "aesgcm" content-coding.

Implements draft-ietf-webpush-encryption-04 on top of draft-ietf-httpbis-encryption-encoding-03,
which is the coding announced by ``Content-Encoding: aesgcm``. Key agreement is ECDH on P-256
between a one-time server key and the subscriber's ``p256dh`` key; the subscriber's ``auth``
secret is mixed in before the content key and nonce are derived with HKDF-SHA256. The padded
plaintext is sealed as a single AES-128-GCM record.

The receiving browser needs the ephemeral server public key (``Crypto-Key: dh=``) and the salt
(``Encryption: salt=``) to rebuild the same keys.
"""

import os
import struct
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

CONTENT_ENCODING = "aesgcm"

AUTH_INFO = b"Content-Encoding: auth\x00"
KEY_INFO = b"Content-Encoding: aesgcm\x00"
NONCE_INFO = b"Content-Encoding: nonce\x00"
KEY_LABEL = b"P-256"

SALT_LENGTH = 16
AUTH_SECRET_LENGTH = 16
PUBLIC_KEY_LENGTH = 65
PRK_LENGTH = 32
KEY_LENGTH = 16
NONCE_LENGTH = 12
TAG_LENGTH = 16
PADDING_LENGTH_SIZE = 2

# Push services accept at most 4096 bytes of encrypted body
MAX_PAYLOAD_LENGTH = 4096
MAX_PLAINTEXT_LENGTH = MAX_PAYLOAD_LENGTH - PADDING_LENGTH_SIZE - TAG_LENGTH


class EncryptionError(Exception):
    """Raised when a push payload cannot be encrypted or decrypted."""


@dataclass(frozen=True)
class EncryptedPayload:
    """Body and parameters of one encrypted push message."""

    ciphertext: bytes
    server_public_key: bytes
    salt: bytes


def _hkdf(salt: bytes, ikm: bytes, info: bytes, length: int) -> bytes:
    return HKDF(algorithm=hashes.SHA256(), length=length, salt=salt, info=info).derive(ikm)


def _length_prefixed(key: bytes) -> bytes:
    return struct.pack("!H", len(key)) + key


def _raw_public_key(key: ec.EllipticCurvePublicKey) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )


def load_public_key(raw: bytes) -> ec.EllipticCurvePublicKey:
    """Import a subscriber's uncompressed P-256 point."""
    if len(raw) != PUBLIC_KEY_LENGTH or raw[0] != 0x04:
        raise EncryptionError("Public key must be a 65-byte uncompressed P-256 point")
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256R1(), raw)
    except ValueError as e:
        raise EncryptionError(f"Public key is not a valid P-256 point: {e}") from e


def derive_key_and_nonce(
    shared_secret: bytes,
    auth_secret: bytes,
    salt: bytes,
    client_public_key: bytes,
    server_public_key: bytes,
) -> tuple[bytes, bytes]:
    """Run the aesgcm key schedule, returning (content key, nonce)."""
    prk = _hkdf(auth_secret, shared_secret, AUTH_INFO, PRK_LENGTH)
    context = (
        KEY_LABEL
        + b"\x00"
        + _length_prefixed(client_public_key)
        + _length_prefixed(server_public_key)
    )
    key = _hkdf(salt, prk, KEY_INFO + context, KEY_LENGTH)
    nonce = _hkdf(salt, prk, NONCE_INFO + context, NONCE_LENGTH)
    return key, nonce


def _check_secrets(auth_secret: bytes, salt: bytes) -> None:
    if len(auth_secret) != AUTH_SECRET_LENGTH:
        raise EncryptionError(f"Auth secret must be {AUTH_SECRET_LENGTH} bytes")
    if len(salt) != SALT_LENGTH:
        raise EncryptionError(f"Salt must be {SALT_LENGTH} bytes")


def encrypt(
    client_public_key: bytes,
    client_auth_secret: bytes,
    plaintext: bytes,
    server_private_key: ec.EllipticCurvePrivateKey | None = None,
    salt: bytes | None = None,
) -> EncryptedPayload:
    """Encrypt ``plaintext`` for one subscriber.

    A fresh server key pair and salt are generated on every call; the optional
    arguments exist only to reproduce known vectors and must not be reused.
    """
    if len(plaintext) > MAX_PLAINTEXT_LENGTH:
        raise EncryptionError(
            f"Payload of {len(plaintext)} bytes exceeds {MAX_PLAINTEXT_LENGTH} byte limit"
        )
    salt = os.urandom(SALT_LENGTH) if salt is None else salt
    _check_secrets(client_auth_secret, salt)

    client_key = load_public_key(client_public_key)
    server_key = server_private_key or ec.generate_private_key(ec.SECP256R1())
    server_public_key = _raw_public_key(server_key.public_key())

    shared_secret = server_key.exchange(ec.ECDH(), client_key)
    key, nonce = derive_key_and_nonce(
        shared_secret, client_auth_secret, salt, client_public_key, server_public_key
    )

    # Two-byte padding length (no padding) ahead of the content
    record = struct.pack("!H", 0) + plaintext
    ciphertext = AESGCM(key).encrypt(nonce, record, None)

    return EncryptedPayload(ciphertext=ciphertext, server_public_key=server_public_key, salt=salt)


def decrypt(
    client_private_key: ec.EllipticCurvePrivateKey,
    client_auth_secret: bytes,
    server_public_key: bytes,
    salt: bytes,
    ciphertext: bytes,
) -> bytes:
    """Decrypt a single-record aesgcm payload as the subscribing browser would."""
    _check_secrets(client_auth_secret, salt)
    server_key = load_public_key(server_public_key)
    client_public_key = _raw_public_key(client_private_key.public_key())

    shared_secret = client_private_key.exchange(ec.ECDH(), server_key)
    key, nonce = derive_key_and_nonce(
        shared_secret, client_auth_secret, salt, client_public_key, server_public_key
    )

    try:
        record = AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise EncryptionError("Authentication tag mismatch") from e

    if len(record) < PADDING_LENGTH_SIZE:
        raise EncryptionError("Record too short")
    pad_length = struct.unpack("!H", record[:PADDING_LENGTH_SIZE])[0]
    end = PADDING_LENGTH_SIZE + pad_length
    if end > len(record) or any(record[PADDING_LENGTH_SIZE:end]):
        raise EncryptionError("Invalid padding")
    return record[end:]
