"""
Boxtal Connect — Encrypted body envelope
=========================================
Every body the Boxtal platform sends to the shop endpoints is wrapped in an
envelope:

    {"encryptedKey": "<b64>", "encryptedData": "<b64>"}

encryptedKey  = nonce(12) || AES-256-GCM(ENCRYPTION_KEY, message key)
encryptedData = nonce(12) || AES-256-GCM(message key, JSON body)

A fresh 32-byte message key is drawn for every envelope.
"""

import base64
import binascii
import json
import logging
import os
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from config import ENCRYPTION_KEY

logger = logging.getLogger(__name__)

NONCE_SIZE = 12
KEY_SIZE   = 32


def _shared_key(key: str | None = None) -> bytes:
    raw = base64.b64decode(key if key is not None else ENCRYPTION_KEY)
    if len(raw) != KEY_SIZE:
        raise ValueError(f"Encryption key must be {KEY_SIZE} bytes, got {len(raw)}")
    return raw


def _seal(key: bytes, plaintext: bytes) -> str:
    nonce = os.urandom(NONCE_SIZE)
    return base64.b64encode(nonce + AESGCM(key).encrypt(nonce, plaintext, None)).decode()


def _open(key: bytes, sealed: str) -> bytes:
    blob = base64.b64decode(sealed, validate=True)
    if len(blob) <= NONCE_SIZE:
        raise ValueError("Sealed value too short")
    return AESGCM(key).decrypt(blob[:NONCE_SIZE], blob[NONCE_SIZE:], None)


def encrypt_body(value: Any, key: str | None = None) -> str:
    """Wrap a JSON-serialisable value in an encrypted envelope."""
    message_key = AESGCM.generate_key(bit_length=KEY_SIZE * 8)
    return json.dumps({
        "encryptedKey":  _seal(_shared_key(key), message_key),
        "encryptedData": _seal(message_key, json.dumps(value).encode()),
    })


def decrypt_body(raw: bytes | str, key: str | None = None) -> Any:
    """
    Open an envelope and return the decoded JSON body.

    Returns None when the body is empty, not an envelope, fails authentication
    or does not decode to JSON. Never raises for bad input.
    """
    if not raw:
        return None

    try:
        envelope = json.loads(raw)
    except ValueError:
        logger.debug("Body is not JSON")
        return None

    if not isinstance(envelope, dict):
        return None
    encrypted_key  = envelope.get("encryptedKey")
    encrypted_data = envelope.get("encryptedData")
    if not isinstance(encrypted_key, str) or not isinstance(encrypted_data, str):
        logger.debug("Body is not an encrypted envelope")
        return None

    try:
        message_key = _open(_shared_key(key), encrypted_key)
        plaintext   = _open(message_key, encrypted_data)
        return json.loads(plaintext)
    except (InvalidTag, binascii.Error, ValueError) as e:
        logger.warning("Could not decrypt body: %s", e or type(e).__name__)
        return None
