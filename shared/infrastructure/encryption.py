"""
Fernet encryption for guest identity data.

``ENCRYPTION_KEY`` may be a real Fernet key or any passphrase; a
passphrase is stretched with SHA-256 into a valid key so dev and test
settings can use readable values.
"""

import base64
import binascii
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


def _derive_key(secret: str) -> bytes:
    raw = secret.encode()
    try:
        if len(base64.urlsafe_b64decode(raw)) == 32:
            return raw
    except (binascii.Error, ValueError):
        pass
    return base64.urlsafe_b64encode(hashlib.sha256(raw).digest())


@lru_cache(maxsize=4)
def _cipher(secret: str) -> Fernet:
    return Fernet(_derive_key(secret))


def cipher() -> Fernet:
    secret = getattr(settings, 'ENCRYPTION_KEY', '')
    if not secret:
        raise ImproperlyConfigured('ENCRYPTION_KEY must be set to store guest identity numbers')
    return _cipher(secret)


def encrypt_string(plaintext: str) -> str:
    return cipher().encrypt(plaintext.encode()).decode() if plaintext else ''


def decrypt_string(token: str) -> str:
    return cipher().decrypt(token.encode()).decode() if token else ''
