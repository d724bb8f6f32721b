"""
ContentStore Credential Manager — Encrypted secret access key handling
using Fernet symmetric encryption.

Provides:
    - CredentialManager: Encrypt/decrypt the object store secret access key
    - Key derivation from CONTENTSTORE_SECRET_KEY or an explicit key
    - resolve_secret_access_key(): plain value first, encrypted value second

Security model:
    - contentstore.yaml may carry secret_access_key_encrypted instead of the
      plain secret (token produced by `contentstore encrypt-secret`)
    - Decrypted only at startup, in-memory, when the S3 client is built
"""

from __future__ import annotations

import base64
import hashlib
import logging
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from contentstore.engine.errors import StoreConfigError

logger = logging.getLogger("contentstore.engine.credentials")

SECRET_KEY_ENV = "CONTENTSTORE_SECRET_KEY"
_DEFAULT_SECRET_KEY = "contentstore-dev-key-change-in-production"


class CredentialManager:
    """
    Encrypts and decrypts the object store secret access key.

    Usage:
        manager = CredentialManager(secret_key="...")
        token = manager.encrypt_secret("wJalrXUtnFEMI/K7MDENG")
        manager.decrypt_secret(token)
        # → "wJalrXUtnFEMI/K7MDENG"
    """

    def __init__(self, secret_key: Optional[str] = None):
        self._fernet = self._build_fernet(secret_key)

    @staticmethod
    def _build_fernet(secret_key: Optional[str] = None) -> Fernet:
        """
        Build a Fernet instance from a secret key.

        An explicit secret_key wins, then CONTENTSTORE_SECRET_KEY, then the
        dev default.
        """
        key_source = (
            secret_key
            or os.environ.get(SECRET_KEY_ENV)
            or _DEFAULT_SECRET_KEY
        )
        if key_source == _DEFAULT_SECRET_KEY:
            logger.warning("Using the default credential key; set %s in production", SECRET_KEY_ENV)

        # Fernet requires a URL-safe base64 32-byte key
        derived = hashlib.sha256(key_source.encode("utf-8")).digest()
        return Fernet(base64.urlsafe_b64encode(derived))

    def encrypt_secret(self, secret: str) -> str:
        """Encrypt a secret to a Fernet token (str, safe for YAML)."""
        return self._fernet.encrypt(secret.encode("utf-8")).decode("ascii")

    def decrypt_secret(self, token: str) -> str:
        """
        Decrypt a Fernet token back to the secret.

        Raises:
            StoreConfigError: If decryption fails (wrong key, corrupted token).
        """
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as e:
            raise StoreConfigError(
                "Failed to decrypt secret access key, the encryption key may have changed",
                operation="decrypt_secret",
                error=type(e).__name__,
            )


def resolve_secret_access_key(config, manager: Optional[CredentialManager] = None) -> Optional[str]:
    """
    Return the plain secret access key for a StoreConfig.

    The plain secret_access_key wins; otherwise secret_access_key_encrypted is
    decrypted. Returns None when neither is set.
    """
    if config.secret_access_key:
        return config.secret_access_key
    if not config.secret_access_key_encrypted:
        return None
    manager = manager or CredentialManager()
    return manager.decrypt_secret(config.secret_access_key_encrypted)
