"""Secret sources, one per SecretRef scheme."""

import inspect
import os
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Union

import aiofiles
from cryptography.fernet import Fernet, InvalidToken

from ...core.exceptions import AuthFailureError


class SecretSource(ABC):
    """Resolves the part of a SecretRef after the scheme prefix."""

    scheme: str = ""

    @abstractmethod
    async def fetch(self, key: str) -> str:
        """Return the plaintext for key, or raise AuthFailureError."""


class EnvSecretSource(SecretSource):
    """env:NAME -> value of environment variable NAME."""

    scheme = "env"

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    async def fetch(self, key: str) -> str:
        value = self._environ.get(key)
        if not value:
            raise AuthFailureError(f"Environment variable {key} is not set")
        return value


class FileSecretSource(SecretSource):
    """file:/run/secrets/smb -> first line of the file, whitespace stripped."""

    scheme = "file"

    async def fetch(self, key: str) -> str:
        try:
            async with aiofiles.open(key, "r", encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            raise AuthFailureError(f"Secret file {key} cannot be read: {e.strerror or e}")

        value = content.splitlines()[0].strip() if content else ""
        if not value:
            raise AuthFailureError(f"Secret file {key} is empty")
        return value


class StoreSecretSource(SecretSource):
    """
    store:<key> -> lookup in the credential subsystem.

    The store may be a plain mapping or any object with a get_secret(key)
    method, sync or async.
    """

    scheme = "store"

    def __init__(self, store: Union[Mapping[str, str], Any]):
        self._store = store

    async def fetch(self, key: str) -> str:
        if hasattr(self._store, "get_secret"):
            try:
                value = self._store.get_secret(key)
                if inspect.isawaitable(value):
                    value = await value
            except KeyError:
                value = None
        else:
            value = self._store.get(key)

        if not value:
            raise AuthFailureError(f"Stored secret '{key}' not found")
        return value


class FernetSecretSource(SecretSource):
    """encv1:<token> -> token decrypted with the application secret key."""

    scheme = "encv1"

    def __init__(self, secret_key: str):
        self._fernet = Fernet(secret_key.encode() if isinstance(secret_key, str) else secret_key)

    async def fetch(self, key: str) -> str:
        try:
            return self._fernet.decrypt(key.encode()).decode()
        except InvalidToken:
            raise AuthFailureError("Encrypted secret cannot be decrypted with the configured key")

    def encrypt(self, plaintext: str) -> str:
        """Produce an encv1: reference for plaintext."""
        return f"{self.scheme}:{self._fernet.encrypt(plaintext.encode()).decode()}"
