"""Secret Resolver - turns a SecretRef into plaintext at the moment of use."""

import logging
from typing import Any, Dict, Iterable, Optional

from pydantic import SecretStr

from ...config import Settings
from ...core.exceptions import AuthFailureError
from .secret_sources import (
    EnvSecretSource,
    FernetSecretSource,
    FileSecretSource,
    SecretSource,
    StoreSecretSource,
)


class SecretResolver:
    """
    Resolves opaque credential references.

    Nothing is cached: every call goes to the source again and the plaintext
    is handed back wrapped in SecretStr, so it never shows up in a repr or
    log line by accident.
    """

    def __init__(self, sources: Iterable[SecretSource]):
        self._sources: Dict[str, SecretSource] = {source.scheme: source for source in sources}

    @classmethod
    def from_settings(cls, settings: Settings, store: Optional[Any] = None) -> "SecretResolver":
        sources: list[SecretSource] = [EnvSecretSource(), FileSecretSource()]
        if store is not None:
            sources.append(StoreSecretSource(store))
        if settings.secret_key:
            sources.append(FernetSecretSource(settings.secret_key))
        return cls(sources)

    @property
    def schemes(self) -> list[str]:
        return sorted(self._sources)

    async def resolve(self, ref: Optional[str]) -> SecretStr:
        """
        Resolve ref to its plaintext value.

        Raises:
            AuthFailureError: If ref is empty, malformed, uses an unknown
                scheme, or the source cannot produce a value.
        """
        if not ref:
            raise AuthFailureError("No secret reference configured")

        scheme, sep, key = ref.partition(":")
        if not sep or not key:
            raise AuthFailureError(f"Malformed secret reference (expected <scheme>:<key>): {self.describe(ref)}")

        source = self._sources.get(scheme)
        if source is None:
            raise AuthFailureError(f"Unsupported secret reference scheme '{scheme}'")

        value = await source.fetch(key)
        logging.debug(f"Resolved secret reference {self.describe(ref)}")
        return SecretStr(value)

    @staticmethod
    def describe(ref: str) -> str:
        """Loggable form of a reference; encrypted payloads are not shown."""
        scheme, sep, _ = ref.partition(":")
        if scheme == FernetSecretSource.scheme:
            return f"{scheme}:******"
        return ref if sep else "<unnamed>"
