"""Secrets resolution for credentials and keystore passwords.

The keystore/truststore password and the NiFi single-user credentials are
never written into source or defaults. They are resolved at run time from a
chain of backends:

    ┌────────────────────────────────────────────────────────────────┐
    │                   SecretsResolver                               │
    │   backends (tried in order):                                    │
    │     - EnvSecretBackend   NIFI_DEPLOY_SECRET_{KEY}, {KEY}        │
    │     - FileSecretBackend  /run/secrets/{key}                     │
    │     - DictSecretBackend  (tests)                                │
    └────────────────────────────────────────────────────────────────┘

Examples:
    >>> resolver = SecretsResolver([DictSecretBackend({"store_password": "s3cret"})])
    >>> resolver.resolve("store_password")
    's3cret'
    >>> resolver.resolve("missing", default=None) is None
    True

Tags:
    secrets, credentials, docker-secrets, nifi-deploy
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from nifi_deploy.core.errors import MissingSecretError

# Sentinel for distinguishing "no default" from None
_SENTINEL = object()


# ---------------------------------------------------------------------------
# Secret backends
# ---------------------------------------------------------------------------


class SecretBackend(ABC):
    """Abstract base for secret backends."""

    @abstractmethod
    def get(self, name: str) -> str | None:
        """Retrieve a secret by name, or None if this backend lacks it."""
        ...


class EnvSecretBackend(SecretBackend):
    """Resolve secrets from environment variables.

    Tries ``NIFI_DEPLOY_SECRET_{KEY}`` first, then ``{KEY}``.
    """

    def __init__(self, prefix: str = "NIFI_DEPLOY_SECRET_"):
        self.prefix = prefix

    def get(self, name: str) -> str | None:
        key_upper = name.upper()
        for pattern in (f"{self.prefix}{key_upper}", key_upper):
            value = os.environ.get(pattern)
            if value:
                return value
        return None


class FileSecretBackend(SecretBackend):
    """Resolve secrets from files (Docker secrets, Kubernetes mounts).

    The secret name is the file name inside ``secrets_dir``; contents are
    stripped of surrounding whitespace.
    """

    def __init__(self, secrets_dir: str | Path = "/run/secrets"):
        self.secrets_dir = Path(secrets_dir)
        self._cache: dict[str, str] = {}

    def get(self, name: str) -> str | None:
        if name in self._cache:
            return self._cache[name]

        secret_path = self.secrets_dir / name
        if not secret_path.is_file():
            return None

        try:
            content = secret_path.read_text().strip()
        except OSError:
            return None
        if not content:
            return None
        self._cache[name] = content
        return content


class DictSecretBackend(SecretBackend):
    """In-memory secret backend for testing."""

    def __init__(self, secrets: dict[str, str] | None = None):
        self._secrets = dict(secrets) if secrets else {}

    def get(self, name: str) -> str | None:
        return self._secrets.get(name)


# ---------------------------------------------------------------------------
# SecretsResolver
# ---------------------------------------------------------------------------


class SecretsResolver:
    """Multi-backend secrets resolver.

    Resolves secrets by trying backends in order until one succeeds.
    """

    def __init__(self, backends: list[SecretBackend] | None = None):
        self._backends: list[SecretBackend] = list(backends) if backends is not None else []

    @property
    def backends(self) -> list[SecretBackend]:
        return list(self._backends)

    def resolve(self, key: str, default: Any = _SENTINEL) -> str | None:
        """Resolve a secret by key.

        Raises:
            MissingSecretError: If no backend has the secret and no default given
        """
        tried: list[str] = []
        for backend in self._backends:
            tried.append(type(backend).__name__)
            value = backend.get(key)
            if value is not None:
                return value

        if default is not _SENTINEL:
            return default

        raise MissingSecretError(key, tried)


def default_resolver(secrets_dir: str | Path = "/run/secrets") -> SecretsResolver:
    """Environment first, then mounted secret files."""
    return SecretsResolver([EnvSecretBackend(), FileSecretBackend(secrets_dir)])


__all__ = [
    "DictSecretBackend",
    "EnvSecretBackend",
    "FileSecretBackend",
    "SecretBackend",
    "SecretsResolver",
    "default_resolver",
]
