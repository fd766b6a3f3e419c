"""Dockerfile generation for the TLS (server) image.

The server image is the upstream NiFi image plus the two PKCS12 stores and
the environment NiFi's start script reads to switch to HTTPS with
single-user authentication. The Dockerfile is rendered from the validated
``DeploymentConfig``, written next to the stores (the build context) and
left in place after the build.

Key Concepts:
    generate_dockerfile: Renders the text; raises if a value it needs is
        still missing.
    write_dockerfile: Persists the text, returns the path.

Guardrails:
    - The store password comes from ``config.tls.store_password``, which is
      resolved from settings, secret backends or a hidden prompt. There is
      no built-in default.
    - ``ENV`` values outside a plain character set are double-quoted with
      ``\\``, ``"`` and ``$`` escaped, so the builder neither splits nor
      expands them. A value containing a line break is rejected.

Tags:
    dockerfile, docker, tls, generation, nifi-deploy
"""

from __future__ import annotations

import re
from pathlib import Path

from nifi_deploy.core.errors import MissingSecretError, ValidationError
from nifi_deploy.core.logging import get_logger
from nifi_deploy.deploy.config import DeploymentConfig

logger = get_logger(__name__)

NIFI_START_CMD = '["./opt/nifi/nifi-current/bin/nifi.sh", "start"]'

_PLAIN_ENV_VALUE = re.compile(r"[A-Za-z0-9_.:/,@%+=-]+")


def image_environment(config: DeploymentConfig) -> dict[str, str]:
    """``ENV`` entries baked into the TLS image, in Dockerfile order."""
    missing = [
        name
        for name in ("http_port", "proxy_host", "username", "password")
        if getattr(config, name) is None
    ]
    if missing:
        raise ValidationError(
            f"Cannot render Dockerfile, missing: {', '.join(missing)}",
            field=missing[0],
            constraint="required",
        )
    tls = config.tls
    if tls.store_password is None:
        raise MissingSecretError("store_password")

    env = {
        "NIFI_WEB_HTTPS_PORT": str(config.http_port),
        "NIFI_WEB_PROXY_HOST": config.proxy_host or "",
        "NIFI_SECURITY_USER_AUTHORIZER": tls.authorizer,
        "NIFI_SECURITY_USER_LOGIN_IDENTITY_PROVIDER": tls.login_provider,
        "SINGLE_USER_CREDENTIALS_USERNAME": config.username or "",
        "SINGLE_USER_CREDENTIALS_PASSWORD": config.password.get_secret_value(),  # type: ignore[union-attr]
        "INITIAL_ADMIN_IDENTITY": tls.admin_identity,
        "AUTH": tls.auth_mode,
        "TRUSTSTORE_PATH": tls.image_path(tls.truststore),
        "TRUSTSTORE_PASSWORD": tls.store_password.get_secret_value(),
        "TRUSTSTORE_TYPE": tls.store_type,
        "KEYSTORE_PATH": tls.image_path(tls.keystore),
        "KEYSTORE_TYPE": tls.store_type,
        "KEYSTORE_PASSWORD": tls.store_password.get_secret_value(),
    }
    for key, value in env.items():
        if "\n" in value or "\r" in value:
            raise ValidationError(
                f"{key} must be a single line.",
                field=key,
                constraint="no line breaks",
            )
    return env


def quote_env_value(value: str) -> str:
    """Render a value for a Dockerfile ``ENV key=value`` pair."""
    if _PLAIN_ENV_VALUE.fullmatch(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{escaped}"'


def generate_dockerfile(config: DeploymentConfig) -> str:
    """Render the Dockerfile for the server image."""
    tls = config.tls
    lines = [
        f"FROM {config.names.base_image}",
        "",
        "USER root",
        "",
        "# Set environment variables",
    ]
    lines.extend(f"ENV {key}={quote_env_value(value)}" for key, value in image_environment(config).items())

    lines.extend(["", "# Copy truststore and keystore files to container"])
    for store in tls.store_files:
        lines.append(f"COPY {store} {tls.image_path(store)}")
    lines.append("")
    for store in tls.store_files:
        lines.append(f"RUN chmod +x {tls.image_path(store)}")

    lines.extend([
        "",
        "# Expose NiFi HTTPS port",
        f"EXPOSE {config.http_port}",
        "",
        "# Start NiFi",
        f"CMD {NIFI_START_CMD}",
        "",
    ])
    return "\n".join(lines)


def write_dockerfile(content: str, output_path: str | Path) -> Path:
    """Write Dockerfile text to disk, creating parent directories."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("dockerfile.written", path=str(path))
    return path
