"""Core primitives for nifi-deploy.

    errors.py      Structured error hierarchy (NifiDeployError and subclasses)
    logging.py     structlog configuration and ``get_logger``
    secrets.py     Pluggable secret resolution (env, files)
    settings.py    ``NIFI_DEPLOY_*`` settings via pydantic-settings
"""

from nifi_deploy.core.errors import (
    ConfigError,
    ContainerExistsError,
    DockerNotFoundError,
    ErrorCategory,
    ErrorContext,
    ExternalToolError,
    MissingCertificateError,
    MissingSecretError,
    NifiDeployError,
    PreconditionError,
    ValidationError,
)

__all__ = [
    "ConfigError",
    "ContainerExistsError",
    "DockerNotFoundError",
    "ErrorCategory",
    "ErrorContext",
    "ExternalToolError",
    "MissingCertificateError",
    "MissingSecretError",
    "NifiDeployError",
    "PreconditionError",
    "ValidationError",
]
