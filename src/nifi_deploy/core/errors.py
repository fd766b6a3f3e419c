"""
Structured error types for nifi-deploy.

Every failure in the deployment workflow is terminal: the CLI reports it and
exits with status 1. The hierarchy exists so that the report carries the
same metadata every time (category, the field or command involved, the
underlying cause) instead of a bare message.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     NifiDeployError                          │
        │          (category, context, cause, exit_code)               │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ValidationError     PreconditionError     ExternalToolError │
        │  (VALIDATION)        (PRECONDITION)        (EXTERNAL)        │
        │                           │                      │           │
        │                      MissingSecretError   DockerNotFoundError│
        │                                                              │
        │  ConfigError                                                 │
        │  (CONFIG)                                                    │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ValidationError("Port must be numeric", field="http_port", value="84a")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> error.to_dict()["field"]
    'http_port'

    >>> try:
    ...     raise OSError("disk full")
    ... except OSError as e:
    ...     error = ExternalToolError("Volume create failed", cause=e)
    >>> error.cause
    OSError('disk full')

Guardrails:
    ❌ DON'T: Put passwords in ``value`` or ``context``
    ✅ DO: Pass the field name and let the value stay out of the error

Tags:
    error-handling, exception-hierarchy, error-context, nifi-deploy
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    VALIDATION = "VALIDATION"      # Bad user input
    PRECONDITION = "PRECONDITION"  # Missing files, undeleted container
    EXTERNAL = "EXTERNAL"          # docker CLI failures
    CONFIG = "CONFIG"              # Unreadable / invalid configuration
    INTERNAL = "INTERNAL"          # Bugs, unexpected state


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Attributes:
        step: Workflow step that failed (``volumes``, ``reconcile``, ``launch``)
        run_id: Deployment run identifier
        container: Container name involved
        command: docker command line (space separated)
        metadata: Additional key-value pairs
    """

    step: str | None = None
    run_id: str | None = None
    container: str | None = None
    command: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["step", "run_id", "container", "command"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class NifiDeployError(Exception):
    """
    Base exception for all nifi-deploy errors.

    Subclasses set ``default_category``; every instance carries an
    ``ErrorContext`` and an optional chained ``cause``. ``exit_code`` is the
    process status the CLI exits with.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    exit_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> NifiDeployError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ExternalToolError("Build failed").with_context(step="launch")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class ValidationError(NifiDeployError):
    """
    User input failed a validation rule.

    Never recovered - the run aborts and the operator re-runs with a
    corrected value.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.constraint = constraint

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        if self.constraint:
            result["constraint"] = self.constraint
        return result


class PreconditionError(NifiDeployError):
    """A required condition for continuing the deployment does not hold."""

    default_category = ErrorCategory.PRECONDITION


class MissingCertificateError(PreconditionError):
    """Keystore and/or truststore file is missing from the working directory."""

    def __init__(self, missing: list[str], directory: str):
        self.missing = missing
        self.directory = directory
        super().__init__(
            f"Certificate files ({' or '.join(missing)}) not found in {directory}."
        )


class ContainerExistsError(PreconditionError):
    """A container with the target name exists and was not deleted."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Container {name} already exists and was not deleted.")


class MissingSecretError(PreconditionError):
    """A secret could not be resolved from any backend."""

    def __init__(self, key: str, tried_backends: list[str] | None = None):
        self.key = key
        self.tried_backends = tried_backends or []

        msg = f"Secret not found: {key}"
        if tried_backends:
            msg += f" (tried: {', '.join(tried_backends)})"
        super().__init__(msg)


class ExternalToolError(NifiDeployError):
    """A docker CLI command failed, timed out, or could not be started."""

    default_category = ErrorCategory.EXTERNAL

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.returncode = returncode
        self.stderr = stderr

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.returncode is not None:
            result["returncode"] = self.returncode
        if self.stderr:
            result["stderr"] = self.stderr
        return result


class DockerNotFoundError(ExternalToolError):
    """Raised when the docker CLI is not on PATH."""


class ConfigError(NifiDeployError):
    """Configuration file or settings are invalid."""

    default_category = ErrorCategory.CONFIG


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
