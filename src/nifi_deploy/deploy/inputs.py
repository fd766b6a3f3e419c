"""Input adapters feeding the deployment configuration.

The workflow asks for values one at a time, in a fixed order (destination,
then port, proxy host, username, password, store password). Where an
answer comes from is decided by a chain of ``InputSource`` objects:

    ChainedInput
      ├── PresetInput(cli flags)
      ├── PresetInput(config file)
      ├── PresetInput(NIFI_DEPLOY_* settings)
      ├── SecretInput(resolver)  passwords from env secrets or /run/secrets
      └── PromptInput()          interactive terminal
          NullInput()            --non-interactive: nothing more to ask

The first source that has a value answers. Prompting is therefore one
adapter among several rather than the control flow itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import typer
from pydantic import SecretStr

from nifi_deploy.core.secrets import SecretsResolver

# Secret-backend keys for the fields that hold credentials
SECRET_KEYS = {
    "password": "single_user_password",
    "store_password": "store_password",
}


class InputSource(ABC):
    """Supplies raw string answers for named fields."""

    interactive: bool = False

    @abstractmethod
    def ask(self, field: str, prompt: str, *, default: str | None = None, secret: bool = False) -> str | None:
        """Return the raw answer for ``field`` or None if this source has none."""
        ...

    def confirm(self, prompt: str) -> bool | None:
        """Yes/no question; None when this source cannot answer."""
        return None


class PresetInput(InputSource):
    """Answers from a fixed mapping (CLI flags, config file, environment)."""

    def __init__(self, values: dict[str, Any] | None = None, name: str = "preset") -> None:
        self.name = name
        self.values = {k: v for k, v in (values or {}).items() if v is not None}

    def ask(self, field: str, prompt: str, *, default: str | None = None, secret: bool = False) -> str | None:
        value = self.values.get(field)
        if value is None:
            return None
        if isinstance(value, SecretStr):
            return value.get_secret_value()
        if hasattr(value, "value"):  # enums
            return str(value.value)
        return str(value)

    def __repr__(self) -> str:
        return f"PresetInput({self.name!r}, fields={sorted(self.values)})"


class SecretInput(InputSource):
    """Answers secret fields from a ``SecretsResolver``; ignores the rest."""

    def __init__(self, resolver: SecretsResolver, keys: dict[str, str]) -> None:
        self.resolver = resolver
        self.keys = keys

    def ask(self, field: str, prompt: str, *, default: str | None = None, secret: bool = False) -> str | None:
        key = self.keys.get(field)
        if key is None:
            return None
        return self.resolver.resolve(key, default=None)


class PromptInput(InputSource):
    """Interactive terminal prompts via Typer."""

    interactive = True

    def ask(self, field: str, prompt: str, *, default: str | None = None, secret: bool = False) -> str | None:
        # Empty answers are returned as "" so that validators see them.
        answer = typer.prompt(
            prompt,
            default=default if default is not None else "",
            show_default=default is not None,
            hide_input=secret,
        )
        # Hidden answers are taken verbatim.
        return answer if secret else answer.strip()

    def confirm(self, prompt: str) -> bool | None:
        answer = typer.prompt(f"{prompt} (y/n)", default="", show_default=False)
        return answer.strip().lower() in ("y", "yes")


class NullInput(InputSource):
    """Non-interactive terminal: has no answers."""

    def ask(self, field: str, prompt: str, *, default: str | None = None, secret: bool = False) -> str | None:
        return None


class ChainedInput(InputSource):
    """Tries each source in order; the first non-None answer wins."""

    def __init__(self, sources: list[InputSource]) -> None:
        self.sources = sources

    @property
    def interactive(self) -> bool:  # type: ignore[override]
        return any(source.interactive for source in self.sources)

    def ask(self, field: str, prompt: str, *, default: str | None = None, secret: bool = False) -> str | None:
        for source in self.sources:
            # Interactive sources get the default shown in the prompt; the
            # preset sources must not invent a value from it.
            value = source.ask(
                field,
                prompt,
                default=default if source.interactive else None,
                secret=secret,
            )
            if value is not None:
                return value
        return None

    def confirm(self, prompt: str) -> bool | None:
        for source in self.sources:
            answer = source.confirm(prompt)
            if answer is not None:
                return answer
        return None


def build_input_chain(
    flags: dict[str, Any] | None = None,
    file_values: dict[str, Any] | None = None,
    env_values: dict[str, Any] | None = None,
    resolver: SecretsResolver | None = None,
    interactive: bool = True,
) -> ChainedInput:
    """Assemble the standard precedence: flags > file > env > secrets > prompt."""
    sources: list[InputSource] = [
        PresetInput(flags, name="flags"),
        PresetInput(file_values, name="file"),
        PresetInput(env_values, name="env"),
    ]
    if resolver is not None:
        sources.append(SecretInput(resolver, SECRET_KEYS))
    sources.append(PromptInput() if interactive else NullInput())
    return ChainedInput(sources)
