"""
Shared pytest fixtures for nifi-deploy tests.

This module provides:
- ``FakeDocker``: a stand-in for the docker CLI behind ``subprocess.run``
- ``fake_docker``: patches ``shutil.which`` and ``subprocess.run`` with it
- ``work_dir``: a temporary directory holding both PKCS12 stores
- ``RecordingInput``: an input source that records every question asked
- structlog reset between tests

No test needs a Docker daemon.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Any, Generator
from unittest.mock import patch

import pytest
import structlog

# Ensure nifi_deploy package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from nifi_deploy.deploy.inputs import InputSource  # noqa: E402


class FakeDocker:
    """Answers docker CLI invocations from in-memory state.

    ``calls`` holds every invocation without the binary path, so
    ``calls[0] == ["volume", "create", "nifi_state"]``.
    """

    def __init__(self, containers: list[str] | None = None) -> None:
        self.containers: set[str] = set(containers or [])
        self.volumes: list[str] = []
        self.calls: list[list[str]] = []
        self.fail_on: str | None = None
        self.fail_stderr = "Error response from daemon"

    def __call__(self, cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        args = list(cmd[1:])
        self.calls.append(args)

        if self.fail_on is not None and args[0] == self.fail_on:
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr=self.fail_stderr)

        stdout, returncode = "", 0
        if args[:2] == ["volume", "create"]:
            self.volumes.append(args[2])
            stdout = args[2] + "\n"
        elif args[:2] == ["ps", "-a"]:
            stdout = "".join(f"{name}\n" for name in sorted(self.containers))
        elif args[:2] == ["rm", "-f"]:
            self.containers.discard(args[2])
            stdout = args[2] + "\n"
        elif args[0] == "run":
            self.containers.add(args[args.index("--name") + 1])
            stdout = "4f1c2a9be07d5e3f8a6b\n"
        elif args[0] == "inspect":
            if args[-1] in self.containers:
                stdout = "running\n"
            else:
                returncode = 1
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr="")

    def commands(self, verb: str) -> list[list[str]]:
        return [args for args in self.calls if args[0] == verb]


class RecordingInput(InputSource):
    """Preset answers plus a log of the fields that were asked for."""

    def __init__(self, answers: dict[str, str] | None = None, confirm: bool | None = None) -> None:
        self.answers = dict(answers or {})
        self.confirm_answer = confirm
        self.asked: list[str] = []
        self.confirmations: list[str] = []

    def ask(self, field: str, prompt: str, *, default: str | None = None, secret: bool = False) -> str | None:
        self.asked.append(field)
        return self.answers.get(field)

    def confirm(self, prompt: str) -> bool | None:
        self.confirmations.append(prompt)
        return self.confirm_answer


@pytest.fixture
def fake_docker() -> Generator[FakeDocker, None, None]:
    fake = FakeDocker()
    with patch("shutil.which", return_value="/usr/bin/docker"), patch(
        "subprocess.run", side_effect=fake
    ):
        yield fake


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Working directory with both stores present."""
    (tmp_path / "truststore.pkcs12").write_bytes(b"\x30\x82trust")
    (tmp_path / "keystore.pkcs12").write_bytes(b"\x30\x82key")
    return tmp_path


@pytest.fixture
def localhost_answers() -> dict[str, str]:
    return {
        "destination": "localhost",
        "http_port": "",
        "proxy_host": "localhost",
        "username": "admin",
        "password": "correct-horse-battery",
    }


@pytest.fixture
def server_answers() -> dict[str, str]:
    return {
        "destination": "server",
        "http_port": "9443",
        "proxy_host": "nifi.example.com:9443",
        "username": "admin",
        "password": "correct-horse-battery",
        "store_password": "store-pass-123",
    }


@pytest.fixture(autouse=True)
def _reset_logging(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep structlog configuration and NIFI_DEPLOY_* variables test-local."""
    import os

    for key in list(os.environ):
        if key.startswith("NIFI_DEPLOY_"):
            monkeypatch.delenv(key)
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
