"""Tests for secrets resolver module."""

from pathlib import Path

import pytest

from nifi_deploy.core.errors import MissingSecretError
from nifi_deploy.core.secrets import (
    DictSecretBackend,
    EnvSecretBackend,
    FileSecretBackend,
    SecretsResolver,
    default_resolver,
)


class TestEnvSecretBackend:
    """Tests for EnvSecretBackend."""

    def test_prefixed_variable_wins(self, monkeypatch):
        monkeypatch.setenv("NIFI_DEPLOY_SECRET_STORE_PASSWORD", "prefixed")
        monkeypatch.setenv("STORE_PASSWORD", "plain")
        assert EnvSecretBackend().get("store_password") == "prefixed"

    def test_falls_back_to_plain_name(self, monkeypatch):
        monkeypatch.delenv("NIFI_DEPLOY_SECRET_STORE_PASSWORD", raising=False)
        monkeypatch.setenv("STORE_PASSWORD", "plain")
        assert EnvSecretBackend().get("store_password") == "plain"

    def test_empty_value_is_missing(self, monkeypatch):
        monkeypatch.setenv("NIFI_DEPLOY_SECRET_EMPTY_ONE", "")
        assert EnvSecretBackend().get("empty_one") is None


class TestFileSecretBackend:
    """Tests for FileSecretBackend."""

    def test_reads_and_strips(self, tmp_path: Path):
        (tmp_path / "store_password").write_text("s3cret\n")
        backend = FileSecretBackend(tmp_path)
        assert backend.get("store_password") == "s3cret"

    def test_missing_file(self, tmp_path: Path):
        assert FileSecretBackend(tmp_path).get("nope") is None

    def test_empty_file_is_missing(self, tmp_path: Path):
        (tmp_path / "blank").write_text("  \n")
        assert FileSecretBackend(tmp_path).get("blank") is None

    def test_value_is_cached(self, tmp_path: Path):
        path = tmp_path / "token"
        path.write_text("first")
        backend = FileSecretBackend(tmp_path)
        assert backend.get("token") == "first"
        path.write_text("second")
        assert backend.get("token") == "first"


class TestSecretsResolver:
    """Tests for SecretsResolver."""

    def test_first_backend_wins(self):
        resolver = SecretsResolver([
            DictSecretBackend({"key": "one"}),
            DictSecretBackend({"key": "two"}),
        ])
        assert resolver.resolve("key") == "one"

    def test_missing_raises_with_backends_tried(self):
        resolver = SecretsResolver([DictSecretBackend()])
        with pytest.raises(MissingSecretError) as exc_info:
            resolver.resolve("store_password")
        assert exc_info.value.tried_backends == ["DictSecretBackend"]

    def test_default_suppresses_error(self):
        assert SecretsResolver().resolve("anything", default=None) is None

    def test_default_resolver_order(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("NIFI_DEPLOY_SECRET_SINGLE_USER_PASSWORD", "from-env")
        (tmp_path / "single_user_password").write_text("from-file")
        resolver = default_resolver(tmp_path)
        assert [type(b).__name__ for b in resolver.backends] == ["EnvSecretBackend", "FileSecretBackend"]
        assert resolver.resolve("single_user_password") == "from-env"
