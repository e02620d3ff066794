"""Tests for configuration and logging helpers."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError


class TestSettings:
    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            from app.core.config import Settings
            s = Settings(_env_file=None)
            assert s.auth_mode == "request"
            assert s.gateway_backend == "github"
            assert s.github_api_url == "https://api.github.com"
            assert s.web_port == 8080
            assert s.token == ""
            assert s.owner == ""

    def test_reads_token_and_owner_from_env(self):
        with patch.dict("os.environ", {"TOKEN": "ghp_env", "OWNER": "octocat", "AUTH_MODE": "static"}, clear=True):
            from app.core.config import Settings
            s = Settings(_env_file=None)
            assert s.token == "ghp_env"
            assert s.owner == "octocat"
            assert s.auth_mode == "static"

    def test_modes_are_normalised(self):
        from app.core.config import Settings
        s = Settings(_env_file=None, auth_mode=" Static ", gateway_backend="MEMORY")
        assert s.auth_mode == "static"
        assert s.gateway_backend == "memory"

    def test_unknown_auth_mode_rejected(self):
        from app.core.config import Settings
        with pytest.raises(ValidationError):
            Settings(_env_file=None, auth_mode="oauth")

    def test_unknown_backend_rejected(self):
        from app.core.config import Settings
        with pytest.raises(ValidationError):
            Settings(_env_file=None, gateway_backend="gitlab")

    def test_seed_path_resolved(self, tmp_path):
        from app.core.config import Settings
        s = Settings(_env_file=None, memory_seed_path=str(tmp_path / "seed.yaml"))
        assert s.memory_seed_path == str((tmp_path / "seed.yaml").resolve())


class TestLogging:
    def test_get_logger_is_namespaced(self):
        from app.core.logging import get_logger
        assert get_logger("web.server").name == "repo_gateway.web.server"
        assert get_logger("repo_gateway.x").name == "repo_gateway.x"
        assert get_logger().name == "repo_gateway"

    @pytest.mark.parametrize(
        "token,expected",
        [(None, "unset"), ("", "unset"), ("short", "***"), ("ghp_abcdefghijkl", "ghp_...ijkl")],
    )
    def test_redact_token(self, token, expected):
        from app.core.logging import redact_token
        assert redact_token(token) == expected
