"""End-to-end tests for the oauthsign CLI (Typer app and ``main``)."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import pytest

from oauthsign import __version__
from oauthsign.app import app, main, register_commands
from oauthsign.client import SyncClient
from oauthsign.config import get_logs_dir, load_global_config, load_profile, profile_exists
from oauthsign.exceptions import ConfigurationError, InvalidUsageError, NotFoundError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _commands_registered():
    register_commands()


@pytest.fixture(autouse=True)
def _restore_logger():
    logger = logging.getLogger("oauthsign")
    saved_handlers, saved_level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


@pytest.fixture
def invoke(cli_runner, isolated_config: Path):
    def _invoke(*args: str):
        return cli_runner.invoke(app, list(args))

    return _invoke


@pytest.fixture
def plaintext_profile(invoke) -> None:
    result = invoke(
        "--quiet", "profile", "add", "tw",
        "--consumer-key", "literal:ck",
        "--consumer-secret", "literal:cs",
        "--token", "literal:tk",
        "--token-secret", "literal:ts",
        "--signature-method", "PLAINTEXT",
        "--rest-url", "https://api.example.com/1.1/",
    )
    assert result.exit_code == 0, result.output


@pytest.fixture
def mock_api(monkeypatch: pytest.MonkeyPatch):
    """Route the commands' SyncClient through an httpx.MockTransport."""
    requests: list[httpx.Request] = []
    responses: dict[str, httpx.Response] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return responses.get(request.url.path, httpx.Response(200, json={"ok": True}))

    def factory(*args: Any, **kwargs: Any) -> SyncClient:
        return SyncClient(*args, transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr("oauthsign.commands.api.SyncClient", factory)
    return requests, responses


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


class TestGlobalOptions:
    def test_version(self, invoke) -> None:
        result = invoke("--version")
        assert result.exit_code == 0
        assert result.output.strip() == f"oauthsign {__version__}"

    def test_help_lists_commands(self, invoke) -> None:
        result = invoke("--help")
        assert result.exit_code == 0
        for command in ("sign", "get", "post", "stream", "profile"):
            assert command in result.output


# ---------------------------------------------------------------------------
# profile
# ---------------------------------------------------------------------------


class TestProfileCommands:
    def test_add_saves_sources_and_sets_default(self, plaintext_profile: None) -> None:
        profile = load_profile("tw")
        assert profile.auth is not None
        assert profile.auth.consumer_secret_source == "literal:cs"
        assert profile.auth.signature_method == "PLAINTEXT"
        assert profile.endpoints.rest == "https://api.example.com/1.1"
        assert load_global_config().default_profile == "tw"

    def test_add_existing_requires_force(self, invoke, plaintext_profile: None) -> None:
        result = invoke("profile", "add", "tw", "--consumer-key", "literal:x", "--consumer-secret", "literal:y")
        assert isinstance(result.exception, InvalidUsageError)

    def test_add_rejects_unknown_signature_method(self, invoke) -> None:
        result = invoke(
            "profile", "add", "bad",
            "--consumer-key", "literal:x",
            "--consumer-secret", "literal:y",
            "--signature-method", "RSA-SHA1",
        )
        assert isinstance(result.exception, InvalidUsageError)
        assert not profile_exists("bad")

    def test_add_rejects_unpaired_token(self, invoke) -> None:
        result = invoke(
            "profile", "add", "bad",
            "--consumer-key", "literal:x",
            "--consumer-secret", "literal:y",
            "--token", "literal:t",
        )
        assert isinstance(result.exception, InvalidUsageError)

    def test_list_plain(self, invoke, plaintext_profile: None) -> None:
        result = invoke("--plain", "profile", "list")
        assert result.exit_code == 0
        assert "tw\t*" in result.output

    def test_show_json(self, invoke, plaintext_profile: None) -> None:
        result = invoke("--json", "profile", "show", "tw")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["auth"]["token_secret_source"] == "literal:ts"

    def test_use_unknown(self, invoke) -> None:
        result = invoke("profile", "use", "ghost")
        assert isinstance(result.exception, NotFoundError)

    def test_use_sets_default(self, invoke, plaintext_profile: None) -> None:
        invoke(
            "--quiet", "profile", "add", "other",
            "--consumer-key", "literal:a", "--consumer-secret", "literal:b",
        )
        result = invoke("profile", "use", "other")
        assert result.exit_code == 0
        assert load_global_config().default_profile == "other"

    def test_remove_clears_default(self, invoke, plaintext_profile: None) -> None:
        result = invoke("profile", "remove", "tw", "--force")
        assert result.exit_code == 0
        assert not profile_exists("tw")
        assert load_global_config().default_profile is None


# ---------------------------------------------------------------------------
# sign
# ---------------------------------------------------------------------------


class TestSignCommand:
    def test_prints_header_value(self, invoke, plaintext_profile: None) -> None:
        result = invoke("--plain", "sign", "GET", "https://api.example.com/1.1/x.json?a=1")
        assert result.exit_code == 0, result.output
        header = result.output.strip()
        assert header.startswith('OAuth oauth_consumer_key="ck", oauth_nonce="')
        assert 'oauth_signature="cs%26ts"' in header
        assert 'oauth_token="tk"' in header

    def test_header_line(self, invoke, plaintext_profile: None) -> None:
        result = invoke("--plain", "sign", "--header-line", "GET", "https://x.example.com/")
        assert result.output.startswith("Authorization: OAuth ")

    def test_json_parameter_set(self, invoke, plaintext_profile: None) -> None:
        result = invoke("--json", "sign", "POST", "https://x.example.com/", "-d", "status=hi")
        params = json.loads(result.output)
        assert params["oauth_signature"] == "cs&ts"
        assert params["oauth_signature_method"] == "PLAINTEXT"
        assert "status" not in params

    def test_plaintext_body_hash(self, invoke, plaintext_profile: None) -> None:
        result = invoke("--json", "sign", "--body-hash", "--body", "x", "POST", "https://x.example.com/")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["oauth_body_hash"] == "cs&ts"

    def test_body_hash_with_hmac_profile(self, invoke) -> None:
        invoke(
            "--quiet", "profile", "add", "hmac",
            "--consumer-key", "literal:ck", "--consumer-secret", "literal:cs",
        )
        result = invoke("--json", "sign", "--body-hash", "--body", "", "POST", "https://x.example.com/")
        params = json.loads(result.output)
        assert params["oauth_body_hash"] == "2jmj7l5rSw0yVb/vlWAYkK/YBwk="

    def test_no_profile(self, invoke) -> None:
        result = invoke("sign", "GET", "https://x.example.com/")
        assert isinstance(result.exception, ConfigurationError)


# ---------------------------------------------------------------------------
# get / post / stream
# ---------------------------------------------------------------------------


class TestApiCommands:
    def test_get(self, invoke, plaintext_profile: None, mock_api) -> None:
        requests, _ = mock_api
        result = invoke("--json", "get", "statuses/home_timeline", "-d", "count=5")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"ok": True}
        sent = requests[0]
        assert str(sent.url) == "https://api.example.com/1.1/statuses/home_timeline.json?count=5"
        assert sent.headers["Authorization"].startswith("OAuth ")

    def test_post_form(self, invoke, plaintext_profile: None, mock_api) -> None:
        requests, _ = mock_api
        result = invoke("--json", "post", "statuses/update", "-d", "status=hello")
        assert result.exit_code == 0, result.output
        assert requests[0].method == "POST"
        assert requests[0].content == b"status=hello"

    def test_api_error_surfaces(self, invoke, plaintext_profile: None, mock_api) -> None:
        from oauthsign.exceptions import AuthError

        _, responses = mock_api
        responses["/1.1/x.json"] = httpx.Response(401, json={"errors": [{"message": "Nope"}]})
        result = invoke("get", "x")
        assert isinstance(result.exception, AuthError)

    def test_invalid_param(self, invoke, plaintext_profile: None) -> None:
        result = invoke("get", "x", "-d", "novalue")
        assert isinstance(result.exception, InvalidUsageError)

    def test_dry_run(self, invoke, plaintext_profile: None, mock_api) -> None:
        requests, _ = mock_api
        result = invoke("--json", "--no-color", "--dry-run", "get", "x", "-d", "a=1")
        assert result.exit_code == 0, result.output
        assert requests == []
        assert "[dry-run] GET https://api.example.com/1.1/x.json?a=1" in result.output

    def test_stream_with_limit(self, invoke, plaintext_profile: None, mock_api) -> None:
        requests, responses = mock_api
        body = b'{"n": 1}\r\n\r\n{"n": 2}\r\n{"n": 3}\r\n'
        responses["/1.1/statuses/sample.json"] = httpx.Response(200, content=body)
        result = invoke("--quiet", "stream", "statuses/sample", "--limit", "2")
        assert result.exit_code == 0, result.output
        lines = [json.loads(line) for line in result.output.splitlines()]
        assert lines == [{"n": 1}, {"n": 2}]
        assert requests[0].url.host == "stream.twitter.com"


# ---------------------------------------------------------------------------
# main() exit codes
# ---------------------------------------------------------------------------


class TestMain:
    @pytest.fixture(autouse=True)
    def _no_signal_handlers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("oauthsign.app._setup_signal_handlers", lambda: None)

    def _run(self, monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
        monkeypatch.setattr(sys, "argv", ["oauthsign", *args])
        with pytest.raises(SystemExit) as exc_info:
            main()
        return exc_info.value.code

    def test_success(self, monkeypatch: pytest.MonkeyPatch, isolated_config: Path) -> None:
        assert self._run(monkeypatch, "--quiet", "profile", "list") == 0

    def test_error_maps_to_exit_code(
        self, monkeypatch: pytest.MonkeyPatch, isolated_config: Path, capsys
    ) -> None:
        assert self._run(monkeypatch, "--no-color", "profile", "use", "ghost") == 4
        assert "Profile 'ghost' not found" in capsys.readouterr().err

    def test_unexpected_error_writes_crash_log(
        self, monkeypatch: pytest.MonkeyPatch, isolated_config: Path, capsys
    ) -> None:
        def boom() -> list[str]:
            raise RuntimeError("kaboom")

        monkeypatch.setattr("oauthsign.config.list_profiles", boom)
        assert self._run(monkeypatch, "--no-color", "profile", "list") == 1
        logs = list(get_logs_dir().glob("crash-*.log"))
        assert len(logs) == 1
        assert "kaboom" in logs[0].read_text()
        assert "Debug log" in capsys.readouterr().err
