"""Shared test fixtures for oauthsign.

Provides reusable fixtures for signing inputs, isolated config
environments, output state, and running CLI commands. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from oauthsign.models import Consumer, EndpointsConfig, OAuth1Config, Profile, RequestConfig, Token
from oauthsign.output import OutputFormat, OutputManager, reset_output, set_output


FIXED_NONCE = "N"
FIXED_TIMESTAMP = 1700000000


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Signing fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def consumer() -> Consumer:
    return Consumer(key="ck", secret="cs")


@pytest.fixture
def token() -> Token:
    return Token(key="tk", secret="ts")


@pytest.fixture
def fixed_nonce():
    """Nonce factory that always returns ``"N"``."""
    return lambda: FIXED_NONCE


@pytest.fixture
def fixed_clock():
    """Clock frozen at ``1700000000``."""
    return lambda: float(FIXED_TIMESTAMP)


# ---------------------------------------------------------------------------
# Profile fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def oauth_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Export the credentials referenced by :func:`sample_profile`."""
    monkeypatch.setenv("TEST_CONSUMER_KEY", "ck")
    monkeypatch.setenv("TEST_CONSUMER_SECRET", "cs")
    monkeypatch.setenv("TEST_TOKEN", "tk")
    monkeypatch.setenv("TEST_TOKEN_SECRET", "ts")


@pytest.fixture
def sample_profile() -> Profile:
    """A profile signing with HMAC-SHA1 against a local test API."""
    return Profile(
        name="test-api",
        auth=OAuth1Config(
            consumer_key_source="env:TEST_CONSUMER_KEY",
            consumer_secret_source="env:TEST_CONSUMER_SECRET",
            token_key_source="env:TEST_TOKEN",
            token_secret_source="env:TEST_TOKEN_SECRET",
        ),
        endpoints=EndpointsConfig(
            rest="https://api.example.com/1.1",
            stream="https://stream.example.com/1.1",
            user_stream="https://userstream.example.com/1.1",
            site_stream="https://sitestream.example.com/1.1",
            media="https://upload.example.com/1.1",
        ),
        request=RequestConfig(timeout=5),
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points OAUTHSIGN_HOME at a subdirectory of tmp_path so that tests never
    touch real user config, and clears OAUTHSIGN_PROFILE.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("OAUTHSIGN_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("OAUTHSIGN_PROFILE", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
