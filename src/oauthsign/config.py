"""Profile store and OAuth credential resolution.

Everything oauthsign persists lives under a single home directory::

    <home>/config.json             GlobalConfig (default profile, output format)
    <home>/profiles/<name>.json    one Profile per API account
    <home>/logs/                   crash logs written by the CLI

``<home>`` is ``$OAUTHSIGN_HOME`` when set, otherwise
``$XDG_CONFIG_HOME/oauthsign`` (``~/.config/oauthsign`` by default).

Profiles hold credential *sources* (``env:VAR``, ``file:/path``,
``prompt``, ``literal:value``), never resolved secrets.
:func:`resolve_oauth_credentials` turns the sources of an
:class:`~oauthsign.models.OAuth1Config` into the
:class:`~oauthsign.models.Consumer` and :class:`~oauthsign.models.Token` a
signer needs. Since a ``literal:`` source can still carry a secret, files
are written owner-readable only.
"""

from __future__ import annotations

import getpass
import json
import os
import re
import sys
import tempfile
from pathlib import Path
from typing import Callable, Optional

from oauthsign.exceptions import ConfigurationError
from oauthsign.models import Consumer, GlobalConfig, OAuth1Config, Profile, Token

HOME_ENV_VAR = "OAUTHSIGN_HOME"
PROFILE_ENV_VAR = "OAUTHSIGN_PROFILE"

_PROFILE_NAME = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")


# --- Directories ---


def get_config_dir() -> Path:
    """Return the oauthsign home directory, creating it if necessary."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        path = Path(override).expanduser()
    else:
        xdg = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        path = Path(xdg) / "oauthsign"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    path = get_config_dir() / "profiles"
    path.mkdir(exist_ok=True)
    return path


def get_logs_dir() -> Path:
    path = get_config_dir() / "logs"
    path.mkdir(exist_ok=True)
    return path


def _write_private(path: Path, text: str) -> None:
    """Replace *path* with *text* atomically, readable by the owner only.

    ``mkstemp`` creates the temp file with mode 0600 next to the target so
    that ``os.replace`` stays a rename. A failed write leaves the previous
    file in place and no temp file behind.
    """
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def _read_json(path: Path, what: str) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid {what} at {path}: {exc}") from exc


# --- Global config ---


def load_global_config() -> GlobalConfig:
    """Load ``config.json``, falling back to defaults when it does not exist.

    Raises:
        ConfigurationError: If the file is not valid JSON or fails validation.
    """
    path = get_config_dir() / "config.json"
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    _write_private(
        get_config_dir() / "config.json",
        json.dumps(config.model_dump(mode="json"), indent=2) + "\n",
    )


# --- Profiles ---


def _profile_path(name: str) -> Path:
    if not _PROFILE_NAME.match(name):
        raise ConfigurationError(
            f"Invalid profile name '{name}': use letters, digits, '.', '_' and '-'"
        )
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return the stored profile names, sorted."""
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


def load_profile(name: str) -> Profile:
    """Load and validate the profile called *name*.

    Raises:
        ConfigurationError: If the profile is missing, is not valid JSON or
            fails validation.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigurationError(f"Profile '{name}' not found at {path}")
    data = _read_json(path, f"profile '{name}'")
    try:
        return Profile.model_validate(data)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> None:
    """Write *profile* to ``profiles/<profile.name>.json``."""
    _write_private(
        _profile_path(profile.name),
        json.dumps(profile.model_dump(mode="json"), indent=2) + "\n",
    )


def delete_profile(name: str) -> None:
    """Remove a stored profile.

    Raises:
        ConfigurationError: If the profile does not exist.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigurationError(f"Profile '{name}' not found at {path}")
    path.unlink()


def resolve_config(
    cli_profile: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[Profile]]:
    """Return the global config and the active profile, if any.

    The profile is picked by, in order: *cli_profile* (``--profile``),
    ``$OAUTHSIGN_PROFILE``, ``default_profile`` from ``config.json``, and
    finally the only stored profile when ``auto_select_single_profile`` is
    on. A name that is chosen but missing on disk is an error; finding no
    name at all is not.
    """
    global_cfg = load_global_config()
    name = cli_profile or os.environ.get(PROFILE_ENV_VAR) or global_cfg.default_profile

    if name is None and global_cfg.auto_select_single_profile:
        stored = list_profiles()
        if len(stored) == 1:
            name = stored[0]

    return global_cfg, load_profile(name) if name else None


# --- Credential sources ---


def _from_env(ref: str, label: str) -> str:
    value = os.environ.get(ref)
    if value is None:
        raise ConfigurationError(f"{label}: environment variable '{ref}' is not set")
    return value


def _from_file(ref: str, label: str) -> str:
    path = Path(ref).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"{label}: credential file not found: {path}")
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigurationError(f"{label}: cannot read {path}: {exc}") from exc


def _from_literal(ref: str, label: str) -> str:
    return ref


_SOURCES: dict[str, Callable[[str, str], str]] = {
    "env": _from_env,
    "file": _from_file,
    "literal": _from_literal,
}


def resolve_credential(source: str, label: str = "Credential") -> str:
    """Resolve one credential source descriptor to its value.

    ``env:VAR`` reads the environment, ``file:/path`` reads a file (stripped),
    ``literal:value`` is the value itself, and ``prompt`` asks on the
    terminal with *label* as the prompt text.

    Raises:
        ConfigurationError: If the source is malformed or cannot be read.
    """
    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigurationError(f"{label}: cannot prompt, stdin is not a TTY")
        return getpass.getpass(f"{label}: ")

    scheme, sep, ref = source.partition(":")
    resolver = _SOURCES.get(scheme) if sep else None
    if resolver is None:
        raise ConfigurationError(f"{label}: unknown credential source format '{source}'")
    return resolver(ref, label)


def resolve_oauth_credentials(auth: OAuth1Config) -> tuple[Consumer, Token]:
    """Resolve the consumer and token sources of a profile.

    Without token sources the token is empty and requests are signed
    two-legged (no ``oauth_token``).

    Raises:
        ConfigurationError: If only one of the token sources is set or any
            source cannot be resolved.
    """
    if bool(auth.token_key_source) != bool(auth.token_secret_source):
        raise ConfigurationError(
            "token_key_source and token_secret_source must be set together"
        )

    consumer = Consumer(
        key=resolve_credential(auth.consumer_key_source, "Consumer key"),
        secret=resolve_credential(auth.consumer_secret_source, "Consumer secret"),
    )
    if not auth.token_key_source:
        return consumer, Token()
    return consumer, Token(
        key=resolve_credential(auth.token_key_source, "Access token"),
        secret=resolve_credential(auth.token_secret_source, "Access token secret"),
    )
