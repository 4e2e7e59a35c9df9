"""Profile commands -- create, inspect and select OAuth profiles.

Provides the ``oauthsign profile`` sub-command group. A profile stores
credential *sources* (``env:VAR``, ``file:/path``, ``prompt``,
``literal:value``), never the secrets themselves.

Typical workflow::

    oauthsign profile add twitter \\
        --consumer-key env:TW_CONSUMER_KEY --consumer-secret env:TW_CONSUMER_SECRET \\
        --token env:TW_TOKEN --token-secret env:TW_TOKEN_SECRET
    oauthsign profile use twitter
    oauthsign profile show
"""

from __future__ import annotations

from typing import Optional

import typer

from oauthsign.output import format_response, get_output, info, success, suggest


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("add")
def profile_add(
    ctx: typer.Context,
    name: str = typer.Argument(help="Profile name."),
    consumer_key: str = typer.Option(
        ..., "--consumer-key", help="Consumer key source (env:, file:, prompt, literal:)."
    ),
    consumer_secret: str = typer.Option(
        ..., "--consumer-secret", help="Consumer secret source."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", help="Access token source (omit for two-legged signing)."
    ),
    token_secret: Optional[str] = typer.Option(
        None, "--token-secret", help="Access token secret source."
    ),
    signature_method: str = typer.Option(
        "HMAC-SHA1", "--signature-method", "-m",
        help="HMAC-SHA1, HMAC-SHA256, HMAC-SHA512 or PLAINTEXT.",
    ),
    body_hash_method: Optional[str] = typer.Option(
        None, "--body-hash-method", help="SHA1 or SHA256 (defaults to the signature hash)."
    ),
    realm: Optional[str] = typer.Option(None, "--realm", help="Authorization header realm."),
    rest_url: Optional[str] = typer.Option(None, "--rest-url", help="REST API base URL."),
    stream_url: Optional[str] = typer.Option(None, "--stream-url", help="Stream API base URL."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing profile."),
) -> None:
    """Create a profile from credential sources.

    The settings are validated before anything is written; the first
    profile created also becomes the default.

    Raises:
        InvalidUsageError: If the profile exists (without ``--force``) or the
            settings are invalid.
    """
    from oauthsign.auth import OAuth1AuthPlugin
    from oauthsign.config import (
        load_global_config,
        profile_exists,
        save_global_config,
        save_profile,
    )
    from oauthsign.exceptions import InvalidUsageError
    from oauthsign.models import EndpointsConfig, OAuth1Config, Profile

    if profile_exists(name) and not force:
        raise InvalidUsageError(f"Profile '{name}' already exists (use --force to overwrite)")

    auth = OAuth1Config(
        consumer_key_source=consumer_key,
        consumer_secret_source=consumer_secret,
        token_key_source=token,
        token_secret_source=token_secret,
        signature_method=signature_method.upper(),
        body_hash_method=body_hash_method.upper() if body_hash_method else None,
        realm=realm,
    )
    problems = OAuth1AuthPlugin(auth).validate_config()
    if problems:
        raise InvalidUsageError("; ".join(problems))

    endpoints = EndpointsConfig()
    if rest_url:
        endpoints.rest = rest_url.rstrip("/")
    if stream_url:
        endpoints.stream = stream_url.rstrip("/")

    save_profile(Profile(name=name, auth=auth, endpoints=endpoints))
    success(f"Saved profile '{name}'")

    config = load_global_config()
    if config.default_profile is None:
        config.default_profile = name
        save_global_config(config)
        info(f"'{name}' is now the default profile")
    else:
        suggest(f"Make it the default with: oauthsign profile use {name}")


@profile_app.command("list")
def profile_list() -> None:
    """List profiles, marking the default one."""
    from oauthsign.config import list_profiles, load_global_config

    names = list_profiles()
    if not names:
        info("No profiles configured.")
        suggest("Create one with: oauthsign profile add NAME --consumer-key ... --consumer-secret ...")
        return

    default = load_global_config().default_profile
    rows = [[name, "*" if name == default else ""] for name in names]
    get_output().print_table(["Profile", "Default"], rows, title="Profiles")


@profile_app.command("show")
def profile_show(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Profile name (defaults to the active one)."),
) -> None:
    """Show a profile's settings. Credential sources are shown, never secrets."""
    from oauthsign.commands.api import load_active_profile
    from oauthsign.config import load_profile

    profile = load_profile(name) if name else load_active_profile(ctx)
    format_response(profile.model_dump(mode="json"))


@profile_app.command("remove")
def profile_remove(
    name: str = typer.Argument(help="Profile name."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Delete a profile, clearing it as the default if needed."""
    from oauthsign.config import delete_profile, load_global_config, save_global_config

    if not force and not typer.confirm(f"Remove profile '{name}'?"):
        info("Cancelled.")
        raise typer.Exit()

    delete_profile(name)
    config = load_global_config()
    if config.default_profile == name:
        config.default_profile = None
        save_global_config(config)
    success(f"Removed profile '{name}'")


@profile_app.command("use")
def profile_use(name: str = typer.Argument(help="Profile name.")) -> None:
    """Make a profile the default."""
    from oauthsign.config import load_global_config, profile_exists, save_global_config
    from oauthsign.exceptions import NotFoundError

    if not profile_exists(name):
        raise NotFoundError(f"Profile '{name}' not found")

    config = load_global_config()
    config.default_profile = name
    save_global_config(config)
    success(f"Default profile set to '{name}'")
