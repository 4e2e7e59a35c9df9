"""API commands -- signed requests and streams against the active profile.

Provides the ``oauthsign get``, ``oauthsign post`` and ``oauthsign stream``
commands, plus the helpers other commands use to resolve the active profile
and its auth plugin.

Typical usage::

    oauthsign get statuses/home_timeline -d count=5
    oauthsign post statuses/update -d "status=Hello world"
    oauthsign stream statuses/sample --limit 10
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from oauthsign.auth import OAuth1AuthPlugin
from oauthsign.client import SyncClient
from oauthsign.exceptions import ConfigurationError, InvalidUsageError
from oauthsign.models import Profile
from oauthsign.output import debug, format_response, get_output


def parse_params(pairs: Optional[list[str]]) -> dict[str, Any]:
    """Turn repeated ``key=value`` options into a params dict.

    A key given more than once maps to a list of its values.

    Raises:
        InvalidUsageError: If a pair has no ``=``.
    """
    params: dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Invalid parameter '{pair}': expected key=value")
        if key in params:
            existing = params[key]
            params[key] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            params[key] = value
    return params


def load_active_profile(ctx: typer.Context) -> Profile:
    """Resolve the profile selected by ``--profile``, the environment or config.

    Raises:
        ConfigurationError: If no profile can be resolved or it has no
            ``auth`` section.
    """
    from oauthsign.config import resolve_config

    obj = ctx.obj or {}
    _, profile = resolve_config(cli_profile=obj.get("profile"))
    if profile is None:
        raise ConfigurationError(
            "No profile selected. Create one with 'oauthsign profile add' "
            "or pass --profile."
        )
    if profile.auth is None:
        raise ConfigurationError(f"Profile '{profile.name}' has no OAuth configuration")
    debug(f"Using profile: {profile.name}")
    return profile


def _open_client(ctx: typer.Context) -> SyncClient:
    profile = load_active_profile(ctx)
    assert profile.auth is not None
    return SyncClient(
        profile,
        auth_plugin=OAuth1AuthPlugin(profile.auth),
        dry_run=bool((ctx.obj or {}).get("dry_run")),
    )


def get_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="API path (e.g. statuses/home_timeline) or full URL."),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-d", help="Query parameter as key=value (repeatable)."
    ),
    credential: str = typer.Option(
        "rest", "--credential", "-c", help="Endpoint group: rest, media, stream."
    ),
) -> None:
    """Send a signed GET request and print the JSON response."""
    params = parse_params(param)
    with _open_client(ctx) as client:
        data = client.get(path, params=params, credential=credential)
    format_response(data)


def post_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="API path (e.g. statuses/update) or full URL."),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-d", help="Form field as key=value (repeatable)."
    ),
    credential: str = typer.Option(
        "rest", "--credential", "-c", help="Endpoint group: rest, media."
    ),
) -> None:
    """Send a signed POST request with a form body and print the JSON response."""
    params = parse_params(param)
    with _open_client(ctx) as client:
        data = client.post(path, params=params, credential=credential)
    format_response(data)


def stream_command(
    ctx: typer.Context,
    method: str = typer.Argument(help="Stream method (e.g. statuses/sample, user, site)."),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-d", help="Query parameter as key=value (repeatable)."
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", min=1, help="Stop after this many messages."
    ),
) -> None:
    """Follow a streaming endpoint, printing one JSON message per line.

    Keep-alive pings are reported only with ``--verbose``; unparseable lines
    are reported as warnings and skipped.
    """
    import json

    params = parse_params(param)
    output = get_output()
    received = 0
    with _open_client(ctx) as client:
        for event in client.stream(method, params=params):
            if event.kind == "ping":
                output.debug("ping")
                continue
            if event.kind == "error":
                output.warning(f"Skipping unparseable line: {event.raw[:200]}")
                continue
            output.print_data(json.dumps(event.data, ensure_ascii=False))
            received += 1
            if limit is not None and received >= limit:
                break
