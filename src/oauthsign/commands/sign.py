"""Sign command -- print the Authorization header for a request.

Useful for handing a signed header to another tool (``curl``, a test suite)
without letting oauthsign send the request itself::

    oauthsign sign GET "https://api.twitter.com/1.1/statuses/home_timeline.json?count=5"
    curl -H "$(oauthsign sign --header-line GET https://...)" https://...
"""

from __future__ import annotations

import json
from typing import Optional

import typer

from oauthsign.auth import OAuth1AuthPlugin
from oauthsign.commands.api import load_active_profile, parse_params
from oauthsign.models import RequestDescriptor
from oauthsign.output import OutputFormat, get_output


def sign_command(
    ctx: typer.Context,
    method: str = typer.Argument(help="HTTP method, e.g. GET or POST."),
    url: str = typer.Argument(help="Full request URL, including any query string."),
    form: Optional[list[str]] = typer.Option(
        None, "--form", "-d", help="Form body field as key=value (repeatable)."
    ),
    body: Optional[str] = typer.Option(
        None, "--body", help="Raw request body (covered by --body-hash only)."
    ),
    body_hash: bool = typer.Option(
        False, "--body-hash", help="Add oauth_body_hash for the request body."
    ),
    header_line: bool = typer.Option(
        False, "--header-line", help="Print 'Authorization: ...' instead of the bare value."
    ),
) -> None:
    """Sign a request with the active profile and print its Authorization header.

    With ``--json`` the full signed parameter set is printed instead.
    """
    profile = load_active_profile(ctx)
    assert profile.auth is not None
    plugin = OAuth1AuthPlugin(profile.auth)

    request_body = parse_params(form) if form else body
    request = RequestDescriptor(
        url=url,
        method=method,
        body=request_body,
        include_body_hash=body_hash or profile.auth.include_body_hash,
    )

    output = get_output()
    oauth_params = plugin.signer.sign(request, plugin.token)
    if output.format == OutputFormat.JSON:
        output.print_data(json.dumps(oauth_params, indent=2))
        return

    value = plugin.signer.render_header(oauth_params)["Authorization"]
    output.print_data(f"Authorization: {value}" if header_line else value)
