"""Synchronous HTTP client that signs every request with OAuth 1.0a.

This module provides :class:`SyncClient`, the blocking HTTP client used by
the CLI commands. It wraps :class:`httpx.Client` and layers on:

- **Endpoint building** -- relative API paths such as
  ``statuses/home_timeline`` are expanded against the profile's
  :class:`~oauthsign.models.EndpointsConfig` and given a ``.json`` suffix.
- **Per-request signing** -- the final URL, method and form body are handed
  to an :class:`~oauthsign.auth.base.AuthPlugin` and the resulting
  ``Authorization`` header is attached.
- **Error mapping** -- HTTP error statuses and JSON ``errors`` payloads are
  raised as typed :mod:`oauthsign.exceptions`.
- **Streaming** -- :meth:`SyncClient.stream` feeds a long-lived response
  through :class:`~oauthsign.stream.StreamParser`.
- **Dry-run mode** -- prints the signed request to stderr instead of
  sending it.

Requests are not retried.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import Any, Optional
from urllib.parse import quote, urlencode, urlsplit

import httpx

from oauthsign.auth.base import AuthPlugin
from oauthsign.exceptions import APIError, AuthError, ConnectionError_, NotFoundError, StreamError
from oauthsign.models import Profile, RequestDescriptor
from oauthsign.output import get_output
from oauthsign.stream import StreamEvent, StreamParser

logger = logging.getLogger(__name__)

_MEDIA_PATH = re.compile(r"^/?media")


class SyncClient:
    """Synchronous, signing HTTP client for one profile.

    Must be used as a context manager so that the underlying transport is
    opened and closed properly.

    Args:
        profile: The profile providing endpoints and request settings.
        auth_plugin: Signs each request. When ``None``, requests go out
            unsigned.
        dry_run: When ``True``, requests are printed to stderr and a
            synthetic result is returned without network I/O.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Example::

        with SyncClient(profile, auth_plugin=OAuth1AuthPlugin(profile.auth)) as client:
            timeline = client.get("statuses/home_timeline", params={"count": 5})
    """

    def __init__(
        self,
        profile: Profile,
        auth_plugin: Optional[AuthPlugin] = None,
        dry_run: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._profile = profile
        self._auth_plugin = auth_plugin
        self._dry_run = dry_run
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        config = self._profile.request
        self._client = httpx.Client(
            timeout=config.timeout,
            verify=config.verify_ssl,
            headers=config.headers,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Endpoints
    # ------------------------------------------------------------------ #

    def build_endpoint(self, path: str, credential: str = "rest") -> str:
        """Return the absolute URL for *path*.

        Absolute URLs are used unchanged apart from a trailing slash. A
        relative path is appended to the base URL named by *credential*
        (``media`` paths always go to the media endpoint) and gets a
        ``.json`` suffix unless it already has one.
        """
        endpoints = self._profile.endpoints.model_dump()
        endpoint = endpoints.get(credential, endpoints["rest"])

        is_full_url = bool(urlsplit(path).scheme)
        if is_full_url:
            endpoint = path
        else:
            if _MEDIA_PATH.match(path):
                endpoint = endpoints["media"]
            endpoint += path if path.startswith("/") else "/" + path

        if endpoint.endswith("/"):
            endpoint = endpoint[:-1]

        if not is_full_url and path.split(".")[-1] != "json":
            endpoint += ".json"

        logger.debug("Resolved endpoint %r -> %s", path, endpoint)
        return endpoint

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        credential: str = "rest",
    ) -> Any:
        """Send a signed request and return the decoded response body.

        For GET requests *params* are encoded into the URL before signing,
        so the query string is covered by the signature. For other methods
        they are sent as a form body and signed as body parameters.

        Returns:
            The decoded JSON body (or the raw text for non-JSON bodies).

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            APIError: On any other error status, or when the body carries an
                ``errors`` member.
            ConnectionError_: On network / timeout errors.
        """
        method = method.upper()
        url = self.build_endpoint(path, credential)
        form: Optional[dict[str, Any]] = None
        if method == "GET":
            url = _with_query(url, params)
        elif params:
            form = dict(params)

        headers = self._sign(method, url, form)

        if self._dry_run:
            self._print_dry_run(method, url, headers, form)
            return {"dry_run": True, "message": "Request was not sent"}

        client = self._require_client()
        try:
            response = client.request(method, url, headers=headers, data=form)
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Connection failed: {exc}") from exc

        return self._handle_response(response)

    def get(self, path: str, params: Optional[dict[str, Any]] = None, **kwargs: Any) -> Any:
        """Send a signed GET request. See :meth:`request`."""
        return self.request("GET", path, params=params, **kwargs)

    def post(self, path: str, params: Optional[dict[str, Any]] = None, **kwargs: Any) -> Any:
        """Send a signed POST request with a form body. See :meth:`request`."""
        return self.request("POST", path, params=params, **kwargs)

    def stream(
        self,
        method: str,
        params: Optional[dict[str, Any]] = None,
        parser: Optional[StreamParser] = None,
    ) -> Iterator[StreamEvent]:
        """Open a streaming endpoint and yield its events as they arrive.

        ``user`` and ``site`` select the user-stream and site-stream base
        URLs; every other method name is resolved against the stream base
        URL. Handlers already registered on *parser* are called as well.

        Raises:
            StreamError: If the endpoint answers with a status other than 200.
            ConnectionError_: On network / timeout errors.
        """
        credential = "stream"
        if method in ("user", "site"):
            credential = f"{method}_stream"

        url = _with_query(self.build_endpoint(method, credential), params)
        headers = self._sign("GET", url, None)

        if self._dry_run:
            self._print_dry_run("GET", url, headers, None)
            return

        parser = parser or StreamParser()
        client = self._require_client()
        try:
            with client.stream("GET", url, headers=headers) as response:
                if response.status_code != 200:
                    raise StreamError(f"CODE: {response.status_code}", response.status_code)
                for chunk in response.iter_bytes():
                    yield from parser.receive(chunk)
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Stream connection failed: {exc}") from exc

        remainder = parser.close()
        if remainder:
            logger.debug("Stream ended with an unterminated line: %r", remainder)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _require_client(self) -> httpx.Client:
        assert self._client is not None, "Client not initialised -- use as context manager"
        return self._client

    def _sign(self, method: str, url: str, form: Optional[dict[str, Any]]) -> dict[str, str]:
        """Return the auth headers for the request, if a plugin is configured."""
        if self._auth_plugin is None:
            return {}
        descriptor = RequestDescriptor(url=url, method=method, body=form)
        return dict(self._auth_plugin.authenticate(descriptor).headers)

    def _handle_response(self, response: httpx.Response) -> Any:
        """Decode *response*, raising a typed exception for error payloads."""
        try:
            data = response.json()
        except ValueError:
            data = response.text

        errors = data.get("errors") if isinstance(data, dict) else None
        status = response.status_code
        if status < 400 and errors is None:
            return data

        detail = _error_message(errors) or (response.text[:200] if response.text else "")
        message = f"HTTP {status}: {detail}" if detail else f"HTTP {status}"

        if status in (401, 403):
            raise AuthError(message)
        if status == 404:
            raise NotFoundError(message)
        raise APIError(message, status_code=status, errors=errors)

    def _print_dry_run(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        form: Optional[dict[str, Any]],
    ) -> None:
        output = get_output()
        output.info(f"[dry-run] {method} {url}")
        for key, value in headers.items():
            output.info(f"  Header: {key}: {value}")
        if form:
            for key, value in form.items():
                output.info(f"  Form: {key}={value}")


def _with_query(url: str, params: Optional[dict[str, Any]]) -> str:
    """Append *params* to *url* with RFC 3986 quoting (``%20``, not ``+``)."""
    if not params:
        return url
    query = urlencode(params, doseq=True, safe="~", quote_via=quote)
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def _error_message(errors: Any) -> str:
    """Pull a readable message out of an ``errors`` payload."""
    if not errors:
        return ""
    if isinstance(errors, list):
        messages = [
            str(item.get("message", item)) if isinstance(item, dict) else str(item)
            for item in errors
        ]
        return "; ".join(messages)
    return str(errors)
