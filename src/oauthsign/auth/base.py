"""Abstract base class for authentication plugins.

This module defines the two foundational types of the auth subsystem:

- :class:`AuthResult` -- a plain container for the HTTP headers and query
  parameters that an auth plugin produces.
- :class:`AuthPlugin` -- the abstract base class that every authentication
  strategy must extend.

Unlike static API keys, an OAuth 1.0a signature covers the method, URL and
parameters of each request, so :meth:`AuthPlugin.authenticate` receives the
:class:`~oauthsign.models.RequestDescriptor` being sent and is called once
per request.

See Also:
    :class:`~oauthsign.auth.oauth1.OAuth1AuthPlugin` for the OAuth 1.0a
    implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from oauthsign.models import RequestDescriptor


class AuthResult:
    """Container for authentication artifacts to inject into an HTTP request.

    Args:
        headers: HTTP headers to add (e.g. ``{"Authorization": "OAuth ..."}``).
        params: Query-string parameters to add.

    Example::

        result = AuthResult(headers={"Authorization": 'OAuth oauth_nonce="..."'})
        assert "Authorization" in result.headers
    """

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ):
        self.headers = headers or {}
        self.params = params or {}


class AuthPlugin(ABC):
    """Abstract base class for authentication plugins.

    Concrete strategies provide:

    1. An :attr:`auth_type` property returning a unique string identifier.
    2. An :meth:`authenticate` implementation returning the
       :class:`AuthResult` for one request.

    Plugins are bound to their configuration at construction time.
    """

    @property
    @abstractmethod
    def auth_type(self) -> str:
        """Return the unique auth type identifier this plugin handles."""
        ...

    @abstractmethod
    def authenticate(self, request: RequestDescriptor) -> AuthResult:
        """Return the auth artifacts for *request*.

        Args:
            request: The request about to be sent, with its final URL.

        Raises:
            OAuthSignError: If credentials cannot be resolved or the request
                cannot be signed.
        """
        ...

    def validate_config(self) -> list[str]:
        """Validate the bound configuration before use.

        Returns:
            A list of human-readable error messages. An empty list means the
            configuration is valid.
        """
        return []
