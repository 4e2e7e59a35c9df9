"""Authentication for outgoing requests.

- :class:`AuthPlugin` -- abstract base class for auth strategies.
- :class:`AuthResult` -- headers and params a plugin contributes.
- :class:`OAuth1AuthPlugin` -- signs each request with OAuth 1.0a using the
  credentials configured in a :class:`~oauthsign.models.Profile`.

Typical usage::

    from oauthsign.auth import OAuth1AuthPlugin

    plugin = OAuth1AuthPlugin(profile.auth)
    result = plugin.authenticate(RequestDescriptor(url=url, method="GET"))
    # result.headers["Authorization"] is ready to send.
"""

from oauthsign.auth.base import AuthPlugin, AuthResult
from oauthsign.auth.oauth1 import OAuth1AuthPlugin

__all__ = [
    "AuthPlugin",
    "AuthResult",
    "OAuth1AuthPlugin",
]
