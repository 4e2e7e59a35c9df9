"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~oauthsign.exceptions.OAuthSignError` subclass.
Shell wrappers can inspect the exit code to tell a rejected signature from
a broken profile without parsing stderr.

Example::

    $ oauthsign get statuses/home_timeline
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the server rejected the signature
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The server rejected the request signature or credentials (HTTP 401/403)."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_API_ERROR = 5
"""The remote API returned an error status or an ``errors`` payload."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_SIGNING_ERROR = 8
"""A request could not be signed (e.g. body hash requested without a body-hash function)."""

EXIT_STREAM_ERROR = 9
"""A streaming endpoint refused the connection."""
