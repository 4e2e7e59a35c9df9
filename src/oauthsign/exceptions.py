"""Exception hierarchy for oauthsign.

All exceptions inherit from :class:`OAuthSignError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`oauthsign.exit_codes`.
The top-level handler in :func:`oauthsign.app.main` catches
``OAuthSignError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    OAuthSignError (exit 1)
    +-- ConfigurationError        (exit 1)
    +-- SigningPreconditionError  (exit 8)
    +-- InvalidUsageError         (exit 2)
    +-- AuthError                 (exit 3)
    +-- NotFoundError             (exit 4)
    +-- APIError                  (exit 5)
    +-- ConnectionError_          (exit 6)
    +-- StreamError               (exit 9)

None of these are retried by the library. Configuration and signing errors
reproduce on every identical call until the configuration is fixed.
"""

from __future__ import annotations

from typing import Any, Optional

from oauthsign.exit_codes import (
    EXIT_API_ERROR,
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SIGNING_ERROR,
    EXIT_STREAM_ERROR,
)


class OAuthSignError(Exception):
    """Base exception for all oauthsign errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`oauthsign.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(OAuthSignError):
    """Raised for configuration problems.

    Covers a :class:`~oauthsign.signing.Signer` built without a hash
    function for a non-PLAINTEXT signature method, unknown signature or
    body-hash method names, missing or invalid profile files, and credential
    sources that cannot be resolved.
    """

    exit_code = EXIT_GENERIC_FAILURE


class SigningPreconditionError(OAuthSignError):
    """Raised when a request cannot be signed as given.

    Either a body hash is requested with no body-hash function, or the URL
    query holds an escape sequence that is not valid UTF-8.
    """

    exit_code = EXIT_SIGNING_ERROR


class InvalidUsageError(OAuthSignError):
    """Raised for invalid CLI arguments such as a malformed ``--param``."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(OAuthSignError):
    """Raised when the API answers 401 or 403 (bad signature, revoked token)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(OAuthSignError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class APIError(OAuthSignError):
    """Raised for HTTP error statuses and for JSON payloads carrying ``errors``.

    Args:
        message: Human-readable error description.
        status_code: HTTP status of the response, when there was one.
        errors: The decoded ``errors`` member of the response body, if any.
    """

    exit_code = EXIT_API_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors


class ConnectionError_(OAuthSignError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class StreamError(OAuthSignError):
    """Raised when a streaming endpoint answers with anything other than HTTP 200."""

    exit_code = EXIT_STREAM_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
