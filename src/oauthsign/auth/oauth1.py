"""OAuth 1.0a auth plugin.

This module provides :class:`OAuth1AuthPlugin`, which turns the ``auth``
section of a profile (:class:`~oauthsign.models.OAuth1Config`) into a
configured :class:`~oauthsign.signing.Signer` and signs every outgoing
request with it.

Credential sources (``env:``, ``file:``, ``prompt``, ``literal:``) are
resolved once, the first time a request is signed, so that an interactive
prompt happens at most once per client.

See Also:
    :class:`oauthsign.auth.base.AuthPlugin` for the base interface.
    :func:`oauthsign.config.resolve_oauth_credentials` for how sources resolve.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from oauthsign.auth.base import AuthPlugin, AuthResult
from oauthsign.config import resolve_oauth_credentials
from oauthsign.exceptions import ConfigurationError
from oauthsign.models import OAuth1Config, RequestDescriptor, Token
from oauthsign.signing import Signer, get_body_hash_function, get_hash_function
from oauthsign.signing.hashes import BODY_HASH_METHODS, SIGNATURE_METHODS

logger = logging.getLogger(__name__)


class OAuth1AuthPlugin(AuthPlugin):
    """Sign requests with OAuth 1.0a.

    Args:
        auth_config: The profile's OAuth settings.
        nonce_factory: Passed through to the :class:`Signer`.
        clock: Passed through to the :class:`Signer`.
    """

    def __init__(
        self,
        auth_config: OAuth1Config,
        nonce_factory: Optional[Callable[[], str]] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = auth_config
        self._nonce_factory = nonce_factory
        self._clock = clock
        self._signer: Optional[Signer] = None
        self._token: Optional[Token] = None

    @property
    def auth_type(self) -> str:
        return "oauth1"

    @property
    def signer(self) -> Signer:
        """The configured signer, built on first access."""
        if self._signer is None:
            self._signer, self._token = self._build()
        return self._signer

    @property
    def token(self) -> Token:
        """The resolved access token (empty for two-legged profiles)."""
        if self._token is None:
            self._signer, self._token = self._build()
        return self._token

    def authenticate(self, request: RequestDescriptor) -> AuthResult:
        """Sign *request* and return its ``Authorization`` header.

        ``include_body_hash`` from the profile is applied unless the request
        already asks for a body hash.
        """
        if self._config.include_body_hash and not request.include_body_hash:
            request = request.model_copy(update={"include_body_hash": True})
        headers = self.signer.authorize(request, self.token)
        logger.debug("Signed %s %s", request.method.upper(), request.url)
        return AuthResult(headers=headers)

    def validate_config(self) -> list[str]:
        """Check signature method names and token source pairing.

        Returns:
            A list of human-readable error strings. Empty if valid.
        """
        errors: list[str] = []
        cfg = self._config
        if cfg.signature_method.upper() not in SIGNATURE_METHODS:
            errors.append(
                f"Unknown signature method '{cfg.signature_method}': must be one of "
                + ", ".join(sorted(SIGNATURE_METHODS))
            )
        if cfg.body_hash_method and cfg.body_hash_method.upper() not in BODY_HASH_METHODS:
            errors.append(
                f"Unknown body hash method '{cfg.body_hash_method}': must be one of "
                + ", ".join(sorted(BODY_HASH_METHODS))
            )
        if bool(cfg.token_key_source) != bool(cfg.token_secret_source):
            errors.append(
                "token_key_source and token_secret_source must be set together"
            )
        return errors

    def _build(self) -> tuple[Signer, Token]:
        errors = self.validate_config()
        if errors:
            raise ConfigurationError("; ".join(errors))

        cfg = self._config
        consumer, token = resolve_oauth_credentials(cfg)

        signature_method = cfg.signature_method.upper()
        # PLAINTEXT falls back to the signer default for both hashes.
        hash_function = None
        if signature_method != "PLAINTEXT":
            hash_function = get_hash_function(signature_method)
        signer = Signer(
            consumer,
            nonce_length=cfg.nonce_length,
            version=cfg.version,
            parameter_separator=cfg.parameter_separator,
            realm=cfg.realm,
            last_ampersand=cfg.last_ampersand,
            signature_method=signature_method,
            hash_function=hash_function,
            body_hash_function=get_body_hash_function(cfg.body_hash_method, signature_method),
            nonce_factory=self._nonce_factory,
            clock=self._clock,
        )
        return signer, token
