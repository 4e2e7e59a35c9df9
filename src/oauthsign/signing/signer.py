"""OAuth 1.0a request signer.

:class:`Signer` owns the per-request OAuth parameter lifecycle: it assembles
``oauth_*`` parameters with a fresh nonce and timestamp, asks
:mod:`~oauthsign.signing.canonical` for the signature base string, derives
the signing key, calls the injected hash function and renders the result as
an ``Authorization`` header.

A signer is configured once per client and reused for every request. It
keeps no state between calls, so one instance may be shared by several
threads as long as its hash functions are stateless.

Example::

    signer = Signer(
        Consumer(key="ck", secret="cs"),
        signature_method="HMAC-SHA1",
        hash_function=hmac_sha1,
    )
    oauth_params = signer.sign(request, Token(key="tk", secret="ts"))
    headers = signer.render_header(oauth_params)
"""

from __future__ import annotations

import json
import logging
import secrets
import string
import time
from typing import Any, Callable, Optional

from oauthsign.exceptions import ConfigurationError, SigningPreconditionError
from oauthsign.models import Consumer, OAuthParameters, RequestDescriptor, Token
from oauthsign.signing.canonical import (
    build_base_string,
    build_parameter_string,
    percent_encode,
)
from oauthsign.signing.hashes import HashFunction, plaintext

logger = logging.getLogger(__name__)

NONCE_ALPHABET = string.ascii_letters + string.digits


class Signer:
    """Sign requests on behalf of one consumer.

    Args:
        consumer: The application's key and secret.
        nonce_length: Length of the random alphanumeric nonce.
        version: Value of ``oauth_version``.
        parameter_separator: String placed between header fields.
        realm: Optional realm emitted first in the header. It is neither
            percent-encoded nor signed.
        last_ampersand: When ``False`` and the token secret is empty, the
            signing key is the encoded consumer secret without a trailing
            ``&``. Some providers expect this for two-legged requests.
        signature_method: Value of ``oauth_signature_method``.
        hash_function: ``(base_string, key) -> signature``. Required unless
            *signature_method* is ``"PLAINTEXT"``, in which case the signing
            key itself is used as the signature.
        body_hash_function: ``(body, key) -> hash`` used for
            ``oauth_body_hash``. Defaults to the effective hash function, so
            a PLAINTEXT signer hashes bodies to the signing key.
        nonce_factory: Zero-argument callable returning a nonce. Replaces
            the random generator, mainly for tests.
        clock: Zero-argument callable returning Unix seconds.

    Raises:
        ConfigurationError: If no hash function is given for a
            non-PLAINTEXT signature method.
    """

    def __init__(
        self,
        consumer: Consumer,
        *,
        nonce_length: int = 32,
        version: str = "1.0",
        parameter_separator: str = ", ",
        realm: Optional[str] = None,
        last_ampersand: bool = True,
        signature_method: str = "PLAINTEXT",
        hash_function: Optional[HashFunction] = None,
        body_hash_function: Optional[HashFunction] = None,
        nonce_factory: Optional[Callable[[], str]] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if hash_function is None and signature_method != "PLAINTEXT":
            raise ConfigurationError(
                f"A hash function is required for signature method '{signature_method}'"
            )

        self.consumer = consumer
        self.nonce_length = nonce_length
        self.version = version
        self.parameter_separator = parameter_separator
        self.realm = realm
        self.last_ampersand = last_ampersand
        self.signature_method = signature_method
        self.hash_function: HashFunction = hash_function or plaintext
        self.body_hash_function: Optional[HashFunction] = (
            body_hash_function if body_hash_function is not None else self.hash_function
        )
        self._nonce_factory = nonce_factory
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Per-request values
    # ------------------------------------------------------------------ #

    def generate_nonce(self) -> str:
        """Return a fresh nonce. Never reuse one across requests."""
        if self._nonce_factory is not None:
            return self._nonce_factory()
        return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(self.nonce_length))

    def current_timestamp(self) -> int:
        """Return the current Unix time in whole seconds."""
        return int(self._clock())

    # ------------------------------------------------------------------ #
    # Signing
    # ------------------------------------------------------------------ #

    def derive_signing_key(self, token_secret: Optional[str]) -> str:
        """Return ``encoded(consumer_secret)&encoded(token_secret)``.

        With ``last_ampersand`` disabled and no token secret, the ``&`` and
        the empty second half are dropped.
        """
        token_secret = token_secret or ""
        consumer_part = percent_encode(self.consumer.secret)
        if not self.last_ampersand and not token_secret:
            return consumer_part
        return consumer_part + "&" + percent_encode(token_secret)

    def compute_body_hash(self, body: Any, signing_key: str) -> str:
        """Hash the request body with the configured body-hash function.

        Strings are hashed as-is, ``None`` as the empty string and anything
        else as compact JSON.

        Raises:
            SigningPreconditionError: If no body-hash function is configured.
        """
        if self.body_hash_function is None:
            raise SigningPreconditionError(
                "A body hash was requested but no body_hash_function is configured"
            )
        if body is None:
            serialized = ""
        elif isinstance(body, str):
            serialized = body
        else:
            serialized = json.dumps(body, separators=(",", ":"), ensure_ascii=False)
        return self.body_hash_function(serialized, signing_key)

    def base_string(self, request: RequestDescriptor, oauth_params: OAuthParameters) -> str:
        """Return the signature base string for *request*."""
        return build_base_string(
            request.method,
            request.url,
            build_parameter_string(oauth_params, request),
        )

    def compute_signature(
        self,
        request: RequestDescriptor,
        token_secret: Optional[str],
        oauth_params: OAuthParameters,
    ) -> str:
        """Return ``hash_function(base_string, signing_key)``."""
        base_string = self.base_string(request, oauth_params)
        logger.debug("Signature base string: %s", base_string)
        return self.hash_function(base_string, self.derive_signing_key(token_secret))

    def sign(
        self, request: RequestDescriptor, token: Optional[Token] = None
    ) -> OAuthParameters:
        """Build the full OAuth parameter set for *request*, signature included.

        ``oauth_token`` is present only when the token has a key, and
        ``oauth_body_hash`` only when the request asks for it. Either the
        complete set is returned or an exception is raised.

        Raises:
            SigningPreconditionError: If a body hash is requested but no
                body-hash function is configured.
        """
        token = token or Token()
        oauth_params: OAuthParameters = {
            "oauth_consumer_key": self.consumer.key,
            "oauth_nonce": self.generate_nonce(),
            "oauth_signature_method": self.signature_method,
            "oauth_timestamp": str(self.current_timestamp()),
            "oauth_version": self.version,
        }
        if token.key:
            oauth_params["oauth_token"] = token.key

        if request.include_body_hash:
            oauth_params["oauth_body_hash"] = self.compute_body_hash(
                request.body, self.derive_signing_key(token.secret)
            )

        oauth_params["oauth_signature"] = self.compute_signature(
            request, token.secret, oauth_params
        )
        return oauth_params

    # ------------------------------------------------------------------ #
    # Header rendering
    # ------------------------------------------------------------------ #

    def render_header(self, oauth_params: OAuthParameters) -> dict[str, str]:
        """Render an ``Authorization`` header from a signed parameter set.

        Fields are sorted by key and only ``oauth_``-prefixed keys are
        emitted, each as ``key="value"`` with both sides percent-encoded.
        A configured realm comes first, unencoded.

        Returns:
            ``{"Authorization": "OAuth ..."}``
        """
        fields = [
            f'{percent_encode(key)}="{percent_encode(value)}"'
            for key, value in sorted(oauth_params.items())
            if key.startswith("oauth_")
        ]
        if self.realm:
            fields.insert(0, f'realm="{self.realm}"')
        return {"Authorization": "OAuth " + self.parameter_separator.join(fields)}

    def authorize(
        self, request: RequestDescriptor, token: Optional[Token] = None
    ) -> dict[str, str]:
        """Sign *request* and return its ``Authorization`` header."""
        return self.render_header(self.sign(request, token))
