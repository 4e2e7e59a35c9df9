"""Hash functions injected into :class:`~oauthsign.signing.signer.Signer`.

The signer never hardcodes a cryptographic algorithm. It calls whatever
callable it was given with ``(base_string, signing_key)`` and uses the
returned string verbatim as ``oauth_signature`` (or ``oauth_body_hash``).
This module provides the usual implementations and looks them up by the
names used in ``oauth_signature_method``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from typing import Protocol

from oauthsign.exceptions import ConfigurationError


class HashFunction(Protocol):
    """Callable turning a base string and a signing key into a signature."""

    def __call__(self, base_string: str, key: str) -> str: ...


def _hmac(digestmod: str, base_string: str, key: str) -> str:
    digest = hmac.new(
        key.encode("utf-8"), base_string.encode("utf-8"), digestmod
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def hmac_sha1(base_string: str, key: str) -> str:
    """HMAC-SHA1 signature, base64-encoded (RFC 5849, 3.4.2)."""
    return _hmac("sha1", base_string, key)


def hmac_sha256(base_string: str, key: str) -> str:
    """HMAC-SHA256 signature, base64-encoded."""
    return _hmac("sha256", base_string, key)


def hmac_sha512(base_string: str, key: str) -> str:
    """HMAC-SHA512 signature, base64-encoded."""
    return _hmac("sha512", base_string, key)


def plaintext(base_string: str, key: str) -> str:
    """PLAINTEXT "signature": the signing key itself (RFC 5849, 3.4.4)."""
    return key


def sha1_body_hash(body: str, key: str) -> str:
    """Base64 SHA-1 digest of the request body. The key is not used."""
    return base64.b64encode(hashlib.sha1(body.encode("utf-8")).digest()).decode("ascii")


def sha256_body_hash(body: str, key: str) -> str:
    """Base64 SHA-256 digest of the request body. The key is not used."""
    return base64.b64encode(hashlib.sha256(body.encode("utf-8")).digest()).decode("ascii")


SIGNATURE_METHODS: dict[str, HashFunction] = {
    "HMAC-SHA1": hmac_sha1,
    "HMAC-SHA256": hmac_sha256,
    "HMAC-SHA512": hmac_sha512,
    "PLAINTEXT": plaintext,
}

BODY_HASH_METHODS: dict[str, HashFunction] = {
    "SHA1": sha1_body_hash,
    "SHA256": sha256_body_hash,
}

# Body hash that matches each signature method's digest.
_DEFAULT_BODY_HASH = {
    "HMAC-SHA1": "SHA1",
    "HMAC-SHA256": "SHA256",
}


def get_hash_function(signature_method: str) -> HashFunction:
    """Return the hash function registered for *signature_method*.

    Raises:
        ConfigurationError: If the method name is unknown.
    """
    try:
        return SIGNATURE_METHODS[signature_method.upper()]
    except KeyError:
        available = ", ".join(sorted(SIGNATURE_METHODS))
        raise ConfigurationError(
            f"Unknown signature method '{signature_method}'. Available: {available}"
        ) from None


def get_body_hash_function(
    body_hash_method: str | None, signature_method: str
) -> HashFunction | None:
    """Return the body-hash function for a profile.

    An explicit *body_hash_method* wins. Without one, HMAC-SHA1 and
    HMAC-SHA256 profiles get the digest of the same family and every other
    signature method gets ``None``, leaving the choice to the signer.

    Raises:
        ConfigurationError: If *body_hash_method* is given but unknown.
    """
    if body_hash_method is None:
        default = _DEFAULT_BODY_HASH.get(signature_method.upper())
        return BODY_HASH_METHODS[default] if default else None
    try:
        return BODY_HASH_METHODS[body_hash_method.upper()]
    except KeyError:
        available = ", ".join(sorted(BODY_HASH_METHODS))
        raise ConfigurationError(
            f"Unknown body hash method '{body_hash_method}'. Available: {available}"
        ) from None
