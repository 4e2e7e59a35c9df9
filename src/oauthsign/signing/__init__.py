"""OAuth 1.0a signing engine.

Two cooperating parts:

- :mod:`~oauthsign.signing.canonical` -- builds the signature base string
  (percent-encoding, query parsing, parameter merging, sorting).
- :class:`Signer` -- assembles the ``oauth_*`` parameters, derives the
  signing key, invokes the injected hash function and renders the
  ``Authorization`` header.

Concrete hash functions live in :mod:`~oauthsign.signing.hashes`.
"""

from oauthsign.signing.canonical import ListValue, StringValue, percent_encode
from oauthsign.signing.hashes import (
    HashFunction,
    get_body_hash_function,
    get_hash_function,
    hmac_sha1,
    hmac_sha256,
    hmac_sha512,
    plaintext,
    sha1_body_hash,
    sha256_body_hash,
)
from oauthsign.signing.signer import Signer

__all__ = [
    "HashFunction",
    "ListValue",
    "Signer",
    "StringValue",
    "get_body_hash_function",
    "get_hash_function",
    "hmac_sha1",
    "hmac_sha256",
    "hmac_sha512",
    "percent_encode",
    "plaintext",
    "sha1_body_hash",
    "sha256_body_hash",
]
