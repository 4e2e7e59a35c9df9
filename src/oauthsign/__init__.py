"""oauthsign -- OAuth 1.0a request signing for Python.

The heart of the package is a small, deterministic signing engine that turns
an HTTP request description and a consumer/token credential pair into an
``Authorization`` header accepted by OAuth-1.0a-protected APIs. Around it sit
the pieces needed to actually talk to such an API from a terminal: an httpx
client that signs every request, a reader for line-delimited JSON streams,
and a Typer CLI backed by JSON profiles.

Typical library usage::

    from oauthsign.models import Consumer, RequestDescriptor, Token
    from oauthsign.signing import Signer, hmac_sha1

    signer = Signer(Consumer(key="ck", secret="cs"),
                    signature_method="HMAC-SHA1", hash_function=hmac_sha1)
    headers = signer.authorize(
        RequestDescriptor(url="https://api.example.com/1.1/x.json", method="GET"),
        Token(key="tk", secret="ts"),
    )

Modules:
    signing: Canonicalizer, Signer and the injectable hash functions.
    auth: Plugin seam that turns a profile's auth section into headers.
    client: Signed HTTP client built on httpx.
    stream: CRLF-delimited JSON stream reader.
    models: Pydantic models shared across the package.
    config: profile store and OAuth credential resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"
