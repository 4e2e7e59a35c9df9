"""Canonical Pydantic models shared across all oauthsign modules.

The models fall into two groups:

**Signing models** -- the inputs of the signing engine:
    :class:`Consumer`, :class:`Token` and :class:`RequestDescriptor`. The
    engine's output, the OAuth parameter set, is a plain ``dict[str, str]``
    aliased as :data:`OAuthParameters`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OAuth1Config`, :class:`EndpointsConfig`, :class:`RequestConfig`,
    :class:`OutputConfig`, :class:`GlobalConfig` and :class:`Profile`.

All models use Pydantic v2. Credentials are frozen so that a signer built
once per client cannot have its identity changed underneath it.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


OAuthParameters = dict[str, str]
"""The ``oauth_*`` parameter set produced by :meth:`Signer.sign`."""

RequestBody = Union[str, dict[str, Any], None]


# --- Signing inputs ---


class Consumer(BaseModel):
    """The application's registered identity (consumer key and secret)."""

    model_config = ConfigDict(frozen=True)

    key: str
    secret: str


class Token(BaseModel):
    """A per-user access token.

    Both fields default to the empty string, which represents a two-legged
    request signed with the consumer credentials only. An empty ``key``
    omits ``oauth_token`` from the signed parameters entirely.
    """

    model_config = ConfigDict(frozen=True)

    key: str = ""
    secret: str = ""


class RequestDescriptor(BaseModel):
    """Describes the HTTP call being signed.

    ``body`` may be absent, a raw string, or a mapping of form fields. Only a
    mapping contributes parameters to the signature base string; a raw string
    body is covered by ``oauth_body_hash`` when ``include_body_hash`` is set.

    Example::

        RequestDescriptor(
            url="https://api.example.com/1.1/statuses/update.json",
            method="POST",
            body={"status": "hello"},
        )
    """

    url: str
    method: str = "GET"
    body: RequestBody = None
    include_body_hash: bool = False


# --- Configuration ---


class OAuth1Config(BaseModel):
    """OAuth 1.0a settings embedded in a :class:`Profile`.

    Secrets are never stored here directly; each ``*_source`` field holds a
    credential source descriptor (``env:VAR``, ``file:/path``, ``prompt`` or
    ``literal:value``) resolved by :func:`~oauthsign.config.resolve_credential`
    when the signer is built.
    """

    consumer_key_source: str = Field(description="Source of the consumer key")
    consumer_secret_source: str = Field(description="Source of the consumer secret")
    token_key_source: Optional[str] = Field(
        default=None, description="Source of the access token (omit for two-legged)"
    )
    token_secret_source: Optional[str] = Field(
        default=None, description="Source of the access token secret"
    )
    signature_method: str = Field(
        default="HMAC-SHA1",
        description="HMAC-SHA1, HMAC-SHA256, HMAC-SHA512 or PLAINTEXT",
    )
    body_hash_method: Optional[str] = Field(
        default=None, description="SHA1 or SHA256; defaults to the signature hash"
    )
    include_body_hash: bool = False
    nonce_length: int = Field(default=32, ge=1)
    version: str = "1.0"
    realm: Optional[str] = None
    parameter_separator: str = ", "
    last_ampersand: bool = True


class EndpointsConfig(BaseModel):
    """Base URLs used to turn relative API paths into absolute endpoints."""

    rest: str = "https://api.twitter.com/1.1"
    stream: str = "https://stream.twitter.com/1.1"
    user_stream: str = "https://userstream.twitter.com/1.1"
    site_stream: str = "https://sitestream.twitter.com/1.1"
    media: str = "https://upload.twitter.com/1.1"


class RequestConfig(BaseModel):
    """Default HTTP request settings applied to every API call in a profile."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    headers: dict[str, str] = Field(
        default_factory=lambda: {"Accept": "*/*"},
        description="Headers sent with every request",
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/oauthsign/config.json``.

    Loaded and saved by :func:`~oauthsign.config.load_global_config` and
    :func:`~oauthsign.config.save_global_config`. See
    :func:`~oauthsign.config.resolve_config` for how it combines with CLI
    flags and environment variables.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    output: OutputConfig = Field(default_factory=OutputConfig)


class Profile(BaseModel):
    """Per-API profile stored as JSON under the ``profiles/`` config directory.

    A profile bundles the OAuth settings, endpoint base URLs and request
    defaults needed to talk to one API. Profiles are created with
    ``oauthsign profile add``.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    auth: Optional[OAuth1Config] = None
    endpoints: EndpointsConfig = Field(default_factory=EndpointsConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
