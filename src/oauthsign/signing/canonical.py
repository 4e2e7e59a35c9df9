"""Signature base string construction (RFC 5849, section 3.4.1).

Everything in this module is a pure function of its inputs. Given the OAuth
parameters of a request and the request itself, it produces the exact string
that gets signed::

    METHOD&percent(base_url)&percent(k1=v1&k2=v2&...)

Parameter values come in two shapes. Most keys carry a single value
(:class:`StringValue`), but a query string or form body may repeat a key
(``?a=1&a=2``), in which case the value is a :class:`ListValue`. The two
variants are carried explicitly through merging, encoding, sorting and
serialisation, and each knows how to encode and render itself.

The pipeline, in order::

    collect_parameters -> percent_encode_all -> sort_by_key
        -> serialize_parameter_string -> build_base_string

Sorting happens on the *encoded* keys, as the protocol requires.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import quote, unquote

from oauthsign.exceptions import SigningPreconditionError
from oauthsign.models import RequestDescriptor


@dataclass(frozen=True)
class StringValue:
    """A parameter that appears exactly once."""

    value: str

    def encoded(self) -> StringValue:
        return StringValue(percent_encode(self.value))

    def appended(self, value: str) -> ListValue:
        return ListValue((self.value, value))

    def segments(self, key: str) -> list[str]:
        return [f"{key}={self.value}"]


@dataclass(frozen=True)
class ListValue:
    """A parameter repeated under the same key, values in first-seen order."""

    values: tuple[str, ...]

    def encoded(self) -> ListValue:
        return ListValue(tuple(percent_encode(v) for v in self.values))

    def appended(self, value: str) -> ListValue:
        return ListValue(self.values + (value,))

    def segments(self, key: str) -> list[str]:
        # Repeated keys are ordered by value (RFC 5849, 3.4.1.3.2).
        return [f"{key}={v}" for v in sorted(self.values)]


ParamValue = Union[StringValue, ListValue]


def percent_encode(value: Any) -> str:
    """Percent-encode *value* per RFC 3986, section 2.1.

    Only the unreserved characters ``A-Z a-z 0-9 - . _ ~`` are left as-is.
    In particular ``!*'()`` become ``%21 %2A %27 %28 %29`` and a space
    becomes ``%20``, never ``+``. Non-string values are converted with
    :func:`str` and text is UTF-8 encoded before escaping.

    Example::

        >>> percent_encode("Ladies + Gentlemen")
        'Ladies%20%2B%20Gentlemen'
    """
    return quote(str(value), safe="~")


def to_param_value(value: Any) -> ParamValue:
    """Wrap a raw body or OAuth value into the matching :data:`ParamValue`."""
    if isinstance(value, (StringValue, ListValue)):
        return value
    if isinstance(value, (list, tuple)):
        return ListValue(tuple(_stringify(v) for v in value))
    return StringValue(_stringify(value))


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _decode(component: str) -> str:
    try:
        return unquote(component, errors="strict")
    except UnicodeDecodeError as exc:
        raise SigningPreconditionError(
            f"Query component '{component}' is not valid percent-encoded UTF-8"
        ) from exc


def parse_query(query: str) -> dict[str, ParamValue]:
    """Decode an ``application/x-www-form-urlencoded`` style query string.

    Each ``&``-separated pair is split on its first ``=`` and both halves are
    percent-decoded. ``+`` is kept literally. A key seen a second time turns
    into a :class:`ListValue` holding every value in first-seen order.
    Empty segments are skipped and a pair without ``=`` has an empty value.

    Raises:
        SigningPreconditionError: If an escape sequence does not decode as
            UTF-8. The value could not be re-encoded to what the request
            actually carries.
    """
    params: dict[str, ParamValue] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        raw_key, _, raw_value = pair.partition("=")
        key, value = _decode(raw_key), _decode(raw_value)
        if key in params:
            params[key] = params[key].appended(value)
        else:
            params[key] = StringValue(value)
    return params


def extract_query_params(url: str) -> dict[str, ParamValue]:
    """Return the decoded query parameters of *url*.

    Everything after the first ``?`` (up to an optional ``#fragment``) is
    parsed with :func:`parse_query`. A URL without a query string yields an
    empty dict rather than an error.
    """
    _, sep, query = url.partition("?")
    if not sep:
        return {}
    return parse_query(query.split("#", 1)[0])


def base_url(url: str) -> str:
    """Strip the query string and fragment from *url*."""
    return url.split("?", 1)[0].split("#", 1)[0]


def body_parameters(body: Any) -> dict[str, ParamValue]:
    """Return the parameters a request body contributes to the signature.

    Only a mapping (form fields) contributes. A raw string body is opaque
    and an absent body is empty.
    """
    if not isinstance(body, Mapping):
        return {}
    return {str(k): to_param_value(v) for k, v in body.items()}


def merge_parameter_sources(
    first: Mapping[str, Any], second: Mapping[str, Any]
) -> dict[str, ParamValue]:
    """Shallow union of two parameter sources; *second* wins on collision.

    Neither input is modified.
    """
    merged = {k: to_param_value(v) for k, v in first.items()}
    for key, value in second.items():
        merged[key] = to_param_value(value)
    return merged


def percent_encode_all(params: Mapping[str, ParamValue]) -> dict[str, ParamValue]:
    """Percent-encode every key and value, preserving each value's shape."""
    return {percent_encode(k): v.encoded() for k, v in params.items()}


def sort_by_key(params: Mapping[str, ParamValue]) -> list[tuple[str, ParamValue]]:
    """Return ``(key, value)`` pairs ordered by key in code-point order.

    Call this on already-encoded keys; encoding can change relative order.
    """
    return sorted(params.items(), key=lambda item: item[0])


def serialize_parameter_string(pairs: list[tuple[str, ParamValue]]) -> str:
    """Render sorted pairs as ``k1=v1&k2=v2``.

    A list value expands into one ``key=value`` segment per element, elements
    sorted. Segments are joined with single ``&`` characters, so no separator
    is ever left at either end, whatever the shape of the last value.
    """
    segments: list[str] = []
    for key, value in pairs:
        segments.extend(value.segments(key))
    return "&".join(segments)


def build_base_string(method: str, url: str, parameter_string: str) -> str:
    """Assemble the signature base string from its three parts."""
    return "&".join(
        [
            method.upper(),
            percent_encode(base_url(url)),
            percent_encode(parameter_string),
        ]
    )


def collect_parameters(
    oauth_params: Mapping[str, str], request: RequestDescriptor
) -> dict[str, ParamValue]:
    """Select and merge the parameter sources covered by the signature.

    With ``oauth_body_hash`` present the body is represented by its hash, so
    only the URL's query parameters are merged over the OAuth parameters.
    Otherwise body parameters are merged first and the query parameters
    overwrite them, and both overwrite OAuth keys on collision.
    """
    query = extract_query_params(request.url)
    if "oauth_body_hash" in oauth_params:
        return merge_parameter_sources(oauth_params, query)
    return merge_parameter_sources(
        oauth_params,
        merge_parameter_sources(body_parameters(request.body), query),
    )


def build_parameter_string(
    oauth_params: Mapping[str, str], request: RequestDescriptor
) -> str:
    """Return the normalised request parameter string for *request*."""
    encoded = percent_encode_all(collect_parameters(oauth_params, request))
    return serialize_parameter_string(sort_by_key(encoded))
