"""OAuth 1.0a request signing for the miiCard SDK.

Requests are signed with HMAC-SHA1 in one of two shapes:

- form: caller parameters and the ``oauth_*`` parameters travel together in
  an ``application/x-www-form-urlencoded`` body (the authorisation endpoint).
- header: the body is an opaque JSON payload and the ``oauth_*`` parameters
  travel in the ``Authorization`` header (the Claims API).

Signing is pure: nothing here touches the network. Uses oauthlib for the
base string and signature computation.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from oauthlib.common import urldecode
from oauthlib.oauth1 import (
    SIGNATURE_HMAC_SHA1,
    SIGNATURE_TYPE_AUTH_HEADER,
    SIGNATURE_TYPE_BODY,
    Client,
)
from oauthlib.oauth1.rfc5849.signature import base_string_uri
from oauthlib.oauth1.rfc5849.utils import parse_authorization_header, unescape

from .errors import InvalidCredentialsError

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class Credentials:
    """OAuth consumer credentials, optionally with an access token pair.

    Without a token pair, requests are signed consumer-only, which is what
    the first leg of the authorisation handshake needs.
    """
    consumer_key: str
    consumer_secret: str
    access_token: str | None = None
    access_token_secret: str | None = None

    def __post_init__(self) -> None:
        if not self.consumer_key:
            raise InvalidCredentialsError("consumer_key is required")
        if not self.consumer_secret:
            raise InvalidCredentialsError("consumer_secret is required")
        if bool(self.access_token) != bool(self.access_token_secret):
            raise InvalidCredentialsError(
                "access_token and access_token_secret must be supplied together"
            )

    @property
    def has_access_token(self) -> bool:
        return bool(self.access_token and self.access_token_secret)

    def with_access_token(self, token: str, secret: str) -> "Credentials":
        """Return a copy carrying the given token pair."""
        return Credentials(self.consumer_key, self.consumer_secret, token, secret)

    def without_access_token(self) -> "Credentials":
        return Credentials(self.consumer_key, self.consumer_secret)


@dataclass(frozen=True)
class SignedRequest:
    """A request ready to hand to a transport. Built fresh for every call."""
    method: str
    url: str
    headers: Mapping[str, str]
    body: str
    parameters: tuple[tuple[str, str], ...]
    signature: str
    nonce: str
    timestamp: str
    signature_method: str = SIGNATURE_HMAC_SHA1


def sign_request(
    credentials: Credentials,
    method: str,
    url: str,
    parameters: Mapping[str, Any] | str | bytes | None = None,
    *,
    form_body: bool,
    nonce: str | None = None,
    timestamp: str | int | None = None,
) -> SignedRequest:
    """Sign a request with HMAC-SHA1.

    Args:
        credentials: Consumer credentials, with or without a token pair.
        method: HTTP method.
        url: Target URL; the signed request carries its normalized form.
        parameters: A mapping of form fields when ``form_body`` is true,
            otherwise a raw payload (already-serialized JSON) or None.
        form_body: Selects the form shape (True) or the header shape (False).
        nonce: Fixed nonce, generated when omitted.
        timestamp: Fixed timestamp in epoch seconds, current time when omitted.

    Returns:
        SignedRequest with headers and body ready to send.
    """
    client = Client(
        credentials.consumer_key,
        client_secret=credentials.consumer_secret,
        resource_owner_key=credentials.access_token,
        resource_owner_secret=credentials.access_token_secret,
        signature_method=SIGNATURE_HMAC_SHA1,
        signature_type=SIGNATURE_TYPE_BODY if form_body else SIGNATURE_TYPE_AUTH_HEADER,
        nonce=nonce,
        timestamp=str(timestamp) if timestamp is not None else None,
    )
    normalized_url = base_string_uri(url)

    if form_body:
        if isinstance(parameters, (str, bytes)):
            raise TypeError("form-signed requests take a mapping of parameters")
        fields = [(str(k), str(v)) for k, v in (parameters or {}).items()]
        _, headers, body = client.sign(
            normalized_url,
            http_method=method.upper(),
            body=fields,
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )
        signed_params = urldecode(body)
    else:
        if parameters is not None and not isinstance(parameters, (str, bytes)):
            raise TypeError("header-signed requests take a raw str/bytes payload")
        # The JSON body is not form-encoded, so it stays out of the base string.
        _, headers, _ = client.sign(
            normalized_url,
            http_method=method.upper(),
            body=None,
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )
        body = _as_text(parameters)
        signed_params = [
            (k, unescape(v)) for k, v in parse_authorization_header(headers["Authorization"])
        ]

    oauth = dict(signed_params)
    return SignedRequest(
        method=method.upper(),
        url=normalized_url,
        headers=MappingProxyType(dict(headers)),
        body=body,
        parameters=tuple(signed_params),
        signature=oauth["oauth_signature"],
        nonce=oauth["oauth_nonce"],
        timestamp=oauth["oauth_timestamp"],
        signature_method=oauth.get("oauth_signature_method", SIGNATURE_HMAC_SHA1),
    )


def _as_text(payload: str | bytes | None) -> str:
    if payload is None:
        return ""
    if isinstance(payload, bytes):
        return payload.decode("utf-8")
    return payload
