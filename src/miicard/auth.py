"""OAuth authorisation flow for miiCard.

Wraps the three-legged handshake: obtain a request token, send the member
to miiCard to approve it, then exchange the verifier from the callback for
an access token pair.

The request token has to survive the browser round trip, so the caller
passes in a session-like mapping (``store``). Nothing is kept in globals;
the access token pair is returned as new Credentials.
"""
from __future__ import annotations

import html
import sys
from enum import Enum
from typing import Mapping, MutableMapping
from urllib.parse import parse_qsl, quote

from .client import ClaimsService
from .config import ServiceConfig
from .errors import (
    AuthorisationError,
    InvalidCredentialsError,
    NoTokenReceivedError,
    TransportError,
    VerifierExchangeFailedError,
)
from .signing import Credentials, SignedRequest, sign_request
from .transport import Transport, send
from .types import UserProfile

STORE_KEY_ACCESS_TOKEN = "miiCard.OAuth.InProgress.AccessToken"
STORE_KEY_ACCESS_TOKEN_SECRET = "miiCard.OAuth.InProgress.AccessTokenSecret"


class AuthorisationState(Enum):
    NO_TOKEN = "no_token"
    REQUEST_TOKEN_OBTAINED = "request_token_obtained"
    AWAITING_CALLBACK = "awaiting_callback"
    AUTHORIZED = "authorized"
    FAILED = "failed"


class MiiCard:
    """Drives the OAuth handshake for one member.

    Args:
        credentials: Consumer key/secret. If an access token pair is
            included the helper starts out AUTHORIZED.
        config: Service endpoints (defaults from environment).
        transport: Replacement for :func:`miicard.transport.send`.
        referrer_code: Your affiliate code, if you have one.
        force_claims_picker: Make the member re-select what to share.
        log_failures: Emit MIICARD_AUTH_FAILED to stderr on handshake errors.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        config: ServiceConfig | None = None,
        transport: Transport | None = None,
        referrer_code: str | None = None,
        force_claims_picker: bool = False,
        log_failures: bool = True,
    ):
        self._credentials = credentials
        self._config = config or ServiceConfig.from_env()
        self._transport = transport or send
        self._referrer_code = referrer_code
        self._force_claims_picker = force_claims_picker
        self._log_failures = log_failures
        self.state = (
            AuthorisationState.AUTHORIZED
            if credentials.has_access_token
            else AuthorisationState.NO_TOKEN
        )

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def is_authorisation_success(self) -> bool:
        return self.state == AuthorisationState.AUTHORIZED

    def begin_authorisation(self, store: MutableMapping[str, str], callback_url: str) -> str:
        """Obtain a request token and return the URL to send the member to.

        The request token pair is written to ``store`` for
        :meth:`handle_authorisation_callback` to pick up.

        Raises:
            NoTokenReceivedError: The OAuth endpoint did not issue a token.
            TransportError: The request-token call could not be made.
        """
        self.clear(store)
        self._credentials = self._credentials.without_access_token()
        self.state = AuthorisationState.NO_TOKEN

        token, secret = self._get_request_token(callback_url)
        self.state = AuthorisationState.REQUEST_TOKEN_OBTAINED

        store[STORE_KEY_ACCESS_TOKEN] = token
        store[STORE_KEY_ACCESS_TOKEN_SECRET] = secret
        self.state = AuthorisationState.AWAITING_CALLBACK

        return self.redirect_url(token)

    def redirect_url(self, request_token: str) -> str:
        url = f"{self._config.oauth_endpoint}?oauth_token={quote(request_token, safe='')}"
        if self._referrer_code:
            url += f"&referrer={quote(self._referrer_code, safe='')}"
        if self._force_claims_picker:
            url += "&force_claims=true"
        return url

    @staticmethod
    def is_authorisation_callback(query: Mapping[str, str]) -> bool:
        """True if the current request looks like the OAuth callback."""
        return "oauth_verifier" in query

    def handle_authorisation_callback(
        self, store: MutableMapping[str, str], query: Mapping[str, str]
    ) -> Credentials | None:
        """Exchange the callback's verifier for an access token pair.

        Returns None without making any request unless both ``oauth_token``
        and ``oauth_verifier`` are present. On success the access token pair
        replaces the request token in ``store`` and is returned.

        Raises:
            AuthorisationError: No request token in ``store``.
            VerifierExchangeFailedError: The exchange returned nothing usable.
            TransportError: The exchange call could not be made.
        """
        token = query.get("oauth_token")
        verifier = query.get("oauth_verifier")
        if not token or not verifier:
            return None

        request_token = store.get(STORE_KEY_ACCESS_TOKEN)
        request_secret = store.get(STORE_KEY_ACCESS_TOKEN_SECRET)
        if not request_token or not request_secret:
            self._fail("no_request_token")
            raise AuthorisationError(
                "No request token found - call begin_authorisation first",
                "NO_REQUEST_TOKEN",
            )
        self.state = AuthorisationState.AWAITING_CALLBACK

        signed = sign_request(
            self._credentials.with_access_token(request_token, request_secret),
            "POST",
            self._config.oauth_endpoint,
            {"oauth_verifier": verifier},
            form_body=True,
        )
        raw = self._send(signed)
        if not raw:
            self._fail("empty_response")
            raise VerifierExchangeFailedError()

        fields = _parse_token_response(raw)
        access_token = fields.get("oauth_token")
        access_secret = fields.get("oauth_token_secret")
        if not access_token or not access_secret:
            self._fail("missing_access_token")
            raise VerifierExchangeFailedError(
                "Access token response did not contain oauth_token and oauth_token_secret"
            )

        store[STORE_KEY_ACCESS_TOKEN] = access_token
        store[STORE_KEY_ACCESS_TOKEN_SECRET] = access_secret
        self._credentials = self._credentials.with_access_token(access_token, access_secret)
        self.state = AuthorisationState.AUTHORIZED
        return self._credentials

    def get_user_profile(self) -> UserProfile | None:
        """Claims the member shared, or None if the call failed.

        Convenience only; a ClaimsService is the preferred way to call the API.
        """
        if self.state != AuthorisationState.AUTHORIZED:
            raise InvalidCredentialsError(
                "You must complete authorisation before calling the miiCard API"
            )
        api = ClaimsService(
            self._credentials,
            config=self._config,
            transport=self._transport,
            log_failures=self._log_failures,
        )
        response = api.get_claims()
        return response.data if response.succeeded else None

    @staticmethod
    def clear(store: MutableMapping[str, str]) -> None:
        """Forget any in-progress or completed token pair held in ``store``."""
        store.pop(STORE_KEY_ACCESS_TOKEN, None)
        store.pop(STORE_KEY_ACCESS_TOKEN_SECRET, None)

    def _get_request_token(self, callback_url: str) -> tuple[str, str]:
        signed = sign_request(
            self._credentials,
            "POST",
            self._config.oauth_endpoint,
            {"oauth_callback": callback_url},
            form_body=True,
        )
        raw = self._send(signed)
        fields = _parse_token_response(raw) if raw else {}

        token = fields.get("oauth_token")
        secret = fields.get("oauth_token_secret")
        if not token or not secret:
            self._fail("no_token_received")
            raise NoTokenReceivedError()
        return token, secret

    def _send(self, signed: SignedRequest) -> bytes:
        try:
            return self._transport(
                signed, timeout=self._config.timeout, ca_bundle=self._config.ca_bundle
            )
        except TransportError:
            self._fail("transport_error")
            raise

    def _fail(self, reason: str) -> None:
        self.state = AuthorisationState.FAILED
        if self._log_failures:
            print(
                f"MIICARD_AUTH_FAILED consumer={self._credentials.consumer_key} reason={reason}",
                file=sys.stderr,
            )


def default_callback_url(host: str, script_name: str, is_https: bool) -> str:
    """Callback URL pointing back at the current script."""
    scheme = "https" if is_https else "http"
    return f"{scheme}://{host}{script_name}"


def render_redirect_page(redirect_url: str) -> str:
    """Meta-refresh page that bounces the browser to miiCard.

    Used instead of a 302 so the session cookie holding the request token is
    set before the browser leaves.
    """
    url = html.escape(redirect_url, quote=True)
    return (
        f'<html><head><meta http-equiv="refresh" content="0;url={url}">'
        "<title>Redirecting to miiCard.com</title></head>"
        f'<body>You should be redirected automatically - if not, <a href="{url}">click here</a>.</body></html>'
    )


def _parse_token_response(raw: bytes | str) -> dict[str, str]:
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    return dict(parse_qsl(text.strip(), keep_blank_values=True))
