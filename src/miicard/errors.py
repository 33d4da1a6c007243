"""Error classes for the miiCard SDK."""
from __future__ import annotations


class MiiCardError(Exception):
    """Base error for miiCard SDK operations."""

    def __init__(self, message: str, code: str = "MIICARD_ERROR"):
        super().__init__(message)
        self.code = code


class InvalidCredentialsError(MiiCardError, ValueError):
    """Raised when a consumer key/secret is missing or a token pair is incomplete."""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_CREDENTIALS")


class TransportError(MiiCardError):
    """Raised when the HTTP exchange itself fails (network, timeout, TLS)."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message, "TRANSPORT_ERROR")
        self.cause = cause


class EmptyResponseError(MiiCardError):
    """Raised when the server answered but sent no body."""

    def __init__(self, message: str = "An empty response was received from the server"):
        super().__init__(message, "EMPTY_RESPONSE")


class MalformedEnvelopeError(MiiCardError):
    """Raised when a response is not a well-formed API envelope or record."""

    def __init__(self, message: str):
        super().__init__(message, "MALFORMED_ENVELOPE")


class MalformedTimestampError(MiiCardError):
    """Raised when a /Date(ms)/ wire timestamp cannot be parsed."""

    def __init__(self, value: object):
        super().__init__(f"Malformed wire timestamp: {value!r}", "MALFORMED_TIMESTAMP")
        self.value = value


class AuthorisationError(MiiCardError):
    """Base error for the OAuth authorisation handshake."""


class NoTokenReceivedError(AuthorisationError):
    """Raised when the request-token call returns no oauth_token."""

    def __init__(
        self,
        message: str = "No token received from OAuth service - check credentials",
    ):
        super().__init__(message, "NO_TOKEN_RECEIVED")


class VerifierExchangeFailedError(AuthorisationError):
    """Raised when exchanging the verifier for an access token yields nothing."""

    def __init__(self, message: str = "Nothing received from miiCard"):
        super().__init__(message, "VERIFIER_EXCHANGE_FAILED")
