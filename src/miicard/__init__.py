"""miiCard SDK — Python client for the miiCard identity-assurance API."""
from .auth import (
    AuthorisationState,
    MiiCard,
    default_callback_url,
    render_redirect_page,
)
from .client import ClaimsService
from .config import ServiceConfig
from .errors import (
    AuthorisationError,
    EmptyResponseError,
    InvalidCredentialsError,
    MalformedEnvelopeError,
    MalformedTimestampError,
    MiiCardError,
    NoTokenReceivedError,
    TransportError,
    VerifierExchangeFailedError,
)
from .parsing import (
    parse_email_address,
    parse_envelope,
    parse_identity,
    parse_identity_snapshot,
    parse_identity_snapshot_details,
    parse_phone_number,
    parse_postal_address,
    parse_user_profile,
    parse_web_property,
)
from .signing import Credentials, SignedRequest, sign_request
from .timestamps import format_wire_timestamp, parse_wire_timestamp
from .types import (
    ApiCallStatus,
    ApiErrorCode,
    ApiResponse,
    EmailAddress,
    Identity,
    IdentitySnapshot,
    IdentitySnapshotDetails,
    PhoneNumber,
    PostalAddress,
    UserProfile,
    WebProperty,
    WebPropertyType,
)

__version__ = "1.0.0"

__all__ = [
    "MiiCard",
    "ClaimsService",
    "AuthorisationState",
    "ServiceConfig",
    "Credentials",
    "SignedRequest",
    "sign_request",
    "default_callback_url",
    "render_redirect_page",
    "parse_envelope",
    "parse_user_profile",
    "parse_email_address",
    "parse_phone_number",
    "parse_postal_address",
    "parse_web_property",
    "parse_identity",
    "parse_identity_snapshot",
    "parse_identity_snapshot_details",
    "parse_wire_timestamp",
    "format_wire_timestamp",
    "MiiCardError",
    "InvalidCredentialsError",
    "TransportError",
    "EmptyResponseError",
    "MalformedEnvelopeError",
    "MalformedTimestampError",
    "AuthorisationError",
    "NoTokenReceivedError",
    "VerifierExchangeFailedError",
    "ApiCallStatus",
    "ApiErrorCode",
    "ApiResponse",
    "EmailAddress",
    "PhoneNumber",
    "PostalAddress",
    "WebProperty",
    "WebPropertyType",
    "Identity",
    "UserProfile",
    "IdentitySnapshotDetails",
    "IdentitySnapshot",
]
