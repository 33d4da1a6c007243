"""Decoders turning Claims API JSON into miiCard SDK types.

Every decoder takes a dict as returned by ``json.loads`` and never mutates
it. Missing fields fall back to None / False / an empty tuple; only
identifiers are required. Sequence order is kept as received.
"""
from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable, TypeVar

from .errors import MalformedEnvelopeError
from .timestamps import parse_wire_timestamp
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

T = TypeVar("T")
E = TypeVar("E", bound=IntEnum)

Decoder = Callable[[dict[str, Any]], Any]

# Strict enums gate control flow, so an unknown value is an error. The rest
# decode unknown values to their UNKNOWN member.
ENUM_STRICT: dict[type[IntEnum], bool] = {
    ApiCallStatus: True,
    ApiErrorCode: False,
    WebPropertyType: False,
}


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


def parse_envelope(
    raw: Any,
    decoder: Decoder | None = None,
    *,
    sequence: bool = False,
) -> ApiResponse:
    """Parse a Claims API response envelope.

    Args:
        raw: The decoded JSON response.
        decoder: Applied to ``Data`` on success. Without one, ``Data`` is
            passed through untouched (e.g. the IsUserAssured boolean).
        sequence: ``Data`` is a list whose elements are decoded one by one.

    Raises:
        MalformedEnvelopeError: ``Status`` or ``ErrorCode`` is missing, or
            ``Status`` is not a known value.
    """
    if not isinstance(raw, dict):
        raise MalformedEnvelopeError(
            f"Response envelope must be a JSON object, got {type(raw).__name__}"
        )
    for key in ("Status", "ErrorCode"):
        if raw.get(key) is None:
            raise MalformedEnvelopeError(f"Response envelope is missing '{key}'")

    status = _parse_enum(ApiCallStatus, raw["Status"], "Status")
    error_code = _parse_enum(ApiErrorCode, raw["ErrorCode"], "ErrorCode")

    data = raw.get("Data")
    if decoder is not None:
        if status != ApiCallStatus.SUCCESS:
            data = None
        elif sequence:
            data = tuple(decoder(item) for item in _as_list(data, "Data"))
        elif data is not None:
            data = decoder(data)

    return ApiResponse(
        status=status,
        error_code=error_code,
        error_message=raw.get("ErrorMessage"),
        is_test_user=bool(raw.get("IsTestUser", False)),
        data=data,
    )


# ---------------------------------------------------------------------------
# Domain records
# ---------------------------------------------------------------------------


def parse_user_profile(raw: dict[str, Any]) -> UserProfile:
    """Parse a MiiUserProfile object, including its public profile if any."""
    _require_object(raw, "UserProfile")
    public = raw.get("PublicProfile")

    return UserProfile(
        username=raw.get("Username"),
        salutation=raw.get("Salutation"),
        first_name=raw.get("FirstName"),
        middle_name=raw.get("MiddleName"),
        last_name=raw.get("LastName"),
        previous_first_name=raw.get("PreviousFirstName"),
        previous_middle_name=raw.get("PreviousMiddleName"),
        previous_last_name=raw.get("PreviousLastName"),
        last_verified=_parse_date(raw, "LastVerified"),
        date_of_birth=_parse_date(raw, "DateOfBirth"),
        profile_url=raw.get("ProfileUrl"),
        profile_short_url=raw.get("ProfileShortUrl"),
        card_image_url=raw.get("CardImageUrl"),
        identity_assured=bool(raw.get("IdentityAssured", False)),
        has_public_profile=bool(raw.get("HasPublicProfile", False)),
        email_addresses=_parse_list(raw, "EmailAddresses", parse_email_address),
        phone_numbers=_parse_list(raw, "PhoneNumbers", parse_phone_number),
        postal_addresses=_parse_list(raw, "PostalAddresses", parse_postal_address),
        web_properties=_parse_list(raw, "WebProperties", parse_web_property),
        identities=_parse_list(raw, "Identities", parse_identity),
        public_profile=parse_user_profile(public) if public is not None else None,
    )


def parse_email_address(raw: dict[str, Any]) -> EmailAddress:
    _require_object(raw, "EmailAddress")
    return EmailAddress(
        address=raw.get("Address"),
        display_name=raw.get("DisplayName"),
        verified=bool(raw.get("Verified", False)),
        is_primary=bool(raw.get("IsPrimary", False)),
    )


def parse_phone_number(raw: dict[str, Any]) -> PhoneNumber:
    _require_object(raw, "PhoneNumber")
    return PhoneNumber(
        country_code=raw.get("CountryCode"),
        national_number=raw.get("NationalNumber"),
        display_name=raw.get("DisplayName"),
        verified=bool(raw.get("Verified", False)),
        is_mobile=bool(raw.get("IsMobile", False)),
        is_primary=bool(raw.get("IsPrimary", False)),
    )


def parse_postal_address(raw: dict[str, Any]) -> PostalAddress:
    _require_object(raw, "PostalAddress")
    return PostalAddress(
        house=raw.get("House"),
        line1=raw.get("Line1"),
        line2=raw.get("Line2"),
        city=raw.get("City"),
        region=raw.get("Region"),
        code=raw.get("Code"),
        country=raw.get("Country"),
        is_primary=bool(raw.get("IsPrimary", False)),
        verified=bool(raw.get("Verified", False)),
    )


def parse_web_property(raw: dict[str, Any]) -> WebProperty:
    _require_object(raw, "WebProperty")
    prop_type = raw.get("Type")
    return WebProperty(
        identifier=raw.get("Identifier"),
        display_name=raw.get("DisplayName"),
        verified=bool(raw.get("Verified", False)),
        type=(
            _parse_enum(WebPropertyType, prop_type, "Type")
            if prop_type is not None
            else WebPropertyType.UNKNOWN
        ),
    )


def parse_identity(raw: dict[str, Any]) -> Identity:
    _require_object(raw, "Identity")
    return Identity(
        source=raw.get("Source"),
        user_id=raw.get("UserId"),
        profile_url=raw.get("ProfileUrl"),
        verified=bool(raw.get("Verified", False)),
    )


def parse_identity_snapshot_details(raw: dict[str, Any]) -> IdentitySnapshotDetails:
    _require_object(raw, "IdentitySnapshotDetails")
    snapshot_id = raw.get("SnapshotId")
    if not snapshot_id:
        raise MalformedEnvelopeError("IdentitySnapshotDetails is missing 'SnapshotId'")

    return IdentitySnapshotDetails(
        snapshot_id=snapshot_id,
        username=raw.get("Username"),
        timestamp_utc=_parse_date(raw, "TimestampUtc"),
        was_test_user=bool(raw.get("WasTestUser", False)),
    )


def parse_identity_snapshot(raw: dict[str, Any]) -> IdentitySnapshot:
    _require_object(raw, "IdentitySnapshot")
    details = raw.get("Details")
    if details is None:
        raise MalformedEnvelopeError("IdentitySnapshot is missing 'Details'")
    snapshot = raw.get("Snapshot")

    return IdentitySnapshot(
        details=parse_identity_snapshot_details(details),
        snapshot=parse_user_profile(snapshot) if snapshot is not None else UserProfile(),
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_enum(enum_cls: type[E], value: Any, field: str) -> E:
    if not isinstance(value, bool):
        try:
            return enum_cls(value)
        except (TypeError, ValueError):
            pass
    if ENUM_STRICT[enum_cls]:
        raise MalformedEnvelopeError(
            f"Unrecognised {enum_cls.__name__} value for '{field}': {value!r}"
        )
    return enum_cls.UNKNOWN


def _parse_date(raw: dict[str, Any], key: str) -> float | None:
    value = raw.get(key)
    if value is None:
        return None
    return parse_wire_timestamp(value)


def _parse_list(
    raw: dict[str, Any], key: str, parser: Callable[[dict[str, Any]], T]
) -> tuple[T, ...]:
    return tuple(parser(item) for item in _as_list(raw.get(key), key))


def _as_list(value: Any, key: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedEnvelopeError(f"'{key}' must be a JSON array")
    return value


def _require_object(raw: Any, name: str) -> None:
    if not isinstance(raw, dict):
        raise MalformedEnvelopeError(f"{name} must be a JSON object, got {type(raw).__name__}")
