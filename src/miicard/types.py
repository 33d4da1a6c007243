"""Dataclasses and enums for miiCard API response types.

Records are frozen: build them with the parse_* functions in
``miicard.parsing`` rather than by hand.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class ApiCallStatus(IntEnum):
    """Outcome of a Claims API call."""
    SUCCESS = 0
    FAILURE = 1


class ApiErrorCode(IntEnum):
    """Reason a Claims API call failed, SUCCESS when it didn't."""
    UNKNOWN = -1
    SUCCESS = 0
    UNKNOWN_SEARCH_TYPE = 10
    NO_MATCHES = 11
    ACCESS_REVOKED = 100
    USER_SUBSCRIPTION_LAPSED = 200
    TRANSACTIONAL_SUPPORT_DISABLED = 1000
    DEVELOPMENT_TRANSACTIONAL_SUPPORT_ONLY = 1010
    INVALID_SNAPSHOT_ID = 1020
    BLACKLISTED = 2000
    PRODUCT_DISABLED = 2010
    USER_DELETED = 2020
    EXCEPTION = 10000


class WebPropertyType(IntEnum):
    UNKNOWN = -1
    DOMAIN = 0
    WEBSITE = 1


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """Envelope wrapping every Claims API response.

    ``data`` is only meaningful when ``status`` is SUCCESS.
    """
    status: ApiCallStatus
    error_code: ApiErrorCode
    error_message: str | None
    is_test_user: bool
    data: T | None

    @property
    def succeeded(self) -> bool:
        return self.status == ApiCallStatus.SUCCESS


@dataclass(frozen=True)
class EmailAddress:
    address: str | None = None
    display_name: str | None = None
    verified: bool = False
    is_primary: bool = False


@dataclass(frozen=True)
class PhoneNumber:
    country_code: str | None = None
    national_number: str | None = None
    display_name: str | None = None
    verified: bool = False
    is_mobile: bool = False
    is_primary: bool = False


@dataclass(frozen=True)
class PostalAddress:
    house: str | None = None
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    region: str | None = None
    code: str | None = None
    country: str | None = None
    is_primary: bool = False
    verified: bool = False


@dataclass(frozen=True)
class WebProperty:
    """A website or domain the member has proven ownership of."""
    identifier: str | None = None
    display_name: str | None = None
    verified: bool = False
    type: WebPropertyType = WebPropertyType.UNKNOWN


@dataclass(frozen=True)
class Identity:
    """A social network account linked to the member's miiCard."""
    source: str | None = None
    user_id: str | None = None
    profile_url: str | None = None
    verified: bool = False


@dataclass(frozen=True)
class UserProfile:
    """Identity claims a member has shared with the application.

    ``public_profile`` is the subset visible on the member's public card.
    It has the same shape, so it may itself carry a ``public_profile``; the
    service only ever sends one level.
    """
    username: str | None = None
    salutation: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    previous_first_name: str | None = None
    previous_middle_name: str | None = None
    previous_last_name: str | None = None
    last_verified: float | None = None
    date_of_birth: float | None = None
    profile_url: str | None = None
    profile_short_url: str | None = None
    card_image_url: str | None = None
    identity_assured: bool = False
    has_public_profile: bool = False
    email_addresses: tuple[EmailAddress, ...] = ()
    phone_numbers: tuple[PhoneNumber, ...] = ()
    postal_addresses: tuple[PostalAddress, ...] = ()
    web_properties: tuple[WebProperty, ...] = ()
    identities: tuple[Identity, ...] = ()
    public_profile: UserProfile | None = None


@dataclass(frozen=True)
class IdentitySnapshotDetails:
    """Metadata about a stored snapshot of a member's identity."""
    snapshot_id: str
    username: str | None = None
    timestamp_utc: float | None = None
    was_test_user: bool = False


@dataclass(frozen=True)
class IdentitySnapshot:
    """A member's shared claims as they stood when the snapshot was taken."""
    details: IdentitySnapshotDetails
    snapshot: UserProfile
