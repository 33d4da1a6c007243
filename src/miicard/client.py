"""miiCard Claims API client."""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any

from .config import ServiceConfig
from .errors import EmptyResponseError, InvalidCredentialsError, MalformedEnvelopeError
from .parsing import (
    Decoder,
    parse_envelope,
    parse_identity_snapshot,
    parse_identity_snapshot_details,
    parse_user_profile,
)
from .signing import Credentials, sign_request
from .transport import Transport, send
from .types import ApiResponse, IdentitySnapshot, IdentitySnapshotDetails, UserProfile


@dataclass(frozen=True)
class _ApiMethod:
    name: str
    decoder: Decoder | None
    wrapped: bool = True
    sequence: bool = False


_GET_CLAIMS = _ApiMethod("GetClaims", parse_user_profile)
_IS_SOCIAL_ACCOUNT_ASSURED = _ApiMethod("IsSocialAccountAssured", None)
_IS_USER_ASSURED = _ApiMethod("IsUserAssured", None)
_ASSURANCE_IMAGE = _ApiMethod("AssuranceImage", None, wrapped=False)
_GET_IDENTITY_SNAPSHOT_DETAILS = _ApiMethod(
    "GetIdentitySnapshotDetails", parse_identity_snapshot_details, sequence=True
)
_GET_IDENTITY_SNAPSHOT = _ApiMethod("GetIdentitySnapshot", parse_identity_snapshot)


class ClaimsService:
    """Client for the miiCard Claims API v1.

    Example::

        creds = Credentials(key, secret, access_token, access_token_secret)
        api = ClaimsService(creds)
        response = api.get_claims()
        if response.succeeded:
            print(response.data.first_name)

    Failure envelopes are returned, not raised. With ``log_failures`` (the
    default) each one also writes a MIICARD_API_FAILURE line to stderr.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        config: ServiceConfig | None = None,
        transport: Transport | None = None,
        log_failures: bool = True,
    ):
        if not credentials.has_access_token:
            raise InvalidCredentialsError(
                "access_token and access_token_secret are required to call the Claims API"
            )
        self._credentials = credentials
        self._config = config or ServiceConfig.from_env()
        self._transport = transport or send
        self._log_failures = log_failures

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    def get_claims(self) -> ApiResponse[UserProfile]:
        """Get the claims the member has shared with your application."""
        return self._call(_GET_CLAIMS)

    def is_social_account_assured(
        self, social_account_id: str, social_account_type: str
    ) -> ApiResponse[bool]:
        """Whether the member owns the given social media account.

        Only answerable if the member shared that account with your application.
        """
        return self._call(
            _IS_SOCIAL_ACCOUNT_ASSURED,
            {
                "socialAccountId": social_account_id,
                "socialAccountType": social_account_type,
            },
        )

    def is_user_assured(self) -> ApiResponse[bool]:
        """Whether the member's identity has been assured by miiCard."""
        return self._call(_IS_USER_ASSURED)

    def assurance_image(self, image_type: str) -> bytes:
        """Image of the member's assurance status.

        ``image_type`` is one of 'banner', 'badge-small' or 'badge'.
        """
        return self._call(_ASSURANCE_IMAGE, {"type": image_type})

    def get_identity_snapshot_details(
        self, snapshot_id: str | None = None
    ) -> ApiResponse[tuple[IdentitySnapshotDetails, ...]]:
        """Details of one snapshot, or of every snapshot when no ID is given."""
        body: dict[str, Any] = {}
        if snapshot_id is not None:
            body["snapshotId"] = snapshot_id
        return self._call(_GET_IDENTITY_SNAPSHOT_DETAILS, body)

    def get_identity_snapshot(self, snapshot_id: str) -> ApiResponse[IdentitySnapshot]:
        """A previously taken snapshot of the member's identity."""
        return self._call(_GET_IDENTITY_SNAPSHOT, {"snapshotId": snapshot_id})

    def _call(self, method: _ApiMethod, body: dict[str, Any] | None = None) -> Any:
        payload = json.dumps(body, separators=(",", ":")) if body is not None else None
        signed = sign_request(
            self._credentials,
            "POST",
            self._config.method_url(method.name),
            payload,
            form_body=False,
        )
        raw = self._transport(
            signed, timeout=self._config.timeout, ca_bundle=self._config.ca_bundle
        )
        if not raw:
            raise EmptyResponseError()

        if not method.wrapped:
            return method.decoder(raw) if method.decoder else raw

        try:
            decoded = json.loads(raw)
        except ValueError as exc:
            raise MalformedEnvelopeError(
                f"{method.name} returned a body that is not JSON: {exc}"
            ) from exc

        response = parse_envelope(decoded, method.decoder, sequence=method.sequence)
        if not response.succeeded and self._log_failures:
            self._log_failure(method.name, response)
        return response

    def _log_failure(self, method_name: str, response: ApiResponse) -> None:
        """Emit structured MIICARD_API_FAILURE log line to stderr."""
        parts = [
            "MIICARD_API_FAILURE",
            f"method={method_name}",
            f"error_code={response.error_code.name}",
        ]
        if response.is_test_user:
            parts.append("test_user=true")
        if response.error_message:
            parts.append(f"message={response.error_message!r}")

        print(" ".join(parts), file=sys.stderr)
