"""Service endpoints and transport settings.

Constructor keywords win over environment variables, which win over the
built-in production defaults:

- MIICARD_OAUTH_ENDPOINT
- MIICARD_CLAIMS_ENDPOINT
- MIICARD_TIMEOUT (seconds, applied to both connect and read)
- MIICARD_CA_BUNDLE (path to a PEM file to pin the trust root)
"""
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_OAUTH_ENDPOINT = "https://sts.miicard.com/auth/OAuth.ashx"
DEFAULT_CLAIMS_ENDPOINT = "https://sts.miicard.com/api/v1/Claims.svc/json"
DEFAULT_TIMEOUT = 90.0


@dataclass(frozen=True)
class ServiceConfig:
    """Where to send requests and how to reach the service."""
    oauth_endpoint: str = DEFAULT_OAUTH_ENDPOINT
    claims_endpoint: str = DEFAULT_CLAIMS_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT
    ca_bundle: str | None = None

    def method_url(self, method_name: str) -> str:
        """URL of a Claims API method, e.g. ``<claims_endpoint>/GetClaims``."""
        return f"{self.claims_endpoint.rstrip('/')}/{method_name}"

    @classmethod
    def from_env(
        cls,
        *,
        oauth_endpoint: str | None = None,
        claims_endpoint: str | None = None,
        timeout: float | None = None,
        ca_bundle: str | None = None,
    ) -> "ServiceConfig":
        env_timeout = os.environ.get("MIICARD_TIMEOUT")
        if timeout is None and env_timeout:
            try:
                timeout = float(env_timeout)
            except ValueError as exc:
                raise ValueError(f"MIICARD_TIMEOUT must be a number, got {env_timeout!r}") from exc

        return cls(
            oauth_endpoint=(
                oauth_endpoint
                or os.environ.get("MIICARD_OAUTH_ENDPOINT")
                or DEFAULT_OAUTH_ENDPOINT
            ),
            claims_endpoint=(
                claims_endpoint
                or os.environ.get("MIICARD_CLAIMS_ENDPOINT")
                or DEFAULT_CLAIMS_ENDPOINT
            ),
            timeout=timeout if timeout is not None else DEFAULT_TIMEOUT,
            ca_bundle=ca_bundle or os.environ.get("MIICARD_CA_BUNDLE") or None,
        )
