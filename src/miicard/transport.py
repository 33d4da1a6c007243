"""HTTPS transport for signed requests.

Anything with the signature of :func:`send` can be used in its place, which
is how hosts plug in their own HTTP stack and how tests avoid the network.
"""
from __future__ import annotations

from typing import Callable

import requests

from .config import DEFAULT_TIMEOUT
from .errors import TransportError
from .signing import SignedRequest

_USER_AGENT = "miiCard Python"

Transport = Callable[..., bytes]


def send(
    signed: SignedRequest,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    ca_bundle: str | None = None,
) -> bytes:
    """POST a signed request and return the raw response body.

    Non-2xx answers are returned as-is: the Claims API reports failures in
    its response envelope. Connection, timeout and TLS failures raise
    TransportError.
    """
    headers = {"User-Agent": _USER_AGENT, **signed.headers}
    try:
        resp = requests.post(
            signed.url,
            data=signed.body.encode("utf-8"),
            headers=headers,
            timeout=(timeout, timeout),
            verify=ca_bundle if ca_bundle else True,
            allow_redirects=True,
        )
    except requests.RequestException as exc:
        raise TransportError(f"{signed.method} {signed.url} failed: {exc}", cause=exc) from exc

    return resp.content
