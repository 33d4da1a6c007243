"""Unit tests for miicard.transport."""
from unittest.mock import MagicMock, patch

import pytest
import requests

from miicard.errors import TransportError
from miicard.signing import Credentials, sign_request
from miicard.transport import send


def _signed():
    return sign_request(
        Credentials("key", "secret", "token", "tokensecret"),
        "POST",
        "https://sts.miicard.com/api/v1/Claims.svc/json/IsUserAssured",
        '{"a":"b"}',
        form_body=False,
    )


class TestSend:
    def test_posts_signed_request(self):
        resp = MagicMock(status_code=200, content=b'{"Status":0}')
        signed = _signed()

        with patch("miicard.transport.requests.post", return_value=resp) as mock_request:
            assert send(signed) == b'{"Status":0}'

        args, kwargs = mock_request.call_args
        assert args == (signed.url,)
        assert kwargs["data"] == b'{"a":"b"}'
        assert kwargs["headers"]["Authorization"] == signed.headers["Authorization"]
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["headers"]["User-Agent"] == "miiCard Python"
        assert kwargs["timeout"] == (90.0, 90.0)
        assert kwargs["verify"] is True

    def test_pinned_ca_bundle(self):
        resp = MagicMock(status_code=200, content=b"ok")
        with patch("miicard.transport.requests.post", return_value=resp) as mock_request:
            send(_signed(), timeout=10, ca_bundle="/etc/miicard/sts.miicard.com.pem")

        kwargs = mock_request.call_args.kwargs
        assert kwargs["verify"] == "/etc/miicard/sts.miicard.com.pem"
        assert kwargs["timeout"] == (10, 10)

    def test_error_status_returns_body(self):
        resp = MagicMock(status_code=500, content=b'{"Status":1,"ErrorCode":10000}')
        with patch("miicard.transport.requests.post", return_value=resp):
            assert send(_signed()) == b'{"Status":1,"ErrorCode":10000}'

    @pytest.mark.parametrize("exc", [
        requests.Timeout("timed out"),
        requests.ConnectionError("refused"),
        requests.exceptions.SSLError("bad cert"),
    ])
    def test_network_failure_raises_transport_error(self, exc):
        with patch("miicard.transport.requests.post", side_effect=exc):
            with pytest.raises(TransportError) as info:
                send(_signed())

        assert info.value.cause is exc
        assert info.value.code == "TRANSPORT_ERROR"
