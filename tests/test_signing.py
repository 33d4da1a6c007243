"""Unit tests for miicard.signing."""
import base64
import hashlib
import hmac
from urllib.parse import parse_qs, quote

import pytest

from miicard.errors import InvalidCredentialsError
from miicard.signing import Credentials, sign_request


API_URL = "https://sts.miicard.com/api/v1/Claims.svc/json/GetClaims"
OAUTH_URL = "https://sts.miicard.com/auth/OAuth.ashx"
NONCE = "abcdef0123456789"
TIMESTAMP = "1351594328"


def _creds(token_secret: str = "tokensecret") -> Credentials:
    return Credentials("consumerkey", "consumersecret", "accesstoken", token_secret)


def _expected_signature(url, params, consumer_secret, token_secret=""):
    """Compute an HMAC-SHA1 OAuth 1.0a signature from first principles."""
    def enc(s):
        return quote(s, safe="~")

    normalized = "&".join(f"{enc(k)}={enc(v)}" for k, v in sorted(params))
    base = "&".join(["POST", enc(url), enc(normalized)])
    key = f"{enc(consumer_secret)}&{enc(token_secret)}"
    digest = hmac.new(key.encode(), base.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


# --- Credentials ---


class TestCredentials:
    def test_consumer_only(self):
        creds = Credentials("key", "secret")
        assert creds.has_access_token is False

    def test_with_token_pair(self):
        assert _creds().has_access_token is True

    @pytest.mark.parametrize("key,secret", [(None, "secret"), ("key", None), ("", "secret"), ("key", "")])
    def test_missing_consumer_fields_raise(self, key, secret):
        with pytest.raises(InvalidCredentialsError):
            Credentials(key, secret)

    def test_token_without_secret_raises(self):
        with pytest.raises(InvalidCredentialsError):
            Credentials("key", "secret", access_token="token")

    def test_secret_without_token_raises(self):
        with pytest.raises(InvalidCredentialsError):
            Credentials("key", "secret", access_token_secret="tokensecret")

    def test_invalid_credentials_is_value_error(self):
        with pytest.raises(ValueError):
            Credentials("key", None)

    def test_with_access_token_returns_copy(self):
        creds = Credentials("key", "secret")
        updated = creds.with_access_token("token", "tokensecret")
        assert updated.access_token == "token"
        assert creds.access_token is None
        assert updated.without_access_token() == creds


# --- header shape ---


class TestHeaderSigning:
    def _sign(self, creds=None, payload=None, nonce=NONCE):
        return sign_request(
            creds or _creds(), "POST", API_URL, payload,
            form_body=False, nonce=nonce, timestamp=TIMESTAMP,
        )

    def test_signature_matches_reference(self):
        signed = self._sign()
        params = [
            ("oauth_consumer_key", "consumerkey"),
            ("oauth_nonce", NONCE),
            ("oauth_signature_method", "HMAC-SHA1"),
            ("oauth_timestamp", TIMESTAMP),
            ("oauth_token", "accesstoken"),
            ("oauth_version", "1.0"),
        ]
        assert signed.signature == _expected_signature(
            API_URL, params, "consumersecret", "tokensecret"
        )

    def test_oauth_params_in_authorization_header(self):
        signed = self._sign(payload='{"snapshotId":"abc"}')

        assert signed.headers["Authorization"].startswith("OAuth ")
        assert signed.headers["Content-Type"] == "application/json"
        assert signed.body == '{"snapshotId":"abc"}'
        assert signed.nonce == NONCE
        assert signed.timestamp == TIMESTAMP
        assert signed.signature_method == "HMAC-SHA1"
        assert dict(signed.parameters)["oauth_token"] == "accesstoken"

    def test_signed_request_is_immutable(self):
        signed = self._sign()

        with pytest.raises(TypeError):
            signed.headers["Authorization"] = "OAuth forged"
        assert isinstance(signed.parameters, tuple)

    def test_json_body_not_signed(self):
        assert self._sign(payload="{}").signature == self._sign(payload=None).signature

    def test_bytes_payload(self):
        assert self._sign(payload=b'{"type":"badge"}').body == '{"type":"badge"}'

    def test_deterministic(self):
        assert self._sign().signature == self._sign().signature

    def test_token_secret_changes_signature(self):
        assert self._sign().signature != self._sign(_creds("othersecret")).signature

    def test_nonce_changes_signature(self):
        assert self._sign().signature != self._sign(nonce="another").signature

    def test_generated_nonce_when_omitted(self):
        first = sign_request(_creds(), "POST", API_URL, None, form_body=False)
        second = sign_request(_creds(), "POST", API_URL, None, form_body=False)
        assert first.nonce != second.nonce

    def test_url_is_normalized(self):
        signed = sign_request(
            _creds(), "post", "https://sts.miicard.com:443/api/v1/Claims.svc/json/GetClaims?x=1",
            None, form_body=False, nonce=NONCE, timestamp=TIMESTAMP,
        )
        assert signed.url == API_URL
        assert signed.method == "POST"

    def test_rejects_mapping_payload(self):
        with pytest.raises(TypeError):
            sign_request(_creds(), "POST", API_URL, {"a": "b"}, form_body=False)


# --- form shape ---


class TestFormSigning:
    def _sign(self, params, creds=None):
        return sign_request(
            creds or Credentials("consumerkey", "consumersecret"),
            "POST", OAUTH_URL, params,
            form_body=True, nonce=NONCE, timestamp=TIMESTAMP,
        )

    def test_consumer_only_signature_matches_reference(self):
        signed = self._sign({"oauth_callback": "https://example.com/callback"})
        params = [
            ("oauth_callback", "https://example.com/callback"),
            ("oauth_consumer_key", "consumerkey"),
            ("oauth_nonce", NONCE),
            ("oauth_signature_method", "HMAC-SHA1"),
            ("oauth_timestamp", TIMESTAMP),
            ("oauth_version", "1.0"),
        ]
        assert signed.signature == _expected_signature(OAUTH_URL, params, "consumersecret")

    def test_params_merged_into_body(self):
        signed = self._sign({"oauth_callback": "https://example.com/callback"})
        body = parse_qs(signed.body)

        assert body["oauth_callback"] == ["https://example.com/callback"]
        assert body["oauth_signature"] == [signed.signature]
        assert body["oauth_consumer_key"] == ["consumerkey"]
        assert "Authorization" not in signed.headers
        assert signed.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_caller_params_are_signed(self):
        first = self._sign({"oauth_callback": "https://example.com/a"})
        second = self._sign({"oauth_callback": "https://example.com/b"})
        assert first.signature != second.signature

    def test_token_included_when_present(self):
        creds = Credentials("consumerkey", "consumersecret", "requesttoken", "requestsecret")
        signed = self._sign({"oauth_verifier": "verifier"}, creds)
        body = parse_qs(signed.body)
        assert body["oauth_token"] == ["requesttoken"]
        assert body["oauth_verifier"] == ["verifier"]

    def test_empty_params(self):
        signed = self._sign(None)
        assert "oauth_signature" in parse_qs(signed.body)

    def test_rejects_raw_payload(self):
        with pytest.raises(TypeError):
            self._sign("raw body")
