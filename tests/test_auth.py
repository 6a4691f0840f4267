"""Unit tests for the auth package.

Tests request signing, auth headers, subaccount switching and redaction.
"""

import hashlib
import hmac
import threading

import pytest

from ftxc.auth import (
    REDACTED,
    Signer,
    canonical_path,
    mask_string,
    redact_secrets,
    rest_prehash,
    safe_dict_for_logging,
    ws_login_prehash,
)
from ftxc.config import Settings
from ftxc.errors import AuthConfigMissing

# Key pair and vectors published in the exchange's API documentation
DOC_KEY = "LR0RQT6bKjrUNh38eCw9jYC89VDAbRkCogAc_XAm"
DOC_SECRET = "T4lPid48QtjNxjLUFOcUZghD7CUJ7sTVsfuvQZF2"


def _hmac(secret: str, prehash: str) -> str:
    return hmac.new(secret.encode(), prehash.encode(), hashlib.sha256).hexdigest()


# =============================================================================
# Prehash Tests
# =============================================================================


class TestPrehash:
    """Tests for the signed-string builders."""

    def test_rest_prehash_without_body(self) -> None:
        """GET prehash is timestamp + method + path."""
        assert rest_prehash(1588591511721, "GET", "/api/markets") == (
            "1588591511721GET/api/markets"
        )

    def test_rest_prehash_with_body(self) -> None:
        """Body is appended verbatim."""
        prehash = rest_prehash(1, "POST", "/api/orders", '{"a":1}')
        assert prehash == '1POST/api/orders{"a":1}'

    def test_rest_prehash_empty_body(self) -> None:
        """Empty body contributes nothing."""
        assert rest_prehash(1, "DELETE", "/api/orders", "") == "1DELETE/api/orders"

    def test_ws_login_prehash(self) -> None:
        """Stream login signs timestamp + 'websocket_login'."""
        assert ws_login_prehash(1557246346499) == "1557246346499websocket_login"


class TestCanonicalPath:
    """Tests for canonical path normalization."""

    def test_strips_bare_trailing_question_mark(self) -> None:
        """A trailing '?' with no query is dropped."""
        assert canonical_path("/api/orders?") == "/api/orders"

    def test_keeps_query(self) -> None:
        """Path and query are kept as-is."""
        assert canonical_path("/api/orders?market=BTC-PERP") == "/api/orders?market=BTC-PERP"

    def test_plain_path_unchanged(self) -> None:
        """Path without query is unchanged."""
        assert canonical_path("/api/wallet/balances") == "/api/wallet/balances"


# =============================================================================
# Signer Tests
# =============================================================================


class TestSign:
    """Tests for HMAC-SHA256 signing."""

    def test_documented_get_vector(self) -> None:
        """Matches the documented signature for GET /api/markets."""
        signer = Signer(DOC_KEY, DOC_SECRET)
        signature = signer.sign("1588591511721GET/api/markets")
        assert signature == "dbc62ec300b2624c580611858d94f2332ac636bb86eccfa1167a7777c496ee6f"

    def test_documented_post_vector(self) -> None:
        """Matches the documented signature for POST /api/orders."""
        signer = Signer(DOC_KEY, DOC_SECRET)
        body = (
            '{"market": "BTC-PERP", "side": "buy", "price": 8500, "size": 1, '
            '"type": "limit", "reduceOnly": false, "ioc": false, "postOnly": false, '
            '"clientId": null}'
        )
        signature = signer.sign(rest_prehash(1588591856950, "POST", "/api/orders", body))
        assert signature == "c4fbabaf178658a59d7bbf57678d44c369382f3da29138f04cd46d3d582ba4ba"

    def test_documented_websocket_login_vector(self) -> None:
        """Matches the documented stream login signature."""
        signer = Signer("key", "Y2QTHI23f23f23jfjas23f23To0RfUwX3H42fvN-")
        signature = signer.sign(ws_login_prehash(1557246346499))
        assert signature == "d10b5a67a1a941ae9463a60b285ae845cdeac1b11edc7da9977bef0228b96de9"

    def test_deterministic(self) -> None:
        """Same key and prehash give the same signature."""
        signer = Signer("key", "secret")
        assert signer.sign("1GET/api/account") == signer.sign("1GET/api/account")

    def test_lowercase_hex(self) -> None:
        """Signature is 64 lowercase hex characters."""
        signature = Signer("key", "secret").sign("anything")
        assert len(signature) == 64
        assert signature == signature.lower()
        int(signature, 16)

    @pytest.mark.parametrize(
        "changed",
        [
            "2GET/api/account",
            "1get/api/account",
            "1GET/api/account?",
            "1GET/api/accounts",
            "1POST/api/account",
        ],
    )
    def test_any_change_alters_signature(self, changed: str) -> None:
        """Timestamp, method case, path and trailing characters all matter."""
        signer = Signer("key", "secret")
        assert signer.sign(changed) != signer.sign("1GET/api/account")

    def test_bytes_key_equivalent_to_str(self) -> None:
        """A bytes secret signs the same as its str form."""
        assert Signer("k", b"secret").sign("x") == Signer("k", "secret").sign("x")

    def test_empty_key_raises(self) -> None:
        """A zero-length secret cannot be used as an HMAC key."""
        with pytest.raises(AuthConfigMissing):
            Signer("key", "").sign("1GET/api/account")


class TestAuthHeaders:
    """Tests for auth header construction."""

    def test_headers(self) -> None:
        """FTX-KEY, FTX-TS and FTX-SIGN are set from the prehash."""
        signer = Signer(DOC_KEY, DOC_SECRET)
        headers = signer.auth_headers("GET", "/api/markets", timestamp=1588591511721)

        assert headers == {
            "FTX-KEY": DOC_KEY,
            "FTX-TS": "1588591511721",
            "FTX-SIGN": "dbc62ec300b2624c580611858d94f2332ac636bb86eccfa1167a7777c496ee6f",
        }

    def test_body_is_signed(self) -> None:
        """Signature covers the body."""
        signer = Signer("key", "secret")
        body = '{"nickname":"sub"}'
        headers = signer.auth_headers("POST", "/api/subaccounts", body, timestamp=5)
        assert headers["FTX-SIGN"] == _hmac("secret", '5POST/api/subaccounts{"nickname":"sub"}')

    def test_default_timestamp_is_now(self) -> None:
        """Without an explicit timestamp, current milliseconds are used."""
        headers = Signer("key", "secret").auth_headers("GET", "/api/account")
        assert len(headers["FTX-TS"]) == 13

    def test_subaccount_header(self) -> None:
        """A selected subaccount is sent URL-quoted."""
        signer = Signer("key", "secret", subaccount="my sub/acc")
        headers = signer.auth_headers("GET", "/api/account", timestamp=1)
        assert headers["FTX-SUBACCOUNT"] == "my%20sub%2Facc"

    def test_no_subaccount_header_for_main(self) -> None:
        """Main account sends no subaccount header."""
        headers = Signer("key", "secret").auth_headers("GET", "/api/account", timestamp=1)
        assert "FTX-SUBACCOUNT" not in headers


class TestSubaccount:
    """Tests for subaccount switching."""

    def test_change_subaccount(self) -> None:
        """Subaccount can be switched and reset."""
        signer = Signer("key", "secret")
        assert signer.subaccount is None

        signer.change_subaccount("trading")
        assert signer.subaccount == "trading"

        signer.change_subaccount(None)
        assert signer.subaccount is None

    def test_concurrent_changes(self) -> None:
        """Concurrent swaps leave one of the written values."""
        signer = Signer("key", "secret")
        names = [f"sub{i}" for i in range(20)]

        def worker(name: str) -> None:
            for _ in range(200):
                signer.change_subaccount(name)
                signer.auth_headers("GET", "/api/account", timestamp=1)

        threads = [threading.Thread(target=worker, args=(n,)) for n in names]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert signer.subaccount in names

    def test_repr_hides_secret(self) -> None:
        """repr shows neither the secret nor the full public key."""
        signer = Signer(DOC_KEY, DOC_SECRET, subaccount="sub")
        text = repr(signer)
        assert DOC_SECRET not in text
        assert DOC_KEY not in text
        assert "sub" in text


class TestFromSettings:
    """Tests for building a signer from configuration."""

    def test_with_credentials(self) -> None:
        """Key pair and subaccount are taken from settings."""
        settings = Settings(
            _env_file=None,
            public_key="key",
            private_key="secret",
            subaccount="sub",
        )
        signer = Signer.from_settings(settings)

        assert signer is not None
        assert signer.public_key == "key"
        assert signer.subaccount == "sub"
        assert signer.sign("x") == _hmac("secret", "x")

    def test_without_credentials(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """No key pair means no signer."""
        monkeypatch.delenv("FTX_PUBLIC_KEY", raising=False)
        monkeypatch.delenv("FTX_PRIVATE_KEY", raising=False)
        settings = Settings(_env_file=None)
        assert Signer.from_settings(settings) is None

    def test_half_a_key_pair(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A public key alone is not usable."""
        monkeypatch.delenv("FTX_PRIVATE_KEY", raising=False)
        settings = Settings(_env_file=None, public_key="key")
        assert Signer.from_settings(settings) is None


# =============================================================================
# Redaction Tests
# =============================================================================


class TestRedaction:
    """Tests for log redaction utilities."""

    def test_redact_signature(self) -> None:
        """64-char hex digests are redacted."""
        text = "FTX-SIGN: dbc62ec300b2624c580611858d94f2332ac636bb86eccfa1167a7777c496ee6f"
        result = redact_secrets(text)
        assert "dbc62ec3" not in result
        assert REDACTED in result

    def test_redact_api_key(self) -> None:
        """40-char API keys are redacted."""
        result = redact_secrets(f"key={DOC_KEY} failed")
        assert DOC_KEY not in result
        assert result.endswith(" failed")

    def test_plain_text_untouched(self) -> None:
        """Ordinary messages pass through."""
        text = "connection refused to ftx.com:443"
        assert redact_secrets(text) == text

    def test_mask_string(self) -> None:
        """Only the ends of the value remain visible."""
        assert mask_string("1234567890abcdef") == "1234...cdef"
        assert mask_string("short") == "*****"

    def test_safe_dict_for_logging_headers(self) -> None:
        """Auth headers are redacted regardless of case."""
        headers = {
            "FTX-KEY": DOC_KEY,
            "FTX-SIGN": "abc",
            "FTX-TS": "123",
            "user-agent": "ftxc",
        }
        result = safe_dict_for_logging(headers)

        assert result["FTX-KEY"] == REDACTED
        assert result["FTX-SIGN"] == REDACTED
        assert result["FTX-TS"] == "123"
        assert result["user-agent"] == "ftxc"
        # original untouched
        assert headers["FTX-KEY"] == DOC_KEY

    def test_safe_dict_for_logging_nested(self) -> None:
        """Nested mappings are redacted too."""
        data = {"op": "login", "args": {"key": "k", "sign": "s", "time": 1}}
        result = safe_dict_for_logging(data)
        assert result["args"] == {"key": REDACTED, "sign": REDACTED, "time": 1}

    def test_safe_dict_for_logging_extra_keys(self) -> None:
        """Callers can add keys to redact."""
        result = safe_dict_for_logging({"Token": "t", "x": 1}, redact_keys={"token"})
        assert result == {"Token": REDACTED, "x": 1}
