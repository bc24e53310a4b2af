import hashlib
import hmac

import pytest

from transgate.tokens import (
    TokenStatus,
    decode_token,
    encode_token,
    issue_token,
    validate_token,
)

NOW = 1_700_000_000
SECRET = "test-secret"


def test_encode_token_format():
    token = encode_token(SECRET, NOW + 60)

    signature, expiry = token.split(".")
    assert expiry == str(NOW + 60)
    assert signature == hmac.new(SECRET.encode(), expiry.encode(), hashlib.sha256).hexdigest()


def test_issue_token_adds_ttl():
    token = issue_token(SECRET, 300, now=NOW)

    assert decode_token(token).expiry == NOW + 300


def test_valid_token():
    check = validate_token(encode_token(SECRET, NOW + 60), SECRET, now=NOW)

    assert check.valid
    assert check.status is TokenStatus.VALID


@pytest.mark.parametrize("raw", [None, ""])
def test_missing_token(raw):
    assert validate_token(raw, SECRET, now=NOW).status is TokenStatus.MISSING


def test_bypass_literal_is_accepted_without_secret():
    assert validate_token("valid", None, now=NOW).valid


def test_bypass_can_be_disabled():
    check = validate_token("valid", SECRET, now=NOW, bypass=None)

    assert check.status is TokenStatus.MALFORMED


@pytest.mark.parametrize("raw", ["nodot", "abc.def", "abc.", "abc.12.34"])
def test_malformed_token(raw):
    check = validate_token(raw, SECRET, now=NOW)

    assert check.status is TokenStatus.MALFORMED


def test_decode_splits_on_first_separator():
    assert decode_token("sig.123").signature == "sig"
    assert decode_token("sig.12.3") is None


def test_token_expiring_now_is_rejected():
    check = validate_token(encode_token(SECRET, NOW), SECRET, now=NOW)

    assert check.status is TokenStatus.EXPIRED


def test_token_expiring_next_second_is_accepted():
    assert validate_token(encode_token(SECRET, NOW + 1), SECRET, now=NOW).valid


def test_expiry_is_checked_before_signature():
    check = validate_token(f"{'0' * 64}.{NOW - 10}", SECRET, now=NOW)

    assert check.status is TokenStatus.EXPIRED


def test_every_altered_signature_character_is_rejected():
    token = encode_token(SECRET, NOW + 60)
    signature, expiry = token.split(".")

    for i, char in enumerate(signature):
        replacement = "0" if char != "0" else "1"
        altered = signature[:i] + replacement + signature[i + 1:]
        check = validate_token(f"{altered}.{expiry}", SECRET, now=NOW)
        assert check.status is TokenStatus.BAD_SIGNATURE


def test_wrong_secret_is_rejected():
    check = validate_token(encode_token("other-secret", NOW + 60), SECRET, now=NOW)

    assert check.status is TokenStatus.BAD_SIGNATURE


def test_missing_secret_rejects_signed_tokens():
    check = validate_token(encode_token(SECRET, NOW + 60), None, now=NOW)

    assert check.status is TokenStatus.BAD_SIGNATURE
