import hashlib
import hmac

import pytest

from agent_runner_sdk.signing import (
    encode_json_body,
    is_valid_nonce,
    sign_body,
    signature_headers,
    verify_signature,
)

SECRET = "test-secret"
NOW = 1_700_000_000


def _verify(envelope: dict[str, str], body: str | bytes, **overrides: object) -> bool:
    kwargs: dict[str, object] = {
        "signature": envelope["signature"],
        "timestamp": envelope["timestamp"],
        "nonce": envelope["nonce"],
        "body": body,
        "now": NOW,
    }
    kwargs.update(overrides)
    return verify_signature(SECRET, **kwargs)  # type: ignore[arg-type]


def test_sign_envelope_shape() -> None:
    envelope = sign_body(SECRET, '{"test":"data"}', now=NOW)

    assert envelope["timestamp"] == str(NOW)
    assert envelope["signature"].startswith("sha256=")
    assert len(envelope["signature"]) == len("sha256=") + 64
    assert len(envelope["nonce"]) == 32
    int(envelope["nonce"], 16)


def test_sign_generates_fresh_nonce_each_call() -> None:
    first = sign_body(SECRET, "{}", now=NOW)
    second = sign_body(SECRET, "{}", now=NOW)

    assert first["nonce"] != second["nonce"]
    assert first["signature"] != second["signature"]


@pytest.mark.parametrize("body", ['{"test":"data"}', "", b'{"a":1}', '{"name":"café"}'])
def test_sign_and_verify_round_trip(body: str | bytes) -> None:
    envelope = sign_body(SECRET, body, now=NOW)
    assert _verify(envelope, body)


def test_str_and_bytes_bodies_sign_identically() -> None:
    envelope = sign_body(SECRET, '{"name":"café"}', now=NOW)
    assert _verify(envelope, '{"name":"café"}'.encode("utf-8"))


def test_verify_fails_with_wrong_secret() -> None:
    envelope = sign_body(SECRET, "{}", now=NOW)
    assert not verify_signature(
        "other-secret",
        signature=envelope["signature"],
        timestamp=envelope["timestamp"],
        nonce=envelope["nonce"],
        body="{}",
        now=NOW,
    )


def test_any_single_byte_change_in_body_fails() -> None:
    body = b'{"message":"hello world"}'
    envelope = sign_body(SECRET, body, now=NOW)

    for index in range(len(body)):
        tampered = bytearray(body)
        tampered[index] ^= 0x01
        assert not _verify(envelope, bytes(tampered)), index


def test_tampered_nonce_or_timestamp_fails() -> None:
    envelope = sign_body(SECRET, "{}", now=NOW)

    assert not _verify(envelope, "{}", nonce="f" * 32)
    assert not _verify(envelope, "{}", timestamp=str(NOW - 1))


@pytest.mark.parametrize("field", ["signature", "timestamp", "nonce"])
def test_empty_envelope_fields_fail(field: str) -> None:
    envelope = sign_body(SECRET, "{}", now=NOW)
    assert not _verify(envelope, "{}", **{field: ""})


@pytest.mark.parametrize(
    ("skew", "expected"),
    [(0, True), (120, True), (-120, True), (121, False), (-121, False)],
)
def test_timestamp_freshness_boundary(skew: int, expected: bool) -> None:
    envelope = sign_body(SECRET, "{}", now=NOW + skew)
    assert _verify(envelope, "{}") is expected


@pytest.mark.parametrize("timestamp", ["abc", "-5", "1.5", " 1700000000", "²"])
def test_non_digit_timestamp_fails(timestamp: str) -> None:
    envelope = sign_body(SECRET, "{}", now=NOW)
    assert not _verify(envelope, "{}", timestamp=timestamp)


@pytest.mark.parametrize(
    ("nonce", "expected"),
    [
        ("a" * 7, False),
        ("a" * 8, True),
        ("a" * 128, True),
        ("a" * 129, False),
        ("abcdefg!", False),
        ("abc-def_ghi", True),
        ("abc def gh", False),
        ("abcdefgh\n", False),
    ],
)
def test_nonce_format(nonce: str, expected: bool) -> None:
    assert is_valid_nonce(nonce) is expected


def test_verify_rejects_badly_formatted_nonce_even_with_matching_hmac() -> None:
    # A correct HMAC over a short nonce still fails the format gate.
    nonce = "short"
    payload = f"{NOW}.{nonce}.{{}}".encode("utf-8")
    signature = "sha256=" + hmac.new(SECRET.encode(), payload, hashlib.sha256).hexdigest()

    assert not verify_signature(
        SECRET, signature=signature, timestamp=str(NOW), nonce=nonce, body="{}", now=NOW
    )


def test_verify_handles_non_ascii_signature() -> None:
    envelope = sign_body(SECRET, "{}", now=NOW)
    assert not _verify(envelope, "{}", signature="sha256=éé")


def test_signature_headers() -> None:
    envelope = sign_body(SECRET, "{}", now=NOW)
    headers = signature_headers(envelope)

    assert headers == {
        "X-Signature": envelope["signature"],
        "X-Timestamp": envelope["timestamp"],
        "X-Nonce": envelope["nonce"],
    }


def test_encode_json_body_is_compact_sorted_utf8() -> None:
    body = encode_json_body({"b": 1, "a": {"name": "café"}})

    assert body == '{"a":{"name":"café"},"b":1}'.encode("utf-8")
