import base64
import json
import pytest
from datetime import timedelta
from jose import jwt
from services.token_service import TokenCodec, ACCESS, REFRESH
from core.exceptions import MalformedToken, InvalidSignature, TokenExpired


@pytest.fixture
def codec():
    return TokenCodec(keys={"k1": "first-secret"}, active_kid="k1")


def test_access_token_round_trip(codec):
    token = codec.issue_access(subject="user-1", email="user@example.com")

    claims = codec.verify(token)
    assert claims.subject == "user-1"
    assert claims.email == "user@example.com"
    assert claims.token_type == ACCESS
    assert claims.expires_at > claims.issued_at
    assert claims.jti


def test_token_header_names_signing_key(codec):
    token = codec.issue_access(subject="user-1", email="user@example.com")
    assert jwt.get_unverified_header(token)["kid"] == "k1"


def test_refresh_outlives_access(codec):
    pair = codec.issue_pair("user-1", "user@example.com")

    access = codec.verify(pair.access_token)
    refresh = codec.verify(pair.refresh_token, expected_type=REFRESH)

    assert pair.access_token != pair.refresh_token
    assert refresh.expires_at > access.expires_at


def test_tokens_are_unique_within_the_same_second(codec):
    first = codec.issue_access("user-1", "user@example.com")
    second = codec.issue_access("user-1", "user@example.com")
    assert first != second


def test_token_expiration(codec):
    token = codec.issue_access("user-1", "user@example.com", expires_delta=timedelta(seconds=-1))

    with pytest.raises(TokenExpired):
        codec.verify(token)


def test_wrong_key_is_invalid_signature(codec):
    forged = TokenCodec(keys={"k1": "attacker-secret"}, active_kid="k1")
    token = forged.issue_access("user-1", "user@example.com")

    with pytest.raises(InvalidSignature):
        codec.verify(token)


def test_tampered_payload_is_invalid_signature(codec):
    token = codec.issue_access("user-1", "user@example.com")
    header, payload, signature = token.split(".")

    claims = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
    claims["sub"] = "admin"
    forged_payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()

    with pytest.raises(InvalidSignature):
        codec.verify(f"{header}.{forged_payload}.{signature}")


def test_unknown_key_id_is_invalid_signature(codec):
    other = TokenCodec(keys={"k2": "first-secret"}, active_kid="k2")
    token = other.issue_access("user-1", "user@example.com")

    with pytest.raises(InvalidSignature):
        codec.verify(token)


def test_retired_key_still_verifies():
    old = TokenCodec(keys={"old": "old-secret"}, active_kid="old")
    token = old.issue_access("user-1", "user@example.com")

    rotated = TokenCodec(keys={"old": "old-secret", "new": "new-secret"}, active_kid="new")

    assert rotated.verify(token).subject == "user-1"
    assert jwt.get_unverified_header(rotated.issue_access("u", "e@x.com"))["kid"] == "new"


@pytest.mark.parametrize("token", ["not-a-jwt", "a.b.c", ""])
def test_garbage_is_malformed(codec, token):
    with pytest.raises(MalformedToken):
        codec.verify(token)


def test_refresh_token_rejected_as_access(codec):
    token = codec.issue_refresh("user-1", "user@example.com")

    with pytest.raises(MalformedToken):
        codec.verify(token)


def test_missing_claims_are_malformed(codec):
    token = jwt.encode({"sub": "user-1"}, "first-secret", algorithm="HS256", headers={"kid": "k1"})

    with pytest.raises(MalformedToken):
        codec.verify(token)


def test_refresh_lifetime_must_exceed_access():
    with pytest.raises(ValueError):
        TokenCodec(
            keys={"k1": "s"}, active_kid="k1",
            access_ttl=timedelta(hours=1), refresh_ttl=timedelta(minutes=30)
        )


def test_active_key_must_be_in_key_set():
    with pytest.raises(ValueError):
        TokenCodec(keys={"k1": "s"}, active_kid="missing")


@pytest.mark.parametrize("kid", [["x"], {"a": 1}, 7])
def test_non_string_key_id_is_malformed(codec, kid):
    token = jwt.encode(
        {"sub": "user-1", "email": "user@example.com"}, "first-secret",
        algorithm="HS256", headers={"kid": kid}
    )

    with pytest.raises(MalformedToken):
        codec.verify(token)


def test_undecodable_payload_is_malformed(codec):
    token = codec.issue_access("user-1", "user@example.com")
    header, _, signature = token.split(".")
    not_json = base64.urlsafe_b64encode(b"not json at all").rstrip(b"=").decode()

    with pytest.raises(MalformedToken):
        codec.verify(f"{header}.{not_json}.{signature}")


def test_wrongly_typed_registered_claim_is_malformed(codec):
    # Correctly signed, but "sub" must be a string
    token = jwt.encode(
        {"sub": 123, "email": "user@example.com", "type": "access", "jti": "j"},
        "first-secret", algorithm="HS256", headers={"kid": "k1"}
    )

    with pytest.raises(MalformedToken):
        codec.verify(token)


def test_unexpected_algorithm_is_invalid_signature(codec):
    token = jwt.encode(
        {"sub": "user-1", "email": "user@example.com"}, "first-secret",
        algorithm="HS512", headers={"kid": "k1"}
    )

    with pytest.raises(InvalidSignature):
        codec.verify(token)


def test_zero_lifetime_is_not_replaced_by_default(codec):
    token = codec.issue_access("user-1", "user@example.com", expires_delta=timedelta(0))
    payload = jwt.get_unverified_claims(token)

    assert payload["exp"] == payload["iat"]
