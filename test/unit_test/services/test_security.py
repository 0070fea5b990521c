"""Unit tests for password hashing, access tokens and generated identifiers."""

import re
from datetime import timedelta

import jwt
import pytest

from bidchemz_logistics.core.models.domain.enums import UserRole
from bidchemz_logistics.server.core.config import settings
from bidchemz_logistics.services.security import (
    InvalidTokenError,
    TokenPayload,
    create_access_token,
    decode_access_token,
    extract_bearer_token,
    generate_quote_number,
    generate_short_id,
    generate_shipment_number,
    hash_password,
    verify_password,
)


class TestPasswords:
    def test_hash_verifies(self):
        hashed = hash_password("Str0ng!Pass")
        assert hashed != "Str0ng!Pass"
        assert verify_password("Str0ng!Pass", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_hashes_are_salted(self):
        assert hash_password("Str0ng!Pass") != hash_password("Str0ng!Pass")

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("Str0ng!Pass", "not-a-bcrypt-hash") is False


class TestAccessTokens:
    def test_round_trip_carries_identity(self):
        payload = TokenPayload(user_id="u-1", email="a@example.com", role=UserRole.TRADER, company_name="Acme")
        decoded = decode_access_token(create_access_token(payload))
        assert decoded == payload

    def test_expired_token_is_rejected(self):
        payload = TokenPayload(user_id="u-1", email="a@example.com", role=UserRole.ADMIN)
        token = create_access_token(payload, expires_delta=timedelta(seconds=-5))
        with pytest.raises(InvalidTokenError, match="expired"):
            decode_access_token(token)

    def test_wrong_signature_is_rejected(self):
        token = jwt.encode({"sub": "u-1", "role": "ADMIN", "exp": 9_999_999_999}, "other-secret", algorithm="HS256")
        with pytest.raises(InvalidTokenError, match="Invalid token"):
            decode_access_token(token)

    def test_unknown_role_is_rejected(self):
        token = jwt.encode(
            {"sub": "u-1", "role": "SUPERUSER", "exp": 9_999_999_999},
            settings.auth.jwt_secret,
            algorithm=settings.auth.jwt_algorithm,
        )
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_garbage_is_rejected(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("not.a.token")


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc.def", "abc.def"),
        ("Bearer   abc  ", "abc"),
        ("Bearer ", None),
        ("Basic abc", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


class TestIdentifiers:
    def test_short_id_prefix_follows_role(self):
        assert re.fullmatch(r"buyer_[a-z0-9]{6}", generate_short_id(UserRole.TRADER))
        assert re.fullmatch(r"partner_[a-z0-9]{6}", generate_short_id(UserRole.LOGISTICS_PARTNER))

    def test_quote_number_format(self):
        assert re.fullmatch(r"FRQ-\d{13}-[A-Z0-9]{9}", generate_quote_number())

    def test_shipment_number_format(self):
        assert re.fullmatch(r"SHP-\d{13}-[A-Z0-9]{7}", generate_shipment_number())

    def test_numbers_are_unique(self):
        assert len({generate_quote_number() for _ in range(50)}) == 50
