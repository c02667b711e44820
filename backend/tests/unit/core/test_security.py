"""
Unit Tests for Security Module
Tests for: password hashing, access tokens, password reset tokens
"""
import pytest
from datetime import datetime, timedelta
from jose import jwt

from way2pg.core.config import settings
from way2pg.core.exceptions import (
    InvalidTokenError,
    MalformedTokenError,
    TokenExpiredError,
)
from way2pg.core.security import (
    verify_password,
    get_password_hash,
    issue_token,
    verify_token,
    issue_password_reset_token,
    read_password_reset_token,
    password_reset_token_matches,
    generate_verification_code,
    USER_ID_CLAIM,
    ROLE_CLAIM,
)


def encode(payload: dict) -> str:
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_returns_different_value(self):
        hashed = get_password_hash("Passw0rd!")
        assert hashed != "Passw0rd!"
        assert hashed.startswith("$2")

    def test_verify_password_correct(self):
        hashed = get_password_hash("Passw0rd!")
        assert verify_password("Passw0rd!", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("Passw0rd!")
        assert verify_password("wrong", hashed) is False

    def test_verify_password_against_non_bcrypt_value(self):
        """A corrupt stored hash never verifies"""
        assert verify_password("Passw0rd!", "not-a-hash") is False
        assert verify_password("Passw0rd!", "") is False

    def test_hash_long_password_truncated(self):
        """Bcrypt only looks at the first 72 bytes"""
        hashed = get_password_hash("a" * 100)
        assert verify_password("a" * 72, hashed) is True


class TestAccessTokens:
    """Test token issuing and verification"""

    def test_round_trip_claims(self):
        token = issue_token("user-1", "student")
        claims = verify_token(token)

        assert claims.user_id == "user-1"
        assert claims.role == "student"
        assert claims.expires_at is not None

    def test_token_carries_user_id_and_role(self):
        token = issue_token("user-1", "owner")
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

        assert payload[USER_ID_CLAIM] == "user-1"
        assert payload[ROLE_CLAIM] == "owner"
        assert "exp" in payload

    def test_default_lifetime_is_one_hour(self):
        before = datetime.utcnow()
        claims = verify_token(issue_token("user-1", "student"))

        lifetime = claims.expires_at - before
        assert timedelta(minutes=59) < lifetime <= timedelta(minutes=61)

    def test_expired_token(self):
        token = issue_token("user-1", "student", expires_delta=timedelta(seconds=-5))

        with pytest.raises(TokenExpiredError):
            verify_token(token)

    def test_wrong_signature(self):
        token = jwt.encode({USER_ID_CLAIM: "user-1", ROLE_CLAIM: "student"}, "other-secret", algorithm="HS256")

        with pytest.raises(InvalidTokenError) as exc_info:
            verify_token(token)
        assert not isinstance(exc_info.value, TokenExpiredError)

    def test_garbage_token(self):
        with pytest.raises(InvalidTokenError):
            verify_token("not.a.token")

    def test_empty_token(self):
        with pytest.raises(InvalidTokenError):
            verify_token("")

    def test_same_bad_token_fails_the_same_way(self):
        codes = set()
        for _ in range(3):
            with pytest.raises(InvalidTokenError) as exc_info:
                verify_token("not.a.token")
            codes.add(exc_info.value.code)
        assert codes == {"INVALID_TOKEN"}

    @pytest.mark.parametrize("payload,missing", [
        ({ROLE_CLAIM: "student"}, USER_ID_CLAIM),
        ({USER_ID_CLAIM: "user-1"}, ROLE_CLAIM),
    ])
    def test_missing_claim_is_malformed(self, payload, missing):
        payload["exp"] = datetime.utcnow() + timedelta(minutes=5)

        with pytest.raises(MalformedTokenError) as exc_info:
            verify_token(encode(payload))
        assert missing in exc_info.value.message

    def test_reset_token_is_not_an_access_token(self):
        token = issue_password_reset_token("user-1", get_password_hash("Passw0rd!"))

        with pytest.raises(InvalidTokenError):
            verify_token(token)


class TestPasswordResetTokens:

    def test_read_back(self):
        hashed = get_password_hash("Passw0rd!")
        claims = read_password_reset_token(issue_password_reset_token("user-1", hashed))

        assert claims["user_id"] == "user-1"
        assert password_reset_token_matches(claims["fingerprint"], hashed)

    def test_fingerprint_stops_matching_after_password_change(self):
        old_hash = get_password_hash("Passw0rd!")
        claims = read_password_reset_token(issue_password_reset_token("user-1", old_hash))

        assert not password_reset_token_matches(claims["fingerprint"], get_password_hash("N3wPass!"))

    def test_access_token_is_not_a_reset_token(self):
        with pytest.raises(InvalidTokenError):
            read_password_reset_token(issue_token("user-1", "student"))


def test_verification_code_is_six_digits():
    for _ in range(20):
        code = generate_verification_code()
        assert len(code) == 6
        assert code.isdigit()
