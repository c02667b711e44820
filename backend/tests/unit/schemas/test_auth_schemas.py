"""
Unit Tests for auth request schemas
"""
import pytest
from pydantic import ValidationError

from way2pg.models.user import UserRole
from way2pg.schemas.auth import (
    SignupRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
)


def signup(**overrides):
    data = {
        "name": "  Asha Rao ",
        "phone_number": "+91 98765-43210",
        "password": "Passw0rd!",
        "role": "student",
    }
    data.update(overrides)
    return SignupRequest(**data)


class TestSignupRequest:

    def test_normalizes_input(self):
        request = signup(email="Asha@Example.COM")

        assert request.name == "Asha Rao"
        assert request.phone_number == "+919876543210"
        assert request.email == "asha@example.com"
        assert request.role is UserRole.STUDENT

    @pytest.mark.parametrize("password", ["short1!", "alllowercase1!", "NoDigits!!", "NoSpecial123"])
    def test_weak_passwords(self, password):
        with pytest.raises(ValidationError):
            signup(password=password)

    def test_invalid_phone(self):
        with pytest.raises(ValidationError):
            signup(phone_number="12345")

    def test_owner_needs_business_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            signup(role="owner", company_name="Acme")
        assert "business registration" in str(exc_info.value)

    def test_owner_with_business_fields(self):
        request = signup(role="owner", company_name="Acme", business_registration="REG-1")

        assert request.role is UserRole.OWNER

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            signup(role="landlord")

    def test_name_too_short(self):
        with pytest.raises(ValidationError):
            signup(name=" a ")


def test_login_keeps_phone_as_sent():
    assert LoginRequest(phone_number="abc", password="x").phone_number == "abc"


def test_forgot_password_needs_an_identifier():
    with pytest.raises(ValidationError):
        ForgotPasswordRequest()
    assert ForgotPasswordRequest(email="a@example.com").email == "a@example.com"


def test_reset_password_enforces_policy():
    with pytest.raises(ValidationError):
        ResetPasswordRequest(token="t", new_password="weak")
