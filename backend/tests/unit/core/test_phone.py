import pytest

from way2pg.utils.phone import normalize_phone_number


@pytest.mark.parametrize("raw", [
    "9876543210",
    "+91 98765 43210",
    "+91-98765-43210",
    "919876543210",
    "09876543210",
])
def test_normalizes_to_prefixed_national_number(raw):
    assert normalize_phone_number(raw) == "+919876543210"


def test_already_normalized_is_stable():
    assert normalize_phone_number("+919876543210") == "+919876543210"


@pytest.mark.parametrize("raw", [
    "",
    "12345",
    "98765abc10",
    "+1 555 123 45678 99",
    "98765432100",
])
def test_rejects_invalid_numbers(raw):
    with pytest.raises(ValueError, match="valid phone number"):
        normalize_phone_number(raw)


def test_custom_prefix():
    assert normalize_phone_number("9876543210", prefix="+44") == "+449876543210"
