import pytest

from core.exceptions import InvalidPhoneFormat
from services.phone import looks_like_phone, mask_phone, normalize_phone, validate_phone


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0851-5730-0793", "6285157300793"),
        ("+62 851 5730 0793", "6285157300793"),
        ("6285157300793", "6285157300793"),
        ("85157300793", "6285157300793"),
        ("0062 851 5730 0793", "6285157300793"),
        ("+62 0851-5730-0793", "6285157300793"),
        ("620851 5730 0793", "6285157300793"),
    ],
)
def test_normalize_phone_produces_canonical_digits(raw, expected):
    assert normalize_phone(raw) == expected


def test_normalize_phone_is_idempotent():
    canonical = normalize_phone("0812 3456 7890")
    assert normalize_phone(canonical) == canonical


def test_normalize_phone_uses_given_country_code():
    assert normalize_phone("0412 345 678", country_code="61") == "61412345678"


@pytest.mark.parametrize("raw", ["", "   ", "abc", "+-()"])
def test_normalize_phone_rejects_input_without_digits(raw):
    with pytest.raises(InvalidPhoneFormat):
        normalize_phone(raw)


@pytest.mark.parametrize("raw", ["0812", "08123456", "0812345678901234"])
def test_validate_phone_rejects_implausible_lengths(raw):
    with pytest.raises(InvalidPhoneFormat):
        validate_phone(raw)


def test_looks_like_phone():
    assert looks_like_phone("0851-5730-0793")
    assert looks_like_phone("+6285157300793")
    assert looks_like_phone("6285157300793")
    assert not looks_like_phone("Budi Santoso")


def test_mask_phone_hides_the_middle():
    assert mask_phone("6285157300793") == "628515****0793"


def test_trunk_zero_variants_collide_for_duplicate_detection():
    assert validate_phone("+62 0851-5730-0793") == validate_phone("0851-5730-0793")
