import pytest

from library_app.core.exceptions import DuplicateMemberId, InvalidEmail, InvalidInput
from library_app.services import validation


@pytest.mark.parametrize("email", [
    "yohanes@stt.ac.id",
    "first.last+tag@example.com",
    "a_b%c@sub-domain.example.org",
])
def test_valid_emails(email):
    assert validation.is_valid_email(email)
    assert validation.check_email(email) == email


@pytest.mark.parametrize("email", [
    "",
    None,
    "no-at-sign.com",
    "user@domain",
    "user@domain.c",
    "user@domain.c0m",
    "user name@example.com",
    "@example.com",
])
def test_invalid_emails(email):
    assert not validation.is_valid_email(email)
    with pytest.raises(InvalidEmail):
        validation.check_email(email)


def test_member_id_is_trimmed():
    assert validation.admit_member_id("  DSN001 ", ["MHS001"]) == "DSN001"


def test_member_id_duplicate_is_case_insensitive():
    with pytest.raises(DuplicateMemberId) as exc:
        validation.admit_member_id("mhs001", ["MHS001"])
    assert "mhs001" in str(exc.value)


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_empty_member_id(raw):
    with pytest.raises(InvalidInput):
        validation.admit_member_id(raw, [])


def test_check_range():
    assert validation.check_range(None, "Year", 0, 9999) is None
    assert validation.check_range(1, "Stock", 1) == 1
    with pytest.raises(InvalidInput):
        validation.check_range(0, "Stock", 1)
    with pytest.raises(InvalidInput):
        validation.check_range(10000, "Year", 0, 9999)


def test_member_id_comparison_is_plain_lowercase():
    assert validation.admit_member_id("straße", ["STRASSE"]) == "straße"
