import pytest

from acctsync.core.validators import login_name_from_jamf, validate_display_name, validate_login_name


def test_login_name_strips_email_domain():
    assert login_name_from_jamf(" jsmith@example.com ") == "jsmith"
    assert login_name_from_jamf("jsmith") == "jsmith"
    assert login_name_from_jamf("jsmith@example.com", strip_email_domain=False) == "jsmith@example.com"
    assert login_name_from_jamf(None) == ""


@pytest.mark.parametrize("name", ["jsmith", "j.smith", "jane_smith-2"])
def test_valid_login_names(name):
    assert validate_login_name(name) == name


@pytest.mark.parametrize("name", ["", ".hidden", "-opt", "a/b", "a:b", "has space", "x" * 256])
def test_invalid_login_names(name):
    with pytest.raises(ValueError):
        validate_login_name(name)


def test_display_name_falls_back_when_empty():
    assert validate_display_name("  ", "J Doe") == "J Doe"
    assert validate_display_name(" Jane Smith ", "J Doe") == "Jane Smith"


def test_display_name_rejects_newlines():
    with pytest.raises(ValueError):
        validate_display_name("Jane\nSmith", "J Doe")
