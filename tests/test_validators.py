"""Tests for input sanitisation and validation."""
from daykanban.validators import InputValidator


def test_sanitize_text():
    assert InputValidator.sanitize_text("  <b>hi</b>  ") == "hi"
    assert InputValidator.sanitize_text("x" * 20, max_length=5) == "xxxxx"
    assert InputValidator.sanitize_text(None) == ""
    assert InputValidator.sanitize_text(42) == ""


def test_sanitize_prefix():
    assert InputValidator.sanitize_prefix(' <"BUG\'> ') == "BUG"
    assert len(InputValidator.sanitize_prefix("p" * 50)) == 20


def test_sanitize_url():
    assert InputValidator.sanitize_url(" https://example.com/a ") == "https://example.com/a"
    assert InputValidator.sanitize_url("javascript:alert(1)") == ""
    assert InputValidator.sanitize_url("ftp://example.com") == ""
    assert InputValidator.sanitize_url("http://") == ""
    assert InputValidator.sanitize_url("") == ""


def test_validate_card_title():
    assert InputValidator.validate_card_title("Ship it").valid
    result = InputValidator.validate_card_title("   ")
    assert not result.valid
    assert result.error == "Title is required"
    assert not InputValidator.validate_card_title("t" * 201).valid


def test_validate_column_and_tag():
    assert InputValidator.validate_column_name("Review").valid
    assert not InputValidator.validate_column_name("c" * 51).valid
    assert InputValidator.validate_tag_name("work").valid
    assert not InputValidator.validate_tag_name("").valid
    assert not InputValidator.validate_tag_name("t" * 31).valid


def test_validate_description():
    assert InputValidator.validate_description("").valid
    assert InputValidator.validate_description(None).valid
    result = InputValidator.validate_description("d" * 2001)
    assert not result.valid
    assert result.to_dict() == {"valid": False, "error": result.error}
