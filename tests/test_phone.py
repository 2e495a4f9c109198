"""Tests for phone normalization and validation."""

from estates.core.phone import is_valid_phone, normalize_phone


class TestNormalizePhone:
    """Tests for normalize_phone."""

    def test_strips_formatting_and_prefixes_plus(self):
        """Test that spaces, dashes and brackets are removed."""
        assert normalize_phone("+971 (50) 123-4567") == "+971501234567"

    def test_local_number_keeps_leading_zero(self):
        """Test that a local number is prefixed, not rewritten."""
        assert normalize_phone("0501234567") == "+0501234567"

    def test_truncates_to_fifteen_digits(self):
        """Test that anything beyond 15 digits is dropped."""
        assert normalize_phone("1234567890123456789") == "+123456789012345"

    def test_blank_and_none(self):
        """Test that empty input normalizes to an empty string."""
        assert normalize_phone(None) == ""
        assert normalize_phone("   ") == ""

    def test_no_digits_returned_trimmed(self):
        """Test that input without digits is returned as-is (trimmed)."""
        assert normalize_phone("  call me  ") == "call me"


class TestIsValidPhone:
    """Tests for is_valid_phone boundaries."""

    def test_three_digits_rejected(self):
        assert is_valid_phone("123") is False

    def test_seven_digits_rejected(self):
        assert is_valid_phone("1234567") is False

    def test_eight_digits_accepted(self):
        assert is_valid_phone("12345678") is True

    def test_ten_digit_local_number_accepted(self):
        assert is_valid_phone("0501234567") is True

    def test_exactly_fifteen_digits_accepted(self):
        assert is_valid_phone("123456789012345") is True

    def test_sixteen_digits_truncated_then_accepted(self):
        """Test that over-long input is truncated to 15 digits before validation."""
        assert is_valid_phone("1234567890123456") is True

    def test_no_digits_rejected(self):
        assert is_valid_phone("not a number") is False
        assert is_valid_phone("") is False
