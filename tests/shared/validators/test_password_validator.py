"""Tests for the shared validators module."""

import pytest

from src.shared.validators.password import validate_password_strength


class TestPasswordValidation:
    """Test password strength validation."""

    def test_valid_password_with_all_requirements(self):
        """Test password with all requirements passes validation."""
        result = validate_password_strength("SecurePass123!")
        assert result == "SecurePass123!"

    def test_valid_password_minimum_length(self):
        """Test an 8 character password meeting every rule passes."""
        result = validate_password_strength("Abcd12!x")
        assert result == "Abcd12!x"

    def test_password_too_short_fails(self):
        with pytest.raises(ValueError, match="Password must be at least 8 characters"):
            validate_password_strength("Ab1!xyz")

    def test_empty_password_reports_length(self):
        with pytest.raises(ValueError, match="at least 8 characters"):
            validate_password_strength("")

    def test_password_without_uppercase_fails(self):
        """Test password without uppercase letter fails validation."""
        with pytest.raises(ValueError, match="Password must contain at least one uppercase letter"):
            validate_password_strength("securepass123!")

    def test_password_without_lowercase_fails(self):
        """Test password without lowercase letter fails validation."""
        with pytest.raises(ValueError, match="Password must contain at least one lowercase letter"):
            validate_password_strength("SECUREPASS123!")

    def test_password_without_digit_fails(self):
        """Test password without digit fails validation."""
        with pytest.raises(ValueError, match="Password must contain at least one digit"):
            validate_password_strength("SecurePass!")

    def test_password_without_special_character_fails(self):
        with pytest.raises(ValueError, match="Password must contain at least one special character"):
            validate_password_strength("SecurePass123")

    def test_space_is_not_a_special_character(self):
        with pytest.raises(ValueError, match="special character"):
            validate_password_strength("Secure Pass 123")

    @pytest.mark.parametrize("special", list("!@#$%^&*()_+-=[]{}|;:,.<>?"))
    def test_every_listed_special_character_is_accepted(self, special):
        password = f"Secure12{special}"
        assert validate_password_strength(password) == password

    def test_password_with_unicode_characters(self):
        """Test password with unicode characters passes if requirements are met."""
        result = validate_password_strength("Sécure123!")
        assert result == "Sécure123!"

    def test_password_very_long(self):
        """Test very long password passes validation."""
        long_password = "SecurePassword123!" * 10
        result = validate_password_strength(long_password)
        assert result == long_password

    def test_first_failing_rule_is_reported(self):
        """Length is checked before character classes."""
        with pytest.raises(ValueError, match="at least 8 characters"):
            validate_password_strength("abc")
