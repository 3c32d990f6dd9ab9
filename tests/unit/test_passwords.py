"""Tests for password generation."""

from __future__ import annotations

import string

import pytest

from starlane_operator.utils.passwords import generate_password


class TestGeneratePassword:
    """Test cases for generate_password."""

    def test_default_composition(self):
        password = generate_password()

        assert len(password) == 16
        assert sum(c in string.digits for c in password) == 4
        assert sum(c in string.ascii_letters for c in password) == 8

    def test_no_repeated_characters(self):
        password = generate_password()

        assert len(set(password)) == len(password)

    def test_passwords_differ(self):
        assert generate_password() != generate_password()

    def test_custom_length(self):
        assert len(generate_password(length=24, num_digits=2, num_symbols=2)) == 24

    def test_too_short(self):
        with pytest.raises(ValueError):
            generate_password(length=6)
