"""Tests for input validation and sanitization helpers."""

import pytest

from app.utils.validators import (
    is_valid_email,
    is_valid_name,
    is_valid_role,
    is_valid_slug,
    is_valid_url,
    is_valid_uuid,
    is_valid_version,
    limit_length,
    sanitize_for_db,
    sanitize_string,
    validate_password,
)


class TestEmail:
    @pytest.mark.parametrize("email", ["owner@acme.io", "a.b+c@sub.example.org", "  padded@acme.io  "])
    def test_accepts_valid_addresses(self, email: str) -> None:
        assert is_valid_email(email) is True

    @pytest.mark.parametrize("email", ["", "plain", "no-domain@", "@acme.io", "two words@acme.io", "user@acme"])
    def test_rejects_invalid_addresses(self, email: str) -> None:
        assert is_valid_email(email) is False


class TestPassword:
    """Password policy: length, then uppercase, lowercase and digit."""

    def test_strong_password_is_valid(self) -> None:
        result = validate_password("Abcdefg1")

        assert result.valid is True
        assert result.error is None
        assert result.min_length and result.has_uppercase and result.has_lowercase and result.has_number

    def test_length_is_reported_first(self) -> None:
        result = validate_password("abc")

        assert result.valid is False
        assert result.min_length is False
        assert "8 characters" in (result.error or "")

    @pytest.mark.parametrize(
        ("password", "fragment"),
        [
            ("abcdefg1", "uppercase"),
            ("ABCDEFG1", "lowercase"),
            ("Abcdefgh", "number"),
        ],
    )
    def test_first_failing_rule_sets_error(self, password: str, fragment: str) -> None:
        result = validate_password(password)

        assert result.valid is False
        assert fragment in (result.error or "")


class TestSlug:
    @pytest.mark.parametrize("slug", ["acme", "acme-store", "store-2", "a1-b2-c3"])
    def test_accepts_valid_slugs(self, slug: str) -> None:
        assert is_valid_slug(slug) is True

    @pytest.mark.parametrize("slug", ["", "Acme", "acme_store", "-acme", "acme-", "acme--store", "acme store"])
    def test_rejects_invalid_slugs(self, slug: str) -> None:
        assert is_valid_slug(slug) is False


class TestIdentifiersAndUrls:
    def test_uuid_is_case_insensitive(self) -> None:
        assert is_valid_uuid("123e4567-e89b-12d3-a456-426614174000") is True
        assert is_valid_uuid("123E4567-E89B-12D3-A456-426614174000") is True

    @pytest.mark.parametrize("value", ["", "not-a-uuid", "123e4567e89b12d3a456426614174000"])
    def test_uuid_rejects_other_strings(self, value: str) -> None:
        assert is_valid_uuid(value) is False

    def test_uuid_rejects_trailing_newline(self) -> None:
        assert is_valid_uuid("123e4567-e89b-12d3-a456-426614174000\n") is False

    @pytest.mark.parametrize("version", ["1.0", "1.2.3", "10.20.30", " 2.1 "])
    def test_version_accepts_two_or_three_parts(self, version: str) -> None:
        assert is_valid_version(version) is True

    @pytest.mark.parametrize("version", ["1", "1.2.3.4", "v1.2", "1.a", "\u0661.\u0662", "1.\uff12"])
    def test_version_rejects_other_formats(self, version: str) -> None:
        assert is_valid_version(version) is False

    def test_url_requires_http_scheme_and_host(self) -> None:
        assert is_valid_url("https://cdn.example.com/logo.png") is True
        assert is_valid_url("http://localhost:8000") is True
        assert is_valid_url("ftp://example.com/file") is False
        assert is_valid_url("https://") is False
        assert is_valid_url("not a url") is False


class TestRoleAndName:
    def test_only_known_roles_are_valid(self) -> None:
        assert is_valid_role("admin") is True
        assert is_valid_role("user") is True
        assert is_valid_role("owner") is False
        assert is_valid_role("") is False

    def test_name_is_trimmed_and_bounded(self) -> None:
        assert is_valid_name("  Acme  ") is True
        assert is_valid_name("   ") is False
        assert is_valid_name("x" * 100) is True
        assert is_valid_name("x" * 101) is False
        assert is_valid_name("abcdef", max_length=5) is False


class TestSanitizers:
    def test_sanitize_string_escapes_html(self) -> None:
        assert sanitize_string(" <b>\"Tom's\"</b> ") == "&lt;b&gt;&quot;Tom&#x27;s&quot;&lt;&#x2F;b&gt;"

    def test_sanitize_for_db_trims(self) -> None:
        assert sanitize_for_db("  Acme  ") == "Acme"

    def test_limit_length_trims_then_truncates(self) -> None:
        assert limit_length("  abcdef  ", 3) == "abc"
        assert limit_length("ab", 10) == "ab"
