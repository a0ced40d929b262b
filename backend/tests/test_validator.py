"""
Validator and input-rule tests.

Verifies:
- First error recorded for a field wins
- Email and password rules
- Filter query parameters are parsed and bounded
"""

import pytest

from police_training.errors import UnsafeSortError
from police_training.filters import (
    Filters, build_filters, calculate_metadata, read_filters, sort_safelist,
)
from police_training.validator import Validator, validate_email, validate_password_plaintext


class TestValidator:

    def test_new_validator_is_empty(self):
        assert Validator().is_empty()

    def test_first_error_wins(self):
        v = Validator()
        v.add_error("email", "must be provided")
        v.add_error("email", "must be a valid email address")
        assert v.errors == {"email": "must be provided"}

    def test_check_records_only_failures(self):
        v = Validator()
        v.check(True, "a", "never recorded")
        v.check(False, "b", "recorded")
        assert v.errors == {"b": "recorded"}

    def test_permitted(self):
        assert Validator.permitted("m", ("m", "f"))
        assert not Validator.permitted("x", ("m", "f"))


class TestCredentialRules:

    @pytest.mark.parametrize("email", ["user@example.com", "first.last+tag@police.gov.bz"])
    def test_valid_emails(self, email):
        v = Validator()
        validate_email(v, email)
        assert v.is_empty()

    @pytest.mark.parametrize(
        "email,message",
        [
            ("", "must be provided"),
            ("not-an-email", "must be a valid email address"),
            ("a" * 250 + "@x.com", "must not be more than 254 bytes long"),
        ],
    )
    def test_invalid_emails(self, email, message):
        v = Validator()
        validate_email(v, email)
        assert v.errors["email"] == message

    def test_strong_password_accepted(self):
        v = Validator()
        validate_password_plaintext(v, "Password123!")
        assert v.is_empty()

    @pytest.mark.parametrize(
        "password,message",
        [
            ("", "must be provided"),
            (None, "must be provided"),
            ("Pa1!", "must be at least 8 characters long"),
            ("Aa1!" * 20, "must not be more than 72 bytes long"),
            ("Aa1!" + "é" * 40, "must not be more than 72 bytes long"),
            ("Password!!", "must contain at least one number"),
            ("password1!", "must contain at least one uppercase letter"),
            ("PASSWORD1!", "must contain at least one lowercase letter"),
            ("Password12", "must contain at least one special character"),
        ],
    )
    def test_weak_passwords_rejected(self, password, message):
        v = Validator()
        validate_password_plaintext(v, password)
        assert v.errors["password"] == message


class TestFilters:
    SAFELIST = sort_safelist("id", "name")

    def test_defaults(self):
        v = Validator()
        f = read_filters({}, "id", 20, self.SAFELIST, v)
        assert v.is_empty()
        assert (f.page, f.page_size, f.sort) == (1, 20, "id")
        assert f.limit() == 20
        assert f.offset() == 0

    def test_offset_follows_page(self):
        f = Filters(page=3, page_size=10, sort="id", sort_safelist=self.SAFELIST)
        assert f.offset() == 20

    def test_sort_column_and_direction(self):
        f = Filters(page=1, page_size=10, sort="-name", sort_safelist=self.SAFELIST)
        assert f.sort_column() == "name"
        assert f.sort_direction() == "DESC"

        f.sort = "name"
        assert f.sort_direction() == "ASC"

    def test_sort_outside_safelist_raises(self):
        f = Filters(page=1, page_size=10, sort="password_hash", sort_safelist=self.SAFELIST)
        with pytest.raises(UnsafeSortError):
            f.sort_column()

    def test_non_integer_page_reported(self):
        v = Validator()
        build_filters({"page": "abc"}, "id", 20, self.SAFELIST, v)
        assert v.errors == {"page": "must be an integer value"}

    def test_all_bound_errors_reported_together(self):
        v = Validator()
        read_filters({"page": "0", "page_size": "101", "sort": "bogus"}, "id", 20, self.SAFELIST, v)
        assert v.errors == {
            "page": "must be greater than zero",
            "page_size": "must be a maximum of 100",
            "sort": "invalid sort value",
        }

    def test_upper_bounds(self):
        v = Validator()
        read_filters({"page": "501", "page_size": "100"}, "id", 20, self.SAFELIST, v)
        assert v.errors == {"page": "must be a maximum of 500"}


class TestMetadata:

    def test_empty_result_serializes_to_empty_object(self):
        assert calculate_metadata(0, 1, 20).to_dict() == {}

    def test_last_page_rounds_up(self):
        meta = calculate_metadata(45, 2, 20)
        assert meta.to_dict() == {
            "current_page": 2,
            "page_size": 20,
            "first_page": 1,
            "last_page": 3,
            "total_records": 45,
        }

    def test_exact_multiple(self):
        assert calculate_metadata(40, 1, 20).last_page == 2
