"""Unit tests for address display helpers."""

from __future__ import annotations

import pytest

from modules.orders.addresses import country_full, format_address

pytestmark = pytest.mark.unit


class TestFormatAddress:
    def test_joins_parts_one_per_line(self):
        assert format_address("1 High St", "Flat 2", "Leeds", "LS1 1AA", "GB") == (
            "1 High St,\nFlat 2,\nLeeds,\nLS1 1AA,\nGB"
        )

    def test_blank_parts_are_skipped(self):
        assert format_address("1 High St", "", "Leeds", "", "GB") == "1 High St,\nLeeds,\nGB"

    def test_all_blank(self):
        assert format_address("", "", "") == ""


class TestCountryFull:
    def test_mapping_lookup(self):
        assert country_full("GB", {"GB": "United Kingdom"}) == "United Kingdom"

    def test_callable_lookup(self):
        assert country_full("fr", lambda code: code.upper() + "ANCE") == "FRANCE"

    def test_unknown_code_is_returned_unchanged(self):
        assert country_full("ZZ", {"GB": "United Kingdom"}) == "ZZ"

    def test_blank_code(self):
        assert country_full("", {"": "Nowhere"}) == ""

    def test_failing_lookup_degrades_to_empty(self):
        def broken(code):
            raise LookupError("country service down")

        assert country_full("GB", broken) == ""
