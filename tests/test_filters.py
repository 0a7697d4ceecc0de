#!/usr/bin/env python3
"""Unit tests for filter expression escaping.

Tests cover:
    - Percent-encoding of quoted values
    - Operators, quotes and field names left byte-identical
    - Multiple clauses encoded independently
    - ?filter= prefix stripping
    - Plain strings passed through unchanged
"""

import sys

import pytest

sys.path.insert(0, str(__file__).rsplit("/tests", 1)[0])
from src.lmtoggle.api.filters import escape_filter


class TestEscapeFilter:
    """Test escape_filter."""

    def test_not_like_operator(self):
        assert escape_filter('description!~"uplink"') == 'description!~"uplink"'

    def test_reserved_characters_encoded(self):
        assert escape_filter('displayName~"Gi0/1"') == 'displayName~"Gi0%2F1"'

    def test_space_and_ampersand_encoded(self):
        assert (
            escape_filter('description:"core & edge"')
            == 'description:"core%20%26%20edge"'
        )

    @pytest.mark.parametrize("operator", ["!:", "!~", ">:", "<:", ":", ">", "<", "~"])
    def test_operator_preserved(self, operator):
        result = escape_filter(f'name{operator}"a/b"')
        assert result == f'name{operator}"a%2Fb"'

    def test_multiple_clauses(self):
        raw = 'displayName~"Gi0/1",description!:"to core"|name:"x#y"'
        expected = 'displayName~"Gi0%2F1",description!:"to%20core"|name:"x%23y"'
        assert escape_filter(raw) == expected

    def test_only_quoted_substrings_change(self):
        raw = 'displayName~"a b",description!~"c+d"'
        result = escape_filter(raw)

        assert result.replace('"a%20b"', '"a b"').replace('"c%2Bd"', '"c+d"') == raw

    def test_prefix_stripped(self):
        assert escape_filter('?filter=name:"eth0"') == 'name:"eth0"'

    def test_prefix_case_insensitive(self):
        assert escape_filter('?FILTER=name:"a/b"') == 'name:"a%2Fb"'

    def test_plain_text_unchanged(self):
        assert escape_filter("uplink ports") == "uplink ports"

    def test_unquoted_value_unchanged(self):
        assert escape_filter("name:eth0") == "name:eth0"

    def test_empty(self):
        assert escape_filter("") == ""
