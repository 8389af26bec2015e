"""
Unit tests for the tag list codec.
"""

import pytest

from xtag.errors import SearchSyntaxError
from xtag.search.codec import decode_tags, encode_tags


class TestDecodeTags:
    """Test cases for decode_tags."""

    def test_decode_mixed_list(self):
        """Test decoding presence-only tags and tags with values."""
        assert decode_tags("a=1,b,c=x y") == {"a": "1", "b": None, "c": "x y"}

    def test_decode_empty_string(self):
        """Test that an empty attribute means no tags."""
        assert decode_tags("") == {}

    def test_last_duplicate_wins(self):
        """Test that later entries overwrite earlier ones."""
        assert decode_tags("a=1,b,a=2") == {"a": "2", "b": None}

    def test_decode_returns_fresh_map(self):
        """Test that every decode builds a new map."""
        first = decode_tags("a")
        second = decode_tags("a")

        first["b"] = None
        assert second == {"a": None}

    def test_decode_malformed(self):
        """Test that hand-edited garbage is reported as a syntax error."""
        with pytest.raises(SearchSyntaxError):
            decode_tags("a=b=c")


class TestEncodeTags:
    """Test cases for encode_tags."""

    def test_encode_entries(self):
        """Test the rendering of each entry (order is unspecified)."""
        encoded = encode_tags({"a": None, "b": "1", "c": ""})

        assert set(encoded.split(",")) == {"a", "b=1", "c="}

    def test_encode_empty_map(self):
        """Test encoding an empty map."""
        assert encode_tags({}) == ""

    @pytest.mark.parametrize("tags", [
        {},
        {"a": None},
        {"genre": "rock", "year": "1994", "favourite": None},
        {"title": "two words", "empty": ""},
    ])
    def test_round_trip(self, tags):
        """Test that decoding an encoded map gives the same pairs."""
        assert decode_tags(encode_tags(tags)) == tags
