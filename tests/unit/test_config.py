"""
Unit tests for the configuration data model.

Tests defaults, validation, normalization and ignore pattern matching of
XTagConfig.
"""

import pytest
import tempfile
import os
from pathlib import Path
from unittest.mock import patch
from pydantic import ValidationError

from xtag.models.config import XTagConfig, DEFAULT_XATTR_NAME


class TestXTagConfig:
    """Test cases for XTagConfig."""

    def test_default_config(self):
        """Test default configuration."""
        config = XTagConfig()

        assert config.xattr_name == DEFAULT_XATTR_NAME == "user.xtag"
        assert config.bookmark_dir == str(Path("~/.config/xtag/bookmarks").expanduser())
        assert config.max_workers == 4
        assert config.recursive is True
        assert config.follow_symlinks is False
        assert config.ignore == [".git"]

    def test_custom_config(self):
        """Test custom configuration."""
        config = XTagConfig(
            xattr_name="user.tags",
            bookmark_dir="/custom/bookmarks",
            max_workers=16,
            recursive=False,
            ignore=["*.tmp", "node_modules"]
        )

        assert config.xattr_name == "user.tags"
        assert config.bookmark_dir == "/custom/bookmarks"
        assert config.max_workers == 16
        assert config.recursive is False
        assert config.ignore == ["*.tmp", "node_modules"]

    def test_xattr_name_is_stripped(self):
        """Test whitespace around the attribute name."""
        assert XTagConfig(xattr_name="  user.tags ").xattr_name == "user.tags"

    @pytest.mark.parametrize("name", ["", "   ", "xtag"])
    def test_invalid_xattr_name(self, name):
        """Test empty names and names without a namespace."""
        with pytest.raises(ValidationError):
            XTagConfig(xattr_name=name)

    def test_bookmark_dir_expansion(self):
        """Test that '~' is expanded."""
        config = XTagConfig(bookmark_dir="~/marks")
        assert config.bookmark_dir == str(Path.home() / "marks")

    @pytest.mark.parametrize("workers", [0, -1, 1000])
    def test_invalid_max_workers(self, workers):
        """Test worker count limits."""
        with pytest.raises(ValidationError):
            XTagConfig(max_workers=workers)

    def test_ignore_normalization(self):
        """Test that a single string becomes a list and blanks are dropped."""
        assert XTagConfig(ignore="*.bak").ignore == ["*.bak"]
        assert XTagConfig(ignore=["", " .git ", "  "]).ignore == [".git"]
        assert XTagConfig(ignore=None).ignore == []

    def test_should_ignore(self):
        """Test glob matching of names."""
        config = XTagConfig(ignore=[".git", "*.tmp", "cache?"])

        assert config.should_ignore(".git")
        assert config.should_ignore("scratch.tmp")
        assert config.should_ignore("cache1")
        assert not config.should_ignore("notes.txt")
        assert not config.should_ignore(".github")

    def test_validate_configuration(self):
        """Test warnings for likely mistakes."""
        with tempfile.TemporaryDirectory() as temp_dir:
            assert XTagConfig(bookmark_dir=temp_dir).validate_configuration() == []

            warnings = XTagConfig(xattr_name="trusted.xtag", bookmark_dir=temp_dir).validate_configuration()
            assert len(warnings) == 1
            assert "namespace" in warnings[0]

            missing = Path(temp_dir) / "missing"
            warnings = XTagConfig(bookmark_dir=str(missing)).validate_configuration()
            assert any("does not exist" in w for w in warnings)

    def test_from_dict_round_trip(self):
        """Test that a dumped configuration validates to the same values."""
        config = XTagConfig(max_workers=2, ignore=["*.tmp"])
        data = config.model_dump()

        assert data["max_workers"] == 2
        assert "_compiled_ignore" not in data

        restored = XTagConfig.from_dict(data)
        assert restored.model_dump() == data
        assert restored.should_ignore("a.tmp")

    def test_default_bookmark_dir_is_expanded(self):
        """Test that the default bookmark directory has no '~' left."""
        config = XTagConfig()

        assert not config.bookmark_dir.startswith("~")
        assert XTagConfig.from_dict(config.model_dump()).bookmark_dir == config.bookmark_dir

    def test_default_bookmark_dir_without_warning(self):
        """Test that an existing default bookmark directory gives no warning."""
        with tempfile.TemporaryDirectory() as temp_dir:
            with patch.dict(os.environ, {"HOME": temp_dir}):
                (Path(temp_dir) / ".config" / "xtag" / "bookmarks").mkdir(parents=True)

                config = XTagConfig()

                assert config.bookmark_dir == str(Path(temp_dir) / ".config" / "xtag" / "bookmarks")
                assert config.validate_configuration() == []

    def test_str(self):
        """Test string representation."""
        assert "user.xtag" in str(XTagConfig())
