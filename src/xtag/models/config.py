"""
Configuration data model for xtag.

This module defines the settings that control where tags are stored, where
bookmarks live and how directory trees are searched.
"""

from typing import Dict, List, Any
from pathlib import Path
import fnmatch
import re
from pydantic import BaseModel, Field, PrivateAttr, field_validator


DEFAULT_XATTR_NAME = "user.xtag"
DEFAULT_BOOKMARK_DIR = "~/.config/xtag/bookmarks"


class XTagConfig(BaseModel):
    """
    Main configuration model for xtag.

    Attributes:
        xattr_name: Extended attribute holding the serialized tags
        bookmark_dir: Directory holding bookmark links
        max_workers: Number of threads used to read and match files
        recursive: Whether searches descend into subdirectories
        follow_symlinks: Whether searches follow symlinked directories
        ignore: Glob patterns of file and directory names to skip
    """

    xattr_name: str = Field(DEFAULT_XATTR_NAME, min_length=1, description="Extended attribute holding the tags")
    bookmark_dir: str = Field(DEFAULT_BOOKMARK_DIR, validate_default=True, description="Directory holding bookmark links")
    max_workers: int = Field(4, gt=0, le=256, description="Threads used to read and match files")
    recursive: bool = Field(True, description="Whether searches descend into subdirectories")
    follow_symlinks: bool = Field(False, description="Whether searches follow symlinked directories")
    ignore: List[str] = Field(default_factory=lambda: [".git"], description="Names to skip while walking")

    _compiled_ignore: List[re.Pattern] = PrivateAttr(default_factory=list)

    @field_validator('xattr_name')
    @classmethod
    def validate_xattr_name(cls, v: str) -> str:
        """Validate the attribute name."""
        v = v.strip()
        if not v:
            raise ValueError("Attribute name cannot be empty")
        if '.' not in v:
            raise ValueError(f"Attribute name must include a namespace such as 'user.': {v}")
        return v

    @field_validator('bookmark_dir')
    @classmethod
    def validate_bookmark_dir(cls, v: str) -> str:
        """Expand user path."""
        if not v or not v.strip():
            raise ValueError("Bookmark directory cannot be empty")
        return str(Path(v).expanduser())

    @field_validator('ignore', mode='before')
    @classmethod
    def validate_ignore(cls, v) -> List[str]:
        """Normalize ignore patterns, dropping empty entries."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [pattern.strip() for pattern in v if pattern and pattern.strip()]

    def model_post_init(self, __context) -> None:
        """Compile ignore patterns after initialization."""
        self._compiled_ignore = [re.compile(fnmatch.translate(p)) for p in self.ignore]

    def should_ignore(self, name: str) -> bool:
        """Check if a file or directory name matches an ignore pattern."""
        return any(regex.match(name) for regex in self._compiled_ignore)

    def validate_configuration(self) -> List[str]:
        """
        Check the configuration for likely mistakes.

        Returns:
            List of warning messages
        """
        warnings = []
        if not self.xattr_name.startswith('user.'):
            warnings.append(
                f"Attribute '{self.xattr_name}' is outside the 'user.' namespace and may need privileges"
            )
        if not Path(self.bookmark_dir).is_dir():
            warnings.append(f"Bookmark directory does not exist: {self.bookmark_dir}")
        return warnings

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'XTagConfig':
        """Create configuration from dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of configuration."""
        return (f"XTagConfig(attribute={self.xattr_name}, "
                f"bookmarks={self.bookmark_dir}, workers={self.max_workers})")
