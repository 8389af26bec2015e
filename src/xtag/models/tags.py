"""
Tag data models for xtag.

This module defines the in-memory shape of a file's tags and the result
record produced when a file is selected by a filter.
"""

from typing import Dict, Optional
from pathlib import Path
from pydantic import BaseModel, Field, field_validator


# Tag name -> optional value. A tag without "=value" maps to None.
TagMap = Dict[str, Optional[str]]


class TaggedFile(BaseModel):
    """
    A file together with the tags decoded from its attribute.

    Attributes:
        path: Absolute path to the file
        tags: Decoded tag map of the file
    """

    path: str = Field(..., min_length=1, description="Absolute path to the file")
    tags: Dict[str, Optional[str]] = Field(default_factory=dict, description="Decoded tags")

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate and normalize the file path."""
        if not v or not v.strip():
            raise ValueError("File path cannot be empty")
        return str(Path(v).absolute())

    def __str__(self) -> str:
        return self.path
