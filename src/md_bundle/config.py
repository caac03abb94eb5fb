from __future__ import annotations

from enum import StrEnum, auto
from typing import Self, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

FALLBACK_LANGUAGE = "txt"
FALLBACK_ROOT_NAME = "root"
FENCE = "```"
HEADING_PREFIX = "## "
STRUCTURE_TITLE = "# Project Structure"
DEFAULT_EXPORT_NAME = "extracted-files.md"
DEFAULT_STRUCTURE_NAME = "project-structure.md"

TreeNode: TypeAlias = dict[str, "TreeNode"]


class PathKind(StrEnum):
    """What a root-relative path points at.

    Returned by `FileProvider.stat_kind` so callers branch on an explicit tag
    instead of probing for a file and falling back to a directory.
    """

    FILE = auto()
    DIRECTORY = auto()
    NOT_FOUND = auto()


def language_tag(rel: str) -> str:
    """Get the code fence language tag for a relative path.

    The tag is the text after the last dot of the file name, lowercased.
    Names without a dot, or ending with one, get `FALLBACK_LANGUAGE`.

    Args:
        rel (str): the file path relative to the root, with POSIX separators

    Returns:
        str: the fence language tag
    """
    name = rel.rsplit("/", 1)[-1]
    if "." not in name:
        return FALLBACK_LANGUAGE
    ext = name.rsplit(".", 1)[1].lower()
    return ext or FALLBACK_LANGUAGE


class FileRef(BaseModel):
    """A resolved reference to a single file under the root.

    Attributes:
        rel: Path relative to the root, POSIX separators. Unique key.
        language: Fence language tag derived from `rel`.
    """

    model_config = ConfigDict(frozen=True)

    rel: str = Field(..., min_length=1, description="File path relative to the root")

    @computed_field
    @property
    def language(self) -> str:
        """Get the fence language tag based on the file extension."""
        return language_tag(self.rel)


class Section(BaseModel):
    """One rendered file of a document: its content, or why it is missing."""

    model_config = ConfigDict(frozen=True)

    rel: str = Field(..., min_length=1, description="File path relative to the root")
    language: str = Field(default=FALLBACK_LANGUAGE, description="Fence language tag")
    content: str | None = Field(default=None, description="UTF-8 file content")
    error: str | None = Field(default=None, description="Read failure message")

    @model_validator(mode="after")
    def _exactly_one_payload(self) -> Self:
        if (self.content is None) == (self.error is None):
            msg = "exactly one of content and error must be set"
            raise ValueError(msg)
        return self

    @property
    def is_readable(self) -> bool:
        return self.content is not None


class DecodedFile(BaseModel):
    """A file block recovered from a document."""

    model_config = ConfigDict(frozen=True)

    rel: str = Field(..., min_length=1, description="Declared relative path")
    language: str = Field(default="", description="Fence language tag as written")
    content: str = Field(..., description="Block body")
