"""Recover files from a Markdown document produced by the encoder.

Only one block shape is recognized::

    ## relative/path.ext
    <one or more newlines>
    ```ext
    body
    ```

The body runs to the first three-backtick sequence after the opener, so a
file whose own content contains one is cut short. Language tags are limited
to lowercase ASCII letters; a block whose tag has digits or punctuation is
not a match. Headings that are not followed by such a block, including the
encoder's "unable to read file" notes, are skipped without error.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING

from md_bundle.config import FENCE, HEADING_PREFIX, DecodedFile
from md_bundle.exceptions import FileWriteError, UnsafePathError
from md_bundle.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from md_bundle.file_manipulation import FileProvider

_NEWLINES = "\r\n"
_TAG_CHARS = frozenset(string.ascii_lowercase)


class RestoreOutcome(StrEnum):
    """Overall result of restoring a document."""

    NO_MATCHES = auto()
    COMPLETED = auto()
    COMPLETED_WITH_ERRORS = auto()


@dataclass
class RestoreReport:
    """Per-file results of writing decoded files to disk."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    errors: list[FileWriteError] = field(default_factory=list)

    @property
    def written(self) -> int:
        return len(self.created) + len(self.updated)

    @property
    def matched(self) -> int:
        return self.written + len(self.errors)

    @property
    def outcome(self) -> RestoreOutcome:
        if not self.matched:
            return RestoreOutcome.NO_MATCHES
        if self.errors:
            return RestoreOutcome.COMPLETED_WITH_ERRORS
        return RestoreOutcome.COMPLETED


def _line_end(text: str, pos: int) -> int:
    """Index of the first line terminator at or after `pos`, or len(text)."""
    ends = [i for i in (text.find("\n", pos), text.find("\r", pos)) if i != -1]
    return min(ends) if ends else len(text)


def _next_line_start(text: str, line_end: int) -> int:
    if text.startswith("\r\n", line_end):
        return line_end + 2
    return line_end + 1


def _match_block(text: str, pos: int, line_end: int) -> tuple[DecodedFile, int] | None:
    """Try to read one file block whose heading starts at `pos`.

    Returns:
        tuple[DecodedFile, int] | None: the block and the index just past its
            closing fence, or None when the text there is not a file block
    """
    rel = text[pos + len(HEADING_PREFIX) : line_end].strip()
    if not rel or line_end >= len(text):
        return None

    i = line_end
    while i < len(text) and text[i] in _NEWLINES:
        i += 1
    if not text.startswith(FENCE, i):
        return None
    i += len(FENCE)

    tag_start = i
    while i < len(text) and text[i] in _TAG_CHARS:
        i += 1
    language = text[tag_start:i]

    if text.startswith("\r\n", i):
        i += 2
    elif i < len(text) and text[i] in _NEWLINES:
        i += 1
    else:
        return None

    close = text.find(FENCE, i)
    if close == -1:
        return None
    body = text[i:close]
    # The encoder puts one newline between the content and the closing fence.
    body = body.removesuffix("\n")
    return DecodedFile(rel=rel, language=language, content=body), close + len(FENCE)


def iter_blocks(document: str) -> Iterator[DecodedFile]:
    """Scan a document top to bottom and yield every file block, non-overlapping.

    Args:
        document (str): the Markdown text

    Yields:
        DecodedFile: one entry per matched block, in document order
    """
    pos = 0
    while pos < len(document):
        line_end = _line_end(document, pos)
        if document.startswith(HEADING_PREFIX, pos):
            block = _match_block(document, pos, line_end)
            if block is not None:
                decoded, end = block
                yield decoded
                line_end = _line_end(document, end)
            else:
                logger.debug("heading_skipped", line=document[pos:line_end])
        pos = _next_line_start(document, line_end)


def decode(document: str) -> list[DecodedFile]:
    """Decode every file block of a document, in document order."""
    return list(iter_blocks(document))


def apply_files(files: Iterable[DecodedFile], provider: FileProvider) -> RestoreReport:
    """Write decoded files under the provider's root, last write wins.

    Parent directories are created as needed and existing files are
    overwritten. A file that cannot be written, or whose path is absolute or
    escapes the root, is recorded as an error and the rest still get written.

    Args:
        files (Iterable[DecodedFile]): the files to write
        provider (FileProvider): filesystem access rooted at the target directory

    Returns:
        RestoreReport: created, updated and failed paths
    """
    report = RestoreReport()
    for decoded in files:
        try:
            existed = provider.write_text(decoded.rel, decoded.content)
        except UnsafePathError as e:
            logger.error("file_write_failed", path=decoded.rel, error=e.message)
            report.errors.append(FileWriteError(path=decoded.rel, reason=e.message))
            continue
        except FileWriteError as e:
            logger.error("file_write_failed", path=decoded.rel, error=e.reason)
            report.errors.append(e)
            continue
        if existed:
            logger.info("file_updated", path=decoded.rel)
            report.updated.append(decoded.rel)
        else:
            logger.info("file_created", path=decoded.rel)
            report.created.append(decoded.rel)
    return report


def restore(document: str, provider: FileProvider) -> RestoreReport:
    """Decode a document and write every file block it contains."""
    files = decode(document)
    if not files:
        logger.warning("no_matching_blocks")
    return apply_files(files, provider)
