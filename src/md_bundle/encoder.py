from __future__ import annotations

import io
from typing import TYPE_CHECKING

from md_bundle.config import FENCE, HEADING_PREFIX, Section
from md_bundle.exceptions import FileReadError
from md_bundle.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from md_bundle.config import FileRef
    from md_bundle.file_manipulation import FileProvider


def read_section(ref: FileRef, provider: FileProvider) -> Section:
    """Read one file into a section, turning read failures into an error section.

    Args:
        ref (FileRef): the file to read
        provider (FileProvider): filesystem access rooted at the export root

    Returns:
        Section: the file content, or the reason it could not be read
    """
    try:
        content = provider.read_text(ref.rel)
    except FileReadError as e:
        logger.warning("file_unreadable", path=ref.rel, error=e.reason)
        return Section(rel=ref.rel, language=ref.language, error=e.reason)
    if FENCE in content:
        # Such content ends the block early when the document is decoded.
        logger.warning("fence_in_content", path=ref.rel)
    return Section(rel=ref.rel, language=ref.language, content=content)


def render_section(section: Section) -> str:
    """Serialize a section as a Markdown heading followed by a fenced block or error note."""
    head = f"\n{HEADING_PREFIX}{section.rel}\n\n"
    if section.content is None:
        return f"{head}(unable to read file: {section.error})\n\n"
    return f"{head}{FENCE}{section.language}\n{section.content}\n{FENCE}\n\n"


def encode_sections(refs: Iterable[FileRef], provider: FileProvider) -> list[Section]:
    """Read every file, in order, into sections."""
    return [read_section(ref, provider) for ref in refs]


def render_document(sections: Sequence[Section], *, title: str | None = None) -> str:
    """Concatenate rendered sections, optionally under a level-1 title."""
    out = io.StringIO()
    if title:
        out.write(f"# {title}\n\n")
    for section in sections:
        out.write(render_section(section))
    return out.getvalue()


def encode(refs: Iterable[FileRef], provider: FileProvider, *, title: str | None = None) -> str:
    """Encode files into a Markdown document.

    Args:
        refs (Iterable[FileRef]): the files to encode, in output order
        provider (FileProvider): filesystem access rooted at the export root
        title (str | None): optional document title; omitted by default

    Returns:
        str: the document, "" for no files and no title
    """
    return render_document(encode_sections(refs, provider), title=title)
