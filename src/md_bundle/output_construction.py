from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from md_bundle.collector import collect
from md_bundle.decoder import restore
from md_bundle.encoder import encode_sections, render_document
from md_bundle.exceptions import (
    DocumentNotFoundError,
    EmptySelectionError,
    FileReadError,
    FileWriteError,
    NothingToExportError,
)
from md_bundle.file_manipulation import LocalFileProvider
from md_bundle.logging import logger
from md_bundle.tree import build_structure_document, build_tree, collect_structure_paths, render_tree

if TYPE_CHECKING:
    from pathlib import Path

    from md_bundle.config import Section
    from md_bundle.decoder import RestoreReport
    from md_bundle.exceptions import PathNotFoundError
    from md_bundle.file_manipulation import FileProvider
    from md_bundle.session import Session


@dataclass(frozen=True)
class ExportReport:
    """A rendered document and what went into it."""

    document: str
    sections: list[Section] = field(default_factory=list)
    missing: list[PathNotFoundError] = field(default_factory=list)

    @property
    def written(self) -> int:
        return sum(1 for section in self.sections if section.is_readable)

    @property
    def unreadable(self) -> int:
        return len(self.sections) - self.written


@dataclass(frozen=True)
class StructureReport:
    """A rendered structure document and the paths it shows."""

    document: str
    paths: list[str] = field(default_factory=list)
    missing: list[PathNotFoundError] = field(default_factory=list)


def _require_selection(session: Session) -> None:
    if not session.selection:
        raise EmptySelectionError


def export_markdown(
    session: Session,
    provider: FileProvider | None = None,
    *,
    title: str | None = None,
) -> ExportReport:
    """Collect and encode the session's selection into one Markdown document.

    Args:
        session (Session): the root and selection to export
        provider (FileProvider | None): filesystem access; defaults to the
            local filesystem under the session root
        title (str | None): optional level-1 title for the document

    Raises:
        EmptySelectionError: if nothing is selected
        NothingToExportError: if no selected path resolved to a file

    Returns:
        ExportReport: the document, its sections and the unresolved selections
    """
    _require_selection(session)
    provider = provider or session.provider()
    result = collect(provider, session.selection)
    if not result.files:
        raise NothingToExportError(missing=tuple(err.path for err in result.errors))

    sections = encode_sections(result.files, provider)
    report = ExportReport(
        document=render_document(sections, title=title),
        sections=sections,
        missing=result.errors,
    )
    logger.info(
        "markdown_exported",
        root=str(session.root),
        sections=len(sections),
        unreadable=report.unreadable,
        missing=len(report.missing),
    )
    return report


def export_structure(session: Session, provider: FileProvider | None = None) -> StructureReport:
    """Render the tree of the session's selection as a structure document.

    Raises:
        EmptySelectionError: if nothing is selected
        NothingToExportError: if no selected path resolved

    Returns:
        StructureReport: the document, the paths shown and the unresolved selections
    """
    _require_selection(session)
    provider = provider or session.provider()
    paths, missing = collect_structure_paths(provider, session.selection)
    if not paths and "" not in session.selection:
        raise NothingToExportError(missing=tuple(err.path for err in missing))

    tree_text = render_tree(build_tree(paths), session.display_name)
    logger.info("structure_exported", root=str(session.root), paths=len(paths), missing=len(missing))
    return StructureReport(document=build_structure_document(tree_text), paths=paths, missing=missing)


def read_document(path: Path) -> str:
    """Read a Markdown document to restore from.

    Raises:
        DocumentNotFoundError: if the file does not exist
        FileReadError: if it cannot be read as UTF-8

    Returns:
        str: the document text, newlines untouched
    """
    if not path.is_file():
        raise DocumentNotFoundError(file=path)
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(path=str(path), reason=str(e)) from e


def write_document(path: Path, text: str) -> None:
    """Save a generated document, creating its directory.

    Raises:
        FileWriteError: if the document cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode("utf-8"))
    except OSError as e:
        raise FileWriteError(path=str(path), reason=str(e)) from e
    logger.info("document_written", path=str(path), chars=len(text))


def restore_markdown(document: str, target: Path) -> RestoreReport:
    """Write every file block of a document under `target`."""
    report = restore(document, LocalFileProvider(target))
    logger.info(
        "markdown_restored",
        target=str(target),
        outcome=str(report.outcome),
        created=len(report.created),
        updated=len(report.updated),
        errors=len(report.errors),
    )
    return report
