"""Expand a selection of files and directories into an ordered file list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from md_bundle.config import FileRef, PathKind
from md_bundle.exceptions import PathNotFoundError, UnsafePathError
from md_bundle.file_manipulation import join_rel, normalize_relpath
from md_bundle.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from md_bundle.file_manipulation import FileProvider


@dataclass(frozen=True)
class CollectResult:
    """Files resolved from a selection, plus the entries that did not resolve."""

    files: list[FileRef] = field(default_factory=list)
    errors: list[PathNotFoundError] = field(default_factory=list)


def walk_descendants(
    provider: FileProvider,
    start: str,
    *,
    include_directories: bool = False,
) -> Iterator[str]:
    """Yield every descendant of a directory in pre-order.

    Uses an explicit stack rather than recursion. Children are visited in name
    order so repeated walks over an unchanged tree agree. A directory that
    cannot be listed is logged and skipped.

    Args:
        provider (FileProvider): filesystem access rooted at the export root
        start (str): the relative directory to walk, "" for the root
        include_directories (bool): also yield directory paths

    Yields:
        str: relative paths of files (and directories, if requested)
    """
    stack: list[tuple[str, bool]] = [(start, True)]
    first = True
    while stack:
        rel, is_dir = stack.pop()
        if not first and (include_directories or not is_dir):
            yield rel
        first = False
        if not is_dir:
            continue
        try:
            children = provider.list_children(rel)
        except OSError as e:
            logger.warning("directory_unreadable", path=rel or ".", error=str(e))
            continue
        children.sort(key=lambda child: child.name)
        stack.extend((join_rel(rel, child.name), child.is_dir) for child in reversed(children))


def expand_selection(
    provider: FileProvider,
    selection: Iterable[str],
    *,
    include_directories: bool = False,
) -> tuple[list[str], list[PathNotFoundError]]:
    """Resolve selected paths into relative paths, deduplicated in first-seen order.

    Each entry is either the root (""), a file, or a directory whose
    descendants are enumerated. Entries that resolve to nothing are collected
    as errors and do not stop the batch.

    Args:
        provider (FileProvider): filesystem access rooted at the export root
        selection (Iterable[str]): selected paths relative to the root
        include_directories (bool): record directories as well as files

    Returns:
        tuple[list[str], list[PathNotFoundError]]: the resolved paths and the
            selection entries that could not be resolved
    """
    seen: dict[str, None] = {}
    errors: list[PathNotFoundError] = []
    for raw in selection:
        try:
            rel = normalize_relpath(raw)
        except UnsafePathError:
            logger.warning("selection_not_found", path=raw, reason="unsafe path")
            errors.append(PathNotFoundError(path=raw))
            continue

        if not rel:
            seen.update(dict.fromkeys(walk_descendants(provider, "", include_directories=include_directories)))
            continue

        kind = provider.stat_kind(rel)
        if kind is PathKind.FILE:
            seen.setdefault(rel)
        elif kind is PathKind.DIRECTORY:
            if include_directories:
                seen.setdefault(rel)
            seen.update(dict.fromkeys(walk_descendants(provider, rel, include_directories=include_directories)))
        else:
            logger.warning("selection_not_found", path=rel)
            errors.append(PathNotFoundError(path=rel))
    return list(seen), errors


def collect(provider: FileProvider, selection: Iterable[str]) -> CollectResult:
    """Collect the files to export for a selection.

    Args:
        provider (FileProvider): filesystem access rooted at the export root
        selection (Iterable[str]): selected paths relative to the root

    Returns:
        CollectResult: one `FileRef` per distinct file, in selection order then
            traversal order, and the unresolved selection entries
    """
    rels, errors = expand_selection(provider, selection)
    files = [FileRef(rel=rel) for rel in rels]
    logger.info("selection_collected", files=len(files), missing=len(errors))
    return CollectResult(files=files, errors=errors)
