from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from md_bundle.config import PathKind
from md_bundle.exceptions import FileReadError, FileWriteError, UnsafePathError
from md_bundle.logging import logger


@dataclass(frozen=True)
class DirectoryChild:
    """One entry of a single-level directory listing."""

    name: str
    is_dir: bool


class FileProvider(Protocol):
    """Filesystem access rooted at one directory, addressed by relative paths."""

    def stat_kind(self, rel: str) -> PathKind: ...

    def list_children(self, rel: str) -> list[DirectoryChild]: ...

    def read_text(self, rel: str) -> str: ...

    def write_text(self, rel: str, text: str) -> bool: ...


def normalize_relpath(raw: str) -> str:
    """Normalize a user supplied path to the root-relative POSIX form.

    Backslashes become slashes, empty and "." segments are dropped, so "",
    "." and "./" all denote the root itself.

    Args:
        raw (str): the path to normalize

    Raises:
        UnsafePathError: if the path is absolute or contains a ".." segment

    Returns:
        str: the normalized relative path, "" for the root
    """
    text = raw.strip().replace("\\", "/")
    if text.startswith("/") or (len(text) > 1 and text[1] == ":"):
        raise UnsafePathError(path=raw)
    parts = [part for part in text.split("/") if part not in {"", "."}]
    if ".." in parts:
        raise UnsafePathError(path=raw)
    return "/".join(parts)


def join_rel(parent: str, name: str) -> str:
    """Join a child name onto a relative directory path ("" is the root)."""
    return f"{parent}/{name}" if parent else name


class LocalFileProvider:
    """`FileProvider` over the local filesystem.

    Directory symlinks are listed as files-or-nothing and never traversed, and
    any symlink resolving outside the root is treated as missing. Reads and
    writes keep bytes intact: no newline translation, strict UTF-8.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self._resolved_root = self.root.resolve()

    def path_of(self, rel: str) -> Path:
        """Get the absolute on-disk path for a relative path.

        Raises:
            UnsafePathError: if `rel` is absolute or escapes the root.
        """
        normalized = normalize_relpath(rel)
        return self.root / normalized if normalized else self.root

    def _inside_root(self, path: Path) -> bool:
        try:
            return path.resolve().is_relative_to(self._resolved_root)
        except OSError:
            return False

    def stat_kind(self, rel: str) -> PathKind:
        path = self.path_of(rel)
        try:
            st = path.stat()
        except OSError:
            return PathKind.NOT_FOUND
        if not self._inside_root(path):
            logger.warning("path_outside_root", path=rel)
            return PathKind.NOT_FOUND
        if stat.S_ISDIR(st.st_mode):
            return PathKind.DIRECTORY
        if stat.S_ISREG(st.st_mode):
            return PathKind.FILE
        return PathKind.NOT_FOUND

    def list_children(self, rel: str) -> list[DirectoryChild]:
        """List one directory level.

        Symlinks are kept only when they point at a regular file inside the
        root; special files (sockets, fifos) are left out.

        Raises:
            OSError: if the directory cannot be scanned.
        """
        children: list[DirectoryChild] = []
        with os.scandir(self.path_of(rel)) as entries:
            for entry in entries:
                if entry.is_symlink():
                    target = Path(entry.path)
                    if not self._inside_root(target) or not target.is_file():
                        logger.info("symlink_skipped", path=join_rel(rel, entry.name))
                        continue
                    children.append(DirectoryChild(name=entry.name, is_dir=False))
                elif entry.is_dir(follow_symlinks=False):
                    children.append(DirectoryChild(name=entry.name, is_dir=True))
                elif entry.is_file(follow_symlinks=False):
                    children.append(DirectoryChild(name=entry.name, is_dir=False))
        return children

    def read_text(self, rel: str) -> str:
        try:
            return self.path_of(rel).read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FileReadError(path=rel, reason=str(e)) from e

    def write_text(self, rel: str, text: str) -> bool:
        """Write `text` at `rel`, creating parent directories.

        Returns:
            bool: True if an existing file was overwritten, False if created.

        Raises:
            UnsafePathError: if `rel` is absolute or escapes the root, including
                through a symlinked directory or file.
            FileWriteError: if the file or its directories cannot be written.
        """
        path = self.path_of(rel)
        # Checked before mkdir so nothing is created through an escaping symlink.
        if not self._inside_root(path):
            logger.warning("path_outside_root", path=rel)
            raise UnsafePathError(path=rel)
        existed = path.exists()
        try:
            if not path.parent.exists():
                logger.info("directory_created", path=str(path.parent.relative_to(self.root)))
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(text.encode("utf-8"))
        except OSError as e:
            raise FileWriteError(path=rel, reason=str(e)) from e
        return existed
