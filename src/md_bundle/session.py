from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from md_bundle.config import FALLBACK_ROOT_NAME
from md_bundle.exceptions import UnsafePathError
from md_bundle.file_manipulation import DirectoryChild, LocalFileProvider, join_rel, normalize_relpath
from md_bundle.logging import logger

if TYPE_CHECKING:
    from md_bundle.file_manipulation import FileProvider


class Session:
    """State of one export session: the root, the selection and where the user is browsing.

    Selection entries are root-relative POSIX paths, "" being the root itself.
    The selection keeps insertion order and ignores duplicates. An entry that is
    absolute or climbs out of the root is kept as typed; the collector reports
    it as not found like any other path that does not resolve.
    """

    def __init__(self, root: Path, display_name: str | None = None) -> None:
        self.root = Path(root).resolve()
        self.display_name = display_name or self.root.name or FALLBACK_ROOT_NAME
        self._selection: dict[str, None] = {}
        self._history: list[str] = [""]

    @property
    def selection(self) -> list[str]:
        return list(self._selection)

    def provider(self) -> LocalFileProvider:
        return LocalFileProvider(self.root)

    @staticmethod
    def _key(path: str) -> str:
        try:
            return normalize_relpath(path)
        except UnsafePathError:
            return path.strip()

    def is_selected(self, path: str) -> bool:
        return self._key(path) in self._selection

    def select(self, path: str) -> str:
        """Add a root-relative path to the selection and return its normalized form."""
        rel = self._key(path)
        self._selection.setdefault(rel)
        return rel

    def select_display_path(self, path: str) -> str:
        """Select a path written as `{display_name}/...`, the way a file browser shows it.

        A path that does not start with the display name is taken as root-relative.
        """
        rel = self._key(path)
        if rel == self.display_name:
            rel = ""
        elif rel.startswith(f"{self.display_name}/"):
            rel = rel[len(self.display_name) + 1 :]
        return self.select(rel)

    def deselect(self, path: str) -> None:
        self._selection.pop(self._key(path), None)

    def toggle(self, path: str) -> bool:
        """Flip the selection state of a path.

        Returns:
            bool: True if the path is selected afterwards.
        """
        rel = self._key(path)
        if rel in self._selection:
            del self._selection[rel]
            return False
        self._selection[rel] = None
        return True

    def clear(self) -> None:
        self._selection.clear()

    def change_root(self, root: Path, display_name: str | None = None) -> None:
        """Point the session at a new root, dropping the selection and history."""
        self.root = Path(root).resolve()
        self.display_name = display_name or self.root.name or FALLBACK_ROOT_NAME
        self.clear()
        self._history = [""]
        logger.info("root_changed", root=str(self.root))

    # ------------------------------ Navigation ------------------------------

    @property
    def current(self) -> str:
        """The directory being browsed, relative to the root."""
        return self._history[-1]

    def enter(self, name: str) -> str:
        """Descend into a child directory of the current one."""
        name = normalize_relpath(name)
        if not name:
            return self.current
        rel = join_rel(self.current, name)
        self._history.append(rel)
        return rel

    def back(self) -> str:
        """Return to the previous directory; stays at the root when already there."""
        if len(self._history) > 1:
            self._history.pop()
        return self.current

    def jump_to(self, rel: str) -> str:
        """Go back to a directory already in the history, as a breadcrumb click does.

        Unknown paths leave the history untouched.
        """
        target = normalize_relpath(rel)
        if target in self._history:
            del self._history[self._history.index(target) + 1 :]
        return self.current

    def breadcrumbs(self) -> list[str]:
        """Display name followed by each segment of the current directory."""
        return [self.display_name, *(part for part in self.current.split("/") if part)]

    def listing(self, provider: FileProvider | None = None) -> list[DirectoryChild]:
        """List the current directory: directories first, then files, each by name.

        Raises:
            OSError: if the directory cannot be scanned.
        """
        children = (provider or self.provider()).list_children(self.current)
        return sorted(children, key=lambda child: (not child.is_dir, child.name.casefold(), child.name))
