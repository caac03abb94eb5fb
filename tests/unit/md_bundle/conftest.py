from __future__ import annotations

import pytest

from md_bundle.config import PathKind
from md_bundle.exceptions import FileReadError
from md_bundle.file_manipulation import DirectoryChild


class InMemoryProvider:
    """Dict-backed `FileProvider`; lists children in reverse name order on purpose."""

    def __init__(self, files: dict[str, str], unreadable: set[str] | None = None) -> None:
        self.files = dict(files)
        self.unreadable = unreadable or set()

    def _dirs(self) -> set[str]:
        dirs = {""}
        for rel in self.files:
            parts = rel.split("/")
            dirs.update("/".join(parts[:i]) for i in range(1, len(parts)))
        return dirs

    def stat_kind(self, rel: str) -> PathKind:
        if rel in self.files:
            return PathKind.FILE
        if rel in self._dirs():
            return PathKind.DIRECTORY
        return PathKind.NOT_FOUND

    def list_children(self, rel: str) -> list[DirectoryChild]:
        prefix = f"{rel}/" if rel else ""
        children: dict[str, bool] = {}
        for path in self.files:
            if not path.startswith(prefix):
                continue
            head, sep, _ = path[len(prefix) :].partition("/")
            children[head] = children.get(head, False) or bool(sep)
        return [DirectoryChild(name=name, is_dir=is_dir) for name, is_dir in sorted(children.items(), reverse=True)]

    def read_text(self, rel: str) -> str:
        if rel in self.unreadable:
            raise FileReadError(path=rel, reason="permission denied")
        return self.files[rel]

    def write_text(self, rel: str, text: str) -> bool:
        existed = rel in self.files
        self.files[rel] = text
        return existed


@pytest.fixture
def memory_provider() -> InMemoryProvider:
    return InMemoryProvider(
        {
            "a.txt": "hello",
            "sub/b.py": "print(1)",
            "sub/deep/c.md": "# c",
            "sub/Makefile": "all:\n",
        },
    )


@pytest.fixture
def make_provider() -> type[InMemoryProvider]:
    return InMemoryProvider
