from __future__ import annotations

from typing import TYPE_CHECKING

from md_bundle.collector import expand_selection
from md_bundle.config import FALLBACK_ROOT_NAME, STRUCTURE_TITLE

if TYPE_CHECKING:
    from collections.abc import Iterable

    from md_bundle.config import TreeNode
    from md_bundle.exceptions import PathNotFoundError
    from md_bundle.file_manipulation import FileProvider


def collect_structure_paths(
    provider: FileProvider,
    selection: Iterable[str],
) -> tuple[list[str], list[PathNotFoundError]]:
    """Expand a selection like the collector, keeping directories as well as files."""
    return expand_selection(provider, selection, include_directories=True)


def sibling_key(name: str) -> tuple[str, str]:
    """Sort key for sibling names: case-insensitive first, exact name as tie-break.

    This is code point order after casefolding, not a locale collation: it does
    not depend on the host locale, but punctuation and digits order by code
    point, so "1" sorts before "_x" where a locale-aware sort may put "_x" first.
    """
    return (name.casefold(), name)


def build_tree(rel_paths: Iterable[str]) -> TreeNode:
    """Build a nested mapping of path segments.

    Args:
        rel_paths (Iterable[str]): relative paths using POSIX separators

    Returns:
        TreeNode: segment name to child node; leaves are empty mappings
    """
    tree: TreeNode = {}
    for rel in rel_paths:
        cur = tree
        for part in rel.strip("/").split("/"):
            if part:
                cur = cur.setdefault(part, {})
    return tree


def render_tree(tree: TreeNode, root_name: str = "") -> str:
    """Render a tree as ASCII art, one newline-terminated line per node.

    Args:
        tree (TreeNode): the nested mapping built by `build_tree`
        root_name (str): label of the first line; falls back to "root"

    Returns:
        str: the rendered tree, starting with "{root_name}/"
    """
    lines: list[str] = [f"{root_name or FALLBACK_ROOT_NAME}/"]

    def walk(node: TreeNode, prefix: str) -> None:
        names = sorted(node, key=sibling_key)
        for idx, name in enumerate(names):
            last = idx == len(names) - 1
            lines.append(prefix + ("└── " if last else "├── ") + name)
            if node[name]:
                walk(node[name], prefix + ("    " if last else "│   "))

    walk(tree, "")
    return "".join(f"{line}\n" for line in lines)


def build_structure_document(tree_text: str) -> str:
    """Wrap a rendered tree into the structure export document."""
    return f"{STRUCTURE_TITLE}\n\n```text\n{tree_text}\n```\n"
