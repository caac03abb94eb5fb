from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

import pytest

from md_bundle.tree import build_structure_document, build_tree, collect_structure_paths, render_tree

if TYPE_CHECKING:
    from conftest import InMemoryProvider


@pytest.mark.unit
def test_build_tree_nests_segments() -> None:
    assert build_tree(["sub", "sub/b.py", "a.txt"]) == {"sub": {"b.py": {}}, "a.txt": {}}


@pytest.mark.unit
def test_render_tree_branches_and_prefixes() -> None:
    tree = build_tree(["a.txt", "sub", "sub/b.py", "sub/deep", "sub/deep/c.md", "z.txt"])

    assert render_tree(tree, "proj") == (
        "proj/\n"
        "├── a.txt\n"
        "├── sub\n"
        "│   ├── b.py\n"
        "│   └── deep\n"
        "│       └── c.md\n"
        "└── z.txt\n"
    )


@pytest.mark.unit
def test_render_tree_falls_back_to_root_label() -> None:
    assert render_tree({}, "") == "root/\n"


@pytest.mark.unit
def test_render_tree_sorts_case_insensitively() -> None:
    assert render_tree(build_tree(["b.txt", "A.txt", "a.txt", "C"]), "p") == (
        "p/\n├── A.txt\n├── a.txt\n├── b.txt\n└── C\n"
    )


@pytest.mark.unit
def test_overlapping_selection_renders_each_node_once(memory_provider: InMemoryProvider) -> None:
    paths, errors = collect_structure_paths(memory_provider, ["a.txt", "sub/deep", "sub/deep/c.md"])

    assert errors == []
    assert render_tree(build_tree(paths), "proj") == "proj/\n├── a.txt\n└── sub\n    └── deep\n        └── c.md\n"


@pytest.mark.unit
def test_tree_ignores_selection_order(memory_provider: InMemoryProvider) -> None:
    selection = ["a.txt", "sub", "sub/b.py"]
    renders = {
        render_tree(build_tree(collect_structure_paths(memory_provider, order)[0]), "proj")
        for order in itertools.permutations(selection)
    }

    assert renders == {
        "proj/\n├── a.txt\n└── sub\n    ├── b.py\n    ├── deep\n    │   └── c.md\n    └── Makefile\n",
    }


@pytest.mark.unit
def test_structure_document_wraps_tree() -> None:
    assert build_structure_document("proj/\n└── a.txt\n") == (
        "# Project Structure\n\n```text\nproj/\n└── a.txt\n\n```\n"
    )


@pytest.mark.unit
def test_sibling_order_is_independent_of_locale() -> None:
    assert render_tree(build_tree(["_x", "1", "B", "a"]), "p") == "p/\n├── 1\n├── _x\n├── a\n└── B\n"
