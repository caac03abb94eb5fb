from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from md_bundle.exceptions import UnsafePathError
from md_bundle.file_manipulation import DirectoryChild
from md_bundle.session import Session

if TYPE_CHECKING:
    from conftest import InMemoryProvider


@pytest.fixture
def session(tmp_path: Path) -> Session:
    root = tmp_path / "proj"
    (root / "sub" / "deep").mkdir(parents=True)
    (root / "a.txt").write_text("hello", encoding="utf-8")
    (root / "sub" / "b.py").write_text("print(1)", encoding="utf-8")
    return Session(root)


@pytest.mark.unit
def test_display_name_defaults_to_root_name(session: Session) -> None:
    assert session.display_name == "proj"
    assert Session(session.root, display_name="shown").display_name == "shown"


@pytest.mark.unit
def test_select_normalizes_and_deduplicates(session: Session) -> None:
    session.select("sub\\b.py")
    session.select("./sub/b.py")
    session.select(".")

    assert session.selection == ["sub/b.py", ""]
    assert session.is_selected("sub/b.py")


@pytest.mark.unit
def test_select_keeps_escaping_paths_as_typed(session: Session) -> None:
    assert session.select(" ../elsewhere ") == "../elsewhere"
    assert session.select_display_path("proj/../up") == "../up"
    assert session.is_selected("../elsewhere")
    assert session.toggle("../elsewhere") is False

    assert session.selection == ["../up"]


@pytest.mark.unit
def test_enter_rejects_escaping_paths(session: Session) -> None:
    with pytest.raises(UnsafePathError):
        session.enter("..")


@pytest.mark.unit
def test_select_display_path_strips_display_name(session: Session) -> None:
    assert session.select_display_path("proj/sub/b.py") == "sub/b.py"
    assert session.select_display_path("proj") == ""
    assert session.select_display_path("a.txt") == "a.txt"


@pytest.mark.unit
def test_toggle_and_deselect(session: Session) -> None:
    assert session.toggle("a.txt") is True
    assert session.toggle("a.txt") is False
    session.select("sub")
    session.deselect("sub")
    session.deselect("never-selected")

    assert session.selection == []


@pytest.mark.unit
def test_clear_empties_selection(session: Session) -> None:
    session.select("a.txt")
    session.clear()

    assert session.selection == []


@pytest.mark.unit
def test_navigation_history(session: Session) -> None:
    assert session.enter("sub") == "sub"
    assert session.enter("deep") == "sub/deep"
    assert session.breadcrumbs() == ["proj", "sub", "deep"]
    assert session.back() == "sub"
    assert session.back() == ""
    assert session.back() == ""


@pytest.mark.unit
def test_enter_empty_name_stays_put(session: Session) -> None:
    session.enter("sub")

    assert session.enter(".") == "sub"
    assert session.breadcrumbs() == ["proj", "sub"]


@pytest.mark.unit
def test_jump_to_truncates_history(session: Session) -> None:
    session.enter("sub")
    session.enter("deep")

    assert session.jump_to("") == ""
    assert session.back() == ""
    session.enter("sub")
    assert session.jump_to("not/visited") == "sub"


@pytest.mark.unit
def test_change_root_resets_selection_and_history(session: Session, tmp_path: Path) -> None:
    session.select("a.txt")
    session.enter("sub")
    other = tmp_path / "other"
    other.mkdir()

    session.change_root(other)

    assert session.selection == []
    assert session.current == ""
    assert session.display_name == "other"


@pytest.mark.unit
def test_listing_puts_directories_first(session: Session) -> None:
    (session.root / "Z.md").write_text("z", encoding="utf-8")

    assert session.listing() == [
        DirectoryChild(name="sub", is_dir=True),
        DirectoryChild(name="a.txt", is_dir=False),
        DirectoryChild(name="Z.md", is_dir=False),
    ]


@pytest.mark.unit
def test_listing_uses_given_provider(memory_provider: InMemoryProvider) -> None:
    session = Session(Path("unused"))
    session.enter("sub")

    assert [child.name for child in session.listing(memory_provider)] == ["deep", "b.py", "Makefile"]
