"""
md_bundle — snapshot project files into one Markdown document, and back.

Overview
--------
1) **export** — the selected files and directories become one document with a
   `## path` heading and a fenced code block per file. Unreadable files get an
   inline note instead of a block.

2) **structure** — the selection is rendered as an ASCII tree under a
   `# Project Structure` heading.

3) **restore** — every `## path` + fenced block of a document is written back
   to disk under a target directory, creating directories as needed.

4) **list** — show one directory of the root, directories first.

Selected paths are relative to `--root`; `.` selects the root itself. With
`--display-paths` they may instead start with the root directory name, as
`proj/src/app.py`.

Usage
-----
    md-bundle export --root . src pyproject.toml --output snapshot.md
    md-bundle structure --root . . --output structure.md
    md-bundle restore snapshot.md --target ./restored
    md-bundle export --root . --selection-file selection.yaml --log-file export.log
    md-bundle export --root ./proj --display-paths proj/src proj/README.md
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from md_bundle import __version__
from md_bundle.decoder import RestoreOutcome
from md_bundle.exceptions import (
    DocumentNotFoundError,
    EmptySelectionError,
    FileReadError,
    FileWriteError,
    NothingToExportError,
    UnsafePathError,
)
from md_bundle.logging import setup_logging
from md_bundle.output_construction import (
    export_markdown,
    export_structure,
    read_document,
    restore_markdown,
    write_document,
)
from md_bundle.session import Session
from md_bundle.settings import Settings

if TYPE_CHECKING:
    from collections.abc import Sequence

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--log-file", type=str, default=None, help="Log file path.")
    p.add_argument("--log-level", type=str, default=None, help="Minimum log level.")


def _add_selection(p: argparse.ArgumentParser) -> None:
    p.add_argument("paths", nargs="*", help="Files or directories relative to --root ('.' for the root).")
    p.add_argument("--root", type=Path, default=Path.cwd(), help="Root directory.")
    p.add_argument("--selection-file", type=Path, default=None, help="YAML list of paths to select.")
    p.add_argument("--output", "-o", type=Path, default=None, help="Output document.")
    p.add_argument("--force", action="store_true", help="Overwrite the output without asking.")
    p.add_argument(
        "--display-paths",
        action="store_true",
        help="Paths start with the root directory name (proj/src/app.py), as a file browser shows them.",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="md-bundle",
        description="Snapshot project files into one Markdown document, and restore them.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", help="Write the selected files into one Markdown document.")
    _add_selection(export)
    export.add_argument("--title", type=str, default="", help="Optional document title.")
    _add_common(export)

    structure = sub.add_parser("structure", help="Write the tree of the selected paths.")
    _add_selection(structure)
    _add_common(structure)

    restore = sub.add_parser("restore", help="Recreate files from a Markdown document.")
    restore.add_argument("document", type=Path, help="Markdown document to restore from.")
    restore.add_argument("--target", type=Path, default=Path.cwd(), help="Directory to write files into.")
    _add_common(restore)

    listing = sub.add_parser("list", help="List a directory of the root, directories first.")
    listing.add_argument("paths", nargs="?", default=".", help="Directory relative to --root.")
    listing.add_argument("--root", type=Path, default=Path.cwd(), help="Root directory.")
    _add_common(listing)
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    values = {k: v for k, v in vars(args).items() if v is not None}
    if isinstance(values.get("paths"), str):
        values["paths"] = [values["paths"]]
    return Settings(**values)


def confirm_overwrite(path: Path) -> bool:
    """Ask before replacing an existing document. EOF counts as no."""
    try:
        answer = input(f"{path} exists. Overwrite? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _session_for(settings: Settings) -> Session:
    session = Session(settings.root)
    select = session.select_display_path if settings.display_paths else session.select
    for path in settings.selection():
        select(path)
    return session


def _save(settings: Settings, text: str) -> Path | None:
    out_path = settings.output_path()
    if out_path.exists() and not settings.force and not confirm_overwrite(out_path):
        return None
    write_document(out_path, text)
    return out_path


def run_export(settings: Settings) -> int:
    report = export_markdown(_session_for(settings), title=settings.title or None)
    out_path = _save(settings, report.document)
    if out_path is None:
        print("Export cancelled.")
        return EXIT_OK
    print(
        f"Wrote {out_path} files={report.written} unreadable={report.unreadable} missing={len(report.missing)}",
    )
    return EXIT_OK


def run_structure(settings: Settings) -> int:
    report = export_structure(_session_for(settings))
    out_path = _save(settings, report.document)
    if out_path is None:
        print("Export cancelled.")
        return EXIT_OK
    print(f"Wrote {out_path} paths={len(report.paths)} missing={len(report.missing)}")
    return EXIT_OK


def run_restore(settings: Settings) -> int:
    document = Path(settings.document or "")
    report = restore_markdown(read_document(document), settings.target)
    if report.outcome is RestoreOutcome.NO_MATCHES:
        print(f"No file blocks found in {settings.document}")
        return EXIT_OK
    print(
        f"Restored {report.written} files (created={len(report.created)} updated={len(report.updated)}),"
        f" {len(report.errors)} errors",
    )
    for err in report.errors:
        print(f"  failed: {err}")
    return EXIT_FAILURE if report.errors else EXIT_OK


def run_list(settings: Settings) -> int:
    session = Session(settings.root)
    for path in settings.paths:
        session.enter(path)
    for child in session.listing():
        print(f"{child.name}/" if child.is_dir else child.name)
    return EXIT_OK


COMMANDS = {
    "export": run_export,
    "structure": run_structure,
    "restore": run_restore,
    "list": run_list,
}


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    logger = setup_logging(settings.log_file or None, settings.log_level, force=True)

    try:
        return COMMANDS[settings.command](settings)
    except EmptySelectionError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except (ValueError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except (NothingToExportError, DocumentNotFoundError, FileReadError, FileWriteError, UnsafePathError) as e:
        logger.error("command_failed", command=settings.command, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        logger.error("command_failed", command=settings.command, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
