from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class MdBundleError(Exception):
    """Base exception for errors in the md_bundle module."""

    def __str__(self) -> str:
        return getattr(self, "message", self.__class__.__name__)


@dataclass(frozen=True)
class PathNotFoundError(MdBundleError):
    """Raised when a selected path is neither a file nor a directory under the root."""

    path: str
    message: str = "The selected path does not exist under the root."

    def __str__(self) -> str:
        return f"{self.message} ({self.path})"


@dataclass(frozen=True)
class UnsafePathError(MdBundleError):
    """Raised when a relative path is absolute or climbs out of its root."""

    path: str
    message: str = "The path is absolute or escapes the root directory."

    def __str__(self) -> str:
        return f"{self.message} ({self.path})"


@dataclass(frozen=True)
class FileReadError(MdBundleError):
    """Raised when a file cannot be read as UTF-8 text."""

    path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


@dataclass(frozen=True)
class FileWriteError(MdBundleError):
    """Raised when a file or one of its parent directories cannot be written."""

    path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


@dataclass(frozen=True)
class DocumentNotFoundError(MdBundleError):
    """Raised when the Markdown document to restore from does not exist."""

    file: Path
    message: str = "The specified Markdown document does not exist."

    def __str__(self) -> str:
        return f"{self.message} ({self.file})"


@dataclass(frozen=True)
class EmptySelectionError(MdBundleError):
    """Raised when an export is requested without any selected path."""

    message: str = "Select at least one file or directory."


@dataclass(frozen=True)
class NothingToExportError(MdBundleError):
    """Raised when none of the selected paths resolved to anything exportable."""

    missing: tuple[str, ...] = ()
    message: str = "None of the selected paths could be resolved."

    def __str__(self) -> str:
        if not self.missing:
            return self.message
        return f"{self.message} ({', '.join(self.missing)})"
