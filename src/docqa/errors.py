"""Error classification shared by every pipeline stage."""

from __future__ import annotations

from enum import Enum
from typing import Sequence


class ErrorKind(str, Enum):
    """Who is expected to fix the failure."""

    CLIENT = "client"
    SERVER = "server"
    UPSTREAM = "upstream"


class DocQAError(RuntimeError):
    """Base class for failures surfaced to API callers.

    ``used_files`` is filled in by the query pipeline once documents have been
    selected, so callers can see which files a failed request had gathered.
    """

    kind: ErrorKind = ErrorKind.SERVER

    def __init__(self, message: str, *, used_files: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.used_files: list[str] = list(used_files)

    def with_used_files(self, used_files: Sequence[str]) -> "DocQAError":
        self.used_files = list(used_files)
        return self

    def __str__(self) -> str:
        return self.message


__all__ = ["DocQAError", "ErrorKind"]
