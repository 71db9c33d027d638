"""File storage contract and its value types."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from platformkit.errors import AppError

ERR_FILE_NOT_FOUND = AppError("55423545-001", "File not found")


@dataclass
class File:
    content: bytes = b""
    scope: str = ""
    file_path: str = ""
    mime: str = ""


@dataclass
class FileMetaData:
    metadata: dict[str, str] = field(default_factory=dict)


class Storage(Protocol):
    """A store of files addressed by scope and path.

    Implementations raise ERR_FILE_NOT_FOUND when a file is missing.
    """

    def upload_file(self, ctx: Mapping[str, Any] | None, file: File) -> None:
        ...

    def get_file(self, ctx: Mapping[str, Any] | None, scope: str, path: str) -> File:
        ...

    def remove_file(self, ctx: Mapping[str, Any] | None, scope: str, path: str) -> None:
        ...

    def get_file_metadata(
        self, ctx: Mapping[str, Any] | None, scope: str, path: str
    ) -> FileMetaData:
        ...