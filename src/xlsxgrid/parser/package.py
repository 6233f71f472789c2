from __future__ import annotations

import io
from pathlib import Path
from typing import Protocol
from zipfile import BadZipFile, ZipFile

from ..exceptions import PackageError


class PartReader(Protocol):
    def names(self) -> list[str]: ...

    def read_bytes(self, path: str) -> bytes | None: ...

    def read_text(self, path: str) -> str | None: ...


class ZipPartReader:
    """Serve named parts out of a zip archive held in memory or on disk."""

    def __init__(self, source: bytes | str | Path) -> None:
        try:
            if isinstance(source, (bytes, bytearray)):
                self._zip = ZipFile(io.BytesIO(source))
            else:
                self._zip = ZipFile(source)
        except (BadZipFile, OSError) as exc:
            raise PackageError(f"Not a readable spreadsheet package: {exc}") from exc
        self._names = self._zip.namelist()
        self._name_set = set(self._names)

    def __enter__(self) -> ZipPartReader:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    def names(self) -> list[str]:
        return list(self._names)

    def read_bytes(self, path: str) -> bytes | None:
        if path not in self._name_set:
            return None
        return self._zip.read(path)

    def read_text(self, path: str) -> str | None:
        payload = self.read_bytes(path)
        if payload is None:
            return None
        return payload.decode("utf-8-sig")
