"""Destinations for finalized invoice documents."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Protocol, Union


class ExportSink(Protocol):
    def save(self, data: bytes, filename: str) -> None:
        ...


class DirectorySink:
    """Writes each document into ``directory`` under its suggested filename."""

    def __init__(self, directory: Union[str, "os.PathLike[str]"]) -> None:
        self.directory = Path(directory)
        self.last_path: Optional[Path] = None

    def save(self, data: bytes, filename: str) -> None:
        name = Path(filename).name
        if not name:
            raise ValueError(f"Invalid export filename: {filename!r}")
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / name
        path.write_bytes(data)
        self.last_path = path


class MemorySink:
    def __init__(self) -> None:
        self.files: Dict[str, bytes] = {}

    def save(self, data: bytes, filename: str) -> None:
        self.files[filename] = data
