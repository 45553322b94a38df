"""Output root handling: the generator stamp guard and file writes."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

import msgspec

from extjs2react.errors import TargetDirectoryError

log = logging.getLogger(__name__)

STAMP_FILE = "extjs2react.json"
GENERATOR = "extjs2react"


class Stamp(msgspec.Struct):
    generator: str


class Workspace:
    """The output root of a run.

    Nothing is written until ``prepare`` has checked that the root is either
    missing or stamped by a previous run.
    """

    def __init__(self, target_dir: Path) -> None:
        self.target_dir = target_dir
        self.prepared = False

    @property
    def stamp_path(self) -> Path:
        return self.target_dir / STAMP_FILE

    def generator(self) -> Optional[str]:
        """Generator recorded in the stamp file, None when missing or unreadable."""
        if not self.stamp_path.exists():
            return None
        try:
            return msgspec.json.decode(self.stamp_path.read_bytes(), type=Stamp).generator
        except (msgspec.DecodeError, msgspec.ValidationError):
            return None

    def check(self) -> None:
        """Raise TargetDirectoryError for an existing root without a matching stamp."""
        if self.target_dir.is_dir() and self.generator() != GENERATOR:
            raise TargetDirectoryError(str(self.target_dir))
        if self.target_dir.exists() and not self.target_dir.is_dir():
            raise TargetDirectoryError(str(self.target_dir))

    def prepare(self) -> None:
        self.check()
        self.target_dir.mkdir(parents=True, exist_ok=True)
        encoded = msgspec.json.format(msgspec.json.encode(Stamp(generator=GENERATOR)), indent=2)
        self.stamp_path.write_bytes(encoded)
        self.prepared = True
        log.debug(f"Prepared output root {self.target_dir}")

    def _path(self, relative: str) -> Path:
        if not self.prepared:
            raise TargetDirectoryError(str(self.target_dir))
        return self.target_dir / relative

    def write(self, relative: str, text: str) -> Path:
        path = self._path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    def copy(self, relative: str, source: Path) -> Path:
        path = self._path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, path)
        return path

    def remove(self, relative: str) -> None:
        path = self._path(relative)
        if path.exists():
            path.unlink()
            log.info(f"Removed {relative}")
