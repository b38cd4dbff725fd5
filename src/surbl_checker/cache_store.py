"""On-disk cache for the downloaded TLD lists."""

from __future__ import annotations

import os
import tempfile
import time
from pathlib import Path

import structlog

from .errors import ConfigError

log = structlog.get_logger()

CACHE_FILE_NAMES = {2: "tlds.2", 3: "tlds.3"}


class CacheStore:
    """A directory holding one cache file per TLD table level."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"Invalid cache directory: {self.directory}") from exc
        if not self.directory.is_dir():
            raise ConfigError(f"Invalid cache directory: {self.directory}")

    def path_for(self, level: int) -> Path:
        return self.directory / CACHE_FILE_NAMES[level]

    def exists(self, level: int) -> bool:
        return self.path_for(level).is_file()

    def last_modified(self, level: int) -> float | None:
        """Modification time as a POSIX timestamp, or None if there is no cache file."""
        try:
            return self.path_for(level).stat().st_mtime
        except FileNotFoundError:
            return None

    def age_seconds(self, level: int, now: float | None = None) -> float | None:
        mtime = self.last_modified(level)
        if mtime is None:
            return None
        return (now if now is not None else time.time()) - mtime

    def read_suffixes(self, level: int) -> frozenset[str]:
        """Read one suffix per line; blank and comment lines are skipped."""
        path = self.path_for(level)
        with open(path, encoding="utf-8") as f:
            suffixes = frozenset(
                line.strip().lower()
                for line in f
                if line.strip() and not line.lstrip().startswith("#")
            )
        log.info("tlds_loaded", level=level, count=len(suffixes), path=str(path))
        return suffixes

    def write(self, level: int, content: bytes) -> None:
        """Replace the cache file; readers see either the old or the new file."""
        path = self.path_for(level)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        log.info("tld_cache_written", level=level, bytes=len(content), path=str(path))

    def touch(self, level: int) -> None:
        os.utime(self.path_for(level), None)
