"""Write generated tables to the output directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteResult:
    path: Path
    written: bool


def write_if_changed(path: Path, contents: str) -> bool:
    """Write ``contents`` to ``path`` unless the file already holds them.

    Leaving identical files untouched keeps their modification time, so the
    downstream C build does not recompile unchanged tables.
    """

    if path.exists() and path.read_text("utf-8") == contents:
        logger.info("%s is up to date", path)
        return False
    path.write_text(contents, "utf-8")
    logger.info("wrote %s", path)
    return True


def finalize_table(out_dir: Path, name: str, contents: str, suffix: str = ".c") -> WriteResult:
    """Store one generated table as ``<out_dir>/<name><suffix>``."""

    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{name}{suffix}"
    return WriteResult(path=path, written=write_if_changed(path, contents))


__all__ = ["WriteResult", "write_if_changed", "finalize_table"]
