"""Mission (.miz) archive I/O.

A ``.miz`` is a zip archive. The mission document lives at ``mission`` and
the briefing strings at ``l10n/DEFAULT/dictionary``.
"""

from __future__ import annotations

import contextlib
import logging
import shutil
import tempfile
import zipfile
from collections.abc import Iterator
from pathlib import Path

from realweather.errors import ArchiveError

logger = logging.getLogger(__name__)

MISSION_ENTRY = "mission"
DICTIONARY_ENTRY = "l10n/DEFAULT/dictionary"


def unpack(archive: Path, dest: Path) -> list[Path]:
    """Extract every entry of ``archive`` under ``dest``.

    Raises ``ArchiveError`` for unreadable archives and for entries whose
    path would land outside ``dest``.
    """
    archive = Path(archive)
    root = Path(dest).resolve()
    logger.info("Unpacking mission file %s", archive)

    try:
        zf = zipfile.ZipFile(archive)
    except (OSError, zipfile.BadZipFile) as exc:
        raise ArchiveError(f"cannot open {archive}: {exc}") from exc

    extracted: list[Path] = []
    with zf:
        for info in zf.infolist():
            target = (root / info.filename).resolve()
            if target != root and root not in target.parents:
                raise ArchiveError(f"{info.filename}: illegal file path")

            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                with zf.open(info) as src, open(target, "wb") as out:
                    shutil.copyfileobj(src, out)
            except (zipfile.BadZipFile, OSError) as exc:
                raise ArchiveError(f"cannot extract {info.filename}: {exc}") from exc
            extracted.append(target)

    if not (root / MISSION_ENTRY).is_file():
        raise ArchiveError(f"{archive} has no '{MISSION_ENTRY}' entry")

    logger.info("Unpacked mission file")
    return extracted


def pack(source: Path, archive: Path) -> None:
    """Zip every file under ``source`` into ``archive`` with deflate."""
    source = Path(source)
    archive = Path(archive)
    logger.info("Repacking mission file to %s", archive)

    try:
        with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in sorted(source.rglob("*")):
                if path.is_file():
                    zf.write(path, path.relative_to(source).as_posix())
    except OSError as exc:
        raise ArchiveError(f"cannot write {archive}: {exc}") from exc

    logger.info("Repacked mission file")


@contextlib.contextmanager
def unpacked(archive: Path) -> Iterator[Path]:
    """Unpack ``archive`` into a temporary directory removed on exit."""
    with tempfile.TemporaryDirectory(prefix="realweather-") as workdir:
        unpack(archive, Path(workdir))
        yield Path(workdir)
