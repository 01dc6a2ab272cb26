"""Extraction of BOM spreadsheets from ZIP archives."""

import logging
import tempfile
import zipfile
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Iterator, List, Union

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (".zip",)


def is_archive(file_path: Union[str, Path]) -> bool:
    return Path(file_path).suffix.lower() in ARCHIVE_SUFFIXES


def suffix_matches(name: str, suffix: str) -> bool:
    """True when ``name``'s final suffix is exactly ``suffix``.

    ``"a/b.XLS"`` matches ``".xls"``; ``"b.xlsx"`` does not, nor does
    ``"b.xls.bak"``.
    """
    return PurePosixPath(name).suffix.lower() == suffix.lower()


def list_members(archive_path: Union[str, Path], suffix: str = ".xls") -> List[str]:
    """Member paths (folders included) whose suffix matches.

    Raises:
        FileNotFoundError: If the archive doesn't exist
        ValueError: If the file is not a readable ZIP archive
    """
    archive_path = Path(archive_path)
    if not archive_path.exists():
        raise FileNotFoundError(f"Archive not found: {archive_path}")

    try:
        with zipfile.ZipFile(archive_path) as zf:
            return [
                info.filename for info in zf.infolist()
                if not info.is_dir() and suffix_matches(info.filename, suffix)
            ]
    except zipfile.BadZipFile as e:
        raise ValueError(f"Could not read archive {archive_path}: {e}")


@contextmanager
def open_archive(archive_path: Union[str, Path], suffix: str = ".xls") -> Iterator[List[Path]]:
    """Extract matching members into a temporary directory.

    The member's path inside the archive is kept, so files with the same
    name in different folders stay apart. The directory is removed on exit.

    Yields:
        Paths of the extracted files, in archive order
    """
    members = list_members(archive_path, suffix)
    with tempfile.TemporaryDirectory(prefix="bomrollup-") as tmp_dir:
        extracted = []
        with zipfile.ZipFile(archive_path) as zf:
            for member in members:
                extracted.append(Path(zf.extract(member, tmp_dir)))
        logger.info(f"Extracted {len(extracted)} '{suffix}' files from {archive_path}")
        yield extracted
