"""Line-oriented, pipe-delimited record files shared by the three stores."""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Generic, Iterable, List, TypeVar
import logging
import os

from ..errors import StorageError

FIELD_SEP = '|'
LIST_SEP = ','

T = TypeVar('T')

logger = logging.getLogger('clinicease.storage')


@dataclass
class LoadResult(Generic[T]):
    records: List[T] = field(default_factory=list)
    skipped: int = 0
    # highest sequence number seen, used to continue id numbering
    last_sequence: int = 0


def split_fields(line: str, expected: int) -> List[str]:
    parts = line.split(FIELD_SEP)
    if len(parts) != expected:
        raise ValueError(f"expected {expected} fields, found {len(parts)}")
    return parts


def join_list(items: Iterable[str]) -> str:
    return LIST_SEP.join(items)


def split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(LIST_SEP) if item.strip()]


def parse_sequence(raw: str) -> int:
    value = int(raw.strip())
    if value <= 0:
        raise ValueError(f"sequence must be positive: {value}")
    return value


def read_lines(path: Path) -> List[str]:
    """Read a data file; undecodable bytes survive as surrogates so only their line is lost."""
    if not path.exists():
        return []
    try:
        return path.read_text(encoding='utf-8', errors='surrogateescape').splitlines()
    except OSError as exc:
        raise StorageError(f"Cannot read {path}: {exc}") from exc


def parse_lines(path: Path, lines: Iterable[str], parse: Callable[[str], T]) -> LoadResult[T]:
    """Best-effort load: malformed lines are counted and dropped, the rest still load."""
    result: LoadResult[T] = LoadResult()
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            # UnicodeEncodeError (a ValueError) for lines that were not valid UTF-8
            line.encode('utf-8')
            result.records.append(parse(line))
        except ValueError as exc:
            result.skipped += 1
            logger.warning("Skipping malformed line %d in %s: %s", number, path.name, exc)
    return result


def _ends_mid_line(path: Path) -> bool:
    if not path.exists() or path.stat().st_size == 0:
        return False
    with path.open('rb') as handle:
        handle.seek(-1, os.SEEK_END)
        return handle.read(1) != b'\n'


def append_line(path: Path, line: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        prefix = '\n' if _ends_mid_line(path) else ''
        with path.open('a', encoding='utf-8') as handle:
            handle.write(prefix + line + '\n')
    except OSError as exc:
        logger.error("Append to %s failed: %s", path, exc)
        raise StorageError(f"Cannot write to {path}: {exc}") from exc


def write_lines(path: Path, lines: Iterable[str]) -> None:
    tmp_path = path.with_name(path.name + '.tmp')
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp_path.open('w', encoding='utf-8') as handle:
            for line in lines:
                handle.write(line + '\n')
        os.replace(tmp_path, path)
    except OSError as exc:
        logger.error("Rewrite of %s failed: %s", path, exc)
        raise StorageError(f"Cannot write to {path}: {exc}") from exc
