"""
Log file discovery and line counting.
"""

from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from .errors import FatalInputError

DEFAULT_LOG_DIR = "/etc/httpd/logs"
DEFAULT_FILE_PREFIX = "access"


def resolve_log_files(
    log_dir: Union[str, Path],
    file_list: Optional[str] = None,
    prefix: str = DEFAULT_FILE_PREFIX,
) -> List[Path]:
    """Resolve the files to import.

    Args:
        log_dir: Directory holding the access logs
        file_list: Optional comma separated list of file names inside *log_dir*
        prefix: File name prefix used when no explicit list is given

    Returns:
        Files in processing order

    Raises:
        FatalInputError: If the directory is invalid, a listed file is missing
            or no file matches
    """
    directory = Path(log_dir)
    if not directory.is_dir():
        raise FatalInputError(f"Invalid log directory: {directory}")

    if file_list:
        names = [name.strip() for name in file_list.split(",") if name.strip()]
        files = [directory / name for name in names]
        missing = [str(f) for f in files if not f.is_file()]
        if missing:
            raise FatalInputError(f"File not found: {', '.join(missing)}")
    else:
        files = sorted(p for p in directory.glob(f"{prefix}*") if p.is_file())

    if not files:
        raise FatalInputError(f"No log files to import in {directory}")
    return files


def count_lines(path: Path) -> int:
    """Count the lines of *path* without loading it into memory."""
    count = 0
    with open(path, "rb") as f:
        for _ in f:
            count += 1
    return count


def describe_files(files: Sequence[Path]) -> Iterator[Tuple[Path, int, int]]:
    """Yield ``(path, size_in_bytes, line_count)`` for each file.

    Raises:
        FatalInputError: If a file does not exist
    """
    for path in map(Path, files):
        if not path.is_file():
            raise FatalInputError(f"File not found: {path}")
        yield path, path.stat().st_size, count_lines(path)


def iter_lines(path: Path) -> Iterator[str]:
    """Stream the lines of a log file as text."""
    # Split on '\n' only so the count matches count_lines()
    with open(path, "r", encoding="utf-8", errors="replace", newline="\n") as f:
        yield from f
