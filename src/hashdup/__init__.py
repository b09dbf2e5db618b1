"""hashdup - ファイル内容のハッシュ値による重複ファイル検出ツール"""

from .constants import CHUNK_SIZE, DEFAULT_ALGORITHM
from .core import find_duplicates
from .hasher import HashGrouper, available_algorithms, hash_file
from .models import (
    DuplicateGroup,
    DuplicateReport,
    FileEntry,
    NotDirectoryError,
    PathNotFoundError,
    RootUnreadableError,
    ScanError,
    ScanWarning,
    WarningKind,
)
from .ui import run_scan
from .walker import walk_files

__all__ = [
    "CHUNK_SIZE",
    "DEFAULT_ALGORITHM",
    "DuplicateGroup",
    "DuplicateReport",
    "FileEntry",
    "HashGrouper",
    "NotDirectoryError",
    "PathNotFoundError",
    "RootUnreadableError",
    "ScanError",
    "ScanWarning",
    "WarningKind",
    "available_algorithms",
    "find_duplicates",
    "hash_file",
    "run_scan",
    "walk_files",
]
