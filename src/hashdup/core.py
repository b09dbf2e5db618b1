"""重複ファイル検出のコアロジック（走査 → ハッシュ → グループ化）"""

import logging
import os
from collections import deque
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor

from .constants import CHUNK_SIZE, DEFAULT_ALGORITHM, QUEUE_FACTOR, shutdown_event
from .hasher import HashGrouper
from .models import DuplicateReport, FileEntry, ScanWarning, WarningCallback
from .walker import walk_files

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def filter_by_size(entries: Iterable[FileEntry]) -> list[FileEntry]:
    """サイズが他と一致しないファイルを除外（発見順は保持）

    サイズが異なれば内容も異なるので、ハッシュ対象から外しても結果は変わらない。
    サイズ不明のエントリは常に残す。
    """
    entry_list = list(entries)
    size_counts: dict[int, int] = {}
    for entry in entry_list:
        if entry.size is not None:
            size_counts[entry.size] = size_counts.get(entry.size, 0) + 1

    return [entry for entry in entry_list if entry.size is None or size_counts[entry.size] >= 2]


def _hash_sequential(
    entries: Iterable[FileEntry],
    grouper: HashGrouper,
    progress_callback: ProgressCallback | None,
) -> None:
    for entry in entries:
        if shutdown_event.is_set():
            break
        grouper.process(entry)
        if progress_callback is not None:
            progress_callback(1)


def _collect(
    entry: FileEntry,
    future: Future,
    grouper: HashGrouper,
    progress_callback: ProgressCallback | None,
) -> None:
    try:
        digest = future.result()
    except OSError as e:
        grouper.fail(entry, e)
    else:
        grouper.add(digest, entry)

    if progress_callback is not None:
        progress_callback(1)


def _hash_parallel(
    entries: Iterable[FileEntry],
    grouper: HashGrouper,
    num_workers: int,
    progress_callback: ProgressCallback | None,
) -> None:
    """スレッドプールでハッシュを計算

    投入済みタスクは num_workers * QUEUE_FACTOR 件までに制限し、結果は古い順に
    呼び出し元スレッドで反映する（グループへの書き込みは常に1スレッドのみ）。
    """
    window = num_workers * QUEUE_FACTOR
    pending: deque[tuple[FileEntry, Future]] = deque()

    with ThreadPoolExecutor(max_workers=num_workers, thread_name_prefix="hashdup") as executor:
        try:
            for entry in entries:
                if shutdown_event.is_set():
                    break
                pending.append((entry, executor.submit(grouper.hash_entry, entry)))
                if len(pending) >= window:
                    _collect(*pending.popleft(), grouper, progress_callback)

            while pending and not shutdown_event.is_set():
                _collect(*pending.popleft(), grouper, progress_callback)
        finally:
            for _, future in pending:
                future.cancel()


def find_duplicates(
    root: str | os.PathLike,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    chunk_size: int = CHUNK_SIZE,
    num_workers: int = 1,
    recursive: bool = True,
    include_hidden: bool = True,
    follow_symlinks: bool = False,
    size_prefilter: bool = False,
    progress_callback: ProgressCallback | None = None,
    on_warning: WarningCallback | None = None,
) -> DuplicateReport:
    """ルート以下の重複ファイルを探す

    ルートに問題がある場合は ScanError を送出し、レポートは作らない。
    個別ファイル・ディレクトリのエラーは report.warnings に記録して処理を続ける。
    shutdown_event がセットされた場合は、それまでの結果で interrupted=True のレポートを返す。
    前回の実行で残ったイベントは開始時にクリアする。
    """
    shutdown_event.clear()

    warnings: list[ScanWarning] = []

    def collect_warning(warning: ScanWarning) -> None:
        warnings.append(warning)
        if on_warning is not None:
            on_warning(warning)

    grouper = HashGrouper(algorithm, chunk_size, collect_warning)
    entries: Iterable[FileEntry] = walk_files(
        root,
        recursive=recursive,
        include_hidden=include_hidden,
        follow_symlinks=follow_symlinks,
        on_warning=collect_warning,
    )
    logger.info("scan start: %s (algorithm=%s, workers=%d)", os.fspath(root), grouper.algorithm, num_workers)

    if size_prefilter:
        entries = filter_by_size(entries)

    if num_workers > 1:
        _hash_parallel(entries, grouper, num_workers, progress_callback)
    else:
        _hash_sequential(entries, grouper, progress_callback)

    report = DuplicateReport(
        algorithm=grouper.algorithm,
        groups=grouper.finalize(),
        warnings=warnings,
        files_hashed=grouper.files_hashed,
        unique_digests=grouper.unique_digests,
        interrupted=shutdown_event.is_set(),
    )
    logger.info(
        "scan done: %d files, %d groups, %d warnings",
        report.files_hashed,
        len(report.groups),
        len(report.warnings),
    )
    return report
