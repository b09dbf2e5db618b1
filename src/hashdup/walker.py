"""ディレクトリ走査（通常ファイルの列挙）"""

import errno
import logging
import os
import stat
from collections.abc import Iterator

from .constants import shutdown_event
from .models import (
    FileEntry,
    NotDirectoryError,
    PathNotFoundError,
    RootUnreadableError,
    ScanWarning,
    WarningCallback,
    WarningKind,
)

logger = logging.getLogger(__name__)


def _dir_key(st: os.stat_result) -> tuple[int, int]:
    return (st.st_dev, st.st_ino)


def _scan_dir(dir_path: str) -> list[os.DirEntry]:
    """ディレクトリのエントリ一覧を取得（ハンドルはすぐに閉じる）"""
    with os.scandir(dir_path) as it:
        return list(it)


def _report(on_warning: WarningCallback | None, warning: ScanWarning) -> None:
    logger.warning("%s: %s (%s)", warning.kind.value, warning.path, warning.message)
    if on_warning is not None:
        on_warning(warning)


def validate_root(root: str) -> os.stat_result:
    """ルートパスを検査し、問題があれば ScanError を送出する"""
    try:
        st = os.stat(root)
    except FileNotFoundError as e:
        raise PathNotFoundError(root) from e
    except NotADirectoryError as e:
        # 途中の要素がファイルの場合（例: file.txt/sub）
        raise PathNotFoundError(root) from e
    except OSError as e:
        raise RootUnreadableError(root, e.strerror or str(e)) from e

    if not stat.S_ISDIR(st.st_mode):
        raise NotDirectoryError(root)

    return st


def walk_files(
    root: str | os.PathLike,
    *,
    recursive: bool = True,
    include_hidden: bool = True,
    follow_symlinks: bool = False,
    on_warning: WarningCallback | None = None,
) -> Iterator[FileEntry]:
    """ルート以下の通常ファイルを遅延列挙する

    ルートの検査とルート直下の読み込みは呼び出し時点で行うため、
    致命的なエラーは最初の要素を取り出す前に送出される。

    シンボリックリンクの扱い:
      - ファイルへのリンクは、実体が通常ファイルの場合のみ対象にする
      - ディレクトリへのリンクは follow_symlinks が True の場合のみ辿る。
        その場合も (st_dev, st_ino) で訪問済みを管理し、同じディレクトリは1回だけ辿る。
        祖先を指すリンクは循環として警告する
    """
    root = os.fspath(root)
    root_stat = validate_root(root)

    try:
        root_entries = _scan_dir(root)
    except OSError as e:
        raise RootUnreadableError(root, e.strerror or str(e)) from e

    return _walk(
        root_entries,
        _dir_key(root_stat),
        recursive=recursive,
        include_hidden=include_hidden,
        follow_symlinks=follow_symlinks,
        on_warning=on_warning,
    )


def _walk(
    root_entries: list[os.DirEntry],
    root_key: tuple[int, int],
    *,
    recursive: bool,
    include_hidden: bool,
    follow_symlinks: bool,
    on_warning: WarningCallback | None,
) -> Iterator[FileEntry]:
    visited = {root_key}
    # 再帰ではなく明示的なスタックで辿る（深い階層でも上限に当たらない）
    # 各要素は (ディレクトリ, 祖先ディレクトリの (st_dev, st_ino) 集合)
    stack: list[tuple[str, frozenset[tuple[int, int]]]] = []
    entries: list[os.DirEntry] | None = root_entries
    ancestors = frozenset({root_key})

    while True:
        if entries is None:
            if not stack:
                return
            dir_path, ancestors = stack.pop()
            if follow_symlinks:
                # 訪問済みの判定はここだけで行う（どの経路から来たかによらない）
                try:
                    key = _dir_key(os.stat(dir_path))
                except OSError as e:
                    _report(on_warning, ScanWarning.from_oserror(dir_path, e))
                    continue
                if key in ancestors:
                    _report(
                        on_warning,
                        ScanWarning(dir_path, WarningKind.SYMLINK_LOOP, "祖先のディレクトリを指しています"),
                    )
                    continue
                if key in visited:
                    logger.debug("skip already visited directory: %s", dir_path)
                    continue
                visited.add(key)
                ancestors = ancestors | {key}
            try:
                entries = _scan_dir(dir_path)
            except OSError as e:
                _report(on_warning, ScanWarning.from_oserror(dir_path, e))
                continue

        real_dirs: list[str] = []
        linked_dirs: list[str] = []
        for entry in entries:
            if shutdown_event.is_set():
                return
            if not include_hidden and entry.name.startswith("."):
                continue

            is_link = False
            try:
                is_link = entry.is_symlink()
                if is_link:
                    st = entry.stat()
                elif entry.is_dir(follow_symlinks=False):
                    if recursive:
                        real_dirs.append(entry.path)
                    continue
                else:
                    st = entry.stat(follow_symlinks=False)
            except OSError as e:
                if is_link and e.errno in (errno.ENOENT, errno.ELOOP):
                    _report(on_warning, ScanWarning(entry.path, WarningKind.BROKEN_SYMLINK, "リンク先が存在しません"))
                else:
                    _report(on_warning, ScanWarning.from_oserror(entry.path, e))
                continue

            if stat.S_ISREG(st.st_mode):
                yield FileEntry(path=entry.path, size=st.st_size)
            elif stat.S_ISDIR(st.st_mode):
                # ここに来るのはディレクトリへのシンボリックリンクのみ
                if not (recursive and follow_symlinks):
                    logger.debug("skip symlinked directory: %s", entry.path)
                    continue
                linked_dirs.append(entry.path)
            else:
                logger.debug("skip special file: %s", entry.path)

        # 実ディレクトリをリンクより先に、元の並び順で取り出されるよう逆順に積む
        stack.extend((path, ancestors) for path in reversed(real_dirs + linked_dirs))
        entries = None
