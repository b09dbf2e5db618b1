"""ファイル内容のハッシュ計算とグループ化"""

import hashlib
import logging
import os
from typing import Any

import xxhash

from .constants import CHUNK_SIZE, DEFAULT_ALGORITHM
from .models import DuplicateGroup, FileEntry, ScanWarning, WarningCallback

logger = logging.getLogger(__name__)

# 非暗号学的ハッシュ（高速だが衝突耐性は弱い）
_XXHASH_ALGORITHMS = {
    "xxh64": xxhash.xxh64,
    "xxh128": xxhash.xxh128,
    "xxh3_64": xxhash.xxh3_64,
    "xxh3_128": xxhash.xxh3_128,
}

# 可変長出力の shake_* は固定長のダイジェストにならないので除外
_HASHLIB_ALGORITHMS = frozenset(name for name in hashlib.algorithms_guaranteed if not name.startswith("shake_"))


def available_algorithms() -> list[str]:
    """利用可能なアルゴリズム名の一覧"""
    return sorted(_HASHLIB_ALGORITHMS) + list(_XXHASH_ALGORITHMS)


def new_hasher(algorithm: str = DEFAULT_ALGORITHM) -> Any:
    """アルゴリズム名からハッシュオブジェクトを生成"""
    name = algorithm.lower()
    if name in _XXHASH_ALGORITHMS:
        return _XXHASH_ALGORITHMS[name]()
    if name in _HASHLIB_ALGORITHMS:
        return hashlib.new(name)
    raise ValueError(f"未対応のハッシュアルゴリズムです: {algorithm}")


def _check_chunk_size(chunk_size: int) -> None:
    if chunk_size <= 0:
        raise ValueError(f"チャンクサイズは正の値を指定してください: {chunk_size}")


def hash_file(
    path: str | os.PathLike,
    algorithm: str = DEFAULT_ALGORITHM,
    chunk_size: int = CHUNK_SIZE,
) -> bytes:
    """ファイル全体をチャンク単位で読み込んでダイジェストを計算

    空ファイルは空入力のダイジェストになる。読み込みエラーは OSError のまま送出する。
    """
    _check_chunk_size(chunk_size)
    h = new_hasher(algorithm)
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            h.update(chunk)
    return h.digest()


class HashGrouper:
    """ダイジェスト -> パス一覧 の対応を蓄積する

    1回の走査で1つのインスタンスを使う。add() / fail() は単一のスレッドから
    呼び出すこと（並列ハッシュ時も結果の反映は呼び出し元スレッドが行う）。
    """

    def __init__(
        self,
        algorithm: str = DEFAULT_ALGORITHM,
        chunk_size: int = CHUNK_SIZE,
        on_warning: WarningCallback | None = None,
    ):
        new_hasher(algorithm)  # 未対応の名前はここで弾く
        _check_chunk_size(chunk_size)

        self.algorithm = algorithm.lower()
        self.chunk_size = chunk_size
        self.on_warning = on_warning
        self.files_hashed = 0
        self._groups: dict[bytes, list[FileEntry]] = {}
        self._finalized = False

    @property
    def unique_digests(self) -> int:
        return len(self._groups)

    def hash_entry(self, entry: FileEntry) -> bytes:
        """ワーカーからも呼べる純粋なハッシュ計算（状態は変更しない）"""
        return hash_file(entry.path, self.algorithm, self.chunk_size)

    def add(self, digest: bytes, entry: FileEntry) -> None:
        """発見順を保ったままグループに追加"""
        if self._finalized:
            raise RuntimeError("finalize() 後は追加できません")
        self._groups.setdefault(digest, []).append(entry)
        self.files_hashed += 1

    def fail(self, entry: FileEntry, err: OSError) -> None:
        """読み込みに失敗したファイルを警告として記録（グループには入れない）"""
        warning = ScanWarning.from_oserror(entry.path, err)
        logger.warning("%s: %s (%s)", warning.kind.value, warning.path, warning.message)
        if self.on_warning is not None:
            self.on_warning(warning)

    def process(self, entry: FileEntry) -> bytes | None:
        """1ファイルをハッシュしてグループに反映"""
        try:
            digest = self.hash_entry(entry)
        except OSError as e:
            self.fail(entry, e)
            return None
        self.add(digest, entry)
        return digest

    def finalize(self) -> list[DuplicateGroup]:
        """2件以上のグループのみを返す（以降は追加不可）"""
        self._finalized = True
        return [
            DuplicateGroup(
                digest=digest,
                paths=tuple(entry.path for entry in entries),
                size=entries[0].size,
            )
            for digest, entries in self._groups.items()
            if len(entries) >= 2
        ]
