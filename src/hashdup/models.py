"""データモデル・例外定義"""

import enum
from collections.abc import Callable
from dataclasses import dataclass, field


class ScanError(Exception):
    """走査を継続できない致命的なエラー"""

    def __init__(self, path: str, message: str):
        super().__init__(f"{message}: {path}")
        self.path = path


class PathNotFoundError(ScanError):
    """ルートパスが存在しない"""

    def __init__(self, path: str):
        super().__init__(path, "パスが存在しません")


class NotDirectoryError(ScanError):
    """ルートパスがディレクトリではない"""

    def __init__(self, path: str):
        super().__init__(path, "ディレクトリではありません")


class RootUnreadableError(ScanError):
    """ルートディレクトリを読み込めない"""

    def __init__(self, path: str, reason: str = ""):
        message = "ディレクトリを読み込めません"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(path, message)


class WarningKind(enum.Enum):
    """継続可能なエラーの種別"""

    PERMISSION_DENIED = "permission_denied"
    VANISHED = "vanished"
    BROKEN_SYMLINK = "broken_symlink"
    SYMLINK_LOOP = "symlink_loop"
    IO_ERROR = "io_error"

    @classmethod
    def from_oserror(cls, err: OSError) -> "WarningKind":
        """OSError の種類から警告種別を決める"""
        if isinstance(err, PermissionError):
            return cls.PERMISSION_DENIED
        if isinstance(err, FileNotFoundError):
            return cls.VANISHED
        return cls.IO_ERROR


@dataclass(frozen=True)
class ScanWarning:
    """対象から除外したパスと、その理由"""

    path: str
    kind: WarningKind
    message: str

    @classmethod
    def from_oserror(cls, path: str, err: OSError) -> "ScanWarning":
        return cls(path=path, kind=WarningKind.from_oserror(err), message=err.strerror or str(err))


WarningCallback = Callable[[ScanWarning], None]


@dataclass(frozen=True)
class FileEntry:
    """走査で見つかった通常ファイル"""

    path: str
    size: int | None = None  # サイズによる事前フィルタ用（任意）


@dataclass(frozen=True)
class DuplicateGroup:
    """同一内容のファイル群（2件以上）"""

    digest: bytes
    paths: tuple[str, ...]
    size: int | None = None

    @property
    def hexdigest(self) -> str:
        return self.digest.hex()

    @property
    def wasted_bytes(self) -> int:
        """重複によって余分に使われているバイト数（サイズ不明なら 0）"""
        if self.size is None:
            return 0
        return self.size * (len(self.paths) - 1)


@dataclass
class DuplicateReport:
    """1回の走査結果

    ハッシュ値の一致を内容の一致とみなすため、衝突が起きた場合は
    異なる内容のファイルが同じグループに入る可能性がある（既知の制約）。
    """

    algorithm: str
    groups: list[DuplicateGroup] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)
    files_hashed: int = 0
    unique_digests: int = 0
    interrupted: bool = False

    @property
    def duplicate_file_count(self) -> int:
        """他のファイルとハッシュ値を共有するファイルの総数"""
        return sum(len(group.paths) for group in self.groups)

    @property
    def wasted_bytes(self) -> int:
        return sum(group.wasted_bytes for group in self.groups)

    def to_dict(self) -> dict:
        """JSON 出力用の辞書に変換"""
        return {
            "algorithm": self.algorithm,
            "files_hashed": self.files_hashed,
            "unique_digests": self.unique_digests,
            "interrupted": self.interrupted,
            "groups": [
                {"digest": group.hexdigest, "size": group.size, "paths": list(group.paths)}
                for group in self.groups
            ],
            "warnings": [
                {"path": warning.path, "kind": warning.kind.value, "message": warning.message}
                for warning in self.warnings
            ],
        }
