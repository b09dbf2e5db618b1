"""テキスト表示ユーティリティ（全角文字対応）"""

import re
import shutil
import unicodedata

_ANSI_ESCAPE = re.compile(r"\033\[[0-9;]*m")

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def get_term_width() -> int:
    """ターミナルの幅を取得"""
    return shutil.get_terminal_size().columns


def _char_width(char: str) -> int:
    return 2 if unicodedata.east_asian_width(char) in ("F", "W", "A") else 1


def get_visible_width(text: str) -> int:
    """ANSIエスケープシーケンスを除いた表示上の幅を返す（全角文字は2）"""
    return sum(_char_width(char) for char in _ANSI_ESCAPE.sub("", text))


def pad_to_width(text: str, width: int) -> str:
    """文字列を指定した表示幅にパディング（全角文字対応）"""
    padding = width - get_visible_width(text)
    if padding <= 0:
        return text
    return text + " " * padding


def truncate_to_width(text: str, max_width: int, keep_tail: bool = False) -> str:
    """文字列を指定した表示幅に収まるように省略

    keep_tail が True の場合は先頭を削る（パスの末尾を残したい場合用）。
    """
    if get_visible_width(text) <= max_width:
        return text

    result = text
    while result and get_visible_width(result) > max_width - 3:  # "..." の分
        result = result[1:] if keep_tail else result[:-1]
    return "..." + result if keep_tail else result + "..."


def format_size(num_bytes: int) -> str:
    """バイト数を読みやすい単位に変換"""
    size = float(num_bytes)
    for unit in _SIZE_UNITS[:-1]:
        if abs(size) < 1024:
            return f"{int(size)} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} {_SIZE_UNITS[-1]}"
