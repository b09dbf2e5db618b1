"""定数・型定義・グローバル状態"""

import threading

# 読み込みチャンクサイズ (64KB)
CHUNK_SIZE = 64 * 1024

# デフォルトのハッシュアルゴリズム（衝突耐性を優先）
DEFAULT_ALGORITHM = "sha256"

# 並列ハッシュ時に同時に投入しておくタスク数（ワーカー数に対する倍率）
QUEUE_FACTOR = 4

# ANSI256 カラー（黒背景に合う落ち着いた色）
COLOR_TITLE = "\033[38;5;67m"  # スチールブルー
COLOR_SUCCESS = "\033[38;5;72m"  # シアングリーン
COLOR_WARNING = "\033[38;5;180m"  # ライトサーモン
COLOR_ERROR = "\033[38;5;167m"  # インディアンレッド
COLOR_DIM = "\033[38;5;242m"  # ミディアムグレー
COLOR_RESET = "\033[0m"

# 終了コード
EXIT_NO_DUP = 0
EXIT_DUP_FOUND = 1
EXIT_FATAL = 2
EXIT_INTERRUPTED = 130

# グローバル停止フラグ
shutdown_event = threading.Event()
