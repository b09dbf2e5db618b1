#!/usr/bin/env python3

"""
ファイル内容のハッシュ値を比較して重複ファイルを探すツールです。

Usage:
  app.py [-a ALGO] [-c SIZE] [-j JOBS] [--no-recurse] [--skip-hidden] [--follow-symlinks] [--size-prefilter] [--json] [-D] PATH

Options:
  PATH                  チェック対象のフォルダ
  -a --algorithm ALGO   ハッシュアルゴリズム (sha256, sha1, blake2b, xxh128 など) [default: sha256]
  -c --chunk-size SIZE  読み込みチャンクサイズ（バイト） [default: 65536]
  -j --jobs JOBS        ハッシュ計算の並列数 [default: 1]
  --no-recurse          サブフォルダを辿らない
  --skip-hidden         ドットで始まるファイル・フォルダを除外
  --follow-symlinks     フォルダへのシンボリックリンクを辿る（循環は検出して除外）
  --size-prefilter      サイズが一致するファイルのみハッシュする
  --json                結果を JSON で出力
  -D                    デバッグモードで動作します
"""

import logging
import sys

from docopt import docopt

from hashdup import run_scan
from hashdup.constants import EXIT_FATAL


def main() -> None:
    assert __doc__ is not None
    args = docopt(__doc__)

    logging.basicConfig(
        level=logging.DEBUG if args["-D"] else logging.ERROR,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        chunk_size = int(args["--chunk-size"])
        num_workers = int(args["--jobs"])
    except ValueError as e:
        print(f"❌ 数値を指定してください: {e}", file=sys.stderr)
        sys.exit(EXIT_FATAL)

    exit_code = run_scan(
        args["PATH"],
        as_json=args["--json"],
        algorithm=args["--algorithm"],
        chunk_size=chunk_size,
        num_workers=num_workers,
        recursive=not args["--no-recurse"],
        include_hidden=not args["--skip-hidden"],
        follow_symlinks=args["--follow-symlinks"],
        size_prefilter=args["--size-prefilter"],
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
