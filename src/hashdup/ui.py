"""UI/結果表示処理"""

import json
import os
import sys
from typing import Any

import enlighten

from .constants import (
    COLOR_DIM,
    COLOR_ERROR,
    COLOR_RESET,
    COLOR_SUCCESS,
    COLOR_TITLE,
    COLOR_WARNING,
    EXIT_DUP_FOUND,
    EXIT_FATAL,
    EXIT_INTERRUPTED,
    EXIT_NO_DUP,
    shutdown_event,
)
from .core import find_duplicates
from .models import DuplicateGroup, DuplicateReport, ScanError, ScanWarning
from .text import format_size, get_term_width, pad_to_width, truncate_to_width


def _display_path(path: str, root: str | None) -> str:
    """ルートからの相対パスで表示（ルート外を指す場合はそのまま）"""
    if root is None:
        return path
    rel = os.path.relpath(path, root)
    return path if rel.startswith("..") else rel


def print_dup_group(group: DuplicateGroup, index: int, total: int, root: str | None = None) -> None:
    """重複グループを表示"""
    print(f"\n{'─' * get_term_width()}")
    size_text = format_size(group.size) if group.size is not None else "?"
    print(
        f"[{index:3d}/{total:3d}] {COLOR_TITLE}🔑 {group.hexdigest[:16]}{COLOR_RESET}"
        f" {COLOR_DIM}📐 {size_text} × {len(group.paths)}{COLOR_RESET}"
    )
    for i, path in enumerate(group.paths, 1):
        print(f"{i:>5} -> `{_display_path(path, root)}`")


def print_warnings(warnings: list[ScanWarning]) -> None:
    """警告をレポートとは別に標準エラーへ出力"""
    if not warnings:
        return
    print(f"\n{COLOR_WARNING}⚠️  {len(warnings)} 件のパスを処理できませんでした{COLOR_RESET}", file=sys.stderr)
    for warning in warnings:
        print(
            f"  {COLOR_DIM}[{warning.kind.value}]{COLOR_RESET} {warning.path}: {warning.message}",
            file=sys.stderr,
        )


def print_summary(report: DuplicateReport) -> None:
    """集計結果を表示"""
    col_width = 20
    print(f"\n{'=' * 50}")
    print(f"{pad_to_width('ハッシュ済み', col_width)} {report.files_hashed:>10,d} 件")
    print(f"{pad_to_width('ユニーク', col_width)} {report.unique_digests:>10,d} 件")
    print(f"{pad_to_width('重複グループ', col_width)} {len(report.groups):>10,d} 件")
    print(f"{pad_to_width('重複ファイル', col_width)} {report.duplicate_file_count:>10,d} 件")
    print(f"{pad_to_width('削減可能', col_width)} {format_size(report.wasted_bytes):>10}")
    print("=" * 50)


def print_report(report: DuplicateReport, root: str | None = None) -> None:
    """テキスト形式でレポートを表示"""
    if not report.groups:
        print(f"\n{COLOR_DIM}✨ 重複ファイルは見つかりませんでした ({report.algorithm}){COLOR_RESET}")
    else:
        for i, group in enumerate(report.groups, 1):
            print_dup_group(group, i, len(report.groups), root)
    print_summary(report)


def print_report_json(report: DuplicateReport) -> None:
    """JSON 形式でレポートを出力"""
    print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))


def scan_with_progress(target_dir_path: str, manager: enlighten.Manager, **scan_options: Any) -> DuplicateReport:
    """プログレス表示付きで走査"""
    tool_status = manager.status_bar(
        status_format="🔍 hashdup:{fill}{status}{fill}",
        color="bold_bright_white_on_lightslategray",
        justify=enlighten.Justify.CENTER,
        status="重複ファイルを調べています...",
    )
    dir_status = manager.status_bar(
        status_format=f"📂 対象: {truncate_to_width(target_dir_path, get_term_width() - 12, keep_tail=True)}",
        justify=enlighten.Justify.LEFT,
    )
    hash_counter = manager.counter(desc="🔢 ハッシュ", unit="件")
    warning_counter = manager.counter(
        desc="⚠️  警告",
        unit="件",
        counter_format="{desc}{desc_pad}{count:,d} {unit}",
    )

    def on_progress(n: int) -> None:
        hash_counter.update(n)

    def on_warning(_: ScanWarning) -> None:
        warning_counter.update()

    try:
        report = find_duplicates(
            target_dir_path,
            progress_callback=on_progress,
            on_warning=on_warning,
            **scan_options,
        )
        if report.groups:
            tool_status.update(status=f"🎯 {len(report.groups)} 件の重複グループ")
        else:
            tool_status.update(status="✨ 重複ファイルは見つかりませんでした")
        return report
    finally:
        hash_counter.close()
        warning_counter.close()
        dir_status.close()
        tool_status.close()


def run_scan(target_dir_path: str, as_json: bool = False, **scan_options: Any) -> int:
    """走査してレポートを表示し、終了コードを返す"""
    # JSON 出力時は標準出力を汚さないようプログレス表示を止める
    manager = enlighten.get_manager(stream=sys.stderr, enabled=not as_json)

    try:
        report = scan_with_progress(target_dir_path, manager, **scan_options)
    except (ScanError, ValueError) as e:
        print(f"{COLOR_ERROR}❌ {e}{COLOR_RESET}", file=sys.stderr)
        return EXIT_FATAL
    except KeyboardInterrupt:
        shutdown_event.set()
        print(f"\n{COLOR_WARNING}⏹️  中断しました{COLOR_RESET}", file=sys.stderr)
        return EXIT_INTERRUPTED
    finally:
        manager.stop()

    if report.interrupted:
        print(f"\n{COLOR_WARNING}⏹️  中断しました{COLOR_RESET}", file=sys.stderr)
        return EXIT_INTERRUPTED

    if as_json:
        print_report_json(report)
    else:
        print_report(report, target_dir_path)
        if report.groups:
            print(f"{COLOR_SUCCESS}🎉 完了: {len(report.groups)} 件の重複グループが見つかりました{COLOR_RESET}")
    print_warnings(report.warnings)

    return EXIT_DUP_FOUND if report.groups else EXIT_NO_DUP
