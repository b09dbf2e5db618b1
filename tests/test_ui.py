"""ui.py のユニットテスト"""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

from hashdup.constants import EXIT_DUP_FOUND, EXIT_FATAL, EXIT_INTERRUPTED, EXIT_NO_DUP, shutdown_event
from hashdup.models import DuplicateGroup, DuplicateReport, ScanWarning, WarningKind
from hashdup.ui import (
    print_dup_group,
    print_report,
    print_report_json,
    print_summary,
    print_warnings,
    run_scan,
    scan_with_progress,
)


def _make_tree(root: Path, files: dict[str, bytes]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)


def _group(*paths, size=5):
    return DuplicateGroup(digest=bytes(range(32)), paths=tuple(paths), size=size)


class TestPrintDupGroup:
    """print_dup_group のテスト"""

    def test_print_group(self, capsys):
        """グループの表示"""
        print_dup_group(_group("/data/a.txt", "/data/sub/b.txt"), 1, 3, "/data")
        out = capsys.readouterr().out
        assert "[  1/  3]" in out
        assert "000102030405" in out
        assert "    1 -> `a.txt`" in out
        assert "    2 -> `sub/b.txt`" in out

    def test_without_root(self, capsys):
        """ルート未指定ならフルパス"""
        print_dup_group(_group("/data/a.txt", "/data/b.txt"), 1, 1)
        assert "`/data/a.txt`" in capsys.readouterr().out

    def test_unknown_size(self, capsys):
        print_dup_group(_group("/a", "/b", size=None), 1, 1)
        assert "? × 2" in capsys.readouterr().out


class TestPrintWarnings:
    """print_warnings のテスト"""

    def test_to_stderr(self, capsys):
        """警告はレポートとは別に標準エラーへ"""
        print_warnings([ScanWarning("/data/locked", WarningKind.PERMISSION_DENIED, "Permission denied")])
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "1 件" in captured.err
        assert "[permission_denied]" in captured.err
        assert "/data/locked" in captured.err

    def test_no_warnings(self, capsys):
        print_warnings([])
        captured = capsys.readouterr()
        assert captured.err == ""


class TestPrintReport:
    """print_report / print_summary / print_report_json のテスト"""

    def test_no_duplicates(self, capsys):
        print_report(DuplicateReport(algorithm="sha256", files_hashed=3, unique_digests=3))
        out = capsys.readouterr().out
        assert "重複ファイルは見つかりませんでした" in out
        assert "sha256" in out

    def test_with_groups(self, capsys):
        report = DuplicateReport(
            algorithm="sha256",
            groups=[_group("/r/a", "/r/b"), _group("/r/c", "/r/d", "/r/e")],
            files_hashed=6,
            unique_digests=3,
        )
        print_report(report, "/r")
        out = capsys.readouterr().out
        assert "[  1/  2]" in out
        assert "[  2/  2]" in out
        assert "    3 -> `e`" in out

    def test_summary(self, capsys):
        report = DuplicateReport(algorithm="sha256", groups=[_group("/a", "/b", size=2048)], files_hashed=1234)
        print_summary(report)
        out = capsys.readouterr().out
        assert "1,234" in out
        assert "2.0 KB" in out
        for label in ("ハッシュ済み", "ユニーク", "重複グループ", "重複ファイル", "削減可能"):
            assert label in out

    def test_json(self, capsys):
        report = DuplicateReport(algorithm="xxh128", groups=[_group("/r/写真.jpg", "/r/b")], files_hashed=2)
        print_report_json(report)
        data = json.loads(capsys.readouterr().out)
        assert data["algorithm"] == "xxh128"
        assert data["groups"][0]["paths"] == ["/r/写真.jpg", "/r/b"]
        assert set(data) == {"algorithm", "files_hashed", "unique_digests", "interrupted", "groups", "warnings"}
        assert data["interrupted"] is False


class TestScanWithProgress:
    """scan_with_progress のテスト"""

    def test_counters_updated(self, tmp_path):
        """進捗と警告がカウンタに反映される"""
        _make_tree(tmp_path, {"a": b"1", "b": b"1"})
        manager = MagicMock()

        report = scan_with_progress(str(tmp_path), manager)

        assert len(report.groups) == 1
        hash_counter = manager.counter.return_value
        assert hash_counter.update.call_count == 2
        assert hash_counter.close.called
        assert manager.status_bar.return_value.close.called

    def test_bars_closed_on_error(self, tmp_path):
        manager = MagicMock()
        with patch("hashdup.ui.find_duplicates", side_effect=RuntimeError("boom")):
            try:
                scan_with_progress(str(tmp_path), manager)
            except RuntimeError:
                pass
        assert manager.counter.return_value.close.called


class TestRunScan:
    """run_scan のテスト"""

    def test_duplicates_found(self, tmp_path, capsys):
        _make_tree(tmp_path, {"a.txt": b"hello", "b.txt": b"hello", "c.txt": b"world"})

        assert run_scan(str(tmp_path)) == EXIT_DUP_FOUND

        out = capsys.readouterr().out
        assert "`a.txt`" in out
        assert "`b.txt`" in out
        assert "`c.txt`" not in out

    def test_no_duplicates(self, tmp_path, capsys):
        _make_tree(tmp_path, {"a.txt": b"hello", "c.txt": b"world"})
        assert run_scan(str(tmp_path)) == EXIT_NO_DUP

    def test_json_output(self, tmp_path, capsys):
        """JSON 出力は標準出力にそのままパースできる形で出る"""
        _make_tree(tmp_path, {"a.txt": b"hello", "b.txt": b"hello"})

        assert run_scan(str(tmp_path), as_json=True, num_workers=2) == EXIT_DUP_FOUND

        data = json.loads(capsys.readouterr().out)
        assert len(data["groups"]) == 1
        assert sorted(Path(p).name for p in data["groups"][0]["paths"]) == ["a.txt", "b.txt"]

    def test_missing_path(self, tmp_path, capsys):
        """存在しないパスは致命的エラー"""
        assert run_scan(str(tmp_path / "missing")) == EXIT_FATAL
        captured = capsys.readouterr()
        assert "パスが存在しません" in captured.err
        assert captured.out == ""

    def test_invalid_algorithm(self, tmp_path, capsys):
        assert run_scan(str(tmp_path), algorithm="nope") == EXIT_FATAL
        assert "nope" in capsys.readouterr().err

    def test_keyboard_interrupt(self, tmp_path, capsys):
        """Ctrl-C で中断"""
        try:
            with patch("hashdup.ui.find_duplicates", side_effect=KeyboardInterrupt):
                assert run_scan(str(tmp_path)) == EXIT_INTERRUPTED
            assert shutdown_event.is_set()
        finally:
            shutdown_event.clear()
        assert "中断しました" in capsys.readouterr().err

    def test_interrupted_report(self, tmp_path, capsys):
        """中断されたレポートは表示しない"""
        report = DuplicateReport(algorithm="sha256", groups=[_group("/a", "/b")], interrupted=True)
        with patch("hashdup.ui.find_duplicates", return_value=report):
            assert run_scan(str(tmp_path)) == EXIT_INTERRUPTED
        assert "`/a`" not in capsys.readouterr().out

    def test_options_forwarded(self, tmp_path):
        report = DuplicateReport(algorithm="md5")
        with patch("hashdup.ui.find_duplicates", return_value=report) as mock_find:
            run_scan(str(tmp_path), algorithm="md5", recursive=False)
        kwargs = mock_find.call_args.kwargs
        assert kwargs["algorithm"] == "md5"
        assert kwargs["recursive"] is False
