from __future__ import annotations

import io
import os
import json
import subprocess
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from rarscan.cli import cmd_info, cmd_list, cmd_scan, main
from rarscan.reader import ArchiveReader
from rarscan.errors import BadSignatureError

from test_parser import build_archive, end_block, file_block


def _sample_archive() -> bytes:
    return build_archive(
        file_block(b"docs", attr=0x10, unp_size=0, pack_size=0),
        file_block(b"docs/readme.txt", unp_size=1200, pack_size=300),
        file_block(b"notes.md", unp_size=200, pack_size=100),
        end_block(),
    )


def _capture(func, *args, **kwargs):
    buf = io.StringIO()
    with redirect_stdout(buf):
        result = func(*args, **kwargs)
    return result, buf.getvalue()


class ReaderTests(unittest.TestCase):
    def test_reader_lists_entries(self):
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "sample.rar"
            p.write_bytes(_sample_archive())
            with ArchiveReader(str(p)) as r:
                self.assertEqual(r.fmt, "rar4")
                self.assertEqual(r.size, p.stat().st_size)
                self.assertEqual([e.name for e in r.list()], ["docs", "docs/readme.txt", "notes.md"])
                self.assertEqual([e.name for e in r.directories()], ["docs"])
                self.assertEqual(len(r.files()), 2)
            self.assertIsNone(r.data)

    def test_reader_propagates_format_errors(self):
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "bogus.rar"
            p.write_bytes(b"not an archive at all")
            with self.assertRaises(BadSignatureError):
                with ArchiveReader(str(p)):
                    pass


class CommandTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        self.archive = self.root / "sample.rar"
        self.archive.write_bytes(_sample_archive())

    def test_list_text(self):
        ok, out = _capture(cmd_list, str(self.archive))
        self.assertTrue(ok)
        self.assertEqual(
            out.splitlines(),
            [
                "dir\t0\t0\tdocs",
                "file\t1200\t300\tdocs/readme.txt",
                "file\t200\t100\tnotes.md",
            ],
        )

    def test_list_json(self):
        _, out = _capture(cmd_list, str(self.archive), as_json=True)
        data = json.loads(out)
        self.assertEqual([d["name"] for d in data], ["docs", "docs/readme.txt", "notes.md"])
        self.assertTrue(data[0]["is_directory"])
        self.assertEqual(data[1]["compressed_size"], 300)

    def test_info(self):
        _, out = _capture(cmd_info, str(self.archive))
        self.assertIn("Format: rar4", out)
        self.assertIn("Entries: 3", out)
        self.assertIn("Files: 2", out)
        self.assertIn("Directories: 1", out)
        self.assertIn("Uncompressed: 1400", out)
        self.assertIn("Compressed: 400", out)
        self.assertIn("Ratio: 28.6%", out)

    def test_scan_reports_failures(self):
        sub = self.root / "nested"
        sub.mkdir()
        (sub / "deep.cbr").write_bytes(_sample_archive())
        (self.root / "broken.rar").write_bytes(b"garbage")
        (self.root / "ignored.txt").write_bytes(_sample_archive())

        ok, out = _capture(cmd_scan, [str(self.root)], jobs=2)
        self.assertFalse(ok)
        self.assertIn("Summary: ok=1 failed=1", out)
        self.assertNotIn("deep.cbr", out)

        ok, out = _capture(cmd_scan, [str(self.root)], recursive=True, as_json=True)
        self.assertFalse(ok)
        summary = json.loads(out)
        self.assertEqual(summary["ok"], 2)
        self.assertEqual(summary["failed"], 1)
        by_name = {Path(r["path"]).name: r for r in summary["results"]}
        self.assertEqual(set(by_name), {"sample.rar", "broken.rar", "deep.cbr"})
        self.assertEqual(by_name["broken.rar"]["status"], "skip")
        self.assertEqual(by_name["deep.cbr"]["files"], 2)

    def test_scan_truncated_archive(self):
        truncated = build_archive(
            file_block(b"a.txt"),
            file_block(b"b.txt", name_size=400, payload=b""),
        )
        p = self.root / "cut.rar"
        p.write_bytes(truncated)
        ok, out = _capture(cmd_scan, [str(p)], as_json=True)
        self.assertFalse(ok)
        res = json.loads(out)["results"][0]
        self.assertEqual(res["status"], "fail")
        self.assertEqual(res["entries"], 1)

    def test_scan_no_archives(self):
        empty = self.root / "empty"
        empty.mkdir()
        with self.assertRaises(RuntimeError):
            cmd_scan([str(empty)])

    def test_main_maps_errors_to_exit_2(self):
        bogus = self.root / "bogus.rar"
        bogus.write_bytes(b"PK\x03\x04")
        empty = self.root / "empty"
        empty.mkdir()
        cases = {
            "missing file": ["list", str(self.root / "missing.rar")],
            "bad signature": ["info", str(bogus)],
            "unknown codec": ["list", "--encoding", "no-such-codec", str(self.archive)],
            "no archives": ["scan", str(empty)],
        }
        for label, argv in cases.items():
            with self.subTest(case=label):
                err = io.StringIO()
                with redirect_stderr(err), redirect_stdout(io.StringIO()):
                    with self.assertRaises(SystemExit) as cm:
                        main(argv)
                self.assertEqual(cm.exception.code, 2)
                self.assertTrue(err.getvalue().startswith("Error: "))


class CLIIntegrationTests(unittest.TestCase):
    def run_cli(self, args, *, expect: int | None = 0):
        cmd = [sys.executable, "-m", "rarscan.cli"] + list(args)
        env = os.environ.copy()
        repo_root = Path(__file__).resolve().parent
        existing = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = str(repo_root) if not existing else f"{repo_root}{os.pathsep}{existing}"
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=env,
        )
        if expect is not None and proc.returncode != expect:
            raise AssertionError(
                f"CLI exited {proc.returncode}, expected {expect}\nCommand: {' '.join(cmd)}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}"
            )
        return proc

    def test_list_and_errors(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            archive = root / "sample.rar"
            archive.write_bytes(_sample_archive())

            proc = self.run_cli(["list", str(archive)])
            self.assertIn("docs/readme.txt", proc.stdout)

            proc = self.run_cli(["list", str(root / "missing.rar")], expect=2)
            self.assertIn("Error:", proc.stderr)

            bogus = root / "bogus.rar"
            bogus.write_bytes(b"PK\x03\x04")
            proc = self.run_cli(["info", str(bogus)], expect=2)
            self.assertIn("Not a valid RAR 4.x file", proc.stderr)

            proc = self.run_cli(["list", "--encoding", "no-such-codec", str(archive)], expect=2)
            self.assertIn("Error:", proc.stderr)

    def test_scan_exit_codes(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.rar").write_bytes(_sample_archive())
            proc = self.run_cli(["scan", str(root)])
            self.assertIn("Summary: ok=1 failed=0", proc.stdout)

            (root / "b.rar").write_bytes(b"junk")
            proc = self.run_cli(["scan", "--quiet", str(root)], expect=1)
            self.assertNotIn("OK ", proc.stdout)
            self.assertIn("Summary: ok=1 failed=1", proc.stdout)

            empty = root / "empty"
            empty.mkdir()
            proc = self.run_cli(["scan", str(empty)], expect=2)
            self.assertIn("No archives found", proc.stderr)


if __name__ == "__main__":
    unittest.main()
