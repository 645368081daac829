from __future__ import annotations

import os
import sys
import codecs
import argparse
import json as _json
import concurrent.futures as _fut

from typing import List, Iterable, Dict, Any

from rarscan.reader import ArchiveReader
from rarscan.constants import ARCHIVE_EXTENSIONS, DEFAULT_NAME_ENCODING
from rarscan.errors import RarscanError, BadSignatureError, TruncatedNameError


def _is_archive_name(fn: str) -> bool:
    return fn.lower().endswith(ARCHIVE_EXTENSIONS)


def _iter_archives(paths: Iterable[str], recursive: bool) -> Iterable[str]:
    """Yield archive file paths from a list of paths and/or directories.

    Args:
        paths: Paths to scan (files or directories).
        recursive: When True, traverse directories recursively.
    """
    for p in paths:
        if os.path.isdir(p):
            if recursive:
                for root, dirs, files in os.walk(p):
                    dirs.sort()
                    for fn in sorted(files):
                        if _is_archive_name(fn):
                            yield os.path.join(root, fn)
            else:
                try:
                    entries = sorted(os.listdir(p))
                except OSError:
                    continue
                for fn in entries:
                    if _is_archive_name(fn):
                        yield os.path.join(p, fn)
        else:
            # Explicit files are taken as given, whatever the extension
            yield p


def _ratio(compressed: int, uncompressed: int) -> str:
    if uncompressed <= 0:
        return "-"
    return f"{100.0 * compressed / uncompressed:.1f}%"


def _scan_one(path: str, encoding: str) -> Dict[str, Any]:
    """Index a single archive and summarize the outcome."""

    res: Dict[str, Any] = {"path": path, "status": "unknown", "entries": 0, "files": 0, "dirs": 0}
    try:
        with ArchiveReader(path, name_encoding=encoding) as r:
            entries = r.list()
    except BadSignatureError as exc:
        res["status"] = "skip"
        res["message"] = str(exc)
        return res
    except TruncatedNameError as exc:
        res["status"] = "fail"
        res["message"] = str(exc)
        res["entries"] = len(exc.entries)
        return res
    except (RarscanError, OSError) as exc:
        res["status"] = "error"
        res["message"] = str(exc)
        return res
    res["status"] = "ok"
    res["entries"] = len(entries)
    res["files"] = sum(1 for e in entries if not e.is_directory)
    res["dirs"] = sum(1 for e in entries if e.is_directory)
    res["uncompressed"] = sum(e.uncompressed_size for e in entries if not e.is_directory)
    res["compressed"] = sum(e.compressed_size for e in entries if not e.is_directory)
    return res


def cmd_list(archive: str, *, encoding: str = DEFAULT_NAME_ENCODING, as_json: bool = False) -> bool:
    """List archive entries.

    Args:
        archive: Path to a RAR 4.x archive.
        encoding: Codec used to decode stored file names.
        as_json: When True, print a JSON array instead of tab-separated lines.
    """
    with ArchiveReader(archive, name_encoding=encoding) as r:
        entries = r.list()
    if as_json:
        print(_json.dumps([e.to_dict() for e in entries]))
        return True
    for e in entries:
        k = "dir" if e.is_directory else "file"
        print(f"{k}\t{e.uncompressed_size}\t{e.compressed_size}\t{e.name}")
    return True


def cmd_info(archive: str, *, encoding: str = DEFAULT_NAME_ENCODING) -> bool:
    """Show archive information.

    Args:
        archive: Path to a RAR 4.x archive.
        encoding: Codec used to decode stored file names.
    """
    with ArchiveReader(archive, name_encoding=encoding) as r:
        files = r.files()
        unpacked = sum(e.uncompressed_size for e in files)
        packed = sum(e.compressed_size for e in files)
        print(f"Archive: {archive}")
        print(f"  Format: {r.fmt}")
        print(f"  Size: {r.size}")
        print(f"  Entries: {len(r.entries)}")
        print(f"    Files: {len(files)}")
        print(f"    Directories: {len(r.directories())}")
        print(f"  Uncompressed: {unpacked}")
        print(f"  Compressed: {packed}")
        print(f"  Ratio: {_ratio(packed, unpacked)}")
    return True


def cmd_scan(
    paths: List[str],
    *,
    recursive: bool = False,
    jobs: int = 4,
    encoding: str = DEFAULT_NAME_ENCODING,
    as_json: bool = False,
    quiet: bool = False,
) -> bool:
    """Index many archives in parallel.

    Args:
        paths: Archive paths and/or directories to scan.
        recursive: Recurse into directories when True.
        jobs: Maximum parallel workers.
        encoding: Codec used to decode stored file names.
        as_json: When True, print a JSON result summary.
        quiet: When True, print only the summary line.

    Returns:
        True when every archive was indexed, False otherwise.

    Raises:
        RuntimeError: If no archives matching the input paths were found.
    """
    paths = list(_iter_archives(paths, recursive))
    if not paths:
        raise RuntimeError("No archives found")

    results: List[Dict[str, Any]] = []
    with _fut.ThreadPoolExecutor(max_workers=max(1, int(jobs))) as ex:
        for r in ex.map(lambda p: _scan_one(p, encoding), paths):
            results.append(r)
    ok = sum(1 for r in results if r["status"] == "ok")
    failed = len(results) - ok
    if as_json:
        print(_json.dumps({"results": results, "ok": ok, "failed": failed}))
    else:
        for r in results:
            status = r["status"]
            if not quiet:
                print(f"{status.upper():8s} {r['path']} (entries={r['entries']} files={r['files']} dirs={r['dirs']})")
            if status != "ok" and r.get("message"):
                print("  " + r["message"])
        print(f"Summary: ok={ok} failed={failed}")
    return failed == 0


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="rarscan",
        description="List the contents of RAR 4.x archives without extracting them",
        epilog="Payloads are never decompressed; CRCs are not verified.",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_list = sub.add_parser("list", help="List archive contents")
    ap_list.add_argument("archive", help="Archive path")
    ap_list.add_argument("--encoding", default=DEFAULT_NAME_ENCODING, help=f"File name codec (default {DEFAULT_NAME_ENCODING})")
    ap_list.add_argument("--json", action="store_true", help="Emit entries as JSON")

    ap_info = sub.add_parser("info", help="Show archive information")
    ap_info.add_argument("archive", help="Archive path")
    ap_info.add_argument("--encoding", default=DEFAULT_NAME_ENCODING, help=f"File name codec (default {DEFAULT_NAME_ENCODING})")

    ap_scan = sub.add_parser("scan", help="Index many archives; report failures")
    ap_scan.add_argument("paths", nargs="+", help="Archive paths or directories")
    ap_scan.add_argument("--recursive", "-r", action="store_true", help="Recurse into directories")
    ap_scan.add_argument("--jobs", "-j", type=int, default=4, help="Parallel jobs (default 4)")
    ap_scan.add_argument("--encoding", default=DEFAULT_NAME_ENCODING, help=f"File name codec (default {DEFAULT_NAME_ENCODING})")
    ap_scan.add_argument("--json", action="store_true", help="Emit JSON result summary")
    ap_scan.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    args = ap.parse_args(argv)
    try:
        # Fail early on an unknown codec rather than on the first decoded name
        codecs.lookup(args.encoding)
        if args.cmd == "list":
            cmd_list(args.archive, encoding=args.encoding, as_json=args.json)
        elif args.cmd == "info":
            cmd_info(args.archive, encoding=args.encoding)
        elif args.cmd == "scan":
            success = cmd_scan(
                args.paths,
                recursive=args.recursive,
                jobs=args.jobs,
                encoding=args.encoding,
                as_json=args.json,
                quiet=args.quiet,
            )
            sys.exit(0 if success else 1)
        else:
            raise RuntimeError("Unknown command")
    except (RarscanError, OSError, LookupError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
