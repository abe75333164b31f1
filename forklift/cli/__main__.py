from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from forklift.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from forklift.errors import ReadError, UnknownFieldError
from forklift.logging.init import log_summary, setup_logging
from forklift.services.orchestrator import ProcessingError, process_all, scan_source_files
from forklift.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (FORKLIFT_PROJECT_ROOT may override the configured project root)
- Load and validate the YAML config
- Import the given workbooks, or every workbook below the source directory
- Print a SUMMARY line and exit with 0 (all imported), 2 (rejections) or 1 (fatal)
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_REJECTED = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv. Failures only produce a warning."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except (OSError, UnicodeDecodeError) as e:  # pragma: no cover
        logging.getLogger("forklift").warning(f"failed to load {path}: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="forklift", description="Spreadsheet -> structured record importer")
    p.add_argument("paths", nargs="*", help="Workbooks to import (default: scan the source directory)")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config file (default: forklift.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print columns & first rows of each workbook then exit")
    return p.parse_args(argv)


def _inspect_data(cfg, paths: list[str]) -> int:
    from forklift.excel.reader import ExcelReader

    if not paths:
        print("inspect: no workbooks")
        return EXIT_SUCCESS_ALL
    reader = ExcelReader(cfg.reader)
    for path in paths:
        print(f"FILE: {path}")
        try:
            data = reader.read(path)
        except ReadError as e:
            print(f"  read_error: {e}")
            continue
        print(f"  columns={data.columns} records={len(data)}")
        for record in data.records[:3]:
            print(f"    line {record.line_number}: { {k: f.value for k, f in record.fields.items()} }")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    paths: list[str] | None = [Path(p).as_posix() for p in args.paths] or None
    if paths is None:
        directory = Path(cfg.scan_directory)
        if not directory.exists():
            logger.error(f"directory not found: {directory}")
            return EXIT_FATAL
        logger.info(f"Importing workbooks from: {directory}")

    if args.inspect_data:
        return _inspect_data(cfg, paths if paths is not None else scan_source_files(Path(cfg.scan_directory), cfg))

    logger.info(f"project_root={cfg.project_root}")
    try:
        result = process_all(cfg, paths=paths)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    except UnknownFieldError as e:
        logger.error(f"aborted: {e}")
        return EXIT_FATAL
    except Exception as e:
        # 保存やエラーログ書き込みの失敗など、ファイル単位で吸収できないもの
        logger.error(f"unexpected: {type(e).__name__}: {e}")
        return EXIT_FATAL

    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.rejected_files > 0:
        return EXIT_REJECTED
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
