from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .document import DocumentModel
from .formats import FORMATS, detect_format, format_for_path, get_format
from .operations import has_path
from .paths import parse_path
from .position import get_path_at_position
from .settings import Settings, configure_logging, load_settings

logger = logging.getLogger(__name__)


def _read(path: Path) -> str:
    with path.open("r", encoding="utf-8", newline="") as fh:
        return fh.read()


def _write(path: Path, text: str) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8", newline="") as fh:
        fh.write(text)
    tmp.replace(path)


def _resolve_format(args: argparse.Namespace, text: str) -> str:
    if args.format:
        return args.format
    return format_for_path(args.file) or detect_format(text)


def _load(args: argparse.Namespace) -> DocumentModel:
    text = _read(args.file)
    fmt = _resolve_format(args, text)
    logger.info("reading %s as %s", args.file, fmt)
    return DocumentModel.deserialize(text, fmt, settings=args.settings)


def _print_text(text: str) -> None:
    print(text.rstrip("\n"))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def detect_cmd(args: argparse.Namespace) -> int:
    print(detect_format(_read(args.file)))
    return 0


def get_cmd(args: argparse.Namespace) -> int:
    doc = _load(args)
    path = parse_path(args.path)
    if not has_path(doc.data, path):
        return 1
    print(json.dumps(doc.get_value(path), ensure_ascii=False))
    return 0


def set_cmd(args: argparse.Namespace) -> int:
    if args.raw:
        value = args.value
    else:
        try:
            value = json.loads(args.value)
        except ValueError as exc:
            print(f"VALUE is not JSON ({exc}); use --raw for plain strings", file=sys.stderr)
            return 2
    doc = _load(args)
    doc.set_value(args.path, value)
    _write(args.file, doc.serialize())
    return 0


def delete_cmd(args: argparse.Namespace) -> int:
    doc = _load(args)
    path = parse_path(args.path)
    if not has_path(doc.data, path):
        return 1
    doc.delete_value(path)
    _write(args.file, doc.serialize())
    return 0


def convert_cmd(args: argparse.Namespace) -> int:
    doc = _load(args)
    _print_text(get_format(args.to, args.settings).dump(doc.data))
    return 0


def locate_cmd(args: argparse.Namespace) -> int:
    text = _read(args.file)
    found = get_path_at_position(text, args.line, args.column, _resolve_format(args, text))
    if found is None:
        return 1
    print(found)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyseam", description="Edit JSON, JSONC and YAML files without losing comments."
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (repeatable)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_file(p: argparse.ArgumentParser) -> None:
        p.add_argument("file", type=Path)
        p.add_argument("--format", choices=FORMATS, default=None, help="Skip format detection")

    p_detect = subparsers.add_parser("detect", help="Print the detected format of FILE.")
    p_detect.add_argument("file", type=Path)
    p_detect.set_defaults(func=detect_cmd)

    p_get = subparsers.add_parser("get", help="Print the value at PATH as JSON.")
    add_file(p_get)
    p_get.add_argument("path")
    p_get.set_defaults(func=get_cmd)

    p_set = subparsers.add_parser("set", help="Set PATH to VALUE, keeping comments.")
    add_file(p_set)
    p_set.add_argument("path")
    p_set.add_argument("value")
    p_set.add_argument("--raw", action="store_true", help="Store VALUE as a plain string")
    p_set.set_defaults(func=set_cmd)

    p_delete = subparsers.add_parser("delete", help="Remove PATH, keeping comments.")
    add_file(p_delete)
    p_delete.add_argument("path")
    p_delete.set_defaults(func=delete_cmd)

    p_convert = subparsers.add_parser("convert", help="Print FILE serialized in another format.")
    add_file(p_convert)
    p_convert.add_argument("--to", choices=FORMATS, required=True)
    p_convert.set_defaults(func=convert_cmd)

    p_locate = subparsers.add_parser("locate", help="Print the path at LINE and COL (1-based).")
    add_file(p_locate)
    p_locate.add_argument("line", type=int)
    p_locate.add_argument("column", type=int)
    p_locate.set_defaults(func=locate_cmd)

    return parser


def _log_level(verbose: int, settings: Settings) -> str:
    if verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    return settings.log_level


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.settings = load_settings()
    except ValueError as exc:
        print(f"invalid settings: {exc}", file=sys.stderr)
        return 2
    configure_logging(_log_level(args.verbose, args.settings))
    try:
        return int(args.func(args))
    except OSError as exc:
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
