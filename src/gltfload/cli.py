"""Command line interface for gltfload."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import yaml

from .api import load, summarize, verify
from .config import LoadOptions
from .errors import GltfError
from .logging import configure_logging, section, step
from .reporting import (
    JsonLinesReporter,
    PlainReporter,
    RichReporter,
    SilentReporter,
    get_reporter,
    set_reporter,
    set_verbosity,
    task,
)


def _load(args: argparse.Namespace):
    with task("load", f"Load {args.file.name}"):
        return load(args.file, options=args.options)


def _inspect_cmd(args: argparse.Namespace) -> int:
    asset = _load(args)
    summary = summarize(asset)
    if args.format == "json":
        print(json.dumps(summary, indent=2, sort_keys=True))
    elif args.format == "yaml":
        print(yaml.safe_dump(summary, sort_keys=True), end="")
    else:
        with section("Asset"):
            get_reporter().status(
                "Asset summary: "
                + " ".join(f"{k}={v}" for k, v in sorted(summary.items()))
            )
    return 0


def _accessor_cmd(args: argparse.Namespace) -> int:
    asset = _load(args)
    if not 0 <= args.index < len(asset.accessors):
        get_reporter().error(
            f"Accessor {args.index} out of range (asset has {len(asset.accessors)})"
        )
        return 2
    accessor = asset.accessors[args.index]
    step(
        f"decoding accessor {args.index} ({accessor.type}/{accessor.componentType} x{accessor.count})"
    )
    if args.packed:
        print(accessor.get(packed=True).hex())
    else:
        elements = [
            list(e) if isinstance(e, tuple) else e for e in accessor.get()
        ]
        print(json.dumps(elements))
    get_reporter().status(
        f"Accessor summary: index={args.index} count={accessor.count} type={accessor.type}"
    )
    return 0


def _image_cmd(args: argparse.Namespace) -> int:
    asset = _load(args)
    if not 0 <= args.index < len(asset.images):
        get_reporter().error(
            f"Image {args.index} out of range (asset has {len(asset.images)})"
        )
        return 2
    data = asset.images[args.index].get()
    args.output.write_bytes(data)
    get_reporter().status(
        f"Image summary: index={args.index} bytes={len(data)} output={args.output.name}"
    )
    return 0


def _verify_cmd(args: argparse.Namespace) -> int:
    asset = _load(args)
    with task("verify", "Verify binary data"):
        issues = verify(asset)
    rep = get_reporter()
    for issue in issues:
        rep.warning(issue)
    rep.status(f"Verify summary: issues={len(issues)}")
    return 1 if issues else 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="gltfload", description="Inspect and decode glTF 2.0 assets"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=["plain", "rich", "json", "silent"],
        default="plain",
        help="Select reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    i = sub.add_parser("inspect", help="Summarize an asset")
    i.add_argument("file", type=Path)
    i.add_argument(
        "--format",
        choices=["text", "json", "yaml"],
        default="text",
        help="Output format for the summary",
    )
    i.set_defaults(func=_inspect_cmd)

    a = sub.add_parser("accessor", help="Decode one accessor")
    a.add_argument("file", type=Path)
    a.add_argument("index", type=int)
    a.add_argument(
        "--packed",
        action="store_true",
        help="Print the raw element bytes as hex instead of decoded values",
    )
    a.set_defaults(func=_accessor_cmd)

    im = sub.add_parser("image", help="Extract the bytes of one image")
    im.add_argument("file", type=Path)
    im.add_argument("index", type=int)
    im.add_argument("output", type=Path)
    im.set_defaults(func=_image_cmd)

    v = sub.add_parser("verify", help="Decode every buffer, view, accessor and image")
    v.add_argument("file", type=Path)
    v.set_defaults(func=_verify_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    requested = args.reporter
    if requested == "json":
        set_reporter(JsonLinesReporter())
    elif requested == "silent":
        set_reporter(SilentReporter())
    elif requested == "rich" and sys.stderr.isatty():
        set_reporter(RichReporter())
    else:
        # rich falls back to plain without a TTY
        set_reporter(PlainReporter())
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    try:
        args.options = LoadOptions.from_env()
        return args.func(args)
    except (GltfError, ValueError) as e:
        get_reporter().error(str(e))
        return 2
    finally:
        get_reporter().flush()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
