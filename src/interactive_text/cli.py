"""CLI interface for interactive-text.

Usage:
    # Detect elements (stdin: text, stdout: JSON spans)
    echo 'Ping @alice about #release' | \
        python -m interactive_text.cli detect --kinds mention,hashtag

    # Shorten long URLs and list the tagged runs
    echo 'Docs: https://example.com/a/very/long/path' | \
        python -m interactive_text.cli --url-max 20 render

    # Load kinds, colors and patterns from YAML
    python -m interactive_text.cli --config label.yaml detect < post.txt
"""

from __future__ import annotations
import argparse
import dataclasses
import json
import logging
import sys
from typing import Any

from .buffer import TaggedBuffer
from .config import build_config, load_config, load_from_yaml
from .label import InteractiveLabel
from .types import DetectedElement, ElementKind, Span

DEFAULT_KINDS = "mention,hashtag,url,email"


def _build_label(args: argparse.Namespace, text: str) -> InteractiveLabel:
    cfg = load_from_yaml(args.config) if args.config else load_config({})
    if not args.config or args.kinds != DEFAULT_KINDS:
        cfg["enabled_kinds"] = [ElementKind.parse(k) for k in args.kinds.split(",") if k.strip()]
    cfg["enabled_kinds"].extend(ElementKind.custom(p) for p in args.custom)
    if args.url_max is not None:
        cfg["url_maximum_length"] = args.url_max
    return InteractiveLabel(text, config=build_config(cfg), enabled_kinds=cfg["enabled_kinds"])


def _jsonable(value: Any) -> Any:
    if isinstance(value, ElementKind):
        return str(value)
    if isinstance(value, DetectedElement):
        out = {"kind": value.kind, "text": value.text}
        if value.trimmed is not None:
            out["trimmed"] = value.trimmed
        return out
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def _span_json(span: Span) -> dict[str, Any]:
    return {
        "offset": span.offset,
        "length": span.length,
        "kind": str(span.kind),
        "value": span.element.text,
        "display": span.element.display,
    }


def _runs_json(buffer: TaggedBuffer) -> list[dict[str, Any]]:
    return [
        {"start": s, "end": e, "attributes": {k: _jsonable(v) for k, v in attrs.items()}}
        for s, e, attrs in buffer.runs()
    ]


def cmd_detect(args: argparse.Namespace) -> None:
    """Detect interactive elements in text on stdin."""
    text = sys.stdin.read().rstrip("\n")
    label = _build_label(args, text)
    output = {
        "text": label.buffer.text,
        "spans": [_span_json(s) for s in label.spans],
    }
    json.dump(output, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_render(args: argparse.Namespace) -> None:
    """Dump the tagged buffer's attribute runs for text on stdin."""
    text = sys.stdin.read().rstrip("\n")
    label = _build_label(args, text)
    output = {"text": label.buffer.text, "runs": _runs_json(label.buffer)}
    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="interactive_text",
        description="Detect mentions, hashtags, URLs and emails in text",
    )
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--kinds", default=DEFAULT_KINDS, help="Comma-separated kinds to enable")
    parser.add_argument("--custom", action="append", default=[], help="Custom regex (repeatable)")
    parser.add_argument("--url-max", type=int, default=None, help="Trim URLs longer than this")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("detect", help="Print detected spans as JSON")
    sub.add_parser("render", help="Print tagged attribute runs as JSON")

    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    cmds = {
        "detect": cmd_detect,
        "render": cmd_render,
    }
    try:
        cmds[args.command](args)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
