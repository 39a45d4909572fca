"""YAML/dict config loader for interactive-text.

Supports loading from a YAML file or a plain dict (for embedding in a
larger app config).

Example YAML:

    interactive_text:
      enabled_kinds:
        - mention
        - hashtag
        - url
        - custom: "\\bsilex\\b"
      colors:
        mention: "#1da1f2"
        hashtag: purple
      selected_colors:
        mention: "#0d8bd9"
      custom_colors:
        - pattern: "\\bsilex\\b"
          color: green
          selected_color: darkgreen
      highlight_font:
        name: Helvetica-Bold
        size: 18
      line_spacing: 2
      minimum_line_height: 20
      url_maximum_length: 30
"""

from __future__ import annotations
from pathlib import Path
from typing import Any

from .label import InteractiveLabel, LabelConfig
from .types import ElementKind

_BUILTIN = ("mention", "hashtag", "url", "email")


def parse_kind(entry: Any) -> ElementKind:
    """``"mention"`` or ``{"custom": "<pattern>"}`` -> ElementKind."""
    if isinstance(entry, ElementKind):
        return entry
    if isinstance(entry, dict):
        if set(entry) != {"custom"}:
            raise ValueError(f"unknown element kind entry: {entry!r}")
        return ElementKind.custom(str(entry["custom"]))
    return ElementKind.parse(str(entry))


def load_config(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    # Support nested under "interactive_text" key or flat
    if "interactive_text" in data:
        data = data["interactive_text"] or {}

    patterns = data.get("patterns") or {}
    colors = data.get("colors") or {}
    selected = data.get("selected_colors") or {}
    font = data.get("highlight_font") or {}
    for section in (patterns, colors, selected):
        unknown = set(section) - set(_BUILTIN)
        if unknown:
            raise ValueError(f"unknown element kind(s): {', '.join(sorted(unknown))}")

    custom_colors: dict[ElementKind, Any] = {}
    custom_selected: dict[ElementKind, Any] = {}
    for entry in data.get("custom_colors") or []:
        if not isinstance(entry, dict) or entry.get("pattern") is None:
            raise ValueError(f"custom_colors entry needs a pattern: {entry!r}")
        kind = ElementKind.custom(str(entry["pattern"]))
        if "color" in entry:
            custom_colors[kind] = entry["color"]
        if entry.get("selected_color") is not None:
            custom_selected[kind] = entry["selected_color"]

    max_len = data.get("url_maximum_length")
    return {
        "enabled_kinds": [parse_kind(k) for k in data.get("enabled_kinds") or []],
        "patterns": dict(patterns),
        "colors": dict(colors),
        "selected_colors": dict(selected),
        "custom_colors": custom_colors,
        "custom_selected_colors": custom_selected,
        "highlight_font_name": font.get("name"),
        "highlight_font_size": float(font["size"]) if font.get("size") is not None else None,
        "line_spacing": float(data.get("line_spacing") or 0),
        "minimum_line_height": float(data.get("minimum_line_height") or 0),
        "url_maximum_length": int(max_len) if max_len is not None else None,
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    import yaml
    with open(path, encoding="utf-8") as f:
        return load_config(yaml.safe_load(f) or {})


def build_config(cfg: dict[str, Any]) -> LabelConfig:
    """Turn a normalized config dict into a LabelConfig."""
    fields: dict[str, Any] = {}
    for name in _BUILTIN:
        if name in cfg["patterns"]:
            fields[f"{name}_pattern"] = cfg["patterns"][name]
        if name in cfg["colors"]:
            fields[f"{name}_color"] = cfg["colors"][name]
        if name in cfg["selected_colors"]:
            fields[f"{name}_selected_color"] = cfg["selected_colors"][name]
    return LabelConfig(
        custom_color=dict(cfg["custom_colors"]),
        custom_selected_color=dict(cfg["custom_selected_colors"]),
        highlight_font_name=cfg["highlight_font_name"],
        highlight_font_size=cfg["highlight_font_size"],
        line_spacing=cfg["line_spacing"],
        minimum_line_height=cfg["minimum_line_height"],
        url_maximum_length=cfg["url_maximum_length"],
        **fields,
    )


def create_label(config: dict[str, Any], text: str = "", **kwargs: Any) -> InteractiveLabel:
    """Create a fully configured label from a config dict."""
    cfg = load_config(config) if "custom_selected_colors" not in config else config
    return InteractiveLabel(
        text,
        config=build_config(cfg),
        enabled_kinds=cfg["enabled_kinds"],
        **kwargs,
    )
