"""interactive-text — detect, tag and tap mentions, hashtags, URLs and emails in text."""

from .buffer import TaggedBuffer
from .compositor import color_for, compose, selected_color_for
from .config import create_label, load_config, load_from_yaml
from .hittest import Layout, hit_test, locate
from .label import InteractiveLabel, InvalidCustomKindError, LabelConfig
from .parser import detect, merge_spans, parse, trim_urls
from .patterns import PatternError, compiled_regex, pattern_for
from .touch import Phase, TouchTracker
from .types import DetectedElement, ElementKind, Font, Selection, Span, TextStyle

__all__ = [
    "InteractiveLabel", "LabelConfig", "InvalidCustomKindError",
    "ElementKind", "DetectedElement", "Span", "Selection", "Font", "TextStyle",
    "TaggedBuffer",
    "detect", "parse", "trim_urls", "merge_spans",
    "compose", "color_for", "selected_color_for",
    "hit_test", "locate", "Layout",
    "Phase", "TouchTracker",
    "PatternError", "compiled_regex", "pattern_for",
    "create_label", "load_config", "load_from_yaml",
]
__version__ = "0.1.0"
