"""Tests for the label — touch tracking, taps, highlights and rebuilds."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest

from interactive_text import (
    DetectedElement,
    ElementKind,
    InteractiveLabel,
    InvalidCustomKindError,
    LabelConfig,
    Phase,
    TextStyle,
    TouchTracker,
    hit_test,
)
from interactive_text.types import FONT, FOREGROUND_COLOR, INTERACTIVE_ELEMENT, INTERACTIVE_KIND, Font, Selection

STYLE = TextStyle(font=Font("Helvetica", 17))


def _label(text, kinds, config=None, **kwargs):
    label = InteractiveLabel(text, style=STYLE, config=config or LabelConfig(), enabled_kinds=kinds, **kwargs)
    taps = []
    label.on_tap(taps.append)
    return label, taps


class FakeLayout:
    """Ten points per character on a single 20pt line."""

    def __init__(self, length):
        self.length = length

    def used_rect(self):
        return (0, 0, self.length * 10, 20)

    def character_index(self, point):
        return max(0, min(int(point[0] // 10), self.length - 1))


# ── Hit-testing ──────────────────────────────────────────────────────

def test_hit_test_inside_and_outside():
    label, _ = _label("Tap this #hashtag", [ElementKind.HASHTAG])
    hit = hit_test(label.buffer, 10)
    assert hit == Selection(DetectedElement.hashtag("hashtag"), ElementKind.HASHTAG, 8, 9)
    assert hit_test(label.buffer, 0) is None


def test_hit_test_guards_offset():
    label, _ = _label("#tag", [ElementKind.HASHTAG])
    assert hit_test(label.buffer, 4) is None
    assert hit_test(label.buffer, -1) is None
    assert hit_test(label.buffer, None) is None


def test_element_at_uses_detected_kind_and_range():
    label, _ = _label("Ping @bob now", [ElementKind.MENTION])
    assert label.element_at(6) == Selection(DetectedElement.mention("bob"), ElementKind.MENTION, 4, 5)
    assert label.element_at(0) is None
    assert label.element_at(None) is None


def test_hit_test_on_empty_text():
    label, _ = _label("", [ElementKind.HASHTAG])
    assert len(label.buffer) == 0
    assert hit_test(label.buffer, 0) is None


# ── Taps ─────────────────────────────────────────────────────────────

def test_successful_tap():
    label, taps = _label("Tap this #hashtag", [ElementKind.HASHTAG])
    label.touch_offset(Phase.BEGAN, 12)
    label.touch_offset(Phase.MOVED, 13)
    label.touch_offset(Phase.ENDED, 14)
    assert taps == [DetectedElement.hashtag("hashtag")]
    assert label.selection is None


def test_failed_tap_when_released_outside():
    label, taps = _label("Tap this #hashtag", [ElementKind.HASHTAG])
    label.touch_offset(Phase.BEGAN, 12)
    label.touch_offset(Phase.MOVED, 0)
    label.touch_offset(Phase.ENDED, 0)
    assert taps == []


def test_return_to_element_before_release_still_taps():
    label, taps = _label("Tap this #hashtag", [ElementKind.HASHTAG])
    label.touch_offset(Phase.BEGAN, 12)
    label.touch_offset(Phase.MOVED, 0)
    assert label.selection is not None
    label.touch_offset(Phase.MOVED, 12)
    label.touch_offset(Phase.ENDED, 12)
    assert len(taps) == 1


def test_release_on_other_element_does_not_tap():
    label, taps = _label("#one #two", [ElementKind.HASHTAG])
    label.touch_offset(Phase.BEGAN, 1)
    label.touch_offset(Phase.ENDED, 7)
    assert taps == []


def test_begin_outside_any_element():
    label, taps = _label("Tap this #hashtag", [ElementKind.HASHTAG])
    label.touch_offset(Phase.BEGAN, 0)
    assert label.selection is None
    label.touch_offset(Phase.ENDED, 12)
    assert taps == []


def test_cancel_clears_selection():
    label, taps = _label("Tap this #hashtag", [ElementKind.HASHTAG])
    label.touch_offset(Phase.BEGAN, 12)
    label.touch_offset(Phase.CANCELLED, 12)
    assert label.selection is None
    label.touch_offset(Phase.ENDED, 12)
    assert taps == []


def test_stationary_acts_like_cancel():
    label, taps = _label("#tag", [ElementKind.HASHTAG])
    label.touch_offset(Phase.BEGAN, 1)
    label.touch_offset(Phase.STATIONARY, 1)
    label.touch_offset(Phase.ENDED, 1)
    assert taps == []


def test_url_tap_carries_original_and_trimmed():
    config = LabelConfig(url_maximum_length=10)
    label, taps = _label("Docs https://example.com/very/long/path", [ElementKind.URL], config)
    label.touch_offset(Phase.BEGAN, 7)
    label.touch_offset(Phase.ENDED, 7)
    assert taps == [DetectedElement.url("https://example.com/very/long/path", "https://ex...")]


def test_unsubscribe():
    label, taps = _label("#tag", [ElementKind.HASHTAG])
    other = []
    unsubscribe = label.on_tap(other.append)
    unsubscribe()
    label.touch_offset(Phase.BEGAN, 1)
    label.touch_offset(Phase.ENDED, 1)
    assert other == []
    assert len(taps) == 1


# ── Custom kinds ─────────────────────────────────────────────────────

def test_custom_handler_replaces_generic_tap():
    silex = ElementKind.custom("silex")
    label, taps = _label("I use silex daily", [silex])
    handled = []
    label.handle_custom(silex, handler=handled.append)
    label.touch_offset(Phase.BEGAN, 7)
    label.touch_offset(Phase.ENDED, 7)
    assert handled == ["silex"]
    assert taps == []


def test_custom_handler_survives_hook_dropping_kind_tag():
    silex = ElementKind.custom("silex")

    def hook(kind, attributes, selected):
        attributes.pop(INTERACTIVE_KIND, None)
        return attributes

    config = LabelConfig(custom_selected_color={silex: "red"})
    label, taps = _label("I use silex daily", [silex], config, customize_attributes=hook)
    handled = []
    label.handle_custom(silex, handler=handled.append)
    assert INTERACTIVE_KIND not in label.buffer.attributes_at(7)

    label.touch_offset(Phase.BEGAN, 7)
    assert label.selection.kind == silex
    assert label.buffer.attributes_at(7)[FOREGROUND_COLOR] == "red"
    label.touch_offset(Phase.ENDED, 7)
    assert handled == ["silex"]
    assert taps == []
    assert label.buffer.attributes_at(7)[FOREGROUND_COLOR] == "blue"


def test_custom_without_handler_uses_generic_tap():
    silex = ElementKind.custom("silex")
    label, taps = _label("I use silex daily", [silex])
    label.touch_offset(Phase.BEGAN, 7)
    label.touch_offset(Phase.ENDED, 7)
    assert taps == [DetectedElement.custom("silex")]


def test_custom_filter_and_remove_handle():
    word = ElementKind.custom(r"\b[a-z]+ex\b")
    label, _ = _label("silex latex codex", [word])
    assert len(label.spans) == 3
    label.handle_custom(word, filter=lambda w: w != "latex")
    assert [s.element.text for s in label.spans] == ["silex", "codex"]
    label.remove_handle(word)
    assert len(label.spans) == 3


def test_handle_custom_rejects_builtin_kind():
    label, _ = _label("#tag", [ElementKind.HASHTAG])
    with pytest.raises(InvalidCustomKindError):
        label.handle_custom(ElementKind.HASHTAG, handler=print)


def test_builtin_filter():
    label, _ = _label("@bot @human", [ElementKind.MENTION])
    label.set_filter(ElementKind.MENTION, lambda w: w != "bot")
    assert [s.element.text for s in label.spans] == ["human"]


# ── Highlighting ─────────────────────────────────────────────────────

def test_highlight_color_and_font():
    config = LabelConfig(
        mention_selected_color="red",
        highlight_font_name="Helvetica-Bold",
        highlight_font_size=18,
    )
    label, _ = _label("Hello @user", [ElementKind.MENTION], config)

    label.touch_offset(Phase.BEGAN, 7)
    attrs = label.buffer.attributes_at(7)
    assert attrs[FOREGROUND_COLOR] == "red"
    assert attrs[FONT] == Font("Helvetica-Bold", 18)

    label.touch_offset(Phase.ENDED, 7)
    attrs = label.buffer.attributes_at(7)
    assert attrs[FOREGROUND_COLOR] == "blue"
    assert attrs[FONT] == STYLE.font


def test_moving_off_element_unhighlights():
    label, _ = _label("Hello @user", [ElementKind.MENTION], LabelConfig(mention_selected_color="red"))
    label.touch_offset(Phase.BEGAN, 7)
    label.touch_offset(Phase.MOVED, 0)
    assert label.buffer.attributes_at(7)[FOREGROUND_COLOR] == "blue"
    label.touch_offset(Phase.MOVED, 8)
    assert label.buffer.attributes_at(7)[FOREGROUND_COLOR] == "red"


def test_second_began_unhighlights_previous_element():
    label, taps = _label("#one #two", [ElementKind.HASHTAG], LabelConfig(hashtag_selected_color="red"))
    label.touch_offset(Phase.BEGAN, 1)
    assert label.buffer.attributes_at(1)[FOREGROUND_COLOR] == "red"
    label.touch_offset(Phase.BEGAN, 6)
    label.touch_offset(Phase.ENDED, 6)
    assert label.buffer.attributes_at(1)[FOREGROUND_COLOR] == "blue"
    assert label.buffer.attributes_at(6)[FOREGROUND_COLOR] == "blue"
    assert taps == [DetectedElement.hashtag("two")]


def test_highlight_runs_through_hook():
    seen = []

    def hook(kind, attributes, selected):
        seen.append(selected)
        attributes["glow"] = selected
        return attributes

    label, _ = _label("Hello @user", [ElementKind.MENTION], customize_attributes=hook)
    label.touch_offset(Phase.BEGAN, 7)
    assert label.buffer.attributes_at(7)["glow"] is True
    label.touch_offset(Phase.ENDED, 7)
    assert label.buffer.attributes_at(7)["glow"] is False
    assert seen == [False, True, False]


def test_unresolvable_highlight_font_keeps_base_font():
    config = LabelConfig(highlight_font_name="NoSuchFont")
    label, _ = _label("Hello @user", [ElementKind.MENTION], config, font_resolver=lambda name, size: None)
    label.touch_offset(Phase.BEGAN, 7)
    assert label.buffer.attributes_at(7)[FONT] == STYLE.font


# ── Rebuilds ─────────────────────────────────────────────────────────

def test_rebuild_resets_selection():
    label, taps = _label("Tap this #hashtag", [ElementKind.HASHTAG])
    label.touch_offset(Phase.BEGAN, 12)
    label.text = "Tap that #hashtag"
    assert label.selection is None
    label.touch_offset(Phase.ENDED, 12)
    assert taps == []


def test_enabled_kinds_change_rebuilds():
    label, _ = _label("@bob #tag", [ElementKind.MENTION])
    assert [s.kind for s in label.spans] == [ElementKind.MENTION]
    label.enabled_kinds = [ElementKind.MENTION, ElementKind.HASHTAG]
    assert [s.kind for s in label.spans] == [ElementKind.MENTION, ElementKind.HASHTAG]


def test_config_change_rebuilds():
    label, _ = _label("#tag", [ElementKind.HASHTAG])
    label.config = label.config.replace(hashtag_color="purple")
    assert label.buffer.attributes_at(1)[FOREGROUND_COLOR] == "purple"


def test_customize_batches_rebuilds():
    builds = []
    label, _ = _label("#tag", [ElementKind.HASHTAG], on_invalidate=builds.append)
    builds.clear()
    with label.customize() as l:
        l.text = "@bob #tag"
        l.enabled_kinds = [ElementKind.MENTION, ElementKind.HASHTAG]
        l.config = l.config.replace(mention_color="green")
    assert len(builds) == 1
    assert len(label.spans) == 2


def test_invalidate_on_highlight():
    builds = []
    label, _ = _label("#tag", [ElementKind.HASHTAG], on_invalidate=builds.append)
    builds.clear()
    label.touch_offset(Phase.BEGAN, 1)
    assert builds == [label.buffer]


def test_text_property_reports_source_text():
    label, _ = _label("Docs https://example.com/very/long/path", [ElementKind.URL], LabelConfig(url_maximum_length=10))
    assert label.text == "Docs https://example.com/very/long/path"
    assert label.buffer.text == "Docs https://ex..."


# ── Coordinates ──────────────────────────────────────────────────────

def test_touch_with_layout_centers_container():
    text = "Tap this #hashtag"
    label, taps = _label(text, [ElementKind.HASHTAG], layout=FakeLayout(len(text)), bounds=(len(text) * 10 + 40, 60))
    # container sits 20pt right and 20pt down inside the label
    label.touch(Phase.BEGAN, (20 + 125, 30))
    assert label.selection is not None
    label.touch(Phase.ENDED, (20 + 125, 30))
    assert taps == [DetectedElement.hashtag("hashtag")]


def test_touch_without_layout_is_a_miss():
    label, taps = _label("#tag", [ElementKind.HASHTAG])
    label.touch(Phase.BEGAN, (5, 5))
    assert label.selection is None


# ── TouchTracker alone ───────────────────────────────────────────────

def test_tracker_highlight_sequence():
    events = []
    taps = []
    tracker = TouchTracker(lambda sel, on: events.append(on), taps.append)
    sel = Selection(DetectedElement.mention("a"), ElementKind.MENTION, 0, 2)
    tracker.handle(Phase.BEGAN, sel)
    tracker.handle(Phase.MOVED, None)
    tracker.handle(Phase.MOVED, sel)
    tracker.handle(Phase.ENDED, sel)
    assert events == [True, False, True, False]
    assert taps == [sel.element]
    assert not tracker.tracking


def test_tracker_moved_while_idle_does_nothing():
    events = []
    tracker = TouchTracker(lambda sel, on: events.append(on), lambda e: None)
    tracker.handle(Phase.MOVED, None)
    tracker.handle(Phase.CANCELLED, None)
    assert events == []
