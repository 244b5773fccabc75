"""
Chat reply directive parser tests
"""

import pytest

from storefront.models.chat import NavigateDirective, UiActionDirective
from storefront.services.directive_parser import parse_reply, sanitize_for_speech


class TestPlainText:
    """Replies without directives"""

    @pytest.mark.parametrize("text", [
        "",
        "Hello!",
        "  padded text  ",
        "Our [best] products",
        "Multi\nline\nreply",
    ])
    def test_returned_unchanged(self, text):
        assert parse_reply(text) == (text, [])

    @pytest.mark.parametrize("text", [
        "Go [NAVIGATE: /products",           # no closing bracket
        "Go [navigate: /products]",          # keyword is case-sensitive
        "Go [NAVIGATE: ]",                   # empty payload
        "Go [NAVIGATE:/products]",           # missing space
        "Do [ACTION THEME_DARK]",
    ])
    def test_malformed_directives_pass_through(self, text):
        assert parse_reply(text) == (text, [])


class TestNavigate:

    @pytest.mark.parametrize("path", ["/products", "/products/42", "/about?tab=team", "/"])
    def test_navigate_between_words(self, path):
        display, directives = parse_reply(f"hello [NAVIGATE: {path}] world")

        assert display == "hello world"
        assert directives == [NavigateDirective(target_path=path)]

    def test_navigate_at_end_is_trimmed(self):
        display, directives = parse_reply("Sure! [NAVIGATE: /products]")

        assert display == "Sure!"
        assert directives == [NavigateDirective(target_path="/products")]

    def test_captured_path_is_not_validated(self):
        _, directives = parse_reply("[NAVIGATE: not a route at all ]")

        assert directives[0].target_path == "not a route at all "

    def test_span_without_surrounding_space(self):
        display, _ = parse_reply("abc[NAVIGATE: /x]def")

        assert display == "abcdef"

    @pytest.mark.parametrize("raw, expected", [
        ("Sure!\n[NAVIGATE: /p] See you there", "Sure!\nSee you there"),
        ("Sure! [NAVIGATE: /p]\nSee you there", "Sure!\nSee you there"),
        ("Sure!\r\n  [NAVIGATE: /p]  See you there", "Sure!\r\nSee you there"),
    ])
    def test_span_next_to_line_break_leaves_no_stray_space(self, raw, expected):
        display, directives = parse_reply(raw)

        assert display == expected
        assert directives == [NavigateDirective(target_path="/p")]


class TestAction:

    @pytest.mark.parametrize("action", ["THEME_DARK", "THEME_LIGHT", "SOMETHING_NEW"])
    def test_action_extracted(self, action):
        display, directives = parse_reply(f"x [ACTION: {action}] y")

        assert display == "x y"
        assert directives == [UiActionDirective(action_name=action)]


class TestOrderingAndMultiples:

    def test_navigate_listed_first_regardless_of_position(self):
        display, directives = parse_reply("[ACTION: THEME_DARK] [NAVIGATE: /products]")

        assert display == ""
        assert directives == [
            NavigateDirective(target_path="/products"),
            UiActionDirective(action_name="THEME_DARK"),
        ]

    def test_only_first_of_each_kind_is_extracted(self):
        display, directives = parse_reply(
            "A [NAVIGATE: /one] B [NAVIGATE: /two] C [ACTION: THEME_DARK] D [ACTION: THEME_LIGHT]"
        )

        assert directives == [
            NavigateDirective(target_path="/one"),
            UiActionDirective(action_name="THEME_DARK"),
        ]
        assert "[NAVIGATE" not in display
        assert "[ACTION" not in display
        assert display == "A B C D"

    @pytest.mark.parametrize("text", [
        "Sure! [NAVIGATE: /products]",
        "hello [NAVIGATE: /a] world [ACTION: THEME_LIGHT] !",
        "[ACTION: X] [ACTION: Y] [NAVIGATE: /p] [NAVIGATE: /q]",
        "no directives here",
    ])
    def test_reparsing_display_text_finds_nothing(self, text):
        display, _ = parse_reply(text)

        assert parse_reply(display) == (display, [])


class TestSanitizeForSpeech:

    def test_strips_markdown_and_pictographs(self):
        assert sanitize_for_speech("🌿 *Ashwagandha* — #1 `calm` _herb_ 😊") == " Ashwagandha — 1 calm herb "

    def test_idempotent(self):
        text = "**Bold** 📞 +91 98931 56792 ✅"
        once = sanitize_for_speech(text)

        assert sanitize_for_speech(once) == once

    def test_input_is_not_modified(self):
        text = "*keep* me 🌿"
        sanitize_for_speech(text)

        assert text == "*keep* me 🌿"

    def test_plain_text_unchanged(self):
        assert sanitize_for_speech("Hello, how are you?") == "Hello, how are you?"

    def test_regional_indicators_and_enclosed_letters_kept(self):
        text = "Made in \U0001F1EE\U0001F1F3 \U0001F130 grade"

        assert sanitize_for_speech(text) == text

    def test_joiner_and_variation_selector_left_in_place(self):
        # woman farmer: U+1F469 ZWJ U+1F33E; heart with VS16
        assert sanitize_for_speech("a\U0001F469\u200d\U0001F33Eb") == "a\u200db"
        assert sanitize_for_speech("\u2764\ufe0f love") == "\ufe0f love"

    def test_non_pictographic_symbols_kept(self):
        assert sanitize_for_speech("\u2713 done, 5\u00b0C") == "\u2713 done, 5\u00b0C"
