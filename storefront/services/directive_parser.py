"""
Chat reply directive parser

The chatbot backend embeds machine directives in its free-text replies:

    Sure! [NAVIGATE: /products]
    Switching now. [ACTION: THEME_DARK]

parse_reply() separates the human-readable text from the directives before
anything is shown or spoken. Only the first NAVIGATE and the first ACTION are
extracted, and they are always returned Navigate first.
"""
import logging
import re
from typing import List, Tuple

from ..models.chat import NavigateDirective, UiActionDirective, ParsedDirective

logger = logging.getLogger(__name__)

# Keywords are case-sensitive; the payload is one or more non-"]" characters
NAVIGATE_PATTERN = re.compile(r'\[NAVIGATE: ([^\]]+)\]')
ACTION_PATTERN = re.compile(r'\[ACTION: ([^\]]+)\]')
ANY_DIRECTIVE_PATTERN = re.compile(r'\[(?:NAVIGATE|ACTION): [^\]]+\]')

MARKDOWN_PATTERN = re.compile(r'[*_#`]')
# Unicode Extended_Pictographic; ZWJ (U+200D) and VS16 (U+FE0F) are left in place
PICTOGRAPHIC_PATTERN = re.compile(
    "["
    "\u00a9\u00ae\u203c\u2049\u2122\u2139\u2194-\u2199\u21a9\u21aa"
    "\u231a\u231b\u2328\u2388\u23cf\u23e9-\u23f3\u23f8-\u23fa\u24c2"
    "\u25aa\u25ab\u25b6\u25c0\u25fb-\u25fe"
    "\u2600-\u2605\u2607-\u2612\u2614-\u2685\u2690-\u2705\u2708-\u2712"
    "\u2714\u2716\u271d\u2721\u2728\u2733\u2734\u2744\u2747\u274c\u274e"
    "\u2753-\u2755\u2757\u2763-\u2767\u2795-\u2797\u27a1\u27b0\u27bf"
    "\u2934\u2935\u2b05-\u2b07\u2b1b\u2b1c\u2b50\u2b55"
    "\u3030\u303d\u3297\u3299"
    "\U0001F000-\U0001F0FF\U0001F10D-\U0001F10F\U0001F12F"
    "\U0001F16C-\U0001F171\U0001F17E\U0001F17F\U0001F18E\U0001F191-\U0001F19A"
    "\U0001F1AD-\U0001F1E5\U0001F201-\U0001F20F\U0001F21A\U0001F22F"
    "\U0001F232-\U0001F23A\U0001F23C-\U0001F23F\U0001F249-\U0001F3FA"
    "\U0001F400-\U0001F53D\U0001F546-\U0001F64F\U0001F680-\U0001F6FF"
    "\U0001F774-\U0001F77F\U0001F7D5-\U0001F7FF\U0001F80C-\U0001F80F"
    "\U0001F848-\U0001F84F\U0001F85A-\U0001F85F\U0001F888-\U0001F88F"
    "\U0001F8AE-\U0001F8FF\U0001F90C-\U0001F93A\U0001F93C-\U0001F945"
    "\U0001F947-\U0001FAFF\U0001FC00-\U0001FFFD"
    "]"
)


def _remove_span(text: str, start: int, end: int) -> str:
    """
    Cut text[start:end] and close the gap

    Spaces and tabs on either side of the cut collapse to one space, or to
    nothing when the cut touches a line break; the result is trimmed.
    """
    left = text[:start]
    right = text[end:]
    left_stripped = left.rstrip(" \t")
    right_stripped = right.lstrip(" \t")
    had_gap = left_stripped != left or right_stripped != right
    at_line_break = (
        left_stripped.endswith(("\n", "\r"))
        or right_stripped.startswith(("\n", "\r"))
    )
    joiner = " " if had_gap and not at_line_break and left_stripped and right_stripped else ""
    return (left_stripped + joiner + right_stripped).strip()


def parse_reply(raw_text: str) -> Tuple[str, List[ParsedDirective]]:
    """
    Split a bot reply into display text and directives

    Args:
        raw_text: Reply text exactly as the chat backend returned it

    Returns:
        (display_text, directives). Text without directives comes back
        unchanged with an empty list.
    """
    text = raw_text
    directives: List[ParsedDirective] = []

    nav_match = NAVIGATE_PATTERN.search(text)
    if nav_match:
        directives.append(NavigateDirective(target_path=nav_match.group(1)))
        text = _remove_span(text, nav_match.start(), nav_match.end())

    action_match = ACTION_PATTERN.search(text)
    if action_match:
        directives.append(UiActionDirective(action_name=action_match.group(1)))
        text = _remove_span(text, action_match.start(), action_match.end())

    # Later directives of the same kind are not applied, but they must never
    # reach the transcript or speech either.
    residue = ANY_DIRECTIVE_PATTERN.search(text)
    while residue:
        logger.info(f"Dropping extra directive from reply: {residue.group(0)}")
        text = _remove_span(text, residue.start(), residue.end())
        residue = ANY_DIRECTIVE_PATTERN.search(text)

    if directives:
        logger.debug(f"Parsed directives: {[d.model_dump() for d in directives]}")

    return text, directives


def sanitize_for_speech(text: str) -> str:
    """
    Derive the string handed to speech synthesis

    Removes markdown punctuation and pictographic symbols. The input is not
    modified; applying this twice gives the same result as once.
    """
    cleaned = MARKDOWN_PATTERN.sub('', text)
    return PICTOGRAPHIC_PATTERN.sub('', cleaned)


__all__ = [
    "NAVIGATE_PATTERN",
    "ACTION_PATTERN",
    "parse_reply",
    "sanitize_for_speech",
]
