"""
Balanced-delimiter scanning for the text rewrite passes.

Regular expressions cannot count nesting depth, so every expression-level rewrite
isolates call argument lists and operands with the helpers in this module. None of
them raise: an unmatched delimiter is reported with a sentinel index and the caller
copies the region verbatim.
"""

import re
from collections.abc import Callable

OPENERS: dict[str, str] = {"(": ")", "[": "]", "{": "}"}
CLOSERS: dict[str, str] = {close: open_ for open_, close in OPENERS.items()}

# Handler receives the call match and its (already rewritten) argument text.
# Returning None keeps the call as it is.
CallHandler = Callable[[re.Match[str], str], str | None]


def match_close(text: str, open_index: int) -> int:
    """Find the delimiter closing the one at ``open_index``.

    Args:
        text: Buffer to scan
        open_index: Index of an opening ``(``, ``[`` or ``{``

    Returns:
        Index of the matching closer, or ``len(text)`` if there is none
    """
    if not 0 <= open_index < len(text) or text[open_index] not in OPENERS:
        return len(text)

    opener = text[open_index]
    closer = OPENERS[opener]
    depth = 1
    for index in range(open_index + 1, len(text)):
        char = text[index]
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return index
    return len(text)


def match_open(text: str, close_index: int) -> int:
    """Find the delimiter opening the one at ``close_index``.

    Args:
        text: Buffer to scan
        close_index: Index of a closing ``)``, ``]`` or ``}``

    Returns:
        Index of the matching opener, or ``-1`` if there is none
    """
    if not 0 <= close_index < len(text) or text[close_index] not in CLOSERS:
        return -1

    closer = text[close_index]
    opener = CLOSERS[closer]
    depth = 1
    for index in range(close_index - 1, -1, -1):
        char = text[index]
        if char == closer:
            depth += 1
        elif char == opener:
            depth -= 1
            if depth == 0:
                return index
    return -1


def split_top_level(inner: str) -> list[str]:
    """Split call arguments on commas that are not nested in any delimiter.

    Args:
        inner: Text between a call's parentheses

    Returns:
        Argument strings in order, untrimmed
    """
    parts: list[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(inner):
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            depth -= 1
        elif char == "," and depth == 0:
            parts.append(inner[start:index])
            start = index + 1
    parts.append(inner[start:])
    return parts


def rewrite_calls(
    text: str,
    pattern: re.Pattern[str],
    handler: CallHandler,
    recurse: bool = True,
) -> str:
    """Rewrite every call matched by ``pattern`` in one left-to-right pass.

    The pattern must end at the call's opening delimiter. Regions between matches
    are copied verbatim.

    Args:
        text: Buffer to rewrite
        pattern: Compiled pattern whose match ends with the opening delimiter
        handler: Produces the replacement for a call, or None to keep it
        recurse: Rewrite nested calls inside the arguments first

    Returns:
        The rewritten buffer
    """
    pieces: list[str] = []
    cursor = 0
    while True:
        match = pattern.search(text, cursor)
        if match is None:
            break

        open_index = match.end() - 1
        close_index = match_close(text, open_index)
        if close_index >= len(text):
            break

        inner = text[open_index + 1 : close_index]
        if recurse:
            inner = rewrite_calls(inner, pattern, handler, recurse)

        replacement = handler(match, inner)
        if replacement is None:
            replacement = text[match.start() : open_index + 1] + inner + text[close_index]

        pieces.append(text[cursor : match.start()])
        pieces.append(replacement)
        cursor = close_index + 1

    pieces.append(text[cursor:])
    return "".join(pieces)


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char in "_."


def operand_end(text: str, start: int) -> int:
    """Find the end of the primary expression starting at ``start``.

    A primary is a parenthesized group or an identifier/literal, followed by any
    number of call argument lists, index brackets and member accesses.

    Returns:
        Index just past the operand, or ``start`` when no operand begins there
    """
    index = start
    if index < len(text) and text[index] in "+-":
        index += 1

    if index < len(text) and text[index] == "(":
        close_index = match_close(text, index)
        if close_index >= len(text):
            return start
        index = close_index + 1
    else:
        word_end = index
        while word_end < len(text) and _is_word_char(text[word_end]):
            word_end += 1
        if word_end == index:
            return start
        index = word_end

    while index < len(text):
        char = text[index]
        if char in "([":
            close_index = match_close(text, index)
            if close_index >= len(text):
                break
            index = close_index + 1
        elif _is_word_char(char):
            index += 1
        else:
            break
    return index


def operand_start(text: str, end: int) -> int:
    """Find the start of the primary expression ending just before ``end``.

    Mirror of :func:`operand_end` scanning backwards.

    Returns:
        Index of the operand's first character, or ``end`` when there is none
    """
    index = end
    while index > 0:
        char = text[index - 1]
        if char in ")]":
            open_index = match_open(text, index - 1)
            if open_index < 0:
                break
            index = open_index
        elif _is_word_char(char):
            index -= 1
        else:
            break
    return index
