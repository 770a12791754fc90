"""
Positional placeholder substitution for sequence prompts.

Fragments reference positional arguments as ``{0}`` through ``{8}``. ``{{``
and ``}}`` produce literal braces. Anything else that looks brace-like
(``{9}``, ``{10}``, ``{name}``, a lone ``{`` or ``}``) is copied through
unchanged.

The scanner is a single pass over the text with four states: normal, after
``{``, after ``{`` plus one placeholder digit, and after ``}``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

from prompt_assembler.errors import MissingArgumentError

logger = logging.getLogger(__name__)

MAX_PLACEHOLDER_INDEX = 8
_PLACEHOLDER_DIGITS = frozenset("012345678")

_NORMAL = 0
_OPEN = 1
_DIGIT = 2
_CLOSE = 3


def _tokenize(text: str) -> Iterator[str | int]:
    """Split text into literal chunks (str) and placeholder indices (int)."""
    buf: list[str] = []
    state = _NORMAL
    digit = ""

    for ch in text:
        if state == _OPEN:
            state = _NORMAL
            if ch == "{":
                buf.append("{")
                continue
            if ch in _PLACEHOLDER_DIGITS:
                digit = ch
                state = _DIGIT
                continue
            buf.append("{")
        elif state == _DIGIT:
            state = _NORMAL
            if ch == "}":
                if buf:
                    yield "".join(buf)
                    buf = []
                yield int(digit)
                continue
            buf.append("{")
            buf.append(digit)
        elif state == _CLOSE:
            state = _NORMAL
            buf.append("}")
            if ch == "}":
                continue

        if ch == "{":
            state = _OPEN
        elif ch == "}":
            state = _CLOSE
        else:
            buf.append(ch)

    # Unterminated sequences at end of text are literal
    if state == _OPEN:
        buf.append("{")
    elif state == _DIGIT:
        buf.append("{" + digit)
    elif state == _CLOSE:
        buf.append("}")

    if buf:
        yield "".join(buf)


def scan_placeholders(text: str) -> set[int]:
    """Return the placeholder indices referenced by a fragment."""
    return {token for token in _tokenize(text) if isinstance(token, int)}


def substitute(text: str, args: Sequence[str]) -> str:
    """Replace placeholders in one fragment.

    Arguments are inserted verbatim and never re-scanned.

    Raises:
        MissingArgumentError: If a placeholder index has no argument
    """
    out: list[str] = []
    for token in _tokenize(text):
        if isinstance(token, int):
            if token >= len(args):
                raise MissingArgumentError(token)
            out.append(args[token])
        else:
            out.append(token)
    return "".join(out)


def render_sequence(
    fragments: Iterable[tuple[Path | str, str]],
    args: Sequence[str] = (),
    raw: bool = False,
) -> str:
    """Concatenate fragments in order, substituting placeholders.

    Args:
        fragments: Ordered (path, text) pairs
        args: Positional arguments; index 0 may be piped stdin content
        raw: If True, concatenate without any substitution or escape handling

    Returns:
        The assembled text

    Raises:
        MissingArgumentError: On the first placeholder without an argument
    """
    if raw:
        return "".join(text for _, text in fragments)

    if len(args) > MAX_PLACEHOLDER_INDEX + 1:
        logger.debug(
            f"Ignoring {len(args) - MAX_PLACEHOLDER_INDEX - 1} positional argument(s) "
            f"beyond {{{MAX_PLACEHOLDER_INDEX}}}"
        )

    rendered: list[str] = []
    for path, text in fragments:
        logger.debug(f"Substituting placeholders in {path}")
        rendered.append(substitute(text, args))
    return "".join(rendered)
