"""
nstackgen Literal Escaper — Arbitrary string → content of a quoted source literal.

Each dialect owns an ``EscapeRules`` table. Replacements run in table order:
backslash first (so later replacements are never double-escaped), then the
delimiter quote, the interpolation marker, newline, and dialect extras.
Characters the table cannot express are either encoded by the dialect's
``encode_char`` hook or rejected with ``EscapeOverflowError``.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Pattern, Tuple

from nstackgen.engine.errors import EscapeOverflowError

logger = logging.getLogger("nstackgen.generators.escaping")


class EscapeRules:
    """
    Ordered escape table for one target dialect.

    Args:
        delimiter: Quote character that opens and closes the literal.
        replacements: Ordered (character, escape sequence) pairs.
        forbidden: Characters that must not survive escaping.
        encoded: Characters passed through ``encode_char`` after the table ran.
        encode_char: Returns the escape sequence for one ``encoded`` character.
    """

    def __init__(
        self,
        delimiter: str,
        replacements: List[Tuple[str, str]],
        forbidden: str = r"[\n\r]",
        encoded: Optional[str] = None,
        encode_char: Optional[Callable[[str], str]] = None,
    ):
        if not replacements or replacements[0][0] != "\\":
            raise ValueError("Escape table must start with the backslash rule")
        self.delimiter = delimiter
        self.replacements = list(replacements)
        self.forbidden: Pattern[str] = re.compile(forbidden)
        self.encoded: Optional[Pattern[str]] = re.compile(encoded) if encoded else None
        self.encode_char = encode_char

    @property
    def escaped_characters(self) -> List[str]:
        return [char for char, _ in self.replacements]


def escape(raw: str, rules: EscapeRules) -> str:
    """
    Escape ``raw`` for embedding between two ``rules.delimiter`` characters.

    Raises:
        EscapeOverflowError: a character survives that the target literal
            syntax cannot hold.
    """
    escaped = raw
    for char, replacement in rules.replacements:
        escaped = escaped.replace(char, replacement)

    if rules.encoded is not None and rules.encode_char is not None:
        escaped = rules.encoded.sub(lambda m: rules.encode_char(m.group(0)), escaped)

    match = rules.forbidden.search(escaped)
    if match:
        raise EscapeOverflowError(
            f"Character U+{ord(match.group(0)):04X} cannot be embedded in a string literal",
            character=f"U+{ord(match.group(0)):04X}",
            position=match.start(),
        )
    return escaped


def string_literal(raw: str, rules: EscapeRules) -> str:
    """Return ``raw`` as a complete, delimited string literal."""
    return f"{rules.delimiter}{escape(raw, rules)}{rules.delimiter}"
