"""
nstackgen Bundle Generator — Locale → raw translation payload, for offline bootstrap.

Payloads are embedded verbatim (never re-serialized). A raw literal is used
whenever the dialect can hold the payload unchanged; otherwise the payload is
fully escaped. Entries follow the language-list order.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Tuple

from nstackgen.engine.errors import InvariantViolationError, RetrievalError
from nstackgen.generators.dialects import Dialect
from nstackgen.models import LocalizeIndex

logger = logging.getLogger("nstackgen.generators.bundle_generator")


def generate_bundle(
    languages: List[LocalizeIndex],
    payloads: Mapping[str, str],
    dialect: Dialect,
) -> str:
    """
    Generate the bundled-translation mapping.

    Args:
        languages: Resolved language list; decides keys and order.
        payloads: Raw content by locale. Locales absent from ``languages``
            are ignored.

    Raises:
        RetrievalError: a listed language has no payload.
        InvariantViolationError: the language list repeats a locale.
    """
    entries: List[Tuple[str, str]] = []
    seen = set()
    raw_count = 0

    for index in languages:
        locale = index.language.locale
        if locale in seen:
            raise InvariantViolationError(
                f"Locale '{locale}' appears more than once in the language list",
                locale=locale,
            )
        seen.add(locale)

        if locale not in payloads:
            raise RetrievalError(
                f"No translation payload retrieved for locale '{locale}'",
                locale=locale,
                url=index.url,
            )

        payload = payloads[locale]
        if dialect.can_embed_raw(payload):
            raw_count += 1
            literal = dialect.raw_literal(payload)
        else:
            literal = dialect.string_literal(payload)
        entries.append((dialect.string_literal(locale), literal))

    logger.debug(
        f"Generated bundle for {len(entries)} locales ({raw_count} raw, "
        f"{len(entries) - raw_count} escaped)"
    )
    return dialect.bundle(entries)
