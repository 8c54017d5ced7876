"""
nstackgen Language Generator — Config literal and the available-language registry.

Only descriptor fields (id, name, locale, direction, default / best-fit flags)
are embedded. Retrieval metadata (content URL, update timestamps) is
transient and never written into generated code.
"""

from __future__ import annotations

import logging
from typing import List

from nstackgen.engine.errors import InvariantViolationError
from nstackgen.generators.dialects import Dialect
from nstackgen.models import LocalizeIndex, NStackConfig

logger = logging.getLogger("nstackgen.generators.language_generator")


def generate_config(config: NStackConfig, dialect: Dialect) -> str:
    return dialect.config(
        dialect.string_literal(config.project_id),
        dialect.string_literal(config.api_key),
    )


def generate_languages(languages: List[LocalizeIndex], dialect: Dialect) -> str:
    """
    Generate the ordered language list, in resolver order.

    Raises:
        InvariantViolationError: no entry is flagged as default.
    """
    if not any(index.language.is_default for index in languages):
        raise InvariantViolationError(
            "Language registry requires exactly one default language, found none",
            locales=[index.language.locale for index in languages],
        )

    entries: List[str] = []
    for index in languages:
        language = index.language
        entries.append(dialect.language_entry(
            dialect.int_literal(index.id),
            {
                "id": dialect.int_literal(language.id),
                "name": dialect.string_literal(language.name),
                "locale": dialect.string_literal(language.locale),
                "direction": dialect.string_literal(language.direction),
                "is_default": dialect.bool_literal(language.is_default),
                "is_best_fit": dialect.bool_literal(language.is_best_fit),
            },
        ))

    logger.debug(f"Generated language registry with {len(entries)} languages")
    return dialect.language_list(entries)
