"""
nstackgen Section Generator — One accessor type per localization section.

For every section (document order) emits a type whose constructor carries the
original section key and which exposes one getter per translation key
(insertion order). Each getter reads the key from the active localization
store at runtime and falls back to the default captured at generation time.

Output (Dart):
    class _General extends SectionKeyDelegate {
    	const _General(): super("general");

    	String get appName => get("appName", "My App");
    }
"""

from __future__ import annotations

import logging
from typing import List

from nstackgen.generators.dialects import Dialect, Member
from nstackgen.generators.naming import resolve_member_names, resolve_section_names
from nstackgen.models import LocalizationDocument

logger = logging.getLogger("nstackgen.generators.section_generator")


def generate_section(
    type_name: str,
    section_key: str,
    translations: dict,
    dialect: Dialect,
) -> str:
    """Generate the accessor type for a single section."""
    member_names = resolve_member_names(
        section_key, translations.keys(), dialect.reserved_words, dialect.is_identifier
    )
    members: List[Member] = [
        (member, dialect.string_literal(key), dialect.string_literal(default))
        for member, (key, default) in zip(member_names, translations.items())
    ]
    return dialect.section_class(type_name, dialect.string_literal(section_key), members)


def generate_sections(document: LocalizationDocument, dialect: Dialect) -> str:
    """
    Generate accessor types for every section of the document.

    Returns:
        The concatenated blocks; empty string for a document with no sections.
    """
    names = resolve_section_names(
        document.sections.keys(),
        dialect.reserved_words,
        dialect.is_identifier,
        dialect.is_type_name,
    )
    blocks = [
        generate_section(n.type_name, n.section_key, document.sections[n.section_key], dialect)
        for n in names
    ]
    logger.debug(f"Generated {len(blocks)} section types ({document.key_count} keys)")
    return "\n".join(blocks)
