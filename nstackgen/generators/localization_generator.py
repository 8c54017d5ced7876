"""
nstackgen Localization Generator — The facade type and the NStack instance.

    generate_header()        — banner + imports the artifact needs
    generate_localization()  — ``Localization`` with one field per section
    generate_nstack()        — the construct-once facade instance

The facade references the section types by the names the section generator
derives, so both go through ``resolve_section_names``.
"""

from __future__ import annotations

from nstackgen.generators.dialects import Dialect
from nstackgen.generators.naming import resolve_section_names
from nstackgen.models import LocalizationDocument


def generate_header(dialect: Dialect) -> str:
    return dialect.header()


def generate_localization(document: LocalizationDocument, dialect: Dialect) -> str:
    """Generate the facade type; zero sections yield a valid empty type."""
    names = resolve_section_names(
        document.sections.keys(),
        dialect.reserved_words,
        dialect.is_identifier,
        dialect.is_type_name,
    )
    return dialect.localization_class([(n.field_name, n.type_name) for n in names])


def generate_nstack(dialect: Dialect) -> str:
    return dialect.nstack_instance()
