"""
nstackgen Identifier Normalizer — Section/translation keys → type, field and member names.

Rules:
    1. A section key that case-insensitively equals a reserved word gets the
       ``Section`` suffix.
    2. The first character is upper-cased to form the type name.
    3. The field name is the type name with its first character lower-cased.
    4. A translation key that equals a reserved word gets a trailing ``_``;
       the runtime lookup still uses the original key.

Nothing is transliterated: a key that does not form a valid identifier is
reported with ``InvalidIdentifierError`` instead of being silently coerced.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Set

from nstackgen.engine.errors import InvalidIdentifierError, MalformedDocumentError

logger = logging.getLogger("nstackgen.generators.naming")

SECTION_SUFFIX = "Section"
MEMBER_SUFFIX = "_"


def _is_reserved(name: str, reserved_words: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(lowered == word.lower() for word in reserved_words)


def section_key_to_type_name(key: str, reserved_words: Iterable[str]) -> str:
    """Return the CamelCase type name for a section key."""
    if not key:
        raise MalformedDocumentError("Section key must not be empty", key=key)

    adjusted = f"{key}{SECTION_SUFFIX}" if _is_reserved(key, reserved_words) else key
    return adjusted[0].upper() + adjusted[1:]


def type_name_to_field_name(type_name: str) -> str:
    """Return the field name for a generated section type."""
    if not type_name:
        raise MalformedDocumentError("Type name must not be empty")
    return type_name[0].lower() + type_name[1:]


def translation_key_to_member_name(key: str, reserved_words: Iterable[str]) -> str:
    """Return the accessor name for a translation key."""
    if not key:
        raise MalformedDocumentError("Translation key must not be empty", key=key)
    return f"{key}{MEMBER_SUFFIX}" if key in set(reserved_words) else key


class SectionNames(NamedTuple):
    """Names derived for one section."""

    section_key: str
    type_name: str
    field_name: str


def _ensure_identifier(name: str, key: str, is_identifier: Callable[[str], bool]) -> str:
    if not is_identifier(name):
        raise InvalidIdentifierError(
            f"Key '{key}' does not form a valid identifier ('{name}')",
            key=key,
            identifier=name,
        )
    return name


def resolve_section_names(
    section_keys: Iterable[str],
    reserved_words: Iterable[str],
    is_identifier: Callable[[str], bool],
    is_type_name: Optional[Callable[[str], bool]] = None,
) -> List[SectionNames]:
    """
    Derive type and field names for every section, in document order.
    ``is_type_name`` checks type names where the target is stricter about
    them than about fields; it defaults to ``is_identifier``.

    Raises:
        InvalidIdentifierError: a derived name is not a valid identifier, or
            two section keys normalize to the same type name.
    """
    reserved = set(reserved_words)
    is_type_name = is_type_name or is_identifier
    seen: Dict[str, str] = {}
    resolved: List[SectionNames] = []

    for key in section_keys:
        type_name = _ensure_identifier(section_key_to_type_name(key, reserved), key, is_type_name)
        field_name = _ensure_identifier(type_name_to_field_name(type_name), key, is_identifier)
        if type_name in seen:
            raise InvalidIdentifierError(
                f"Section keys '{seen[type_name]}' and '{key}' both map to type '{type_name}'",
                key=key,
                identifier=type_name,
            )
        seen[type_name] = key
        resolved.append(SectionNames(key, type_name, field_name))

    return resolved


def resolve_member_names(
    section_key: str,
    translation_keys: Iterable[str],
    reserved_words: Iterable[str],
    is_identifier: Callable[[str], bool],
) -> List[str]:
    """Derive accessor names for the keys of one section, in insertion order."""
    reserved = set(reserved_words)
    seen: Set[str] = set()
    members: List[str] = []

    for key in translation_keys:
        member = _ensure_identifier(
            translation_key_to_member_name(key, reserved), key, is_identifier
        )
        if member in seen:
            raise InvalidIdentifierError(
                f"Section '{section_key}' has two keys mapping to accessor '{member}'",
                key=key,
                section=section_key,
            )
        seen.add(member)
        members.append(member)

    return members
