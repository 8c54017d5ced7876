"""
nstackgen Models — Typed view of the data one build pass works on.

    NStackConfig          — project id + API key from nstack.json
    Language              — one language descriptor (id, locale, direction, flags)
    LocalizeIndex         — Language plus retrieval metadata (content URL)
    LocalizationDocument  — section key → (translation key → default value)

The default-language payload is decoded exactly once, by
``LocalizationDocument.from_content``; every other payload stays an opaque
string and is embedded verbatim.
"""

from __future__ import annotations

import json
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from nstackgen.engine.errors import InvariantViolationError, MalformedDocumentError


class NStackConfig(BaseModel):
    """Credentials identifying the NStack project to generate for."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    api_key: str


class Language(BaseModel):
    """A language as described by the NStack language index."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    locale: str
    direction: str = "LRM"
    is_default: bool = False
    is_best_fit: bool = False


class LocalizeIndex(BaseModel):
    """
    One entry of the language index. ``url`` is only used to fetch the
    payload and is never embedded in generated code.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    url: Optional[str] = None
    last_updated_at: Optional[str] = None
    should_update: bool = False
    language: Language


def find_default_language(languages: List[LocalizeIndex]) -> LocalizeIndex:
    """Return the first index entry flagged as default."""
    for index in languages:
        if index.language.is_default:
            return index
    raise InvariantViolationError(
        "No language is flagged as default in the language list",
        locales=[index.language.locale for index in languages],
    )


class LocalizationDocument(BaseModel):
    """
    Ordered mapping of section key → ordered mapping of translation key →
    default value. Insertion order drives emitted member order.
    """

    model_config = ConfigDict(frozen=True)

    sections: Dict[StrictStr, Dict[StrictStr, StrictStr]] = Field(default_factory=dict)

    @classmethod
    def from_content(cls, content: str) -> "LocalizationDocument":
        """
        Decode a raw localization payload of the form ``{"data": {...}}``.

        Raises:
            MalformedDocumentError: invalid JSON, missing ``data`` object, or
                any leaf that is not a string.
        """
        try:
            raw = json.loads(content)
        except json.JSONDecodeError as e:
            raise MalformedDocumentError(f"Localization content is not valid JSON: {e}") from e

        if not isinstance(raw, dict) or not isinstance(raw.get("data"), dict):
            raise MalformedDocumentError(
                "Localization content must be an object with a 'data' object"
            )
        return cls.from_sections(raw["data"])

    @classmethod
    def from_sections(cls, sections: object) -> "LocalizationDocument":
        """Validate an already-decoded section mapping."""
        try:
            return cls(sections=sections)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"][1:])
            raise MalformedDocumentError(
                f"Malformed localization at '{location}': {first['msg']}",
                location=location,
                validation_errors=e.errors(include_url=False),
            ) from e

    def items(self) -> Iterator[Tuple[str, Dict[str, str]]]:
        """Iterate (section key, translations) in document order."""
        return iter(self.sections.items())

    @property
    def key_count(self) -> int:
        return sum(len(keys) for keys in self.sections.values())
