"""
nstackgen Runtime — Support classes imported by generated Python modules.

A generated ``nstack.py`` builds one ``NStack`` instance from its embedded
config, language list and bundled translations. Section accessors read the
active ``LocalizationStore``; until a locale is picked the store is empty and
every accessor returns the default captured at generation time.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from typing import Dict, Generic, List, Mapping, Optional, TypeVar

from nstackgen.models import Language, LocalizationDocument, LocalizeIndex, NStackConfig

__all__ = [
    "Language",
    "LocalizationStore",
    "LocalizeIndex",
    "NStack",
    "NStackConfig",
    "SectionKeyDelegate",
    "get_active_store",
]

logger = logging.getLogger("nstackgen.runtime")

L = TypeVar("L")


class LocalizationStore:
    """Thread-safe section → key → value table, replaced wholesale on locale change."""

    def __init__(self) -> None:
        self._sections: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def lookup(self, section_key: str, key: str) -> Optional[str]:
        with self._lock:
            return self._sections.get(section_key, {}).get(key)

    def replace(self, sections: Mapping[str, Mapping[str, str]]) -> None:
        snapshot = {section: dict(keys) for section, keys in sections.items()}
        with self._lock:
            self._sections = snapshot

    def clear(self) -> None:
        with self._lock:
            self._sections = {}

    def snapshot(self) -> Dict[str, Dict[str, str]]:
        with self._lock:
            return {section: dict(keys) for section, keys in self._sections.items()}


_active_store = LocalizationStore()


def get_active_store() -> LocalizationStore:
    """The process-wide store every generated accessor reads."""
    return _active_store


class SectionKeyDelegate:
    """Base of every generated section type."""

    def __init__(self, section_key: str):
        self.section_key = section_key

    def get(self, key: str, fallback: str) -> str:
        value = get_active_store().lookup(self.section_key, key)
        return fallback if value is None else value

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(section_key={self.section_key!r})>"


def _normalize_locale(locale: str) -> str:
    return locale.replace("_", "-").lower()


class NStack(Generic[L]):
    """
    The construct-once facade a generated module exposes as ``nstack``.

    Holds the embedded config, localization accessor tree, language list and
    bundled payloads; ``change_localization`` swaps the active store to a
    bundled locale and ``checksum`` changes whenever it does.
    """

    def __init__(
        self,
        config: NStackConfig,
        localization: L,
        available_languages: List[LocalizeIndex],
        bundled_translations: Mapping[str, str],
        picked_language_locale: str = "",
        debug: bool = False,
    ):
        self.config = config
        self.localization = localization
        self.available_languages = list(available_languages)
        self.bundled_translations = dict(bundled_translations)
        self.picked_language_locale = picked_language_locale
        self.debug = debug

    @property
    def default_language(self) -> Optional[Language]:
        for index in self.available_languages:
            if index.language.is_default:
                return index.language
        return None

    @property
    def checksum(self) -> str:
        """Change-detection token over the picked locale and the active store."""
        payload = json.dumps(
            [self.picked_language_locale, get_active_store().snapshot()],
            sort_keys=True,
            ensure_ascii=False,
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]

    def resolve_locale(self, locale: str) -> Optional[str]:
        """
        Best bundled locale for ``locale``: exact match (``en_GB`` == ``en-GB``),
        then same language code, then the default language.
        """
        wanted = _normalize_locale(locale)
        bundled = {_normalize_locale(known): known for known in self.bundled_translations}
        if wanted in bundled:
            return bundled[wanted]

        language_code = wanted.split("-")[0]
        for normalized, known in bundled.items():
            if normalized.split("-")[0] == language_code:
                return known

        default = self.default_language
        if default is not None and default.locale in self.bundled_translations:
            return default.locale
        return None

    def change_localization(self, locale: str) -> str:
        """
        Activate the bundled translations best matching ``locale``.

        Returns:
            The bundled locale that was activated.

        Raises:
            KeyError: nothing bundled matches and there is no default.
        """
        resolved = self.resolve_locale(locale)
        if resolved is None:
            raise KeyError(f"No bundled translations for locale '{locale}'")

        document = LocalizationDocument.from_content(self.bundled_translations[resolved])
        get_active_store().replace(document.sections)
        self.picked_language_locale = resolved
        if self.debug:
            logger.debug(f"Switched localization to {resolved} (requested {locale})")
        return resolved
