"""
nstackgen Dialects — Target-language syntax for every generated block.

A dialect knows its reserved words, its escape table, how to embed an opaque
payload, and the text templates the emitters fill in. Emitters decide WHAT
goes into the file (order, names, values); dialects decide how it is spelled.

    DartDialect    — .dart output for the Flutter nstack package (default)
    PythonDialect  — .py output importing ``nstackgen.runtime``
"""

from __future__ import annotations

import ast
import keyword
import re
from typing import Dict, FrozenSet, List, Optional, Tuple, Type

from nstackgen.engine.errors import ConfigError, EscapeOverflowError
from nstackgen.generators.escaping import EscapeRules, string_literal

# (member name, key literal, default literal)
Member = Tuple[str, str, str]


class Dialect:
    """Base class for a target language."""

    name: str = ""
    output_extension: str = ""
    reserved_words: FrozenSet[str] = frozenset()
    escape_rules: EscapeRules

    def is_identifier(self, name: str) -> bool:
        raise NotImplementedError

    def is_type_name(self, name: str) -> bool:
        """Section type names are emitted as ``_{name}``."""
        return self.is_identifier(name)

    def string_literal(self, value: str) -> str:
        return string_literal(value, self.escape_rules)

    def can_embed_raw(self, payload: str) -> bool:
        return False

    def raw_literal(self, payload: str) -> str:
        raise NotImplementedError

    def bool_literal(self, value: bool) -> str:
        raise NotImplementedError

    def int_literal(self, value: int) -> str:
        return str(int(value))

    # -- templates ---------------------------------------------------------

    def header(self) -> str:
        raise NotImplementedError

    def section_class(self, type_name: str, section_key: str, members: List[Member]) -> str:
        raise NotImplementedError

    def localization_class(self, fields: List[Tuple[str, str]]) -> str:
        raise NotImplementedError

    def config(self, project_id: str, api_key: str) -> str:
        raise NotImplementedError

    def language_entry(self, index_id: str, language: Dict[str, str]) -> str:
        raise NotImplementedError

    def language_list(self, entries: List[str]) -> str:
        raise NotImplementedError

    def bundle(self, entries: List[Tuple[str, str]]) -> str:
        raise NotImplementedError

    def nstack_instance(self) -> str:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Dart
# ---------------------------------------------------------------------------

DART_KEYWORDS = frozenset({
    # reserved words
    "assert", "break", "case", "catch", "class", "const", "continue",
    "default", "do", "else", "enum", "extends", "false", "final", "finally",
    "for", "if", "in", "is", "new", "null", "rethrow", "return", "super",
    "switch", "this", "throw", "true", "try", "var", "void", "while", "with",
    # built-in identifiers
    "abstract", "as", "covariant", "deferred", "dynamic", "export",
    "extension", "external", "factory", "Function", "get", "implements",
    "import", "interface", "late", "library", "mixin", "operator", "part",
    "required", "set", "static", "typedef",
    # contextual keywords
    "async", "await", "base", "hide", "of", "on", "sealed", "show", "sync",
    "when", "yield",
})

DART_GENERATED_NAMES = frozenset({
    "Localization", "NStack", "NStackConfig", "Language", "LocalizeIndex",
    "SectionKeyDelegate", "String", "bool", "int", "double", "num", "Object",
    # members every class inherits from Object
    "hashCode", "runtimeType", "toString", "noSuchMethod",
})

_DART_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
# A first line holding only whitespace is dropped from a multi-line literal.
_DART_DROPPED_FIRST_LINE = re.compile(r"[ \t\\]*\r?\n")


class DartDialect(Dialect):
    """Dart source for the Flutter ``nstack`` package."""

    name = "dart"
    output_extension = ".dart"
    reserved_words = DART_KEYWORDS | DART_GENERATED_NAMES
    escape_rules = EscapeRules(
        delimiter='"',
        replacements=[
            ("\\", "\\\\"),
            ('"', '\\"'),
            ("$", "\\$"),
            ("\n", "\\n"),
            ("\r", "\\r"),
            ("\x00", "\\x00"),
        ],
        forbidden=r"[\n\r\ud800-\udfff]",
    )

    def is_identifier(self, name: str) -> bool:
        return bool(_DART_IDENTIFIER.fullmatch(name))

    def can_embed_raw(self, payload: str) -> bool:
        return (
            "'''" not in payload
            and not payload.endswith("'")
            and "\r" not in payload
            and not _DART_DROPPED_FIRST_LINE.match(payload)
            and not re.search(r"[\ud800-\udfff]", payload)
        )

    def raw_literal(self, payload: str) -> str:
        return f"r'''{payload}'''"

    def bool_literal(self, value: bool) -> str:
        return "true" if value else "false"

    def header(self) -> str:
        return (
            "/// Generated by NStack, do not modify this file.\n"
            "\n"
            "import 'package:flutter/foundation.dart';\n"
            "import 'package:nstack/models/language.dart';\n"
            "import 'package:nstack/models/localize_index.dart';\n"
            "import 'package:nstack/models/nstack_config.dart';\n"
            "import 'package:nstack/nstack.dart';\n"
            "import 'package:nstack/partial/section_key_delegate.dart';\n"
            "\n"
            "// Update this file by running:\n"
            "// - `nstackgen build nstack.json`\n"
        )

    def section_class(self, type_name: str, section_key: str, members: List[Member]) -> str:
        lines = [
            f"class _{type_name} extends SectionKeyDelegate {{",
            f"\tconst _{type_name}(): super({section_key});",
            "",
        ]
        for member, key, default in members:
            lines.append(f"\tString get {member} => get({key}, {default});")
        lines.append("}")
        return "\n".join(lines) + "\n"

    def localization_class(self, fields: List[Tuple[str, str]]) -> str:
        lines = ["class Localization {"]
        for field_name, type_name in fields:
            lines.append(f"\tfinal {field_name} = const _{type_name}();")
        lines.append("")
        lines.append("\tconst Localization();")
        lines.append("}")
        return "\n".join(lines) + "\n"

    def config(self, project_id: str, api_key: str) -> str:
        return f"const _config = NStackConfig(projectId: {project_id}, apiKey: {api_key});\n"

    def language_entry(self, index_id: str, language: Dict[str, str]) -> str:
        return (
            f"\tLocalizeIndex(id: {index_id}, url: null, lastUpdatedAt: null, "
            f"shouldUpdate: false, language: Language("
            f"id: {language['id']}, name: {language['name']}, "
            f"locale: {language['locale']}, direction: {language['direction']}, "
            f"isDefault: {language['is_default']}, isBestFit: {language['is_best_fit']})),"
        )

    def language_list(self, entries: List[str]) -> str:
        return "final _languages = [\n" + "".join(f"{e}\n" for e in entries) + "];\n"

    def bundle(self, entries: List[Tuple[str, str]]) -> str:
        body = "".join(f"\t{locale}: {payload},\n" for locale, payload in entries)
        return "const _bundledTranslations = {\n" + body + "};\n"

    def nstack_instance(self) -> str:
        return (
            "final _nstack = NStack<Localization>(\n"
            "\tconfig: _config,\n"
            "\tlocalization: const Localization(),\n"
            "\tavailableLanguages: _languages,\n"
            "\tbundledTranslations: _bundledTranslations,\n"
            "\tpickedLanguageLocale: '',\n"
            "\tdebug: kDebugMode,\n"
            ");\n"
            "\n"
            "NStack<Localization> get nstack => _nstack;\n"
        )


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------

PYTHON_GENERATED_NAMES = frozenset({
    "Localization", "NStack", "NStackConfig", "Language", "LocalizeIndex",
    "SectionKeyDelegate", "get", "section_key", "annotations",
})


def _encode_python_char(char: str) -> str:
    return f"\\u{ord(char):04x}"


class PythonDialect(Dialect):
    """Python module importing its support classes from ``nstackgen.runtime``."""

    name = "python"
    output_extension = ".py"
    reserved_words = (
        frozenset(keyword.kwlist) | frozenset(keyword.softkwlist) | PYTHON_GENERATED_NAMES
    )
    escape_rules = EscapeRules(
        delimiter='"',
        replacements=[
            ("\\", "\\\\"),
            ('"', '\\"'),
            ("\n", "\\n"),
            ("\r", "\\r"),
            ("\x00", "\\x00"),
        ],
        forbidden=r"[\n\r\x00]",
        encoded=r"[\ud800-\udfff]",
        encode_char=_encode_python_char,
    )

    def is_identifier(self, name: str) -> bool:
        return name.isidentifier() and not keyword.iskeyword(name) and not name.startswith("__")

    def is_type_name(self, name: str) -> bool:
        # ``_{name}`` must not start with "__": it would be mangled inside Localization.
        return self.is_identifier(name) and not name.startswith("_")

    def string_literal(self, value: str) -> str:
        literal = super().string_literal(value)
        if _literal_eval(literal) != value:
            raise EscapeOverflowError(
                "Escaped literal does not round-trip through the Python parser",
                literal=literal[:80],
            )
        return literal

    def can_embed_raw(self, payload: str) -> bool:
        return _literal_eval(self.raw_literal(payload)) == payload

    def raw_literal(self, payload: str) -> str:
        return f"r'''{payload}'''"

    def bool_literal(self, value: bool) -> str:
        return "True" if value else "False"

    def header(self) -> str:
        return (
            '"""\n'
            "Generated by nstackgen, do not modify this file.\n"
            "\n"
            "Update this file by running:\n"
            "    nstackgen build nstack.json --target python\n"
            '"""\n'
            "\n"
            "from __future__ import annotations\n"
            "\n"
            "from nstackgen.runtime import (\n"
            "    Language,\n"
            "    LocalizeIndex,\n"
            "    NStack,\n"
            "    NStackConfig,\n"
            "    SectionKeyDelegate,\n"
            ")\n"
        )

    def section_class(self, type_name: str, section_key: str, members: List[Member]) -> str:
        lines = [
            f"class _{type_name}(SectionKeyDelegate):",
            "    def __init__(self) -> None:",
            f"        super().__init__({section_key})",
        ]
        for member, key, default in members:
            lines.extend([
                "",
                "    @property",
                f"    def {member}(self) -> str:",
                f"        return self.get({key}, {default})",
            ])
        return "\n".join(lines) + "\n"

    def localization_class(self, fields: List[Tuple[str, str]]) -> str:
        lines = ["class Localization:", "    def __init__(self) -> None:"]
        if not fields:
            lines.append("        pass")
        for field_name, type_name in fields:
            lines.append(f"        self.{field_name} = _{type_name}()")
        return "\n".join(lines) + "\n"

    def config(self, project_id: str, api_key: str) -> str:
        return f"_config = NStackConfig(project_id={project_id}, api_key={api_key})\n"

    def language_entry(self, index_id: str, language: Dict[str, str]) -> str:
        return (
            f"    LocalizeIndex(id={index_id}, url=None, last_updated_at=None, "
            f"should_update=False, language=Language("
            f"id={language['id']}, name={language['name']}, "
            f"locale={language['locale']}, direction={language['direction']}, "
            f"is_default={language['is_default']}, is_best_fit={language['is_best_fit']})),"
        )

    def language_list(self, entries: List[str]) -> str:
        return "_languages = [\n" + "".join(f"{e}\n" for e in entries) + "]\n"

    def bundle(self, entries: List[Tuple[str, str]]) -> str:
        body = "".join(f"    {locale}: {payload},\n" for locale, payload in entries)
        return "_bundled_translations = {\n" + body + "}\n"

    def nstack_instance(self) -> str:
        return (
            "_nstack = NStack(\n"
            "    config=_config,\n"
            "    localization=Localization(),\n"
            "    available_languages=_languages,\n"
            "    bundled_translations=_bundled_translations,\n"
            '    picked_language_locale="",\n'
            "    debug=__debug__,\n"
            ")\n"
            "\n"
            "nstack = _nstack\n"
        )


def _literal_eval(literal: str) -> Optional[object]:
    try:
        return ast.literal_eval(literal)
    except (SyntaxError, ValueError, UnicodeError):
        return None


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

DIALECTS: Dict[str, Type[Dialect]] = {
    DartDialect.name: DartDialect,
    PythonDialect.name: PythonDialect,
}


def get_dialect(name: str) -> Dialect:
    """Return a dialect instance by name."""
    try:
        return DIALECTS[name]()
    except KeyError:
        raise ConfigError(
            f"Unknown target '{name}', expected one of {sorted(DIALECTS)}",
            field="target",
        ) from None
