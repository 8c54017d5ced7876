"""Unit tests for nstackgen.generators — sections, facade, registry, bundle."""

import pytest

from nstackgen.engine.errors import (
    InvalidIdentifierError,
    InvariantViolationError,
    RetrievalError,
)
from nstackgen.generators.bundle_generator import generate_bundle
from nstackgen.generators.dialects import DartDialect, PythonDialect, get_dialect
from nstackgen.generators.language_generator import generate_config, generate_languages
from nstackgen.generators.localization_generator import (
    generate_header,
    generate_localization,
    generate_nstack,
)
from nstackgen.generators.section_generator import generate_section, generate_sections
from nstackgen.models import LocalizationDocument

DART = DartDialect()
PYTHON = PythonDialect()


def _exec_python(*blocks: str) -> dict:
    namespace: dict = {}
    exec(compile("\n".join(blocks), "nstack.py", "exec"), namespace)
    return namespace


class TestSectionGenerator:
    def test_dart_section(self):
        document = LocalizationDocument.from_sections({"general": {"appName": "My App", "ok": "OK"}})
        code = generate_sections(document, DART)
        assert code == (
            "class _General extends SectionKeyDelegate {\n"
            '\tconst _General(): super("general");\n'
            "\n"
            '\tString get appName => get("appName", "My App");\n'
            '\tString get ok => get("ok", "OK");\n'
            "}\n"
        )

    def test_reserved_section_key_keeps_original_lookup_key(self):
        document = LocalizationDocument.from_sections({"default": {"title": "Title"}})
        code = generate_sections(document, DART)
        assert "class _DefaultSection extends SectionKeyDelegate" in code
        assert 'super("default")' in code

    def test_reserved_translation_key(self):
        code = generate_section("General", "general", {"continue": "Continue"}, DART)
        assert 'String get continue_ => get("continue", "Continue");' in code

    def test_empty_section_is_valid(self):
        code = generate_section("Empty", "empty", {}, PYTHON)
        namespace = _exec_python(generate_header(PYTHON), code)
        assert namespace["_Empty"]().section_key == "empty"

    def test_members_follow_insertion_order(self):
        document = LocalizationDocument.from_sections({"s": {"zeta": "z", "alpha": "a", "mid": "m"}})
        code = generate_sections(document, DART)
        assert code.index("zeta") < code.index("alpha") < code.index("mid")

    def test_python_accessor_falls_back_to_default(self):
        document = LocalizationDocument.from_sections({"general": {"appName": 'He said "hi"'}})
        namespace = _exec_python(generate_header(PYTHON), generate_sections(document, PYTHON))
        assert namespace["_General"]().appName == 'He said "hi"'

    def test_invalid_key_surfaces(self):
        document = LocalizationDocument.from_sections({"general": {"app-name": "x"}})
        with pytest.raises(InvalidIdentifierError):
            generate_sections(document, DART)

    def test_python_underscore_section_is_rejected(self):
        document = LocalizationDocument.from_sections({"_private": {"title": "T"}})
        with pytest.raises(InvalidIdentifierError):
            generate_sections(document, PYTHON)
        with pytest.raises(InvalidIdentifierError):
            generate_localization(document, PYTHON)

    def test_python_underscore_member_runs(self):
        document = LocalizationDocument.from_sections({"private": {"_title": "T"}})
        namespace = _exec_python(
            generate_header(PYTHON),
            generate_sections(document, PYTHON),
            generate_localization(document, PYTHON),
        )
        assert namespace["Localization"]().private._title == "T"

    def test_dart_object_members_are_not_overridden(self):
        document = LocalizationDocument.from_sections(
            {"hashCode": {"toString": "x", "runtimeType": "y"}}
        )
        sections = generate_sections(document, DART)
        assert "class _HashCodeSection extends SectionKeyDelegate {" in sections
        assert 'String get toString_ => get("toString", "x");' in sections
        assert 'String get runtimeType_ => get("runtimeType", "y");' in sections
        assert "String get toString =>" not in sections
        assert "\tfinal hashCodeSection = const _HashCodeSection();" in generate_localization(document, DART)

    def test_no_sections(self):
        assert generate_sections(LocalizationDocument(), DART) == ""


class TestLocalizationGenerator:
    def test_dart_fields_in_document_order(self):
        document = LocalizationDocument.from_sections({"login": {}, "general": {}, "class": {}})
        code = generate_localization(document, DART)
        assert code == (
            "class Localization {\n"
            "\tfinal login = const _Login();\n"
            "\tfinal general = const _General();\n"
            "\tfinal classSection = const _ClassSection();\n"
            "\n"
            "\tconst Localization();\n"
            "}\n"
        )

    def test_empty_facade_dart(self):
        code = generate_localization(LocalizationDocument(), DART)
        assert code == "class Localization {\n\n\tconst Localization();\n}\n"

    def test_empty_facade_python(self):
        namespace = _exec_python(
            generate_header(PYTHON), generate_localization(LocalizationDocument(), PYTHON)
        )
        assert vars(namespace["Localization"]()) == {}

    def test_python_facade_wires_section_types(self):
        document = LocalizationDocument.from_sections({"general": {"appName": "My App"}, "if": {}})
        namespace = _exec_python(
            generate_header(PYTHON),
            generate_sections(document, PYTHON),
            generate_localization(document, PYTHON),
        )
        localization = namespace["Localization"]()
        assert localization.general.appName == "My App"
        assert localization.ifSection.section_key == "if"

    def test_nstack_instance_dart(self):
        code = generate_nstack(DART)
        assert "final _nstack = NStack<Localization>(" in code
        assert "\tpickedLanguageLocale: '',\n" in code
        assert "\tdebug: kDebugMode,\n" in code


class TestLanguageGenerator:
    def test_config_is_escaped(self, nstack_config):
        code = generate_config(nstack_config.model_copy(update={"api_key": 'k"$y'}), DART)
        assert code == 'const _config = NStackConfig(projectId: "proj-123", apiKey: "k\\"\\$y");\n'

    def test_dart_language_list(self, default_languages):
        code = generate_languages(default_languages, DART)
        assert code.startswith("final _languages = [\n")
        assert (
            'Language(id: 1, name: "English", locale: "en", direction: "LRM", '
            "isDefault: true, isBestFit: false)"
        ) in code
        assert code.index('locale: "en"') < code.index('locale: "da"')

    def test_urls_are_not_embedded(self, default_languages):
        for dialect in (DART, PYTHON):
            code = generate_languages(default_languages, dialect)
            assert "cdn.nstack.io" not in code
            assert "2026-01-01" not in code

    def test_python_language_list(self, default_languages):
        namespace = _exec_python(generate_header(PYTHON), generate_languages(default_languages, PYTHON))
        languages = namespace["_languages"]
        assert [index.language.locale for index in languages] == ["en", "da"]
        assert languages[0].url is None
        assert languages[0].language.is_default is True
        assert languages[1].language.is_best_fit is True

    def test_missing_default_is_invariant_violation(self, index_factory):
        languages = [index_factory(1, "en"), index_factory(2, "da")]
        with pytest.raises(InvariantViolationError):
            generate_languages(languages, DART)


class TestBundleGenerator:
    def test_keys_follow_language_list(self, default_languages, default_payloads):
        payloads = dict(default_payloads, de='{"data": {}}')
        namespace = _exec_python(
            generate_header(PYTHON), generate_bundle(default_languages, payloads, PYTHON)
        )
        bundle = namespace["_bundled_translations"]
        assert list(bundle) == ["en", "da"]
        assert bundle["en"] == default_payloads["en"]
        assert bundle["da"] == default_payloads["da"]

    def test_dart_uses_raw_literals(self, default_languages, default_payloads):
        code = generate_bundle(default_languages, default_payloads, DART)
        assert code.startswith("const _bundledTranslations = {\n")
        assert f"\t\"en\": r'''{default_payloads['en']}''',\n" in code

    def test_dart_falls_back_to_escaping(self, index_factory):
        languages = [index_factory(1, "en", is_default=True)]
        code = generate_bundle(languages, {"en": "it's '''odd'''"}, DART)
        assert "\"en\": \"it's '''odd'''\"," in code

    def test_missing_payload_fails(self, default_languages, default_payloads):
        with pytest.raises(RetrievalError):
            generate_bundle(default_languages, {"en": default_payloads["en"]}, DART)

    def test_duplicate_locale_fails(self, index_factory):
        languages = [index_factory(1, "en", is_default=True), index_factory(2, "en")]
        with pytest.raises(InvariantViolationError):
            generate_bundle(languages, {"en": "{}"}, DART)


class TestDialectRegistry:
    def test_lookup(self):
        assert isinstance(get_dialect("dart"), DartDialect)
        assert get_dialect("python").output_extension == ".py"

    def test_unknown_target(self):
        from nstackgen.engine.errors import ConfigError

        with pytest.raises(ConfigError):
            get_dialect("kotlin")
