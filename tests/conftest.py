"""
nstackgen Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import pytest

from nstackgen.engine.config import GeneratorSettings
from nstackgen.engine.errors import RetrievalError
from nstackgen.models import Language, LocalizeIndex, NStackConfig


# ---------------------------------------------------------------------------
# Isolation — reset module-level state between tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_state():
    """Reset cached settings and the runtime localization store."""
    import nstackgen.engine.config as cfg_mod
    from nstackgen.runtime import get_active_store

    cfg_mod._settings = None
    get_active_store().clear()
    yield
    get_active_store().clear()


# ---------------------------------------------------------------------------
# Builders for test data
# ---------------------------------------------------------------------------

def make_index(
    index_id: int,
    locale: str,
    is_default: bool = False,
    name: str = "",
    url: Optional[str] = None,
    is_best_fit: bool = False,
) -> LocalizeIndex:
    return LocalizeIndex(
        id=index_id,
        url=url if url is not None else f"https://cdn.nstack.io/localize/{locale}.json",
        last_updated_at="2026-01-01T00:00:00+00:00",
        should_update=True,
        language=Language(
            id=index_id,
            name=name or locale,
            locale=locale,
            direction="LRM",
            is_default=is_default,
            is_best_fit=is_best_fit,
        ),
    )


def make_payload(sections: Dict[str, Dict[str, str]]) -> str:
    return json.dumps({"data": sections, "meta": {"language": {}, "platform": {}}})


class FakeRepository:
    """In-memory resolver; records every fetch."""

    def __init__(
        self,
        languages: List[LocalizeIndex],
        payloads: Dict[str, str],
        failing_locales: tuple = (),
        fail_languages: bool = False,
    ):
        self.languages = languages
        self.payloads = payloads
        self.failing_locales = failing_locales
        self.fail_languages = fail_languages
        self.fetched: List[str] = []
        self.closed = False

    async def __aenter__(self) -> "FakeRepository":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.closed = True

    async def fetch_available_languages(self) -> List[LocalizeIndex]:
        if self.fail_languages:
            raise RetrievalError("language index unavailable", status_code=503)
        return list(self.languages)

    async def fetch_localization_for_language(self, index: LocalizeIndex) -> str:
        locale = index.language.locale
        self.fetched.append(locale)
        if locale in self.failing_locales:
            raise RetrievalError(f"fetch failed for {locale}", status_code=500, url=index.url)
        return self.payloads[locale]


@pytest.fixture
def index_factory() -> Callable[..., LocalizeIndex]:
    return make_index


@pytest.fixture
def payload_factory() -> Callable[[Dict[str, Dict[str, str]]], str]:
    return make_payload


@pytest.fixture
def default_languages() -> List[LocalizeIndex]:
    """English (default) + Danish."""
    return [
        make_index(1, "en", is_default=True, name="English"),
        make_index(2, "da", name="Danish", is_best_fit=True),
    ]


@pytest.fixture
def default_payloads() -> Dict[str, str]:
    return {
        "en": make_payload({"general": {"appName": "My App", "ok": "OK"}, "login": {"title": "Log in"}}),
        "da": make_payload({"general": {"appName": "Min App", "ok": "OK"}, "login": {"title": "Log ind"}}),
    }


@pytest.fixture
def fake_repository(default_languages, default_payloads) -> FakeRepository:
    return FakeRepository(default_languages, default_payloads)


@pytest.fixture
def repository_class():
    return FakeRepository


@pytest.fixture
def nstack_config() -> NStackConfig:
    return NStackConfig(project_id="proj-123", api_key="key-abc")


@pytest.fixture
def dart_settings() -> GeneratorSettings:
    return GeneratorSettings(target="dart")


@pytest.fixture
def python_settings() -> GeneratorSettings:
    return GeneratorSettings(target="python")


@pytest.fixture
def project_root(tmp_path):
    """
    Create a minimal Flutter-style project with lib/nstack.json.
    Returns the root Path.
    """
    root = tmp_path / "project"
    (root / "lib").mkdir(parents=True)
    (root / "lib" / "nstack.json").write_text(
        json.dumps({"nstack_project_id": "proj-123", "nstack_api_key": "key-abc"}),
        encoding="utf-8",
    )
    return root
