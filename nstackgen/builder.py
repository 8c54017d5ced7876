"""
nstackgen Builder — Drives one generation pass per triggered nstack.json.

Pipeline (per input asset):
    1. Match          — asset file name must equal the configured trigger, else no-op
    2. Parse config   — nstack_project_id / nstack_api_key, both non-blank
    3. Resolve        — fetch the language index, select the default language
    4. Fetch default  — fetch + decode the default localization document
    5. Fetch bundle   — raw payload of every language (concurrent or sequential)
    6. Emit           — header → sections → Localization → config → languages
                        → bundled translations → NStack instance
    7. Persist        — write the whole buffer to the output slot, atomically

Any failure in 2-7 is caught here, logged with the asset and stage, and ends
the pass without output. Nothing is written before the buffer is complete.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from nstackgen.build_step import BuildStep, change_extension
from nstackgen.engine.config import GeneratorSettings, get_settings, parse_nstack_config
from nstackgen.engine.errors import NStackGenError
from nstackgen.engine.logging import (
    BuildEventLogger,
    LogEntry,
    log_build_completed,
    log_build_failed,
    log_build_skipped,
    log_build_started,
)
from nstackgen.engine.repository import NStackRepository
from nstackgen.generators.bundle_generator import generate_bundle
from nstackgen.generators.dialects import Dialect, get_dialect
from nstackgen.generators.language_generator import generate_config, generate_languages
from nstackgen.generators.localization_generator import (
    generate_header,
    generate_localization,
    generate_nstack,
)
from nstackgen.generators.section_generator import generate_sections
from nstackgen.models import (
    LocalizationDocument,
    LocalizeIndex,
    NStackConfig,
    find_default_language,
)

logger = logging.getLogger("nstackgen.builder")

STAGE_PARSE_CONFIG = "parse_config"
STAGE_RESOLVE = "resolve"
STAGE_FETCH_DEFAULT = "fetch_default"
STAGE_FETCH_BUNDLE = "fetch_bundle"
STAGE_EMIT = "emit"
STAGE_PERSIST = "persist"

RepositoryFactory = Callable[[NStackConfig, GeneratorSettings], Any]


def _default_repository_factory(config: NStackConfig, settings: GeneratorSettings) -> NStackRepository:
    return NStackRepository(config, base_url=settings.api.base_url, timeout=settings.api.timeout)


class BuildResult:
    """Outcome of one pass: ``completed``, ``skipped`` or ``failed``."""

    def __init__(
        self,
        input_id: str,
        status: str,
        output_id: Optional[str] = None,
        stage: Optional[str] = None,
        error: Optional[NStackGenError] = None,
        duration_ms: float = 0.0,
    ):
        self.input_id = input_id
        self.status = status
        self.output_id = output_id
        self.stage = stage
        self.error = error
        self.duration_ms = duration_ms

    @property
    def completed(self) -> bool:
        return self.status == "completed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    def __repr__(self) -> str:
        return f"<BuildResult({self.input_id!r}, status={self.status!r}, stage={self.stage!r})>"


def generate_source(
    config: NStackConfig,
    document: LocalizationDocument,
    languages: List[LocalizeIndex],
    payloads: Mapping[str, str],
    dialect: Dialect,
) -> str:
    """
    Emit the complete artifact. Pure: identical inputs give byte-identical output.
    """
    blocks = [
        generate_header(dialect),
        generate_sections(document, dialect),
        generate_localization(document, dialect),
        generate_config(config, dialect),
        generate_languages(languages, dialect),
        generate_bundle(languages, payloads, dialect),
        generate_nstack(dialect),
    ]
    return "\n".join(block for block in blocks if block)


class NStackBuilder:
    """
    Builds ``nstack.dart`` (or ``nstack.py``) from ``nstack.json``.

    Usage:
        builder = NStackBuilder(load_settings())
        result = await builder.build(FileBuildStep("lib/nstack.json"))
        if result.failed:
            ...  # no output was written
    """

    def __init__(
        self,
        settings: Optional[GeneratorSettings] = None,
        repository_factory: Optional[RepositoryFactory] = None,
        event_logger: Optional[BuildEventLogger] = None,
    ):
        self.settings = settings or get_settings()
        self.dialect = get_dialect(self.settings.target)
        self._repository_factory = repository_factory or _default_repository_factory
        self._event_logger = event_logger

    @property
    def build_extensions(self) -> Dict[str, List[str]]:
        return {".json": [self.dialect.output_extension]}

    def matches(self, input_id: str) -> bool:
        return Path(input_id).name == self.settings.trigger

    def output_id(self, input_id: str) -> str:
        return change_extension(input_id, self.dialect.output_extension)

    async def build(self, build_step: BuildStep) -> BuildResult:
        """Run one pass. Never raises for pass failures; see ``BuildResult``."""
        input_id = build_step.input_id
        if not self.matches(input_id):
            logger.debug(f"Skipping {input_id}: does not match trigger '{self.settings.trigger}'")
            self._log(log_build_skipped(input_id, self.settings.trigger))
            return BuildResult(input_id, "skipped")

        started = time.monotonic()
        output_id = self.output_id(input_id)
        stage = STAGE_PARSE_CONFIG
        self._log(log_build_started(input_id, self.dialect.name))

        try:
            config = parse_nstack_config(await build_step.read_as_string())

            stage = STAGE_RESOLVE
            async with self._repository_factory(config, self.settings) as repository:
                languages = await repository.fetch_available_languages()
                default_index = find_default_language(languages)
                logger.info(f"Found the default language: {default_index.language.locale}")

                stage = STAGE_FETCH_DEFAULT
                logger.info(f"Fetching default localization from: {default_index.url}")
                default_content = await repository.fetch_localization_for_language(default_index)
                document = LocalizationDocument.from_content(default_content)

                stage = STAGE_FETCH_BUNDLE
                payloads = await self._fetch_payloads(
                    repository, languages, default_index, default_content
                )

            stage = STAGE_EMIT
            content = generate_source(config, document, languages, payloads, self.dialect)

            stage = STAGE_PERSIST
            await build_step.write_as_string(output_id, content)
        except NStackGenError as e:
            e.with_context(asset=input_id, stage=stage)
            logger.error(f"Build of {input_id} failed at {stage}: {e.error_type}: {e.message}")
            return self._failed(input_id, stage, e, started)
        except Exception as e:
            error = NStackGenError(
                f"Unexpected {type(e).__name__}: {e}", asset=input_id, stage=stage
            )
            logger.exception(f"Build of {input_id} failed at {stage}")
            return self._failed(input_id, stage, error, started)

        duration_ms = round((time.monotonic() - started) * 1000, 2)
        self._log(log_build_completed(
            input_id,
            output=output_id,
            duration_ms=duration_ms,
            sections=len(document.sections),
            keys=document.key_count,
            languages=len(languages),
        ))
        logger.info(
            f"Generated {output_id}: {len(document.sections)} sections, "
            f"{document.key_count} keys, {len(languages)} languages"
        )
        return BuildResult(input_id, "completed", output_id=output_id, duration_ms=duration_ms)

    async def build_all(self, build_steps: List[BuildStep]) -> List[BuildResult]:
        """Run independent passes concurrently; results follow input order."""
        return list(await asyncio.gather(*(self.build(step) for step in build_steps)))

    async def _fetch_payloads(
        self,
        repository: Any,
        languages: List[LocalizeIndex],
        default_index: LocalizeIndex,
        default_content: str,
    ) -> Dict[str, str]:
        """
        Fetch the raw payload of every listed language, keyed by locale in
        list order. The default payload is reused, not fetched again.
        """
        pending = [index for index in languages if index is not default_index]

        if self.settings.api.concurrent_fetch:
            tasks = [
                asyncio.ensure_future(repository.fetch_localization_for_language(index))
                for index in pending
            ]
            try:
                contents = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        else:
            contents = [
                await repository.fetch_localization_for_language(index) for index in pending
            ]

        fetched = {id(index): content for index, content in zip(pending, contents)}
        fetched[id(default_index)] = default_content
        return {index.language.locale: fetched[id(index)] for index in languages}

    def _failed(
        self,
        input_id: str,
        stage: str,
        error: NStackGenError,
        started: float,
    ) -> BuildResult:
        duration_ms = round((time.monotonic() - started) * 1000, 2)
        self._log(log_build_failed(input_id, stage, duration_ms, error.to_dict()))
        return BuildResult(input_id, "failed", stage=stage, error=error, duration_ms=duration_ms)

    def _log(self, entry: LogEntry) -> None:
        if self._event_logger is None:
            return
        try:
            self._event_logger.write(entry)
        except OSError as e:
            logger.warning(f"Could not write build log entry: {e}")
