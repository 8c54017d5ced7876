"""
nstackgen Repository — NStack content API client used by the build pass.

Two calls, both authenticated with the project credentials:
    1. fetch_available_languages()           → List[LocalizeIndex]
    2. fetch_localization_for_language(idx)  → raw payload text (verbatim)

Uses httpx.AsyncClient (one client per repository, closed by ``aclose()``).
No retry: a failed call raises RetrievalError and the pass fails.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from nstackgen.engine.errors import RetrievalError
from nstackgen.models import LocalizeIndex, NStackConfig

logger = logging.getLogger("nstackgen.engine.repository")

LANGUAGES_PATH = "/api/v2/content/localize/resources/platforms/mobile"


class NStackRepository:
    """
    Resolver for the language index and per-language payloads.

    Usage:
        async with NStackRepository(config) as repository:
            languages = await repository.fetch_available_languages()
            content = await repository.fetch_localization_for_language(languages[0])
    """

    def __init__(
        self,
        config: NStackConfig,
        base_url: str = "https://nstack.io",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            headers={
                "Accept": "application/json",
                "X-Application-Id": config.project_id,
                "X-Rest-Api-Key": config.api_key,
            },
            timeout=httpx.Timeout(timeout, connect=10.0),
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "NStackRepository":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, url: str, params: Optional[dict] = None) -> httpx.Response:
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise RetrievalError(f"Request to {url} failed: {e}", url=url) from e

        if response.is_error:
            raise RetrievalError(
                f"Request to {url} returned HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
                response_body=response.text[:500],
            )
        return response

    async def fetch_available_languages(self) -> List[LocalizeIndex]:
        """
        Fetch the language index for the project.

        Raises:
            RetrievalError: transport failure, error status, or a body that is
                not ``{"data": [LocalizeIndex, ...]}``.
        """
        url = f"{self.base_url}{LANGUAGES_PATH}"
        response = await self._get(url, params={"dev": "true"})

        try:
            body = response.json()
        except ValueError as e:
            raise RetrievalError(f"Language index from {url} is not JSON", url=url) from e

        entries = body.get("data") if isinstance(body, dict) else None
        if not isinstance(entries, list):
            raise RetrievalError(f"Language index from {url} has no 'data' list", url=url)

        try:
            languages = [LocalizeIndex.model_validate(entry) for entry in entries]
        except ValidationError as e:
            raise RetrievalError(
                f"Language index from {url} is malformed: {e.errors()[0]['msg']}",
                url=url,
            ) from e

        logger.info(f"Fetched {len(languages)} languages for project {self.config.project_id}")
        return languages

    async def fetch_localization_for_language(self, index: LocalizeIndex) -> str:
        """
        Fetch the raw localization payload for one language.

        Raises:
            RetrievalError: no URL on the index entry, transport failure or
                error status.
        """
        if not index.url:
            raise RetrievalError(
                f"Language '{index.language.locale}' has no content URL",
                locale=index.language.locale,
            )
        response = await self._get(index.url)
        logger.debug(f"Fetched localization for {index.language.locale} from {index.url}")
        return response.text
