"""
Country -> language lookup client.

Resolves ISO 3166 alpha-3 country codes (as used in the packed
EnAdditionalInfo field) to ISO 639-1 language codes through a
REST Countries style HTTP service, with:
- Exponential backoff retry on timeouts, network errors and 5xx
- No retry on 404 (unknown country code)
- Per-process caching of successful answers
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx

from core.config import settings
from core.exceptions import (
    LanguageLookupError,
    NetworkError,
    ResourceNotFoundError
)

logger = logging.getLogger(__name__)


class LanguageLookup(ABC):
    """Resolves a country code to a language code"""

    @abstractmethod
    async def get_language_code(self, country_code: str) -> str:
        """
        Raises:
            LanguageLookupError: If the country cannot be resolved
        """
        pass


class CountryLanguageClient(LanguageLookup):
    """
    HTTP implementation of LanguageLookup.

    Attributes:
        lookup_url: URL template with a {code} placeholder
        max_retries: Maximum number of attempts per lookup (default: settings.MAX_RETRIES)
        retry_delay: Initial retry delay in seconds (default: 0.5)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        lookup_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_delay: float = 0.5,
        timeout: Optional[float] = None
    ):
        self.lookup_url = lookup_url or settings.LANGUAGE_LOOKUP_URL
        self.max_retries = max_retries or settings.MAX_RETRIES
        self.retry_delay = retry_delay
        self.timeout = timeout or settings.LANGUAGE_LOOKUP_TIMEOUT
        self._cache: Dict[str, str] = {}

    async def get_language_code(self, country_code: str) -> str:
        if country_code in self._cache:
            return self._cache[country_code]

        url = self.lookup_url.format(code=country_code)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await self._get_with_retry(client, url, country_code)

        language_code = self._parse_language_code(response, country_code, url)
        self._cache[country_code] = language_code
        logger.debug(f"Resolved {country_code} -> {language_code}")
        return language_code

    async def _get_with_retry(
        self,
        client: httpx.AsyncClient,
        url: str,
        country_code: str
    ) -> httpx.Response:
        context = {"country_code": country_code, "lookup_url": url}

        for attempt in range(self.max_retries):
            delay = self.retry_delay * (2 ** attempt)
            last_attempt = attempt == self.max_retries - 1

            try:
                response = await client.get(url)
            except httpx.TransportError as e:
                if last_attempt:
                    raise NetworkError(
                        f"Language lookup failed after {self.max_retries} attempts",
                        context={**context, "retry_count": attempt + 1},
                        original_exception=e
                    )
                logger.warning(f"Language lookup for {country_code} failed ({type(e).__name__}). Retrying in {delay} seconds")
                await asyncio.sleep(delay)
                continue
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise LanguageLookupError(
                    "Language lookup request failed",
                    context=context,
                    original_exception=e
                )

            if response.status_code == 404:
                raise ResourceNotFoundError(
                    f"Unknown country code: {country_code}",
                    context={**context, "status_code": 404}
                )

            if response.status_code >= 500:
                if last_attempt:
                    raise NetworkError(
                        f"Server error after {self.max_retries} attempts",
                        context={
                            **context,
                            "status_code": response.status_code,
                            "retry_count": attempt + 1,
                            "response_body": response.text[:500]
                        }
                    )
                logger.warning(f"Language lookup server error {response.status_code}. Retrying in {delay} seconds")
                await asyncio.sleep(delay)
                continue

            if response.status_code >= 400:
                raise LanguageLookupError(
                    f"Language lookup rejected with HTTP {response.status_code}",
                    context={**context, "status_code": response.status_code}
                )

            return response

        raise LanguageLookupError("Max retries exceeded", context=context)

    @staticmethod
    def _parse_language_code(response: httpx.Response, country_code: str, url: str) -> str:
        try:
            data = response.json()
            if isinstance(data, list):
                data = data[0]
            language_code = data["languages"][0]["iso639_1"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LanguageLookupError(
                "Unexpected language lookup response",
                context={"country_code": country_code, "lookup_url": url},
                original_exception=e
            )

        if not language_code:
            raise LanguageLookupError(
                "Country has no ISO 639-1 language",
                context={"country_code": country_code, "lookup_url": url}
            )
        return language_code
