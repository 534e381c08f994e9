"""
EVSE feed extractor for local JSON documents and HTTP endpoints
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from core.config import settings
from core.exceptions import FeedExtractionError, InvalidFeedError
from schemas.feed import EvseDataRoot

logger = logging.getLogger(__name__)


class FeedExtractor:
    """
    Fetch the EVSE feed document and validate it.

    Supports:
    - Local JSON files
    - http(s) URLs with retry and exponential backoff
    """

    def __init__(
        self,
        source: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_delay: float = 1.0,
        timeout: float = 60.0
    ):
        self.source = source or settings.FEED_SOURCE
        self.max_retries = max_retries or settings.MAX_RETRIES
        self.retry_delay = retry_delay
        self.timeout = timeout

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))

    async def fetch(self) -> EvseDataRoot:
        """
        Returns:
            Validated feed document

        Raises:
            FeedExtractionError: If the document cannot be read
            InvalidFeedError: If it is not valid JSON or not a feed
        """
        if self.is_remote:
            document = await self._fetch_remote()
        else:
            document = self._read_file()

        try:
            feed = EvseDataRoot(**document)
        except ValidationError as e:
            raise InvalidFeedError(
                "Feed document does not match the EVSE data schema",
                context={"source": self.source, "error_count": e.error_count()},
                original_exception=e
            )
        except TypeError as e:
            raise InvalidFeedError(
                "Feed document is not a JSON object",
                context={"source": self.source},
                original_exception=e
            )

        logger.info(
            f"Fetched feed from {self.source}: {len(feed.operators)} operators, "
            f"{sum(len(o.evse_data_records) for o in feed.operators)} EVSE records"
        )
        return feed

    def _read_file(self) -> Dict[str, Any]:
        path = Path(self.source)
        if not path.exists():
            raise FeedExtractionError(
                f"Feed file not found: {path}",
                context={"source": self.source}
            )

        logger.info(f"Reading feed from {path}")
        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidFeedError(
                "Feed file is not valid JSON",
                context={"source": self.source, "line": e.lineno},
                original_exception=e
            )
        except OSError as e:
            raise FeedExtractionError(
                "Failed to read feed file",
                context={"source": self.source},
                original_exception=e
            )

    async def _fetch_remote(self) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for attempt in range(self.max_retries):
                delay = self.retry_delay * (2 ** attempt)
                last_attempt = attempt == self.max_retries - 1

                try:
                    logger.info(f"Fetching feed from {self.source} (attempt {attempt + 1}/{self.max_retries})")
                    response = await client.get(self.source)
                except httpx.TransportError as e:
                    if last_attempt:
                        raise FeedExtractionError(
                            f"Feed download failed after {self.max_retries} attempts",
                            context={"source": self.source, "retry_count": attempt + 1},
                            original_exception=e
                        )
                    logger.warning(f"Feed download failed ({type(e).__name__}). Retrying in {delay} seconds")
                    await asyncio.sleep(delay)
                    continue
                except (httpx.HTTPError, httpx.InvalidURL) as e:
                    raise FeedExtractionError(
                        "Feed download request failed",
                        context={"source": self.source},
                        original_exception=e
                    )

                if response.status_code >= 500 and not last_attempt:
                    logger.warning(f"Feed server error {response.status_code}. Retrying in {delay} seconds")
                    await asyncio.sleep(delay)
                    continue

                if response.status_code >= 400:
                    raise FeedExtractionError(
                        f"Feed download rejected with HTTP {response.status_code}",
                        context={
                            "source": self.source,
                            "status_code": response.status_code,
                            "response_body": response.text[:500]
                        }
                    )

                try:
                    return response.json()
                except ValueError as e:
                    raise InvalidFeedError(
                        "Feed response is not valid JSON",
                        context={"source": self.source, "response_body": response.text[:500]},
                        original_exception=e
                    )

        raise FeedExtractionError("Max retries exceeded", context={"source": self.source})
