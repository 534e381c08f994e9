"""
Extract per-language station names and additional info.

The feed carries the localized content in two places:

- ChargingStationName (German) and EnChargingStationName (English) are
  plain strings.
- EnAdditionalInfo packs the additional info of several languages into
  one string, each segment prefixed with an ISO 3166 alpha-3 code and
  terminated by "|||":

      "DEU:Inhalt|||GBR:Content|||FRA:Objet|||"

Each segment becomes one translation row. The two name fields are
attached to the rows of their anchor codes; when the packed field has no
segment for an anchor, a row carrying only the name is backfilled.
"""

import asyncio
import logging
import re
from typing import Dict, Iterable, List, NamedTuple, Optional

from ingestion.extractors.language_client import LanguageLookup
from schemas.feed import EvseDataRecord
from schemas.normalized import StationTranslationRow
from core.exceptions import LanguageLookupError

logger = logging.getLogger(__name__)

SEGMENT_DELIMITER = "|||"
PRIMARY_ANCHOR_CODE = "DEU"
ALTERNATE_ANCHOR_CODE = "GBR"

_COUNTRY_CODE = re.compile(r"[A-Z]{3}")


class LocalizedSegment(NamedTuple):
    country_code: str
    text: Optional[str]


def tokenize_localized_info(packed: Optional[str]) -> List[LocalizedSegment]:
    """
    Split a packed multi-language field into (country code, text) segments.

    Only delimiter-terminated segments count; trailing text after the last
    delimiter is ignored. A segment whose part before the first colon is
    not a three-letter upper-case code is skipped.
    """
    if not packed:
        return []

    tokens = packed.split(SEGMENT_DELIMITER)[:-1]
    segments = []

    for token in tokens:
        code, colon, text = token.partition(":")
        code = code.strip()
        if not colon or not _COUNTRY_CODE.fullmatch(code):
            logger.debug(f"Skipping localized segment without country code: {token!r}")
            continue
        segments.append(LocalizedSegment(code, text.strip()))

    return segments


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class LocalizationExtractor:
    """
    Build translation rows for a batch of EVSE records.

    Country codes are translated to language codes through the injected
    lookup. A failed lookup falls back to the country code itself and is
    recorded in `fallbacks`.
    """

    def __init__(
        self,
        language_lookup: LanguageLookup,
        primary_code: str = PRIMARY_ANCHOR_CODE,
        alternate_code: str = ALTERNATE_ANCHOR_CODE
    ):
        self.language_lookup = language_lookup
        self.primary_code = primary_code
        self.alternate_code = alternate_code
        self.fallbacks: Dict[str, str] = {}

    def station_segments(self, record: EvseDataRecord) -> List[LocalizedSegment]:
        """
        Segments for one station, anchor backfills appended.

        Names are resolved later; a backfilled segment is marked by
        text None.
        """
        segments = tokenize_localized_info(record.en_additional_info)
        present = {segment.country_code for segment in segments}

        if self.alternate_code not in present and not _is_blank(record.en_charging_station_name):
            segments.append(LocalizedSegment(self.alternate_code, None))

        if self.primary_code not in present and not _is_blank(record.charging_station_name):
            segments.append(LocalizedSegment(self.primary_code, None))

        return segments

    def _station_name(self, record: EvseDataRecord, country_code: str) -> Optional[str]:
        if country_code == self.alternate_code:
            return record.en_charging_station_name
        if country_code == self.primary_code:
            return record.charging_station_name
        return None

    async def _language_code(self, country_code: str) -> str:
        try:
            return await self.language_lookup.get_language_code(country_code)
        except LanguageLookupError as e:
            logger.warning(
                f"Language lookup failed for {country_code}, using country code as language code: {e.message}"
            )
            self.fallbacks[country_code] = e.message
            return country_code

    async def resolve_language_codes(self, country_codes: Iterable[str]) -> Dict[str, str]:
        """Look up every distinct country code once, concurrently"""
        codes = sorted(set(country_codes))
        languages = await asyncio.gather(*(self._language_code(code) for code in codes))
        return dict(zip(codes, languages))

    async def extract(self, records: List[EvseDataRecord]) -> List[StationTranslationRow]:
        """
        Returns:
            Translation rows in record order, scanned segments first and
            backfilled anchors after them
        """
        per_station = [(record, self.station_segments(record)) for record in records]

        languages = await self.resolve_language_codes(
            segment.country_code
            for _, segments in per_station
            for segment in segments
        )

        rows = []
        for record, segments in per_station:
            for segment in segments:
                rows.append(
                    StationTranslationRow(
                        station_id=record.evse_id,
                        language_code=languages[segment.country_code],
                        charging_station_name=self._station_name(record, segment.country_code),
                        additional_info=segment.text
                    )
                )

        logger.info(f"Extracted {len(rows)} translation rows from {len(records)} records")
        return rows
