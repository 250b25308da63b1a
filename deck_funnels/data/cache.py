"""In-memory cache of resolved funnel data, keyed by (data source id, format)."""

import logging

from deck_funnels.data.schemas import FunnelData, SourceFormat

logger = logging.getLogger(__name__)

CacheKey = tuple[str, SourceFormat]


class FunnelDataCache:
    """Mapping from (data source id, format) to resolved FunnelData.

    Entries live for the lifetime of the cache; there is no eviction since
    the number of datasets is bounded by the authored deck. Concurrent
    resolutions of the same key are not deduplicated: the last put wins.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, FunnelData] = {}

    def get(self, data_source_id: str, source_format: SourceFormat) -> FunnelData | None:
        data = self._entries.get((data_source_id, SourceFormat(source_format)))
        if data is not None:
            logger.debug(f"Cache hit: {data_source_id} ({source_format})")
        return data

    def put(self, data_source_id: str, source_format: SourceFormat, data: FunnelData) -> None:
        key = (data_source_id, SourceFormat(source_format))
        if key in self._entries:
            logger.debug(f"Overwriting cached data: {data_source_id} ({source_format})")
        self._entries[key] = data

    def keys(self) -> list[CacheKey]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
