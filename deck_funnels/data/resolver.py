"""
Resolve the funnel data for a container.

Resolution order, first success wins:
1. Inline config in an HTML comment inside the container (not cached)
2. Cache lookup by (data source id, format)
3. Fetched data file (JSON used as-is, CSV parsed); cached on success
4. Built-in fallback dataset, for the "default" data source only
5. None: the caller skips the container
"""

import json
import logging

import numpy as np
from pydantic import ValidationError

from deck_funnels.data.cache import FunnelDataCache
from deck_funnels.data.defaults import DEFAULT_DATA_SOURCE, FALLBACK_FUNNEL
from deck_funnels.data.parsers import ColorPolicy, parse_csv, parse_inline_config
from deck_funnels.data.schemas import ContainerDescriptor, FunnelData, SourceFormat
from deck_funnels.data.sources import DataSource

logger = logging.getLogger(__name__)


class DataResolver:
    """Resolves canonical funnel data for container descriptors."""

    def __init__(
        self,
        source: DataSource,
        cache: FunnelDataCache | None = None,
        *,
        color_policy: ColorPolicy = "palette",
        rng: np.random.Generator | None = None,
        default_data_source: str = DEFAULT_DATA_SOURCE,
    ):
        self.source = source
        self.cache = cache if cache is not None else FunnelDataCache()
        self.color_policy = color_policy
        self.rng = rng if rng is not None else np.random.default_rng()
        self.default_data_source = default_data_source

    async def resolve(self, container: ContainerDescriptor) -> FunnelData | None:
        """Resolve data for a container.

        Returns:
            FunnelData, or None when nothing could be resolved (logged)
        """
        data = self.from_inline(container)
        if data is not None:
            logger.debug(f"Using inline config for {container.id}")
            return data

        data_id, fmt = container.data_source_id, container.format

        data = self.cache.get(data_id, fmt)
        if data is not None:
            return data

        data = await self.fetch(data_id, fmt)
        if data is not None:
            self.cache.put(data_id, fmt, data)
            return data

        if data_id == self.default_data_source:
            logger.info(f"Using built-in fallback data for {container.id}")
            return FALLBACK_FUNNEL

        logger.error(f"No data available for funnel chart: {data_id}")
        return None

    def from_inline(self, container: ContainerDescriptor) -> FunnelData | None:
        """First inline comment config carrying a valid data payload."""
        for text in container.inline_configs:
            config = parse_inline_config(text)
            if not config or not config.get("data"):
                continue
            try:
                return FunnelData.model_validate(config["data"])
            except ValidationError as e:
                logger.warning(
                    f"Invalid inline data in {container.id}: {e.error_count()} errors"
                )
        return None

    async def fetch(self, data_source_id: str, source_format: SourceFormat) -> FunnelData | None:
        """Fetch and decode a data file, or None on failure (logged)."""
        text = await self.source.fetch(data_source_id, source_format)
        if text is None:
            return None

        if SourceFormat(source_format) is SourceFormat.CSV:
            return parse_csv(text, color_policy=self.color_policy, rng=self.rng)

        try:
            return FunnelData.model_validate(json.loads(text))
        except json.JSONDecodeError as e:
            logger.warning(f"Error loading funnel data ({data_source_id}): invalid JSON: {e}")
        except ValidationError as e:
            logger.warning(
                f"Error loading funnel data ({data_source_id}): "
                f"{e.error_count()} validation errors"
            )
        return None
