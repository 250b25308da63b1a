"""Data sources that fetch funnel data files.

Two implementations share one interface:
- HttpDataSource: fetches over HTTP(S) relative to a base URL (httpx)
- LocalDataSource: reads files under a root directory

Both return the raw body text, or None when the file can't be obtained.
Failures are logged here and never raised to the resolver.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import httpx

from deck_funnels.data.schemas import SourceFormat
from deck_funnels.exceptions import DataSourceError

logger = logging.getLogger(__name__)


class DataSource(ABC):
    """Fetches data files by data source id and format."""

    def __init__(
        self,
        *,
        json_path_template: str = "data/json/{id}.json",
        csv_path_template: str = "data/csv/{id}.csv",
    ):
        self.json_path_template = json_path_template
        self.csv_path_template = csv_path_template

    def path_for(self, data_source_id: str, source_format: SourceFormat) -> str:
        """Relative path of the data file for an id and format."""
        if SourceFormat(source_format) is SourceFormat.JSON:
            return self.json_path_template.format(id=data_source_id)
        return self.csv_path_template.format(id=data_source_id)

    async def fetch(self, data_source_id: str, source_format: SourceFormat) -> str | None:
        """Fetch the data file body.

        Returns:
            Body text, or None on any failure (logged)
        """
        path = self.path_for(data_source_id, source_format)
        try:
            return await self.fetch_text(path)
        except DataSourceError as e:
            logger.warning(f"Error loading funnel data ({data_source_id}): {e.message}")
            return None

    @abstractmethod
    async def fetch_text(self, path: str) -> str:
        """Fetch a file's text.

        Raises:
            DataSourceError: If the file can't be fetched
        """

    async def aclose(self) -> None:
        """Release any held resources."""

    async def __aenter__(self) -> "DataSource":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class HttpDataSource(DataSource):
    """Fetch data files over HTTP relative to a base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.base_url = base_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    async def fetch_text(self, path: str) -> str:
        try:
            response = await self._client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DataSourceError(
                f"Failed to load data: {e.response.status_code}",
                status_code=e.response.status_code,
                context={"path": path},
            ) from e
        except httpx.HTTPError as e:
            raise DataSourceError(
                f"Request failed: {e}",
                context={"path": path},
            ) from e

        logger.debug(f"Fetched {path} ({len(response.content)} bytes)")
        return response.text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class LocalDataSource(DataSource):
    """Read data files from a directory on disk."""

    def __init__(self, root: str | Path = ".", **kwargs):
        super().__init__(**kwargs)
        self.root = Path(root)

    async def fetch_text(self, path: str) -> str:
        file_path = self.root / path
        try:
            text = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        except FileNotFoundError as e:
            raise DataSourceError(
                f"Data file not found: {file_path}",
                context={"path": str(file_path)},
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise DataSourceError(
                f"Could not read {file_path}: {e}",
                context={"path": str(file_path)},
            ) from e

        logger.debug(f"Read {file_path}")
        return text
