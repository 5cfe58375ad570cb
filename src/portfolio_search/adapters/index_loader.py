"""Loaders that fetch a published index snapshot.

Every query loads the whole artifact afresh. Loaders raise
:class:`~portfolio_search.search.store.IndexLoadError` on any fetch or
decode failure; the service layer turns that into an empty index.
"""

from abc import ABC, abstractmethod
import logging
from pathlib import Path

import anyio
import httpx

from portfolio_search.config import Settings
from portfolio_search.search.store import IndexLoadError, IndexStore


logger = logging.getLogger(__name__)


class AbstractIndexLoader(ABC):
    """Source of immutable index snapshots."""

    source: str = "unknown"

    @abstractmethod
    async def load(self) -> IndexStore:
        """Return the current index; raise IndexLoadError when it is unavailable."""
        raise NotImplementedError


class FileIndexLoader(AbstractIndexLoader):
    """Read the artifact written by the build CLI."""

    source = "file"

    def __init__(self, path: Path) -> None:
        self.path = path

    async def load(self) -> IndexStore:
        try:
            payload = await anyio.Path(self.path).read_bytes()
        except OSError as exc:
            raise IndexLoadError(f"Unable to read index {self.path}: {exc}") from exc
        return IndexStore.from_json(payload)


class HttpIndexLoader(AbstractIndexLoader):
    """Fetch a published ``search-index.json`` over HTTP (no retries)."""

    source = "http"

    def __init__(self, url: str, *, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def load(self) -> IndexStore:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url, headers={"Cache-Control": "no-cache"})
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise IndexLoadError(f"Failed to fetch {self.url}: {exc}") from exc
        return IndexStore.from_json(response.content)


class InMemoryIndexLoader(AbstractIndexLoader):
    """Serve a pre-built snapshot; used by tests and by callers embedding the engine."""

    source = "memory"

    def __init__(self, store: IndexStore) -> None:
        self.store = store

    async def load(self) -> IndexStore:
        return self.store


def create_index_loader(settings: Settings) -> AbstractIndexLoader:
    """Remote artifact when ``INDEX_URL`` is set, otherwise the local build output."""
    if settings.index_url:
        logger.info("Loading search index from %s", settings.index_url)
        return HttpIndexLoader(settings.index_url, timeout=settings.http_timeout)
    return FileIndexLoader(settings.index_path)
