"""Source model: items, sections, configuration and the source registry.

A *source* fetches a :class:`Section` of :class:`SourceItem` objects from
one upstream (an API, a feed).  Sources share a single
:class:`httpx.AsyncClient` supplied by the caller so that sync can run them
concurrently and tests can inject a mock transport.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import IntEnum
from typing import Any, Iterator

import httpx

from hotbrew.shared.constants import HTTP_TIMEOUT_SECONDS, USER_AGENT
from hotbrew.shared.errors import SourceFetchError

logger = logging.getLogger(__name__)


class Priority(IntEnum):
    """Item urgency, lowest first."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    URGENT = 3

    def __str__(self) -> str:
        return self.name.lower()


def priority_for(value: float, urgent: float, high: float, medium: float, *, inclusive: bool = False) -> Priority:
    """Bucket *value* against descending thresholds.

    With ``inclusive=False`` a value must be strictly greater than the
    threshold; with ``inclusive=True`` equal values qualify.
    """
    def _over(threshold: float) -> bool:
        return value >= threshold if inclusive else value > threshold

    if _over(urgent):
        return Priority.URGENT
    if _over(high):
        return Priority.HIGH
    if _over(medium):
        return Priority.MEDIUM
    return Priority.LOW


@dataclass
class Action:
    """Something the user can do with an item."""

    key: str
    label: str
    command: str


@dataclass
class SourceItem:
    """A single piece of information produced by a source."""

    id: str
    title: str
    subtitle: str = ""
    body: str = ""
    url: str = ""
    priority: Priority = Priority.LOW
    timestamp: datetime | None = None
    category: str = ""
    icon: str = ""
    actions: list[Action] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Section:
    """A group of items from one source."""

    name: str
    icon: str = ""
    priority: int = 0
    items: list[SourceItem] = field(default_factory=list)


@dataclass
class SourceConfig:
    """Per-source settings (``max`` and friends) from ``hotbrew.yaml``."""

    enabled: bool = True
    settings: dict[str, Any] = field(default_factory=dict)

    def get_int(self, key: str, default: int) -> int:
        value = self.settings.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        return int(value)


class Source(ABC):
    """Base class every source driver implements."""

    name: str = ""
    icon: str = ""
    ttl: timedelta = timedelta(minutes=15)

    @abstractmethod
    async def fetch(self, client: httpx.AsyncClient, config: SourceConfig) -> Section:
        """Fetch the current items for this source.

        Raises:
            SourceFetchError: When the upstream cannot be reached or parsed.
        """

    async def _get(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """GET *url* and return the response, raising on transport or status errors."""
        try:
            response = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            raise SourceFetchError(self.name, str(exc) or type(exc).__name__) from exc
        if response.status_code != 200:
            raise SourceFetchError(self.name, f"status {response.status_code}")
        return response

    async def _get_json(self, client: httpx.AsyncClient, url: str, **kwargs: Any) -> Any:
        response = await self._get(client, url, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise SourceFetchError(self.name, f"invalid JSON: {exc}") from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class Registry:
    """Ordered collection of sources keyed by profile key."""

    def __init__(self) -> None:
        self._sources: dict[str, Source] = {}
        self._configs: dict[str, SourceConfig] = {}

    def register(self, key: str, source: Source, config: SourceConfig | None = None) -> None:
        self._sources[key] = source
        self._configs[key] = config or SourceConfig()

    def get(self, key: str) -> Source | None:
        return self._sources.get(key)

    def config_for(self, key: str) -> SourceConfig:
        return self._configs.get(key) or SourceConfig()

    def all(self) -> dict[str, Source]:
        return dict(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self) -> Iterator[tuple[str, Source]]:
        return iter(self._sources.items())


def new_client(timeout: float = HTTP_TIMEOUT_SECONDS) -> httpx.AsyncClient:
    """Create the shared HTTP client used for a sync run."""
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    )
