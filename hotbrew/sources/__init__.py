"""Content sources and the registry that drives sync."""
from hotbrew.sources.base import (
    Action,
    Priority,
    Registry,
    Section,
    Source,
    SourceConfig,
    SourceItem,
    new_client,
)

__all__ = [
    "Action",
    "Priority",
    "Registry",
    "Section",
    "Source",
    "SourceConfig",
    "SourceItem",
    "new_client",
]
