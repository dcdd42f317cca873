"""Append digest items to a log file that other tools can tail."""
from __future__ import annotations

import logging
from pathlib import Path

from hotbrew.sinks.base import Sink
from hotbrew.trss.models import Digest
from hotbrew.trss.ndjson import encode_items

logger = logging.getLogger(__name__)


class StreamLogSink(Sink):
    """Append one NDJSON line per item to *path*, creating its directory."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def deliver(self, digest: Digest) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            encode_items(f, digest.items)
        logger.debug("Appended %d items to %s", len(digest.items), self.path)
