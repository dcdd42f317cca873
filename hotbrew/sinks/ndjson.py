"""Machine-readable digest output."""
from __future__ import annotations

import sys
from typing import IO

from hotbrew.sinks.base import Sink
from hotbrew.trss.models import Digest
from hotbrew.trss.ndjson import encode_digest


class NDJSONSink(Sink):
    """Write the digest as one JSON line (stdout by default)."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self.stream = stream

    def deliver(self, digest: Digest) -> None:
        stream = self.stream or sys.stdout
        encode_digest(stream, digest)
        stream.flush()
