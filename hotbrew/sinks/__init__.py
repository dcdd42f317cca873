"""Digest sinks."""
from hotbrew.sinks.base import Sink
from hotbrew.sinks.ndjson import NDJSONSink
from hotbrew.sinks.stdout import StdoutSink
from hotbrew.sinks.streamlog import StreamLogSink
from hotbrew.sinks.tui import digest_to_sections

__all__ = ["NDJSONSink", "Sink", "StdoutSink", "StreamLogSink", "digest_to_sections"]
