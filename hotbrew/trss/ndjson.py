"""Newline-delimited JSON encoding for TRSS items and digests."""
from __future__ import annotations

import json
import logging
from typing import IO, Iterable

from pydantic import ValidationError as PydanticValidationError

from hotbrew.trss.models import Digest, Item

logger = logging.getLogger(__name__)


def _dumps(data: dict) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def encode_items(stream: IO[str], items: Iterable[Item]) -> None:
    """Write *items* to *stream*, one JSON object per line."""
    for item in items:
        stream.write(_dumps(item.to_wire()) + "\n")


def encode_digest(stream: IO[str], digest: Digest) -> None:
    """Write *digest* to *stream* as a single JSON line."""
    stream.write(_dumps(digest.to_wire()) + "\n")


def decode_items(stream: IO[str]) -> list[Item]:
    """Read NDJSON items, skipping blank and malformed lines."""
    items: list[Item] = []
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            items.append(Item.model_validate_json(line))
        except (PydanticValidationError, ValueError):
            logger.debug("Skipping malformed NDJSON line %d", lineno)
    return items


def decode_digest(stream: IO[str]) -> Digest:
    """Read a single digest object from *stream*."""
    return Digest.model_validate_json(stream.read())
