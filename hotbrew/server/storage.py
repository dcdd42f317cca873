"""Subscriber persistence in a single JSON file."""
from __future__ import annotations

import logging
import secrets
import threading
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from hotbrew.server.models import Subscriber
from hotbrew.shared.constants import DB_DIR_MODE, DB_FILE_MODE
from hotbrew.shared.utils import atomic_write_json, ensure_dir, load_json

logger = logging.getLogger(__name__)

SUBSCRIBERS_FILE = "subscribers.json"


def generate_token() -> str:
    """32 hex characters from 16 random bytes."""
    return secrets.token_hex(16)


class SubscriberStore:
    """Subscribers keyed by token, mirrored to ``subscribers.json``.

    The file is rewritten atomically on every change and is readable by
    the owner only.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir).expanduser()
        self.path = self.data_dir / SUBSCRIBERS_FILE
        self._lock = threading.Lock()
        self._subscribers: dict[str, Subscriber] = {}
        self._load()

    def _load(self) -> None:
        raw = load_json(self.path)
        if not isinstance(raw, dict):
            return
        for token, data in raw.items():
            try:
                self._subscribers[token] = Subscriber.model_validate(data)
            except PydanticValidationError as exc:
                logger.warning("Skipping invalid subscriber record: %s", exc)
        logger.info("Loaded %d subscribers from %s", len(self._subscribers), self.path)

    def _save(self) -> None:
        ensure_dir(self.data_dir, mode=DB_DIR_MODE)
        data = {token: sub.model_dump(mode="json") for token, sub in self._subscribers.items()}
        atomic_write_json(self.path, data, mode=DB_FILE_MODE)

    def add(self, email: str, name: str = "") -> Subscriber:
        subscriber = Subscriber(token=generate_token(), email=email, name=name)
        with self._lock:
            self._subscribers[subscriber.token] = subscriber
            self._save()
        return subscriber

    def get(self, token: str) -> Subscriber | None:
        with self._lock:
            return self._subscribers.get(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)
