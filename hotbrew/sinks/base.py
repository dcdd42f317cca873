"""Output targets for curated digests."""
from __future__ import annotations

from abc import ABC, abstractmethod

from hotbrew.trss.models import Digest


class Sink(ABC):
    """Delivers a digest somewhere (terminal, file, pipe)."""

    @abstractmethod
    def deliver(self, digest: Digest) -> None:
        """Deliver *digest*.

        Raises:
            OSError: If the target cannot be written.
        """
