"""hotbrew: terminal RSS, piping hot."""
from __future__ import annotations

from hotbrew.shared.constants import VERSION

__version__ = VERSION

__all__ = ["__version__"]
