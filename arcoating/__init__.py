"""Anti-reflection coating design: thin-film optics and thickness optimization."""

from __future__ import annotations

__version__ = "0.1.0"
