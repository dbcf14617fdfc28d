"""
Posts component port definitions.
"""

from __future__ import annotations

from src.core.ports.db import PostRepoPort
from src.core.ports.storage import ImageStorePort
from src.core.ports.time import TimePort

__all__ = ["ImageStorePort", "PostRepoPort", "TimePort"]
