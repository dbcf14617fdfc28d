"""
Engagement component port definitions.
"""

from __future__ import annotations

from src.core.ports.db import PostRepoPort

__all__ = ["PostRepoPort"]
