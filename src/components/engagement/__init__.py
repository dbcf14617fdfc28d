"""
Engagement component - Likes and bookmarks.
"""

from .component import run_toggle_bookmark, run_toggle_like
from .models import BookmarkOutput, LikeOutput, ToggleBookmarkInput, ToggleLikeInput
from .ports import PostRepoPort

__all__ = [
    # Entry points
    "run_toggle_like",
    "run_toggle_bookmark",
    # Input models
    "ToggleLikeInput",
    "ToggleBookmarkInput",
    # Output models
    "LikeOutput",
    "BookmarkOutput",
    # Ports
    "PostRepoPort",
]
