"""API routers for Storyframe."""

from . import storyboards

__all__ = ["storyboards"]
