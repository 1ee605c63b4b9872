"""
Centralized environment variable loading for Storyframe.

This module ensures .env is loaded once and consistently across the entire application.

Usage:
    from storyframe.core.env_loader import ensure_env_loaded
    ensure_env_loaded()
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_env_loaded = False


def get_project_root() -> Path:
    """Get the project root directory (where .env is located)."""
    # This file is at storyframe/core/env_loader.py
    return Path(__file__).parent.parent.parent


def ensure_env_loaded(env_path: Optional[Path] = None) -> bool:
    """
    Ensure environment variables from .env are loaded.

    Looks for .env in the current directory first, then in the project root.
    Existing non-empty environment variables win over values from the file.

    Returns:
        True if .env was loaded, False if already loaded or file not found
    """
    global _env_loaded

    if _env_loaded:
        return False

    candidates = [env_path] if env_path else [Path.cwd() / ".env", get_project_root() / ".env"]
    for candidate in candidates:
        if candidate and candidate.exists():
            load_dotenv(candidate, override=False)
            _env_loaded = True
            return True

    return False


def get_api_key(key_name: str, fallback_keys: Optional[list[str]] = None) -> Optional[str]:
    """
    Get an API key from environment, with fallback options.

    Args:
        key_name: Primary environment variable name
        fallback_keys: List of fallback variable names to try

    Returns:
        API key value or None if not found
    """
    ensure_env_loaded()

    value = os.getenv(key_name)
    if value and value.strip():
        return value.strip()

    for fallback in fallback_keys or []:
        value = os.getenv(fallback)
        if value and value.strip():
            return value.strip()

    return None


def get_google_api_key() -> Optional[str]:
    """Get Google/Gemini API key."""
    return get_api_key("GEMINI_API_KEY", ["GOOGLE_API_KEY", "API_KEY"])
