"""
Startup validation and environment checks.

Validates required API keys at application startup.
"""

import importlib.util
from dataclasses import dataclass, field
from typing import List

from .env_loader import get_google_api_key
from .exceptions import MissingConfigError


@dataclass
class ValidationResult:
    """Result of environment validation."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def validate_environment() -> ValidationResult:
    """
    Validate the environment configuration.

    Gemini is the only provider, so its key is required.
    """
    errors = []
    warnings = []

    if not get_google_api_key():
        errors.append(
            "No Gemini API key found. Set GEMINI_API_KEY (or GOOGLE_API_KEY) "
            "in the environment or in .env"
        )

    if importlib.util.find_spec("sounddevice") is None:
        warnings.append("sounddevice not installed - local audio playback will be unavailable")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def require_api_key() -> str:
    """Return the Gemini API key or raise MissingConfigError."""
    api_key = get_google_api_key()
    if not api_key:
        raise MissingConfigError(
            "GEMINI_API_KEY environment variable not set",
            {"checked": ["GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"]},
        )
    return api_key
