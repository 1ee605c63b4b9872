"""
Storyframe Custom Exceptions

Custom exception classes for error handling throughout Storyframe.
"""


class StoryframeError(Exception):
    """Base exception for all Storyframe errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(StoryframeError):
    """Raised when there's an issue with configuration."""
    pass


class MissingConfigError(ConfigurationError):
    """Raised when a required configuration is missing."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""
    pass


# =============================================================================
# REQUEST ERRORS
# =============================================================================

class InvalidRequestError(StoryframeError):
    """Raised when submitted story details fail validation."""

    def __init__(self, field: str, reason: str):
        message = f"Invalid '{field}': {reason}"
        super().__init__(message, {"field": field, "reason": reason})
        self.field = field
        self.reason = reason


# =============================================================================
# PIPELINE ERRORS
# =============================================================================

class PipelineError(StoryframeError):
    """Base exception for pipeline errors."""
    pass


class StructureDecodeError(PipelineError):
    """Raised when the storyboard structure cannot be obtained or decoded."""

    def __init__(self, reason: str, raw_text: str = None):
        message = f"Storyboard structure could not be decoded: {reason}"
        details = {"reason": reason}
        if raw_text is not None:
            details["raw_text"] = raw_text[:500]
        super().__init__(message, details)
        self.reason = reason
        self.raw_text = raw_text


class ClipMediaError(PipelineError):
    """Raised when image or audio is missing from a clip's media responses."""

    def __init__(self, scene: int, clip: int, missing: list):
        message = (
            f"Failed to generate content for clip {clip} in scene {scene}: "
            f"no {' or '.join(missing)} returned (invalid or blocked response)"
        )
        super().__init__(message, {"scene": scene, "clip": clip, "missing": missing})
        self.scene = scene
        self.clip = clip
        self.missing = missing


# =============================================================================
# LLM ERRORS
# =============================================================================

class LLMError(StoryframeError):
    """Base exception for generative API errors."""
    pass


class GeminiAPIError(LLMError):
    """Raised when a Gemini request fails at the HTTP or transport level."""

    def __init__(self, message: str, status_code: int = None, response_text: str = None):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code
        self.response_text = response_text


# =============================================================================
# AUDIO ERRORS
# =============================================================================

class AudioError(StoryframeError):
    """Base exception for audio errors."""
    pass


class AudioDecodeError(AudioError):
    """Raised when an audio payload is not valid 16-bit PCM."""
    pass
