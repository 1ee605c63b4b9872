"""
Storyframe Constants

Global constants used throughout Storyframe.
"""

from enum import Enum

# =============================================================================
# STORY INPUT OPTIONS
# =============================================================================

class StyleTheme(str, Enum):
    """Visual themes a storyboard can be rendered in."""
    REAL = "Real"
    STYLE_2D = "Style 2D"
    STYLE_3D = "Style 3D"


class AspectRatio(str, Enum):
    """Frame aspect ratios."""
    PORTRAIT = "9:16"
    LANDSCAPE = "16:9"

    @property
    def orientation(self) -> str:
        return "portrait" if self is AspectRatio.PORTRAIT else "landscape"


DEFAULT_STYLE = StyleTheme.REAL
DEFAULT_ASPECT_RATIO = AspectRatio.PORTRAIT

# =============================================================================
# STORYBOARD SHAPE
# =============================================================================

SCENE_COUNT = 4
CLIPS_PER_SCENE = 3

# =============================================================================
# GEMINI MODELS
# =============================================================================

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
STRUCTURE_MODEL = "gemini-2.5-pro"
IMAGE_MODEL = "gemini-2.5-flash-image"
SPEECH_MODEL = "gemini-2.5-flash-preview-tts"
DEFAULT_VOICE = "Kore"
DEFAULT_NARRATION_LANGUAGE = "Indonesian"

# =============================================================================
# AUDIO
# =============================================================================

# Gemini TTS returns signed 16-bit little-endian mono PCM
PCM_SAMPLE_RATE = 24000
PCM_CHANNELS = 1
PCM_SAMPLE_WIDTH = 2
PCM_SCALE = 32768.0

# =============================================================================
# UPLOADS
# =============================================================================

MAX_IMAGE_BYTES = 10 * 1024 * 1024
ALLOWED_IMAGE_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "GIF": "image/gif",
}
