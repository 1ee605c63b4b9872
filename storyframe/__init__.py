"""
Storyframe - Storyboard Generator

Turns a story title, description, visual style and up to two character
reference images into a 4-scene storyboard whose clips each carry narration
text, a generated image and synthesized narration audio.

Version: 1.0.0
"""

__version__ = "1.0.0"
__project__ = "Storyframe"

from pathlib import Path

# Package root directory
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent

__all__ = [
    "__version__",
    "__project__",
    "PACKAGE_ROOT",
    "PROJECT_ROOT",
]
