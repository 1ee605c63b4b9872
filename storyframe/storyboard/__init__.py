"""
Storyframe Storyboard Module

Request models, prompt templates, the two-stage generation pipeline and export.

Pipeline Flow:
    GenerationRequest -> structure call (4 scenes x 3 clips of text)
                      -> per clip: image + speech calls in parallel
                      -> Storyboard (PNG data URLs + base64 PCM)
"""

from .models import (
    CharacterImage,
    GenerationRequest,
    StructureClip,
    StructureScene,
    StoryboardStructure,
    Clip,
    Scene,
    Storyboard,
)
from .forms import build_request, load_character_image
from .pipeline import StoryboardPipeline, generate_storyboard
from .export import export_storyboard, load_storyboard

__all__ = [
    'CharacterImage',
    'GenerationRequest',
    'StructureClip',
    'StructureScene',
    'StoryboardStructure',
    'Clip',
    'Scene',
    'Storyboard',
    'build_request',
    'load_character_image',
    'StoryboardPipeline',
    'generate_storyboard',
    'export_storyboard',
    'load_storyboard',
]
